# Overview: Flask API routes for full-database backup download and restore upload.

# backend/donphone/routes/backup.py
"""
Backup routes

GET  /api/backup/export   -> JSON file download
POST /api/backup/import   -> restore from a JSON body or an uploaded file
                             (multipart field "file"); requires confirm=true

Only one restore may run per process. A second request while one is in
progress gets 409.
"""

import json
import threading

from flask import Blueprint, Response, current_app, jsonify, request

from ..services import backup_service
from ..time_utils import utcnow

backup_bp = Blueprint("backup", __name__, url_prefix="/api/backup")

_restore_lock = threading.Lock()


def backup_filename(now=None) -> str:
    now = now or utcnow()
    return f"backup-donphone-{now.strftime('%Y-%m-%d_%H-%M-%S')}.json"


def _is_confirmed() -> bool:
    raw = request.args.get("confirm") or request.form.get("confirm")
    return str(raw).lower() in ("1", "true", "yes")


def _read_bundle():
    upload = request.files.get("file")
    if upload is not None:
        try:
            return json.loads(upload.read().decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            raise backup_service.InvalidBackupFormat("Backup file is not valid JSON")
    bundle = request.get_json(silent=True)
    if bundle is None:
        raise backup_service.InvalidBackupFormat("No backup file or JSON body was sent")
    return bundle


@backup_bp.get("/export")
def export_route():
    try:
        bundle = backup_service.export_database()
    except backup_service.BackupFailed as e:
        return jsonify({"error": str(e), "collection": e.collection}), 500

    body = json.dumps(bundle, ensure_ascii=False, indent=2)
    return Response(
        body,
        mimetype="application/json",
        headers={"Content-Disposition": f'attachment; filename="{backup_filename()}"'},
    )


@backup_bp.post("/import")
def import_route():
    """
    Replace ALL data in the known collections with the backup contents.

    Returns:
    - 200: restore report (per-collection deleted/written counts)
    - 400: missing confirm=true or unrecognizable backup (nothing changed)
    - 409: another restore is running
    - 500: a batch failed; data may be partially restored
    """
    if not _is_confirmed():
        return jsonify({"error": "Restoring replaces all current data; send confirm=true to proceed"}), 400

    try:
        bundle = _read_bundle()
    except backup_service.InvalidBackupFormat as e:
        return jsonify({"error": str(e)}), 400

    if not _restore_lock.acquire(blocking=False):
        return jsonify({"error": "A restore is already in progress"}), 409

    report = backup_service.RestoreReport()
    try:
        backup_service.import_database(bundle, report)
    except backup_service.InvalidBackupFormat as e:
        return jsonify({"error": str(e), "restore": report.to_dict()}), 400
    except backup_service.RestoreFailed as e:
        current_app.logger.error("Restore failed in %s (%s)", e.collection, e.phase)
        return jsonify({
            "error": str(e),
            "collection": e.collection,
            "phase": e.phase,
            "restore": report.to_dict(),
        }), 500
    finally:
        _restore_lock.release()

    return jsonify({"ok": True, "restore": report.to_dict()}), 200
