# Overview: Flask CLI command groups for database setup, backups and counter inspection.

# backend/donphone/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System:
# - python -m flask system init-db
#   Create the documents table if it does not exist (use "flask db upgrade" in production).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Backup:
# - python -m flask backup export [--out backup.json]
#   Write a full backup to a file (default: backup-donphone-<timestamp>.json).
# - python -m flask backup import backup.json --yes
#   Replace all data with the contents of a backup file.
#
# Sequences:
# - python -m flask sequences show
#   Print the last issued sale and service-order numbers.

import json

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .routes.backup import backup_filename
from .services import backup_service, sequence_service


@click.group('system')
def system_group():
    """Database setup commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create missing tables."""
    db.create_all()
    click.echo("PASS Database tables ready.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA, including the sale and service-order counters!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete.")


@click.group('backup')
def backup_group():
    """Full-database backup and restore."""


@backup_group.command('export')
@click.option('--out', 'out_path', type=click.Path(dir_okay=False, writable=True), help='Output file')
@with_appcontext
def export_backup(out_path):
    """Write every collection to a JSON backup file."""
    try:
        bundle = backup_service.export_database()
    except backup_service.BackupFailed as exc:
        raise click.ClickException(str(exc))

    out_path = out_path or backup_filename()
    with open(out_path, "w", encoding="utf-8") as fh:
        json.dump(bundle, fh, ensure_ascii=False, indent=2)

    total = sum(len(docs) for docs in bundle.values())
    click.echo(f"PASS Backed up {total} documents from {len(bundle)} collections to {out_path}")


@backup_group.command('import')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def import_backup(path, yes):
    """Replace ALL data with the contents of a backup file."""
    if not yes:
        click.confirm("WARN This will DELETE ALL current data and restore the backup. Continue?", abort=True)

    with open(path, "r", encoding="utf-8") as fh:
        try:
            bundle = json.load(fh)
        except json.JSONDecodeError as exc:
            raise click.ClickException(f"Backup file is not valid JSON: {exc}")

    try:
        report = backup_service.import_database(bundle)
    except backup_service.BackupError as exc:
        raise click.ClickException(str(exc))

    for collection, count in report.written.items():
        click.echo(f"  {collection:<16} {count:>6} documents")
    for name in report.skipped:
        click.echo(f"  SKIP {name}")
    click.echo("PASS Restore complete.")


@click.group('sequences')
def sequences_group():
    """Sale and service-order number counters."""


@sequences_group.command('show')
@with_appcontext
def show_sequences():
    """Print the last issued number of every sequence."""
    for name, definition in current_app.config["SEQUENCES"].items():
        last = sequence_service.current_value(name)
        last_str = "never used" if last is None else str(last)
        click.echo(f"{name:<16} last={last_str:<12} start={definition['start']}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(backup_group)
    app.cli.add_command(sequences_group)
