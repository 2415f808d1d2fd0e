# Overview: Service-layer operations for establishment (shop) settings.

from __future__ import annotations

from ..time_utils import utcnow
from ..validation import DocumentPolicy, as_email, as_text, validate_document
from . import document_store

SYSTEM_SETTINGS = "systemSettings"
ESTABLISHMENT_DOC = "establishment"

ESTABLISHMENT_POLICY = DocumentPolicy(
    fields={
        "businessName": as_text,
        "businessAddress": as_text,
        "businessCnpj": as_text,
        "businessPhone": as_text,
        "businessEmail": as_email,
    },
    required_on_create=frozenset({"businessName"}),
)


def get_establishment_settings() -> dict | None:
    """Saved shop data, or None before the first save."""
    data = document_store.get_document_data(SYSTEM_SETTINGS, ESTABLISHMENT_DOC)
    if data is None:
        return None
    data.pop("id", None)
    return data


def save_establishment_settings(payload: dict) -> dict:
    """Replace the shop data (fields printed on receipts and reports)."""
    data = validate_document(payload, policy=ESTABLISHMENT_POLICY, partial=False)
    data["updatedAt"] = utcnow()
    document_store.set_document(SYSTEM_SETTINGS, ESTABLISHMENT_DOC, data)
    return data
