# Overview: Service-layer operations for staff user records.

"""
User records

Only the profile document is kept here (name, e-mail, role). Credentials and
sign-in are handled by the identity provider, so no password ever reaches
this collection. The caller may pass the identity provider's uid as the
document id.
"""

from __future__ import annotations

from ..validation import ConflictError, DocumentPolicy, ValidationError, as_email, as_text, one_of
from . import document_store, records

USERS = "users"

ROLE_ADMIN = "admin"
ROLE_USER = "user"

USER_POLICY = DocumentPolicy(
    fields={
        "name": as_text,
        "email": as_email,
        "role": one_of(ROLE_ADMIN, ROLE_USER),
    },
    required_on_create=frozenset({"name", "email"}),
)

# E-mail is the login identity and cannot change after creation
USER_UPDATE_POLICY = DocumentPolicy(
    fields={k: v for k, v in USER_POLICY.fields.items() if k != "email"},
    required_on_create=frozenset({"name"}),
)


def add_user(payload: dict, *, user_id: str | None = None) -> dict:
    payload = dict(payload or {})
    for secret_field in ("password", "confirmPassword"):
        payload.pop(secret_field, None)
    if user_id is not None:
        user_id = str(user_id).strip()
        if not user_id:
            raise ValidationError("user id cannot be blank")
        if document_store.get_document(USERS, user_id) is not None:
            raise ConflictError(f"User {user_id} already exists")
    return records.create_record(
        USERS,
        payload,
        policy=USER_POLICY,
        doc_id=user_id,
        defaults={"role": ROLE_USER},
    )


def list_users() -> list[dict]:
    return records.list_records(USERS, order_by="name")


def get_user(user_id: str) -> dict:
    return records.get_record(USERS, user_id)


def update_user(user_id: str, payload: dict) -> dict:
    return records.update_record(USERS, user_id, payload, policy=USER_UPDATE_POLICY)


def delete_user(user_id: str) -> None:
    records.delete_record(USERS, user_id)
