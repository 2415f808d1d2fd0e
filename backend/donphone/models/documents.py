from __future__ import annotations

from sqlalchemy.types import JSON, TypeDecorator

from ..extensions import db
from ..codec import deserialize_value, serialize_value
from ..time_utils import to_utc_z


class DocumentBody(TypeDecorator):
    """
    JSON column holding a document body.

    datetime leaves are stored in tagged form and revived on load, so callers
    always see aware UTC datetimes.
    """
    impl = JSON
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return serialize_value(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return deserialize_value(value)


class Document(db.Model):
    """
    One document of a named collection.

    Business records (clients, sales, service orders, ...) are schemaless
    bodies addressed by (collection, doc_id). Counters and shop settings are
    documents of the systemSettings collection.
    """
    __tablename__ = "documents"
    __table_args__ = (
        db.UniqueConstraint("collection", "doc_id", name="uq_documents_collection_doc_id"),
        db.Index("ix_documents_collection", "collection"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    collection = db.Column(db.String(64), nullable=False)
    doc_id = db.Column(db.String(128), nullable=False)
    data = db.Column(DocumentBody, nullable=False, default=dict)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        """Body plus its id, the shape returned by list/get operations."""
        return {"id": self.doc_id, **(self.data or {})}

    def __repr__(self) -> str:
        return f"<Document {self.collection}/{self.doc_id} updated={to_utc_z(self.updated_at)}>"
