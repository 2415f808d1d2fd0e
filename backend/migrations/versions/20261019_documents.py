"""Documents table (collections, counters, settings)

Revision ID: 20261019_documents
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_documents"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "documents",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("collection", sa.String(length=64), nullable=False),
        sa.Column("doc_id", sa.String(length=128), nullable=False),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("collection", "doc_id", name="uq_documents_collection_doc_id"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_documents_collection", "documents", ["collection"])


def downgrade():
    op.drop_index("ix_documents_collection", table_name="documents")
    op.drop_table("documents")
