"""create client_documents table

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "client_documents",
        sa.Column("company_id", sa.String(length=128), nullable=False, comment="Owning company identifier"),
        sa.Column(
            "client_id",
            sa.String(length=255),
            nullable=False,
            comment="Stable client identifier (imported or generated)",
        ),
        sa.Column(
            "payload",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            comment="Canonical client record",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("company_id", "client_id"),
    )
    op.create_index("ix_client_documents_company_id", "client_documents", ["company_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_client_documents_company_id", table_name="client_documents")
    op.drop_table("client_documents")
