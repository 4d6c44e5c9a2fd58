"""Add stored_files table indexing uploaded object names by file id.

Revision ID: 20260103000000
Revises: 20260102100000
Create Date: 2026-01-03

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "20260103000000"
down_revision: Union[str, None] = "20260102100000"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "stored_files",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("file_id", sa.String(length=36), nullable=False),
        sa.Column("object_name", sa.String(length=1024), nullable=False),
        sa.Column("original_name", sa.String(length=512), nullable=False, server_default=""),
        sa.Column(
            "content_type",
            sa.String(length=255),
            nullable=False,
            server_default="application/octet-stream",
        ),
        sa.Column("size", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_stored_files_file_id"), "stored_files", ["file_id"], unique=False)
    op.create_index(op.f("ix_stored_files_object_name"), "stored_files", ["object_name"], unique=True)


def downgrade() -> None:
    op.drop_index(op.f("ix_stored_files_object_name"), table_name="stored_files")
    op.drop_index(op.f("ix_stored_files_file_id"), table_name="stored_files")
    op.drop_table("stored_files")
