"""create uploaded_files table

Revision ID: 8d2f6a0e5b13
Revises: 3b7e1c9a4f20
Create Date: 2026-10-01 10:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8d2f6a0e5b13'
down_revision: Union[str, Sequence[str], None] = '3b7e1c9a4f20'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "uploaded_files",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("original_file_name", sa.String(255), nullable=False),
        sa.Column("stored_file_name", sa.String(255), nullable=False),
        sa.Column("file_extension", sa.String(10), nullable=False),
        sa.Column("file_size_in_bytes", sa.BigInteger(), nullable=False),
        sa.Column("content_type", sa.String(100), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("storage_path", sa.String(500), nullable=False),
        sa.Column("file_hash", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("uploaded_by_user", sa.String(100), server_default="Anonymous", nullable=False),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("uploaded_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.Column("updated_by_user", sa.String(100), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_uploaded_files_stored_file_name", "uploaded_files", ["stored_file_name"], unique=True
    )
    op.create_index("ix_uploaded_files_uploaded_at", "uploaded_files", ["uploaded_at"])
    op.create_index("ix_uploaded_files_uploaded_by_user", "uploaded_files", ["uploaded_by_user"])
    op.create_index("ix_uploaded_files_is_active", "uploaded_files", ["is_active"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_uploaded_files_is_active", table_name="uploaded_files")
    op.drop_index("ix_uploaded_files_uploaded_by_user", table_name="uploaded_files")
    op.drop_index("ix_uploaded_files_uploaded_at", table_name="uploaded_files")
    op.drop_index("ix_uploaded_files_stored_file_name", table_name="uploaded_files")
    op.drop_table("uploaded_files")
