"""create faculty directory

Revision ID: 20261019_0001
Revises: None
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "faculty",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("faculty_code", sa.String(length=50), nullable=False),
        sa.Column("department", sa.String(length=200), nullable=False, server_default=""),
        sa.Column("designation", sa.String(length=100), nullable=True),
        sa.Column("course_handled", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_faculty_faculty_code", "faculty", ["faculty_code"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_faculty_faculty_code", table_name="faculty")
    op.drop_table("faculty")
