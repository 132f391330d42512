"""create batch timetables

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "batch_timetables",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("semester", sa.String(length=20), nullable=False),
        sa.Column("batch", sa.String(length=50), nullable=False),
        sa.Column("grid", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("semester", "batch", name="uq_batch_timetables_semester_batch"),
    )
    op.create_index("ix_batch_timetables_semester", "batch_timetables", ["semester"])
    op.create_index("ix_batch_timetables_batch", "batch_timetables", ["batch"])


def downgrade() -> None:
    op.drop_index("ix_batch_timetables_batch", table_name="batch_timetables")
    op.drop_index("ix_batch_timetables_semester", table_name="batch_timetables")
    op.drop_table("batch_timetables")
