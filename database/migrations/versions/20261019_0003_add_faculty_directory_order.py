"""add faculty directory order

Revision ID: 20261019_0003
Revises: 20261019_0002
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0003"
down_revision = "20261019_0002"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("faculty") as batch_op:
        batch_op.add_column(sa.Column("directory_order", sa.Integer(), nullable=False, server_default="0"))
        batch_op.create_index("ix_faculty_directory_order", ["directory_order"])


def downgrade() -> None:
    with op.batch_alter_table("faculty") as batch_op:
        batch_op.drop_index("ix_faculty_directory_order")
        batch_op.drop_column("directory_order")
