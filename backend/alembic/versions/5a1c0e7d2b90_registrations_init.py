"""registrations init

Revision ID: 5a1c0e7d2b90
Revises:
Create Date: 2024-02-25 09:00:00

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5a1c0e7d2b90"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

registrant_type = sa.Enum("Member", "Guest", name="registrant_type")


def upgrade() -> None:
    op.create_table(
        "registrations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("community", sa.String(length=64), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=254), nullable=False),
        sa.Column("registrant_type", registrant_type, nullable=False),
        sa.Column("session_label", sa.String(length=200), nullable=False),
        sa.Column("sunday_date", sa.Date(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_registrations_id", "registrations", ["id"])
    op.create_index("ix_registrations_timestamp", "registrations", ["timestamp"])
    op.create_index("ix_registrations_community", "registrations", ["community"])
    op.create_index("ix_registrations_email", "registrations", ["email"])
    op.create_index("ix_registrations_sunday_date", "registrations", ["sunday_date"])


def downgrade() -> None:
    op.drop_index("ix_registrations_sunday_date", table_name="registrations")
    op.drop_index("ix_registrations_email", table_name="registrations")
    op.drop_index("ix_registrations_community", table_name="registrations")
    op.drop_index("ix_registrations_timestamp", table_name="registrations")
    op.drop_index("ix_registrations_id", table_name="registrations")
    op.drop_table("registrations")
    registrant_type.drop(op.get_bind(), checkfirst=True)
