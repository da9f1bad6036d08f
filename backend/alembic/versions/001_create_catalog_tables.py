"""Create catalog tables

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Creates `coffees`, `flavours`, their `coffees_flavours` join table and
       the append-only `events` table.

Rollback: downgrade() drops all four tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "coffees",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("brand", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("recommendations", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.PrimaryKeyConstraint("id"),
    )

    # UNIQUE(name): concurrent creates of one new flavour cannot both succeed
    op.create_table(
        "flavours",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "coffees_flavours",
        sa.Column("coffee_id", sa.Integer(), nullable=False),
        sa.Column("flavour_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["coffee_id"], ["coffees.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["flavour_id"], ["flavours.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("coffee_id", "flavour_id"),
    )

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("type", sa.String(100), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_events_name", "events", ["name"])
    op.create_index("ix_events_name_type", "events", ["name", "type"])


def downgrade() -> None:
    """Drop every catalog table. All data is lost."""
    op.drop_index("ix_events_name_type", table_name="events")
    op.drop_index("ix_events_name", table_name="events")
    op.drop_table("events")
    op.drop_table("coffees_flavours")
    op.drop_table("flavours")
    op.drop_table("coffees")
