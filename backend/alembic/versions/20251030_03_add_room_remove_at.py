"""Add the expiration timestamp of rooms."""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import mysql


# revision identifiers, used by Alembic.
revision = "20251030_03"
down_revision = "20251024_02"
branch_labels = None
depends_on = None


TIMESTAMP = sa.DateTime(timezone=True).with_variant(mysql.DATETIME(timezone=True, fsp=3), "mysql")


def upgrade() -> None:
    op.add_column("rooms", sa.Column("remove_at", TIMESTAMP, nullable=True))
    op.create_index("ix_rooms_remove_at", "rooms", ["remove_at"])


def downgrade() -> None:
    op.drop_index("ix_rooms_remove_at", table_name="rooms")
    op.drop_column("rooms", "remove_at")
