"""Track the live JaaS connection of each room user."""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import mysql


# revision identifiers, used by Alembic.
revision = "20251024_02"
down_revision = "20251020_01"
branch_labels = None
depends_on = None


TIMESTAMP = sa.DateTime(timezone=True).with_variant(mysql.DATETIME(timezone=True, fsp=3), "mysql")


def upgrade() -> None:
    op.add_column("room_users", sa.Column("participant_id", sa.String(length=255), nullable=True))
    op.add_column("room_users", sa.Column("joined_at", TIMESTAMP, nullable=True))


def downgrade() -> None:
    op.drop_column("room_users", "joined_at")
    op.drop_column("room_users", "participant_id")
