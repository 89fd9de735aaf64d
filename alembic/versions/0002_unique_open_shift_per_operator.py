"""Close duplicate open shifts and enforce one open shift per operator

Revision ID: 0002
Revises: 0001
Create Date: 2025-11-21 16:40:51.902117

"""

import sqlalchemy as sa

from alembic import op  # type: ignore[attr-defined]
from front_desk.db.readers.shifts import operators_with_duplicate_open_shifts
from front_desk.services.shift_ledger import reconcile_duplicates
from front_desk.utils.datetime import utc_now

# revision identifiers, used by Alembic.
revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None

INDEX_NAME = "uq_shifts_one_open_per_operator"


def upgrade() -> None:
    """Upgrade schema."""
    conn = op.get_bind()

    # The index cannot be built while duplicates exist
    now = utc_now()
    for operator_id in operators_with_duplicate_open_shifts(conn):
        reconcile_duplicates(conn, operator_id, now)

    op.create_index(
        INDEX_NAME,
        "shifts",
        ["operator_id"],
        unique=True,
        postgresql_where=sa.text("status = 'open'"),
        sqlite_where=sa.text("status = 'open'"),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(INDEX_NAME, table_name="shifts")
