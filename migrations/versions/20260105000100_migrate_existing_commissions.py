"""
Open a wallet for every optometrist who has none

The opening balance is the commission of appointments that are both completed
and paid.
"""

import logging
import uuid

from sqlalchemy import text

logger = logging.getLogger(__name__)


def upgrade(conn):
    rows = conn.execute(
        text(
            """
            SELECT u.id, COALESCE(SUM(a.commission_amount), 0)
            FROM users u
            LEFT JOIN appointments a
                ON a.optometrist_id = u.id
                AND a.status = 'completed'
                AND a.payment_status = 'paid'
                AND a.commission_amount IS NOT NULL
            WHERE u.role = 'optometris'
            AND NOT EXISTS (SELECT 1 FROM wallets w WHERE w.user_id = u.id)
            GROUP BY u.id
            """
        )
    ).fetchall()

    for user_id, balance in rows:
        conn.execute(
            text(
                """
                INSERT INTO wallets (id, user_id, role, balance, hold_balance, created_at, updated_at)
                VALUES (:id, :user_id, 'optometris', :balance, 0, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)
                """
            ),
            {"id": str(uuid.uuid4()), "user_id": user_id, "balance": balance},
        )
    logger.info(f"✅ Created {len(rows)} optometrist wallets")


def downgrade(conn):
    conn.execute(text("DELETE FROM wallets"))
