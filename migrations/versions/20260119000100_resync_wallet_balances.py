"""
Resync optometrist balances with the ledger

Commission is credited when an appointment is paid, whatever its status, so:
balance = paid commissions - hold_balance - withdrawals already paid out.
Optometrists without a wallet get one first.
"""

import logging
import uuid

from sqlalchemy import text

logger = logging.getLogger(__name__)


def upgrade(conn):
    missing = conn.execute(
        text(
            """
            SELECT u.id FROM users u
            WHERE u.role = 'optometris'
            AND NOT EXISTS (SELECT 1 FROM wallets w WHERE w.user_id = u.id)
            """
        )
    ).fetchall()
    for (user_id,) in missing:
        conn.execute(
            text(
                """
                INSERT INTO wallets (id, user_id, role, balance, hold_balance, created_at, updated_at)
                VALUES (:id, :user_id, 'optometris', 0, 0, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)
                """
            ),
            {"id": str(uuid.uuid4()), "user_id": user_id},
        )

    conn.execute(
        text(
            """
            UPDATE wallets
            SET balance = (
                SELECT COALESCE(SUM(a.commission_amount), 0)
                FROM appointments a
                WHERE a.optometrist_id = wallets.user_id
                AND a.payment_status = 'paid'
                AND a.commission_amount IS NOT NULL
            ) - hold_balance - (
                SELECT COALESCE(SUM(wr.amount), 0)
                FROM withdraw_requests wr
                WHERE wr.optometrist_id = wallets.user_id
                AND wr.status = 'PAID'
            ),
            updated_at = CURRENT_TIMESTAMP
            WHERE role = 'optometris'
            """
        )
    )
    logger.info(f"✅ Wallet balances resynced ({len(missing)} wallets created)")


def downgrade(conn):
    pass
