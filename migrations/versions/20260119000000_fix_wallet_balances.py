"""Recompute optometrist balances from completed and paid commissions, less the held amount"""

from sqlalchemy import text


def upgrade(conn):
    conn.execute(
        text(
            """
            UPDATE wallets
            SET balance = (
                SELECT COALESCE(SUM(a.commission_amount), 0)
                FROM appointments a
                WHERE a.optometrist_id = wallets.user_id
                AND a.status = 'completed'
                AND a.payment_status = 'paid'
                AND a.commission_amount IS NOT NULL
            ) - hold_balance,
            updated_at = CURRENT_TIMESTAMP
            WHERE role = 'optometris'
            """
        )
    )


def downgrade(conn):
    pass
