"""
Bank transfer support on payments

Adds proof, deadline and verification columns and widens the payment method and
status enums (PostgreSQL) with bank_transfer and the verification states.
"""

from sqlalchemy import text

from halo_optom.shared.ddl import add_column, drop_column, is_postgres, widen_enum

COLUMNS = [
    ("payments", "payment_proof_url", "VARCHAR(500)"),
    ("payments", "payment_deadline", "TIMESTAMP"),
    ("payments", "verified_by_id", "VARCHAR(36) REFERENCES users(id) ON DELETE SET NULL"),
    ("payments", "verified_at", "TIMESTAMP"),
    ("payments", "rejection_reason", "TEXT"),
]

METHODS = ("xendit", "bank_transfer", "manual", "other")
STATUSES = (
    "pending",
    "paid",
    "failed",
    "expired",
    "cancelled",
    "waiting_verification",
    "verified",
    "rejected",
)


def upgrade(conn):
    for table, column, ddl in COLUMNS:
        add_column(conn, table, column, ddl)
    widen_enum(conn, "payments", "payment_method", "payments_payment_method_enum", METHODS, default="xendit")
    widen_enum(conn, "payments", "status", "payments_status_enum", STATUSES, default="pending")


def downgrade(conn):
    if is_postgres(conn):
        # Rows using the new values cannot be cast back
        conn.execute(text("UPDATE payments SET payment_method = 'manual' WHERE payment_method = 'bank_transfer'"))
        conn.execute(
            text(
                "UPDATE payments SET status = 'failed' "
                "WHERE status IN ('waiting_verification', 'verified', 'rejected')"
            )
        )
        widen_enum(
            conn,
            "payments",
            "payment_method",
            "payments_payment_method_enum",
            ("xendit", "manual", "other"),
            default="xendit",
        )
        widen_enum(
            conn,
            "payments",
            "status",
            "payments_status_enum",
            ("pending", "paid", "failed", "expired", "cancelled"),
            default="pending",
        )
    for table, column, _ in reversed(COLUMNS):
        drop_column(conn, table, column)
