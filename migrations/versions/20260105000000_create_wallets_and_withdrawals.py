"""Optometrist wallets, withdrawal requests and platform bank accounts"""

from sqlalchemy import text

from halo_optom.shared.ddl import drop_enum, enum_type

WITHDRAW_STATUS_ENUM = "withdraw_requests_status_enum"


def upgrade(conn):
    status_type = enum_type(conn, WITHDRAW_STATUS_ENUM, ("PENDING", "APPROVED", "REJECTED", "PAID"))
    statements = [
        """
        CREATE TABLE IF NOT EXISTS wallets (
            id VARCHAR(36) PRIMARY KEY,
            user_id VARCHAR(36) NOT NULL UNIQUE REFERENCES users(id) ON DELETE CASCADE,
            role VARCHAR(20) NOT NULL DEFAULT 'optometris',
            balance NUMERIC(12, 2) NOT NULL DEFAULT 0,
            hold_balance NUMERIC(12, 2) NOT NULL DEFAULT 0,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """,
        f"""
        CREATE TABLE IF NOT EXISTS withdraw_requests (
            id VARCHAR(36) PRIMARY KEY,
            optometrist_id VARCHAR(36) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            amount NUMERIC(12, 2) NOT NULL,
            bank_name VARCHAR(255) NOT NULL,
            bank_account_number VARCHAR(100) NOT NULL,
            bank_account_name VARCHAR(255) NOT NULL,
            status {status_type} NOT NULL DEFAULT 'PENDING',
            requested_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            reviewed_by_admin_id VARCHAR(36) REFERENCES users(id) ON DELETE SET NULL,
            reviewed_at TIMESTAMP,
            note TEXT,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """,
        "CREATE INDEX IF NOT EXISTS ix_withdraw_requests_optometrist_id ON withdraw_requests (optometrist_id)",
        "CREATE INDEX IF NOT EXISTS ix_withdraw_requests_status ON withdraw_requests (status)",
        """
        CREATE TABLE IF NOT EXISTS bank_accounts (
            id VARCHAR(36) PRIMARY KEY,
            bank_name VARCHAR(255) NOT NULL,
            account_number VARCHAR(100) NOT NULL,
            account_holder_name VARCHAR(255) NOT NULL,
            branch VARCHAR(255),
            is_active BOOLEAN NOT NULL DEFAULT TRUE,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """,
    ]
    for statement in statements:
        conn.execute(text(statement))


def downgrade(conn):
    for table in ("bank_accounts", "withdraw_requests", "wallets"):
        conn.execute(text(f"DROP TABLE IF EXISTS {table}"))
    drop_enum(conn, WITHDRAW_STATUS_ENUM)
