"""Admin-managed base prices for online consultations"""

from sqlalchemy import text


def upgrade(conn):
    conn.execute(
        text(
            """
            CREATE TABLE IF NOT EXISTS service_pricings (
                id VARCHAR(36) PRIMARY KEY,
                type VARCHAR(20) NOT NULL,
                method VARCHAR(20),
                base_price NUMERIC(12, 2) NOT NULL,
                is_active BOOLEAN NOT NULL DEFAULT TRUE,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
            """
        )
    )


def downgrade(conn):
    conn.execute(text("DROP TABLE IF EXISTS service_pricings"))
