"""Generated admin reports"""

from sqlalchemy import text


def upgrade(conn):
    conn.execute(
        text(
            """
            CREATE TABLE IF NOT EXISTS reports (
                id VARCHAR(36) PRIMARY KEY,
                type VARCHAR(20) NOT NULL,
                title VARCHAR(255) NOT NULL,
                description TEXT,
                status VARCHAR(20) NOT NULL DEFAULT 'pending',
                download_url VARCHAR(500),
                record_count INTEGER NOT NULL DEFAULT 0,
                metadata JSON,
                generated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
            """
        )
    )


def downgrade(conn):
    conn.execute(text("DROP TABLE IF EXISTS reports"))
