"""Per-method commission percentages on optometrists and commission tracking on appointments"""

from halo_optom.shared.ddl import add_column, drop_column

COLUMNS = [
    ("users", "chat_commission_percentage", "FLOAT NOT NULL DEFAULT 0"),
    ("users", "video_commission_percentage", "FLOAT NOT NULL DEFAULT 0"),
    ("appointments", "commission_percentage", "FLOAT"),
    ("appointments", "commission_amount", "NUMERIC(12, 2)"),
    ("appointments", "commission_calculated_at", "TIMESTAMP"),
]


def upgrade(conn):
    for table, column, ddl in COLUMNS:
        add_column(conn, table, column, ddl)


def downgrade(conn):
    for table, column, _ in reversed(COLUMNS):
        drop_column(conn, table, column)
