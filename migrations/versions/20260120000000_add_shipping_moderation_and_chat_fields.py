"""
Order shipping address, practitioner STR number, review moderation and the
chat room link on appointments
"""

from halo_optom.shared.ddl import add_column, drop_column

COLUMNS = [
    ("orders", "shipping_address", "JSON"),
    ("users", "str_number", "VARCHAR(100)"),
    ("reviews", "status", "VARCHAR(20) NOT NULL DEFAULT 'pending'"),
    ("reviews", "report_count", "INTEGER NOT NULL DEFAULT 0"),
    ("reviews", "service_type", "VARCHAR(50)"),
    ("appointments", "chat_room_id", "VARCHAR(36)"),
]


def upgrade(conn):
    for table, column, ddl in COLUMNS:
        add_column(conn, table, column, ddl)


def downgrade(conn):
    for table, column, _ in reversed(COLUMNS):
        drop_column(conn, table, column)
