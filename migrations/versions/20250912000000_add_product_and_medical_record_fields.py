"""Product discount price and gallery images, medical record soft delete"""

from halo_optom.shared.ddl import add_column, drop_column

COLUMNS = [
    ("products", "discount_price", "NUMERIC(12, 2)"),
    ("products", "additional_images", "JSON"),
    ("medical_records", "is_deleted", "BOOLEAN NOT NULL DEFAULT FALSE"),
    ("medical_records", "deleted_at", "TIMESTAMP"),
]


def upgrade(conn):
    for table, column, ddl in COLUMNS:
        add_column(conn, table, column, ddl)


def downgrade(conn):
    for table, column, _ in reversed(COLUMNS):
        drop_column(conn, table, column)
