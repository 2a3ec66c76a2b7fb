"""
Create the core marketplace tables

users, appointments, chat, medical records, schedules, notifications, reviews,
products, orders and payments. Later migrations add the commission, moderation
and bank-transfer columns.
"""

from sqlalchemy import text

from halo_optom.shared.ddl import drop_enum, enum_type

ENUMS = {
    "users_role_enum": ("pasien", "optometris", "admin"),
    "appointments_status_enum": ("pending", "confirmed", "ongoing", "completed", "cancelled"),
    "appointments_payment_status_enum": ("unpaid", "paid"),
    "orders_status_enum": ("pending", "paid", "shipped", "delivered", "cancelled"),
    "payments_payment_type_enum": ("order", "appointment"),
    "payments_status_enum": ("pending", "paid", "failed", "expired", "cancelled"),
    "payments_payment_method_enum": ("xendit", "manual", "other"),
}

TABLES = [
    "payments",
    "order_items",
    "orders",
    "products",
    "reviews",
    "notifications",
    "schedules",
    "medical_records",
    "chat_messages",
    "chat_room_participants",
    "chat_rooms",
    "appointments",
    "users",
]


def upgrade(conn):
    t = {name: enum_type(conn, name, values) for name, values in ENUMS.items()}

    statements = [
        f"""
        CREATE TABLE IF NOT EXISTS users (
            id VARCHAR(36) PRIMARY KEY,
            name VARCHAR(255) NOT NULL,
            email VARCHAR(255) NOT NULL UNIQUE,
            password_hash VARCHAR(255) NOT NULL,
            role {t['users_role_enum']} NOT NULL DEFAULT 'pasien',
            phone VARCHAR(50),
            avatar_url VARCHAR(500),
            bio TEXT,
            experience VARCHAR(255),
            certifications TEXT,
            rating FLOAT,
            date_of_birth DATE,
            gender VARCHAR(20),
            address TEXT,
            is_verified BOOLEAN NOT NULL DEFAULT FALSE,
            is_active BOOLEAN NOT NULL DEFAULT TRUE,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """,
        "CREATE INDEX IF NOT EXISTS ix_users_role ON users (role)",
        f"""
        CREATE TABLE IF NOT EXISTS appointments (
            id VARCHAR(36) PRIMARY KEY,
            patient_id VARCHAR(36) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            optometrist_id VARCHAR(36) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            type VARCHAR(20) NOT NULL DEFAULT 'online',
            method VARCHAR(20),
            date DATE NOT NULL,
            start_time TIME NOT NULL,
            end_time TIME,
            location TEXT,
            status {t['appointments_status_enum']} NOT NULL DEFAULT 'pending',
            payment_status {t['appointments_payment_status_enum']} NOT NULL DEFAULT 'unpaid',
            duration_minutes INTEGER,
            price NUMERIC(10, 2),
            cancel_reason TEXT,
            video_room_id VARCHAR(255),
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """,
        "CREATE INDEX IF NOT EXISTS ix_appointments_patient_id ON appointments (patient_id)",
        "CREATE INDEX IF NOT EXISTS ix_appointments_optometrist_id ON appointments (optometrist_id)",
        """
        CREATE TABLE IF NOT EXISTS chat_rooms (
            id VARCHAR(36) PRIMARY KEY,
            appointment_id VARCHAR(36) REFERENCES appointments(id) ON DELETE SET NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """,
        """
        CREATE TABLE IF NOT EXISTS chat_room_participants (
            room_id VARCHAR(36) NOT NULL REFERENCES chat_rooms(id) ON DELETE CASCADE,
            user_id VARCHAR(36) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            PRIMARY KEY (room_id, user_id)
        )
        """,
        """
        CREATE TABLE IF NOT EXISTS chat_messages (
            id VARCHAR(36) PRIMARY KEY,
            room_id VARCHAR(36) NOT NULL REFERENCES chat_rooms(id) ON DELETE CASCADE,
            from_user_id VARCHAR(36) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            to_user_id VARCHAR(36) REFERENCES users(id) ON DELETE SET NULL,
            message TEXT NOT NULL,
            attachments JSON,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """,
        "CREATE INDEX IF NOT EXISTS ix_chat_messages_room_id ON chat_messages (room_id)",
        """
        CREATE TABLE IF NOT EXISTS medical_records (
            id VARCHAR(36) PRIMARY KEY,
            patient_id VARCHAR(36) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            optometrist_id VARCHAR(36) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            appointment_id VARCHAR(36) UNIQUE REFERENCES appointments(id) ON DELETE SET NULL,
            diagnosis TEXT,
            prescription TEXT,
            notes TEXT,
            attachments TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """,
        "CREATE INDEX IF NOT EXISTS ix_medical_records_patient_id ON medical_records (patient_id)",
        """
        CREATE TABLE IF NOT EXISTS schedules (
            id VARCHAR(36) PRIMARY KEY,
            optometrist_id VARCHAR(36) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            day_of_week VARCHAR(10) NOT NULL,
            start_time TIME NOT NULL,
            end_time TIME NOT NULL,
            is_active BOOLEAN NOT NULL DEFAULT TRUE,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """,
        "CREATE INDEX IF NOT EXISTS ix_schedules_optometrist_id ON schedules (optometrist_id)",
        """
        CREATE TABLE IF NOT EXISTS notifications (
            id VARCHAR(36) PRIMARY KEY,
            user_id VARCHAR(36) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            title VARCHAR(255) NOT NULL,
            body TEXT NOT NULL,
            meta JSON,
            is_read BOOLEAN NOT NULL DEFAULT FALSE,
            type VARCHAR(20) NOT NULL DEFAULT 'general',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """,
        "CREATE INDEX IF NOT EXISTS ix_notifications_user_id ON notifications (user_id)",
        """
        CREATE TABLE IF NOT EXISTS reviews (
            id VARCHAR(36) PRIMARY KEY,
            patient_id VARCHAR(36) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            optometrist_id VARCHAR(36) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            rating INTEGER NOT NULL DEFAULT 5,
            comment TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            CONSTRAINT uq_reviews_patient_optometrist UNIQUE (patient_id, optometrist_id)
        )
        """,
        "CREATE INDEX IF NOT EXISTS ix_reviews_optometrist_id ON reviews (optometrist_id)",
        """
        CREATE TABLE IF NOT EXISTS products (
            id VARCHAR(36) PRIMARY KEY,
            name VARCHAR(255) NOT NULL,
            description TEXT,
            price NUMERIC(12, 2) NOT NULL,
            stock INTEGER NOT NULL DEFAULT 0,
            category VARCHAR(100),
            image_url VARCHAR(500),
            is_active BOOLEAN NOT NULL DEFAULT TRUE,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """,
        f"""
        CREATE TABLE IF NOT EXISTS orders (
            id VARCHAR(36) PRIMARY KEY,
            patient_id VARCHAR(36) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            total NUMERIC(12, 2) NOT NULL DEFAULT 0,
            status {t['orders_status_enum']} NOT NULL DEFAULT 'pending',
            payment_data JSON,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """,
        "CREATE INDEX IF NOT EXISTS ix_orders_patient_id ON orders (patient_id)",
        """
        CREATE TABLE IF NOT EXISTS order_items (
            id VARCHAR(36) PRIMARY KEY,
            order_id VARCHAR(36) NOT NULL REFERENCES orders(id) ON DELETE CASCADE,
            product_id VARCHAR(36) REFERENCES products(id) ON DELETE SET NULL,
            quantity INTEGER NOT NULL DEFAULT 1,
            price NUMERIC(12, 2) NOT NULL
        )
        """,
        "CREATE INDEX IF NOT EXISTS ix_order_items_order_id ON order_items (order_id)",
        f"""
        CREATE TABLE IF NOT EXISTS payments (
            id VARCHAR(36) PRIMARY KEY,
            payment_type {t['payments_payment_type_enum']} NOT NULL,
            order_id VARCHAR(36) REFERENCES orders(id) ON DELETE CASCADE,
            appointment_id VARCHAR(36) REFERENCES appointments(id) ON DELETE CASCADE,
            amount NUMERIC(12, 2) NOT NULL,
            status {t['payments_status_enum']} NOT NULL DEFAULT 'pending',
            payment_method {t['payments_payment_method_enum']} NOT NULL DEFAULT 'xendit',
            payment_id VARCHAR(255),
            external_id VARCHAR(255),
            payment_details JSON,
            paid_at TIMESTAMP,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """,
        "CREATE INDEX IF NOT EXISTS ix_payments_order_id ON payments (order_id)",
        "CREATE INDEX IF NOT EXISTS ix_payments_appointment_id ON payments (appointment_id)",
        "CREATE INDEX IF NOT EXISTS ix_payments_status ON payments (status)",
        "CREATE INDEX IF NOT EXISTS ix_payments_external_id ON payments (external_id)",
    ]
    for statement in statements:
        conn.execute(text(statement))


def downgrade(conn):
    for table in TABLES:
        conn.execute(text(f"DROP TABLE IF EXISTS {table}"))
    for name in ENUMS:
        drop_enum(conn, name)
