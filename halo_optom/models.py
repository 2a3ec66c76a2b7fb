import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    Time,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base
from .shared.dates import utcnow

# Role values are stored exactly as the production database has them
ROLE_PATIENT = "pasien"
ROLE_OPTOMETRIST = "optometris"
ROLE_ADMIN = "admin"
USER_ROLES = (ROLE_PATIENT, ROLE_OPTOMETRIST, ROLE_ADMIN)

APPOINTMENT_TYPES = ("online", "homecare")
CONSULTATION_METHODS = ("chat", "video")
APPOINTMENT_STATUSES = ("pending", "confirmed", "ongoing", "completed", "cancelled")
APPOINTMENT_PAYMENT_STATUSES = ("unpaid", "paid")

WITHDRAW_PENDING = "PENDING"
WITHDRAW_APPROVED = "APPROVED"
WITHDRAW_REJECTED = "REJECTED"
WITHDRAW_PAID = "PAID"
WITHDRAW_STATUSES = (WITHDRAW_PENDING, WITHDRAW_APPROVED, WITHDRAW_REJECTED, WITHDRAW_PAID)

PAYMENT_TYPES = ("order", "appointment")
PAYMENT_STATUSES = (
    "pending",
    "paid",
    "failed",
    "expired",
    "cancelled",
    "waiting_verification",
    "verified",
    "rejected",
)
PAYMENT_METHODS = ("xendit", "bank_transfer", "manual", "other")

ORDER_STATUSES = ("pending", "paid", "shipped", "delivered", "cancelled")
REVIEW_STATUSES = ("pending", "approved", "rejected")
NOTIFICATION_TYPES = ("appointment", "payment", "promo", "general", "withdrawal")
REPORT_TYPES = ("users", "orders", "appointments", "revenue", "reviews")


def generate_uuid():
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), default=ROLE_PATIENT, nullable=False, index=True)
    phone = Column(String(50), nullable=True)
    avatar_url = Column(String(500), nullable=True)
    bio = Column(Text, nullable=True)
    experience = Column(String(255), nullable=True)
    certifications = Column(Text, nullable=True)  # comma separated
    str_number = Column(String(100), nullable=True)  # STR practitioner registration number
    rating = Column(Float, nullable=True)
    chat_commission_percentage = Column(Float, default=0, nullable=False)
    video_commission_percentage = Column(Float, default=0, nullable=False)
    date_of_birth = Column(Date, nullable=True)
    gender = Column(String(20), nullable=True)
    address = Column(Text, nullable=True)
    is_verified = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=utcnow, server_default=func.now(), onupdate=utcnow)

    wallet = relationship("Wallet", back_populates="user", uselist=False, cascade="all, delete-orphan")
    schedules = relationship("Schedule", back_populates="optometrist", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")

    @property
    def certification_list(self) -> list[str]:
        if not self.certifications:
            return []
        return [c.strip() for c in self.certifications.split(",") if c.strip()]


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    patient_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    optometrist_id = Column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type = Column(String(20), default="online", nullable=False)  # online, homecare
    method = Column(String(20), nullable=True)  # chat, video; null for homecare
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=True)
    location = Column(Text, nullable=True)  # homecare address
    status = Column(String(20), default="pending", nullable=False)
    payment_status = Column(String(20), default="unpaid", nullable=False)
    duration_minutes = Column(Integer, nullable=True)
    price = Column(Numeric(10, 2), nullable=True)
    cancel_reason = Column(Text, nullable=True)
    video_room_id = Column(String(255), nullable=True)
    chat_room_id = Column(String(36), nullable=True)
    commission_percentage = Column(Float, nullable=True)
    commission_amount = Column(Numeric(12, 2), nullable=True)
    commission_calculated_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=utcnow, server_default=func.now(), onupdate=utcnow)

    patient = relationship("User", foreign_keys=[patient_id])
    optometrist = relationship("User", foreign_keys=[optometrist_id])
    payments = relationship("Payment", back_populates="appointment")
    medical_record = relationship("MedicalRecord", back_populates="appointment", uselist=False)


class Wallet(Base):
    __tablename__ = "wallets"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    role = Column(String(20), default=ROLE_OPTOMETRIST, nullable=False)
    balance = Column(Numeric(12, 2), default=0, nullable=False)
    hold_balance = Column(Numeric(12, 2), default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=utcnow, server_default=func.now(), onupdate=utcnow)

    user = relationship("User", back_populates="wallet")


class WithdrawRequest(Base):
    __tablename__ = "withdraw_requests"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    optometrist_id = Column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount = Column(Numeric(12, 2), nullable=False)
    bank_name = Column(String(255), nullable=False)
    bank_account_number = Column(String(100), nullable=False)
    bank_account_name = Column(String(255), nullable=False)
    status = Column(String(20), default=WITHDRAW_PENDING, nullable=False, index=True)
    requested_at = Column(DateTime, default=utcnow, server_default=func.now())
    reviewed_by_admin_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    note = Column(Text, nullable=True)
    updated_at = Column(DateTime, default=utcnow, server_default=func.now(), onupdate=utcnow)

    optometrist = relationship("User", foreign_keys=[optometrist_id])
    reviewed_by_admin = relationship("User", foreign_keys=[reviewed_by_admin_id])


chat_room_participants = Table(
    "chat_room_participants",
    Base.metadata,
    Column("room_id", String(36), ForeignKey("chat_rooms.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class ChatRoom(Base):
    __tablename__ = "chat_rooms"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    appointment_id = Column(String(36), ForeignKey("appointments.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())

    participants = relationship("User", secondary=chat_room_participants)
    messages = relationship(
        "ChatMessage", back_populates="room", cascade="all, delete-orphan", order_by="ChatMessage.created_at"
    )


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    room_id = Column(String(36), ForeignKey("chat_rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    from_user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    to_user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    message = Column(Text, nullable=False)
    attachments = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())

    room = relationship("ChatRoom", back_populates="messages")
    from_user = relationship("User", foreign_keys=[from_user_id])
    to_user = relationship("User", foreign_keys=[to_user_id])


class MedicalRecord(Base):
    __tablename__ = "medical_records"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    patient_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    optometrist_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    appointment_id = Column(
        String(36), ForeignKey("appointments.id", ondelete="SET NULL"), nullable=True, unique=True
    )
    diagnosis = Column(Text, nullable=True)
    prescription = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    attachments = Column(Text, nullable=True)
    is_deleted = Column(Boolean, default=False, nullable=False)
    deleted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=utcnow, server_default=func.now(), onupdate=utcnow)

    patient = relationship("User", foreign_keys=[patient_id])
    optometrist = relationship("User", foreign_keys=[optometrist_id])
    appointment = relationship("Appointment", back_populates="medical_record")


class Schedule(Base):
    __tablename__ = "schedules"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    optometrist_id = Column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day_of_week = Column(String(10), nullable=False)  # monday..sunday
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=utcnow, server_default=func.now(), onupdate=utcnow)

    optometrist = relationship("User", back_populates="schedules")


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    body = Column(Text, nullable=False)
    meta = Column(JSON, nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)
    type = Column(String(20), default="general", nullable=False)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())

    user = relationship("User", back_populates="notifications")


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (UniqueConstraint("patient_id", "optometrist_id", name="uq_reviews_patient_optometrist"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    patient_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    optometrist_id = Column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    rating = Column(Integer, default=5, nullable=False)
    comment = Column(Text, nullable=True)
    status = Column(String(20), default="pending", nullable=False)
    report_count = Column(Integer, default=0, nullable=False)
    service_type = Column(String(50), nullable=True)  # consultation, homecare, product
    created_at = Column(DateTime, default=utcnow, server_default=func.now())

    patient = relationship("User", foreign_keys=[patient_id])
    optometrist = relationship("User", foreign_keys=[optometrist_id])


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), nullable=False)
    discount_price = Column(Numeric(12, 2), nullable=True)
    stock = Column(Integer, default=0, nullable=False)
    category = Column(String(100), nullable=True)
    image_url = Column(String(500), nullable=True)
    additional_images = Column(JSON, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=utcnow, server_default=func.now(), onupdate=utcnow)


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    patient_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    total = Column(Numeric(12, 2), nullable=False, default=0)
    status = Column(String(20), default="pending", nullable=False)
    payment_data = Column(JSON, nullable=True)
    shipping_address = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=utcnow, server_default=func.now(), onupdate=utcnow)

    patient = relationship("User")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")
    payments = relationship("Payment", back_populates="order")


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="SET NULL"), nullable=True)
    quantity = Column(Integer, default=1, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)  # unit price at purchase time

    order = relationship("Order", back_populates="items")
    product = relationship("Product")

    @property
    def product_name(self):
        return self.product.name if self.product else None


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    payment_type = Column(String(20), nullable=False)  # order, appointment
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=True, index=True)
    appointment_id = Column(
        String(36), ForeignKey("appointments.id", ondelete="CASCADE"), nullable=True, index=True
    )
    amount = Column(Numeric(12, 2), nullable=False)
    status = Column(String(30), default="pending", nullable=False, index=True)
    payment_method = Column(String(20), default="xendit", nullable=False)
    payment_id = Column(String(255), nullable=True)  # provider invoice id
    external_id = Column(String(255), nullable=True, index=True)
    payment_details = Column(JSON, nullable=True)
    payment_proof_url = Column(String(500), nullable=True)
    payment_deadline = Column(DateTime, nullable=True)
    verified_by_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    verified_at = Column(DateTime, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    paid_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=utcnow, server_default=func.now(), onupdate=utcnow)

    order = relationship("Order", back_populates="payments")
    appointment = relationship("Appointment", back_populates="payments")
    verified_by = relationship("User")


class ServicePricing(Base):
    __tablename__ = "service_pricings"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    type = Column(String(20), nullable=False)  # online, homecare
    method = Column(String(20), nullable=True)  # chat, video
    base_price = Column(Numeric(12, 2), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=utcnow, server_default=func.now(), onupdate=utcnow)


class BankAccount(Base):
    __tablename__ = "bank_accounts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    bank_name = Column(String(255), nullable=False)
    account_number = Column(String(100), nullable=False)
    account_holder_name = Column(String(255), nullable=False)
    branch = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=utcnow, server_default=func.now(), onupdate=utcnow)


class Report(Base):
    __tablename__ = "reports"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    type = Column(String(20), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), default="pending", nullable=False)
    download_url = Column(String(500), nullable=True)
    record_count = Column(Integer, default=0, nullable=False)
    # "metadata" is reserved on declarative classes
    report_metadata = Column("metadata", JSON, nullable=True)
    generated_at = Column(DateTime, default=utcnow, server_default=func.now())
