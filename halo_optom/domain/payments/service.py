"""
Payment service

Xendit invoices, manual bank transfers with admin verification, and the
settlement step that moves appointments and orders to paid.
"""

import logging
import math
import secrets
from datetime import timedelta
from decimal import Decimal
from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import BANK_TRANSFER_DEADLINE_HOURS
from ...models import ROLE_ADMIN, Payment, User
from ...services import xendit_service
from ...services.notification_service import send_notification
from ...shared.csv_export import rows_to_csv
from ...shared.dates import start_of_month, utcnow
from ...shared.formatting import format_idr, to_decimal, to_float
from ..appointments.service import AppointmentService
from ..orders.service import OrderService
from .repository import PaymentRepository
from .schemas import BankTransferRequest, PaymentCreate, PaymentUpdate

logger = logging.getLogger(__name__)

EXPORT_HEADER = ["ID", "External ID", "Amount", "Status", "Payment Method", "Payment Type", "Created At"]
UNIQUE_CODE_MAX = 999


def generate_unique_code() -> int:
    """Random 1..999 rupiah suffix that lets admins match a transfer to its payment"""
    return secrets.randbelow(UNIQUE_CODE_MAX) + 1


class PaymentService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = PaymentRepository()
        self.appointments = AppointmentService(db)
        self.orders = OrderService(db)

    # ------------------------------------------------------------------
    # Targets and access
    # ------------------------------------------------------------------

    def _load_target(self, payment_type: str, appointment_id: Optional[str], order_id: Optional[str]):
        if payment_type == "appointment":
            if not appointment_id or order_id:
                raise HTTPException(status_code=400, detail="Appointment payments require appointment_id only")
            return self.appointments.get_appointment(appointment_id)
        if not order_id or appointment_id:
            raise HTTPException(status_code=400, detail="Order payments require order_id only")
        return self.orders.get_order(order_id)

    @staticmethod
    def _payer_id(payment: Payment) -> Optional[str]:
        if payment.appointment is not None:
            return payment.appointment.patient_id
        if payment.order is not None:
            return payment.order.patient_id
        return None

    @staticmethod
    def _can_view(payment: Payment, user: User) -> bool:
        if user.role == ROLE_ADMIN:
            return True
        if payment.appointment is not None:
            return user.id in (payment.appointment.patient_id, payment.appointment.optometrist_id)
        return payment.order is not None and payment.order.patient_id == user.id

    @staticmethod
    def _check_owner(target, user: User):
        if user.role != ROLE_ADMIN and target.patient_id != user.id:
            raise HTTPException(status_code=403, detail="You can only pay for your own bookings and orders")

    def _ensure_no_open_payment(self, payment_type: str, target_id: str):
        # One live payment per appointment or order, across invoices and transfers
        existing = self.repo.open_payment(self.db, payment_type, target_id)
        if existing:
            raise HTTPException(
                status_code=409,
                detail=f"A {existing.payment_method or 'payment'} for this {payment_type} is already in progress",
            )

    def get_payment(self, payment_id: str) -> Payment:
        payment = self.repo.get_by_id(self.db, payment_id)
        if not payment:
            raise HTTPException(status_code=404, detail="Payment not found")
        return payment

    def get_for_user(self, payment_id: str, user: User) -> Payment:
        payment = self.get_payment(payment_id)
        if not self._can_view(payment, user):
            raise HTTPException(status_code=403, detail="You are not allowed to access this payment")
        return payment

    # ------------------------------------------------------------------
    # CRUD and listing
    # ------------------------------------------------------------------

    def create_payment(self, user: User, data: PaymentCreate) -> Payment:
        target = self._load_target(data.payment_type, data.appointment_id, data.order_id)
        self._check_owner(target, user)

        payment = self.repo.add(
            self.db,
            Payment(
                payment_type=data.payment_type,
                appointment_id=data.appointment_id,
                order_id=data.order_id,
                amount=to_decimal(data.amount),
                status="pending",
                payment_method=data.payment_method,
            ),
        )
        self.db.commit()
        self.db.refresh(payment)
        logger.info(f"💳 Payment {payment.id} created for {data.payment_type} {target.id}")
        return payment

    def list_payments(self, user: User, page: int = 1, limit: int = 10, **filters) -> dict[str, Any]:
        page = max(page, 1)
        limit = max(min(limit, 100), 1)
        if user.role != ROLE_ADMIN:
            filters["owner_id"] = user.id
        rows, total = self.repo.list_payments(self.db, page=page, limit=limit, **filters)
        return {
            "data": rows,
            "total": total,
            "page": page,
            "limit": limit,
            "totalPages": math.ceil(total / limit) if total else 0,
        }

    def stats(self) -> dict[str, Any]:
        total_count, _ = self.repo.count_and_sum(self.db)
        pending_count, pending_amount = self.repo.count_and_sum(self.db, status="pending")
        paid_count, paid_amount = self.repo.count_and_sum(self.db, status="paid")
        failed_count, _ = self.repo.count_and_sum(self.db, status="failed")
        _, monthly = self.repo.count_and_sum(self.db, status="paid", since=start_of_month(utcnow()))

        return {
            "totalPayments": total_count,
            "totalAmount": to_float(paid_amount),
            "pendingPayments": pending_count,
            "pendingAmount": to_float(pending_amount),
            "paidPayments": paid_count,
            "paidAmount": to_float(paid_amount),
            "failedPayments": failed_count,
            "monthlyRevenue": to_float(monthly),
            "statusStats": [
                {"status": status, "count": count, "amount": to_float(amount)}
                for status, count, amount in self.repo.grouped(self.db, Payment.status)
            ],
            "typeStats": [
                {"type": payment_type, "count": count}
                for payment_type, count in self.repo.grouped(self.db, Payment.payment_type)
            ],
            "methodStats": [
                {"method": method, "count": count}
                for method, count in self.repo.grouped(self.db, Payment.payment_method)
            ],
        }

    def export_csv(self, **filters) -> str:
        rows = self.repo.export_rows(self.db, **filters)
        logger.info(f"Exporting {len(rows)} payments to CSV")
        return rows_to_csv(
            EXPORT_HEADER,
            (
                [
                    payment.id,
                    payment.external_id,
                    str(to_decimal(payment.amount)),
                    payment.status,
                    payment.payment_method,
                    payment.payment_type,
                    payment.created_at.isoformat() if payment.created_at else None,
                ]
                for payment in rows
            ),
        )

    def pending_verifications(self) -> list[Payment]:
        return self.repo.list_pending_verification(self.db)

    def for_appointment(self, appointment_id: str, user: User) -> list[Payment]:
        self.appointments.get_for_user(appointment_id, user)
        return self.repo.list_for_target(self.db, appointment_id=appointment_id)

    def for_order(self, order_id: str, user: User) -> list[Payment]:
        self.orders.get_for_user(order_id, user)
        return self.repo.list_for_target(self.db, order_id=order_id)

    def payment_status(self, payment_id: str, user: User) -> dict[str, Any]:
        payment = self.get_for_user(payment_id, user)
        result = {
            "id": payment.id,
            "status": payment.status,
            "payment_method": payment.payment_method,
            "paid_at": payment.paid_at,
            "payment_deadline": payment.payment_deadline,
        }
        if payment.appointment is not None:
            result["appointment_payment_status"] = payment.appointment.payment_status
        if payment.order is not None:
            result["order_status"] = payment.order.status
        return result

    async def update_payment(self, payment_id: str, data: PaymentUpdate) -> Payment:
        payment = self.get_payment(payment_id)
        updates = data.model_dump(exclude_unset=True)
        new_status = updates.pop("status", None)
        for key, value in updates.items():
            if value is not None:
                setattr(payment, key, value)

        if new_status == "paid" and payment.status != "paid":
            await self._settle(payment)
        else:
            if new_status:
                payment.status = new_status
            self.db.commit()
        self.db.refresh(payment)
        return payment

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------

    async def _settle(self, payment: Payment, verified_by: Optional[User] = None):
        """Mark a payment paid and move its appointment or order along"""
        now = utcnow()
        payment.status = "paid"
        payment.paid_at = payment.paid_at or now
        if verified_by is not None:
            payment.verified_by_id = verified_by.id
            payment.verified_at = now

        if payment.order is not None:
            if payment.order.status == "pending":
                self.orders.set_status(payment.order, "paid", commit=False)
            self.db.commit()
            logger.info(f"✅ Order {payment.order_id} paid via payment {payment.id}")
        else:
            self.db.commit()
            if payment.appointment is not None:
                await self.appointments.apply_payment_status(payment.appointment, "paid")

    # ------------------------------------------------------------------
    # Xendit invoices
    # ------------------------------------------------------------------

    async def create_invoice_payment(self, payment_type: str, target_id: str, user: User) -> dict[str, Any]:
        if payment_type == "appointment":
            target = self.appointments.get_appointment(target_id)
            self._check_owner(target, user)
            if target.payment_status == "paid":
                raise HTTPException(status_code=400, detail="Appointment is already paid")
            if target.price is None or to_decimal(target.price) <= 0:
                raise HTTPException(status_code=400, detail="Appointment has no price to pay")
            amount = to_decimal(target.price)
            description = f"Konsultasi {target.method or target.type} dengan {target.optometrist.name}"
        else:
            target = self.orders.get_order(target_id)
            self._check_owner(target, user)
            if target.status != "pending":
                raise HTTPException(status_code=400, detail=f"Order is already {target.status}")
            amount = to_decimal(target.total)
            description = f"Pembayaran pesanan {target.id}"

        self._ensure_no_open_payment(payment_type, target.id)

        external_id = xendit_service.generate_external_id(payment_type, target.id)
        invoice = await xendit_service.create_invoice(
            external_id,
            amount,
            description,
            payer_email=target.patient.email,
            customer_name=target.patient.name,
        )

        payment = self.repo.add(
            self.db,
            Payment(
                payment_type=payment_type,
                appointment_id=target.id if payment_type == "appointment" else None,
                order_id=target.id if payment_type == "order" else None,
                amount=amount,
                status="pending",
                payment_method="xendit",
                payment_id=invoice.get("id"),
                external_id=external_id,
                payment_details={"invoice_url": invoice.get("invoice_url"), "expiry_date": invoice.get("expiry_date")},
            ),
        )
        self.db.commit()
        self.db.refresh(payment)
        logger.info(f"🧾 Xendit invoice {external_id} created ({format_idr(amount)})")
        return {"invoice_url": invoice.get("invoice_url"), "external_id": external_id, "payment": payment}

    async def handle_xendit_callback(self, payload: dict[str, Any], expected_type: Optional[str] = None) -> dict:
        external_id = payload.get("external_id")
        payment_type, target_id = xendit_service.parse_external_id(external_id)
        if not payment_type:
            raise HTTPException(status_code=400, detail="Invalid external_id")
        if expected_type and payment_type != expected_type:
            raise HTTPException(status_code=400, detail=f"external_id is not an {expected_type} payment")

        new_status = xendit_service.map_xendit_status(payload.get("status"))
        logger.info(f"📥 Xendit callback {external_id}: {payload.get('status')} -> {new_status}")

        target = (
            self.appointments.get_appointment(target_id)
            if payment_type == "appointment"
            else self.orders.get_order(target_id)
        )

        payment = self.repo.get_by_external_id(self.db, external_id)
        if payment is None:
            payment = self.repo.add(
                self.db,
                Payment(
                    payment_type=payment_type,
                    appointment_id=target.id if payment_type == "appointment" else None,
                    order_id=target.id if payment_type == "order" else None,
                    amount=to_decimal(payload.get("paid_amount") or payload.get("amount")),
                    status="pending",
                    payment_method="xendit",
                    external_id=external_id,
                ),
            )
            logger.info(f"Created payment {payment.id} from Xendit callback")

        payment.payment_id = payload.get("id") or payment.payment_id
        details = dict(payment.payment_details or {})
        for key in ("payment_method", "payment_channel", "bank_code", "paid_at"):
            if payload.get(key):
                details[key] = payload[key]
        payment.payment_details = details

        if new_status == "paid":
            if payment.status != "paid":
                await self._settle(payment)
                self._notify_payer(payment, "Payment received", f"We received your payment of {format_idr(payment.amount)}.")
        elif payment.status == "paid":
            logger.warning(f"⚠️ Ignoring {new_status} callback for paid payment {payment.id}")
            self.db.commit()
        else:
            payment.status = new_status
            self.db.commit()
            if payment_type == "appointment" and new_status in ("expired", "failed"):
                await self.appointments.apply_payment_status(target, "unpaid")

        return {"status": "success", "payment_id": payment.id, "payment_status": payment.status}

    # ------------------------------------------------------------------
    # Bank transfer
    # ------------------------------------------------------------------

    def create_bank_transfer(self, user: User, data: BankTransferRequest) -> Payment:
        target = self._load_target(data.payment_type, data.appointment_id, data.order_id)
        self._check_owner(target, user)

        if data.payment_type == "appointment":
            if target.payment_status == "paid":
                raise HTTPException(status_code=400, detail="Appointment is already paid")
            if target.price is None or to_decimal(target.price) <= 0:
                raise HTTPException(status_code=400, detail="Appointment has no price to pay")
            original_amount = to_decimal(target.price)
        else:
            if target.status != "pending":
                raise HTTPException(status_code=400, detail=f"Order is already {target.status}")
            original_amount = to_decimal(target.total)

        removed = self.repo.delete_failed_payments(self.db, data.payment_type, target.id)
        if removed:
            logger.info(f"Removed {removed} rejected/expired payment(s) for {data.payment_type} {target.id}")

        self._ensure_no_open_payment(data.payment_type, target.id)

        unique_code = generate_unique_code()
        payment = self.repo.add(
            self.db,
            Payment(
                payment_type=data.payment_type,
                appointment_id=target.id if data.payment_type == "appointment" else None,
                order_id=target.id if data.payment_type == "order" else None,
                amount=original_amount + Decimal(unique_code),
                status="pending",
                payment_method="bank_transfer",
                payment_deadline=utcnow() + timedelta(hours=BANK_TRANSFER_DEADLINE_HOURS),
                payment_details={"original_amount": to_float(original_amount), "unique_code": unique_code},
            ),
        )

        # A retry after a rejection reopens the booking
        if data.payment_type == "appointment":
            target.status = "pending"
            target.payment_status = "unpaid"

        self.db.commit()
        self.db.refresh(payment)
        logger.info(f"🏦 Bank transfer {payment.id} created ({format_idr(payment.amount)}, code {unique_code})")
        return payment

    def submit_proof(self, payment_id: str, user: User, proof_url: str) -> Payment:
        payment = self.get_payment(payment_id)
        if user.role != ROLE_ADMIN and self._payer_id(payment) != user.id:
            raise HTTPException(status_code=403, detail="You are not allowed to update this payment")
        if payment.payment_method != "bank_transfer":
            raise HTTPException(status_code=400, detail="Payment proof is only accepted for bank transfers")
        if payment.status != "pending":
            raise HTTPException(status_code=400, detail=f"Payment is already {payment.status}")

        if payment.payment_deadline and utcnow() > payment.payment_deadline:
            payment.status = "expired"
            self.db.commit()
            raise HTTPException(status_code=400, detail="Payment deadline has passed")

        payment.payment_proof_url = proof_url
        payment.status = "waiting_verification"
        self.db.commit()
        self.db.refresh(payment)
        logger.info(f"📎 Proof uploaded for payment {payment.id}")
        return payment

    def _get_waiting(self, payment_id: str) -> Payment:
        payment = self.get_payment(payment_id)
        if payment.status != "waiting_verification":
            raise HTTPException(status_code=400, detail="Payment is not waiting for verification")
        return payment

    async def verify(self, payment_id: str, admin: User) -> Payment:
        payment = self._get_waiting(payment_id)
        await self._settle(payment, verified_by=admin)
        self.db.refresh(payment)
        logger.info(f"✅ Payment {payment.id} verified by {admin.id}")
        self._notify_payer(
            payment, "Payment verified", f"Your bank transfer of {format_idr(payment.amount)} has been verified."
        )
        return payment

    def reject(self, payment_id: str, admin: User, reason: Optional[str]) -> Payment:
        payment = self._get_waiting(payment_id)
        payment.status = "rejected"
        payment.rejection_reason = reason
        payment.verified_by_id = admin.id
        payment.verified_at = utcnow()

        if payment.appointment is not None and payment.appointment.payment_status != "paid":
            payment.appointment.status = "cancelled"
            payment.appointment.payment_status = "unpaid"
        if payment.order is not None and payment.order.status == "pending":
            self.orders.set_status(payment.order, "cancelled", commit=False)

        self.db.commit()
        self.db.refresh(payment)
        logger.info(f"Payment {payment.id} rejected by {admin.id}")
        self._notify_payer(
            payment,
            "Payment rejected",
            "Your bank transfer could not be verified." + (f" Reason: {reason}" if reason else ""),
        )
        return payment

    def _notify_payer(self, payment: Payment, title: str, body: str):
        payer_id = self._payer_id(payment)
        if payer_id:
            send_notification(
                self.db,
                payer_id,
                title,
                body,
                "payment",
                {"payment_id": payment.id, "status": payment.status},
            )
