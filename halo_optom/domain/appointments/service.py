"""
Appointment service - booking, lifecycle and the payment transition

The payment transition (unpaid -> paid) is the one place a commission reaches an
optometrist wallet; it runs at most once per appointment.
"""

import logging
from decimal import Decimal
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import ROLE_ADMIN, ROLE_OPTOMETRIST, ROLE_PATIENT, Appointment, User
from ...services import videosdk_service
from ...services.notification_service import send_notification
from ...shared.dates import format_hhmm, utcnow
from ...shared.formatting import calculate_commission, to_decimal
from ..chat.repository import ChatRepository
from ..service_pricing.repository import ServicePricingRepository
from ..users.repository import UserRepository
from ..wallets.service import WalletService
from .repository import AppointmentRepository
from .schemas import AppointmentCreate, RescheduleRequest

logger = logging.getLogger(__name__)

STATUS_NOTIFICATIONS = {
    "confirmed": ("Appointment confirmed", "Your appointment with {name} has been confirmed."),
    "completed": ("Consultation completed", "Your consultation with {name} has been completed."),
    "cancelled": ("Appointment cancelled", "Your appointment with {name} has been cancelled."),
}


class AppointmentService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = AppointmentRepository()
        self.wallets = WalletService(db)

    # ------------------------------------------------------------------
    # Lookup and access control
    # ------------------------------------------------------------------

    def get_appointment(self, appointment_id: str) -> Appointment:
        appointment = self.repo.get_by_id(self.db, appointment_id)
        if not appointment:
            raise HTTPException(status_code=404, detail="Appointment not found")
        return appointment

    @staticmethod
    def is_participant(appointment: Appointment, user: User) -> bool:
        return user.id in (appointment.patient_id, appointment.optometrist_id)

    def get_for_user(self, appointment_id: str, user: User) -> Appointment:
        appointment = self.get_appointment(appointment_id)
        if user.role != ROLE_ADMIN and not self.is_participant(appointment, user):
            raise HTTPException(status_code=403, detail="You are not allowed to access this appointment")
        return appointment

    def _get_managed(self, appointment_id: str, user: User, action: str) -> Appointment:
        """Owning optometrist or admin"""
        appointment = self.get_appointment(appointment_id)
        if user.role != ROLE_ADMIN and appointment.optometrist_id != user.id:
            raise HTTPException(status_code=403, detail=f"Only the optometrist can {action} this appointment")
        return appointment

    # ------------------------------------------------------------------
    # Booking
    # ------------------------------------------------------------------

    def create_appointment(self, patient: User, data: AppointmentCreate) -> Appointment:
        if patient.role != ROLE_PATIENT:
            raise HTTPException(status_code=403, detail="Only patients can book appointments")

        optometrist = UserRepository.get_by_id(self.db, data.optometrist_id)
        if not optometrist or optometrist.role != ROLE_OPTOMETRIST:
            raise HTTPException(status_code=404, detail="Optometrist not found")

        method = None
        price = None
        if data.type == "online":
            if not data.method:
                raise HTTPException(status_code=400, detail="Online appointments require a method (chat or video)")
            method = data.method
            pricing = ServicePricingRepository.get_by_pair(self.db, "online", method, active_only=True)
            if pricing:
                price = pricing.base_price
            else:
                logger.warning(f"⚠️ No active pricing for online/{method}; appointment created without price")

        if method == "chat":
            commission_percentage = optometrist.chat_commission_percentage or 0
        elif method == "video":
            commission_percentage = optometrist.video_commission_percentage or 0
        else:
            commission_percentage = 0

        appointment = self.repo.create(
            self.db,
            patient_id=patient.id,
            optometrist_id=optometrist.id,
            type=data.type,
            method=method,
            date=data.date,
            start_time=data.start_time,
            location=data.location,
            price=price,
            status="pending",
            payment_status="unpaid",
            commission_percentage=commission_percentage,
        )
        logger.info(f"📅 Appointment {appointment.id} booked by {patient.id} with {optometrist.id}")
        return self.get_appointment(appointment.id)

    def list_for_user(self, user: User) -> list[Appointment]:
        if user.role == ROLE_PATIENT:
            return self.repo.list_appointments(self.db, patient_id=user.id)
        if user.role == ROLE_OPTOMETRIST:
            return self.repo.list_appointments(self.db, optometrist_id=user.id)
        return self.repo.list_appointments(self.db)

    def next_for_user(self, user: User) -> Optional[Appointment]:
        if user.role not in (ROLE_PATIENT, ROLE_OPTOMETRIST):
            return None
        return self.repo.next_for_user(self.db, user.id, as_patient=user.role == ROLE_PATIENT)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def update_status(self, appointment_id: str, user: User, status: str) -> Appointment:
        appointment = self._get_managed(appointment_id, user, "change the status of")
        old_status = appointment.status
        appointment.status = status
        self.db.commit()
        self.db.refresh(appointment)
        logger.info(f"Appointment {appointment.id} status {old_status} -> {status}")

        if status != old_status and status in STATUS_NOTIFICATIONS:
            title, body = STATUS_NOTIFICATIONS[status]
            send_notification(
                self.db,
                appointment.patient_id,
                title,
                body.format(name=appointment.optometrist.name),
                "appointment",
                {"appointment_id": appointment.id, "status": status},
            )
        return appointment

    def reschedule(self, appointment_id: str, user: User, data: RescheduleRequest) -> Appointment:
        appointment = self._get_managed(appointment_id, user, "reschedule")
        if appointment.status in ("completed", "cancelled"):
            raise HTTPException(status_code=400, detail=f"Cannot reschedule a {appointment.status} appointment")

        appointment.date = data.date
        appointment.start_time = data.start_time
        self.db.commit()
        self.db.refresh(appointment)

        send_notification(
            self.db,
            appointment.patient_id,
            "Appointment rescheduled",
            f"Your appointment has been moved to {data.date.strftime('%A, %d %B %Y')} "
            f"at {format_hhmm(data.start_time)} WIB.",
            "appointment",
            {"appointment_id": appointment.id},
        )
        return appointment

    def complete(self, appointment_id: str, user: User) -> Appointment:
        if user.role != ROLE_OPTOMETRIST:
            raise HTTPException(status_code=403, detail="Only optometrists can complete consultations")
        appointment = self.get_appointment(appointment_id)
        if appointment.optometrist_id != user.id:
            raise HTTPException(status_code=403, detail="You cannot complete this consultation")
        if appointment.status == "completed":
            raise HTTPException(status_code=400, detail="Consultation is already completed")
        if appointment.status == "cancelled":
            raise HTTPException(status_code=400, detail="Consultation has been cancelled")

        # Commission was credited when the appointment was paid
        appointment.status = "completed"
        self.db.commit()
        self.db.refresh(appointment)
        return appointment

    def cancel(self, appointment_id: str, user: User, reason: Optional[str]) -> Appointment:
        appointment = self.get_appointment(appointment_id)
        if user.role != ROLE_ADMIN and appointment.patient_id != user.id:
            raise HTTPException(status_code=403, detail="Only the patient can cancel this appointment")
        if appointment.status == "completed":
            raise HTTPException(status_code=400, detail="Completed appointments cannot be cancelled")
        if appointment.status == "cancelled":
            raise HTTPException(status_code=400, detail="Appointment is already cancelled")

        appointment.status = "cancelled"
        appointment.cancel_reason = reason
        self.db.commit()
        self.db.refresh(appointment)
        logger.info(f"Appointment {appointment.id} cancelled by {user.id}")

        send_notification(
            self.db,
            appointment.optometrist_id,
            "Appointment cancelled",
            f"{appointment.patient.name} cancelled the appointment on {appointment.date.isoformat()}."
            + (f" Reason: {reason}" if reason else ""),
            "appointment",
            {"appointment_id": appointment.id, "status": "cancelled"},
        )
        return appointment

    def update_commission(self, appointment_id: str, percentage: float) -> Appointment:
        """Admin override; a paid appointment's wallet credit follows the new amount"""
        appointment = self.get_appointment(appointment_id)
        appointment.commission_percentage = percentage

        if appointment.payment_status == "paid":
            old_amount = to_decimal(appointment.commission_amount)
            new_amount = calculate_commission(appointment.price, percentage)
            appointment.commission_amount = new_amount
            appointment.commission_calculated_at = utcnow() if new_amount is not None else None

            delta = (new_amount or Decimal("0")) - old_amount
            if delta != 0:
                self.wallets.adjust_balance(appointment.optometrist_id, delta, commit=False)

        self.db.commit()
        self.db.refresh(appointment)
        return appointment

    # ------------------------------------------------------------------
    # Payment transition
    # ------------------------------------------------------------------

    async def apply_payment_status(self, appointment: Appointment, payment_status: str) -> Appointment:
        """
        Move an appointment's payment_status.

        On the first unpaid -> paid move: compute the commission, credit the optometrist
        wallet, open a chat room for chat consultations and confirm a pending booking.
        Repeating `paid` is a no-op for the wallet. A paid appointment is never moved
        back to unpaid.
        """
        if payment_status == "paid":
            if appointment.payment_status != "paid":
                self._mark_paid(appointment)
                self.db.commit()
                self.db.refresh(appointment)
                logger.info(f"✅ Appointment {appointment.id} paid")
            await self.ensure_video_room(appointment, raise_on_error=False)
        elif payment_status == "unpaid":
            if appointment.payment_status == "paid":
                logger.warning(f"⚠️ Ignoring unpaid transition for already paid appointment {appointment.id}")
            else:
                appointment.payment_status = "unpaid"
                self.db.commit()
        else:
            raise ValueError(f"Unknown appointment payment status: {payment_status}")
        return appointment

    def _mark_paid(self, appointment: Appointment):
        commission = calculate_commission(appointment.price, appointment.commission_percentage)
        if commission is not None:
            appointment.commission_amount = commission
            appointment.commission_calculated_at = utcnow()
            self.wallets.add_commission(appointment.optometrist_id, commission, commit=False)

        appointment.payment_status = "paid"
        if appointment.status == "pending":
            appointment.status = "confirmed"

        if appointment.method == "chat" and not appointment.chat_room_id:
            room = ChatRepository.create_room(
                self.db, appointment.id, [appointment.patient, appointment.optometrist]
            )
            appointment.chat_room_id = room.id
            logger.info(f"💬 Chat room {room.id} opened for appointment {appointment.id}")

    async def ensure_video_room(self, appointment: Appointment, raise_on_error: bool = True) -> Optional[str]:
        """Create the VideoSDK room of a paid video appointment if it has none"""
        if appointment.method != "video" or appointment.video_room_id:
            return appointment.video_room_id
        try:
            room = await videosdk_service.create_room()
        except HTTPException:
            if raise_on_error:
                raise
            logger.error(f"❌ Video room creation failed for appointment {appointment.id}; will retry on join")
            return None

        appointment.video_room_id = room.get("roomId") or room.get("id")
        self.db.commit()
        self.db.refresh(appointment)
        return appointment.video_room_id

    async def consultation_details(self, appointment_id: str, user: User) -> dict:
        appointment = self.get_appointment(appointment_id)
        if not self.is_participant(appointment, user):
            raise HTTPException(status_code=403, detail="You are not allowed to access this consultation")
        if appointment.payment_status != "paid":
            raise HTTPException(status_code=403, detail="Appointment has not been paid")

        details = {
            "appointment_id": appointment.id,
            "type": appointment.type,
            "method": appointment.method,
            "status": appointment.status,
            "date": appointment.date.isoformat(),
            "start_time": format_hhmm(appointment.start_time),
            "end_time": format_hhmm(appointment.end_time) or None,
            "patient": {
                "id": appointment.patient.id,
                "name": appointment.patient.name,
                "avatar_url": appointment.patient.avatar_url,
            },
            "optometrist": {
                "id": appointment.optometrist.id,
                "name": appointment.optometrist.name,
                "avatar_url": appointment.optometrist.avatar_url,
            },
        }

        if appointment.method == "video":
            room_id = await self.ensure_video_room(appointment)
            details["video"] = {
                "room_id": room_id,
                "token": videosdk_service.generate_join_token(room_id, user.id),
            }
        if appointment.method == "chat" and appointment.chat_room_id:
            details["chat"] = {"room_id": appointment.chat_room_id}
        return details
