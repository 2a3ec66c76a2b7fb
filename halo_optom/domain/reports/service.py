"""Report service - generated admin reports with CSV download and preview"""

import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any

from fastapi import HTTPException
from sqlalchemy.orm import Session, joinedload

from ...models import REPORT_TYPES, Appointment, Order, Report, Review, User
from ...shared.csv_export import rows_to_csv
from ...shared.dates import utcnow
from ..analytics.service import REVENUE_ORDER_STATUSES

logger = logging.getLogger(__name__)

PREVIEW_ROWS = 10

Column = tuple[str, str]  # (key, header)


def _plain(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


class ReportService:
    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Row builders, one per report type
    # ------------------------------------------------------------------

    def _users(self, since: datetime):
        columns = [
            ("id", "ID"),
            ("name", "Name"),
            ("email", "Email"),
            ("role", "Role"),
            ("phone", "Phone"),
            ("created_at", "Registered At"),
        ]
        users = self.db.query(User).filter(User.created_at >= since).order_by(User.created_at.desc()).all()
        rows = [
            {"id": u.id, "name": u.name, "email": u.email, "role": u.role, "phone": u.phone, "created_at": u.created_at}
            for u in users
        ]
        return columns, rows

    def _orders(self, since: datetime):
        columns = [
            ("id", "Order ID"),
            ("patient", "Patient Name"),
            ("total", "Total Amount"),
            ("status", "Status"),
            ("created_at", "Date"),
        ]
        orders = (
            self.db.query(Order)
            .options(joinedload(Order.patient))
            .filter(Order.created_at >= since)
            .order_by(Order.created_at.desc())
            .all()
        )
        rows = [
            {
                "id": o.id,
                "patient": o.patient.name if o.patient else "N/A",
                "total": o.total,
                "status": o.status,
                "created_at": o.created_at,
            }
            for o in orders
        ]
        return columns, rows

    def _appointments(self, since: datetime):
        columns = [
            ("id", "Appointment ID"),
            ("patient", "Patient"),
            ("optometrist", "Optometrist"),
            ("type", "Type"),
            ("date", "Date"),
            ("status", "Status"),
            ("payment_status", "Payment"),
            ("price", "Price"),
        ]
        appointments = (
            self.db.query(Appointment)
            .options(joinedload(Appointment.patient), joinedload(Appointment.optometrist))
            .filter(Appointment.created_at >= since)
            .order_by(Appointment.created_at.desc())
            .all()
        )
        rows = [
            {
                "id": a.id,
                "patient": a.patient.name if a.patient else "N/A",
                "optometrist": a.optometrist.name if a.optometrist else "N/A",
                "type": a.type,
                "date": a.date,
                "status": a.status,
                "payment_status": a.payment_status,
                "price": a.price,
            }
            for a in appointments
        ]
        return columns, rows

    def _revenue(self, since: datetime):
        columns = [("date", "Date"), ("source", "Source"), ("amount", "Amount"), ("details", "Reference ID")]
        orders = (
            self.db.query(Order)
            .filter(Order.created_at >= since, Order.status.in_(REVENUE_ORDER_STATUSES))
            .all()
        )
        appointments = (
            self.db.query(Appointment)
            .filter(Appointment.created_at >= since, Appointment.payment_status == "paid")
            .all()
        )
        rows = [{"date": o.created_at, "source": "Order", "amount": o.total, "details": o.id} for o in orders]
        rows += [
            {"date": a.created_at, "source": "Appointment", "amount": a.price, "details": a.id}
            for a in appointments
        ]
        rows.sort(key=lambda r: r["date"] or datetime.min, reverse=True)
        return columns, rows

    def _reviews(self, since: datetime):
        columns = [
            ("id", "Review ID"),
            ("patient", "Patient"),
            ("optometrist", "Optometrist"),
            ("rating", "Rating"),
            ("comment", "Comment"),
            ("status", "Status"),
            ("created_at", "Date"),
        ]
        reviews = (
            self.db.query(Review)
            .options(joinedload(Review.patient), joinedload(Review.optometrist))
            .filter(Review.created_at >= since)
            .order_by(Review.created_at.desc())
            .all()
        )
        rows = [
            {
                "id": r.id,
                "patient": r.patient.name if r.patient else "N/A",
                "optometrist": r.optometrist.name if r.optometrist else "N/A",
                "rating": r.rating,
                "comment": r.comment,
                "status": r.status,
                "created_at": r.created_at,
            }
            for r in reviews
        ]
        return columns, rows

    def _build(self, report_type: str, period_days: int) -> tuple[list[Column], list[dict]]:
        builders = {
            "users": self._users,
            "orders": self._orders,
            "appointments": self._appointments,
            "revenue": self._revenue,
            "reviews": self._reviews,
        }
        since = utcnow() - timedelta(days=period_days)
        return builders[report_type](since)

    # ------------------------------------------------------------------
    # Report lifecycle
    # ------------------------------------------------------------------

    @staticmethod
    def serialize(report: Report) -> dict:
        return {
            "id": report.id,
            "type": report.type,
            "title": report.title,
            "description": report.description,
            "generatedAt": report.generated_at,
            "status": report.status,
            "downloadUrl": f"/api/reports/download/{report.id}",
            "recordCount": report.record_count,
        }

    def list_reports(self) -> list[Report]:
        return self.db.query(Report).order_by(Report.generated_at.desc()).all()

    def get_report(self, report_id: str) -> Report:
        report = self.db.query(Report).filter(Report.id == report_id).first()
        if not report:
            raise HTTPException(status_code=404, detail="Report not found")
        return report

    def generate(self, report_type: str, period_days: int) -> Report:
        if report_type not in REPORT_TYPES:
            raise HTTPException(status_code=400, detail=f"Unknown report type: {report_type}")

        _, rows = self._build(report_type, period_days)
        report = Report(
            type=report_type,
            title=f"{report_type.capitalize()} Report",
            description=f"Generated {report_type} report for last {period_days} days",
            status="completed",
            record_count=len(rows),
            report_metadata={"period": period_days},
        )
        self.db.add(report)
        self.db.commit()
        self.db.refresh(report)
        logger.info(f"📄 Report {report.id} generated ({report_type}, {len(rows)} rows)")
        return report

    def _report_rows(self, report: Report):
        period = int((report.report_metadata or {}).get("period") or 30)
        return self._build(report.type, period)

    def download_csv(self, report_id: str) -> tuple[str, Report]:
        report = self.get_report(report_id)
        columns, rows = self._report_rows(report)
        content = rows_to_csv(
            [header for _, header in columns],
            ([_plain(row.get(key)) for key, _ in columns] for row in rows),
        )
        return content, report

    def preview(self, report_id: str) -> dict:
        report = self.get_report(report_id)
        columns, rows = self._report_rows(report)
        return {
            "columns": [{"key": key, "header": header} for key, header in columns],
            "rows": [{key: _plain(row.get(key)) for key, _ in columns} for row in rows[:PREVIEW_ROWS]],
            "total": len(rows),
        }
