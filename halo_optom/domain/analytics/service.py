"""
Analytics service - admin dashboard figures

Revenue is counted from orders that are paid, shipped or delivered plus the price
of paid appointments.
"""

import logging
from datetime import datetime, time, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...cache import ANALYTICS_STATS_KEY, cached
from ...models import ROLE_OPTOMETRIST, ROLE_PATIENT, Appointment, Order, User
from ...shared.dates import utcnow
from ...shared.formatting import to_float

logger = logging.getLogger(__name__)

REVENUE_ORDER_STATUSES = ("paid", "shipped", "delivered")
ACTIVE_APPOINTMENT_STATUSES = ("confirmed", "ongoing")
STATS_CACHE_TTL = 60


class AnalyticsService:
    def __init__(self, db: Session):
        self.db = db

    def _count(self, model, *criteria) -> int:
        return self.db.query(func.count(model.id)).filter(*criteria).scalar() or 0

    @cached(lambda self: ANALYTICS_STATS_KEY, ttl=STATS_CACHE_TTL)
    def dashboard_stats(self) -> dict:
        order_revenue = (
            self.db.query(func.coalesce(func.sum(Order.total), 0))
            .filter(Order.status.in_(REVENUE_ORDER_STATUSES))
            .scalar()
        )
        appointment_revenue = (
            self.db.query(func.coalesce(func.sum(Appointment.price), 0))
            .filter(Appointment.payment_status == "paid")
            .scalar()
        )
        stats = {
            "totalUsers": self._count(User),
            "totalOptometrists": self._count(User, User.role == ROLE_OPTOMETRIST),
            "totalPatients": self._count(User, User.role == ROLE_PATIENT),
            "totalOrders": self._count(Order),
            "pendingOrders": self._count(Order, Order.status == "pending"),
            "totalRevenue": to_float(order_revenue) + to_float(appointment_revenue),
            "activeAppointments": self._count(
                Appointment, Appointment.status.in_(ACTIVE_APPOINTMENT_STATUSES)
            ),
        }
        logger.info(f"📊 Dashboard stats computed: {stats['totalUsers']} users, revenue {stats['totalRevenue']}")
        return stats

    def _paid_orders(self, start: datetime, end: datetime) -> list[Order]:
        return (
            self.db.query(Order)
            .filter(
                Order.created_at >= start,
                Order.created_at < end,
                Order.status.in_(REVENUE_ORDER_STATUSES),
            )
            .all()
        )

    def _paid_appointments(self, start: datetime, end: datetime) -> list[Appointment]:
        return (
            self.db.query(Appointment)
            .filter(
                Appointment.created_at >= start,
                Appointment.created_at < end,
                Appointment.payment_status == "paid",
            )
            .all()
        )

    def revenue(self, period_days: int = 30) -> dict:
        """
        Revenue over the last `period_days` days.

        The window covers whole UTC days up to and including today, one zero-filled timeline
        bucket per day. growthRate compares against the equally long window before it and
        is 100 when that window earned nothing but this one did.
        """
        days = period_days if period_days and period_days > 0 else 30
        today = utcnow().date()
        # Whole calendar days, so the timeline buckets add up to the summary
        start = datetime.combine(today - timedelta(days=days - 1), time.min)
        end = datetime.combine(today + timedelta(days=1), time.min)
        prev_start = start - timedelta(days=days)

        orders = self._paid_orders(start, end)
        appointments = self._paid_appointments(start, end)
        order_revenue = sum(to_float(o.total) or 0 for o in orders)
        appointment_revenue = sum(to_float(a.price) or 0 for a in appointments)
        total = order_revenue + appointment_revenue
        transactions = len(orders) + len(appointments)

        prev_total = sum(to_float(o.total) or 0 for o in self._paid_orders(prev_start, start)) + sum(
            to_float(a.price) or 0 for a in self._paid_appointments(prev_start, start)
        )
        if prev_total > 0:
            growth = (total - prev_total) / prev_total * 100
        elif total > 0:
            growth = 100
        else:
            growth = 0

        timeline = {
            (today - timedelta(days=offset)).isoformat(): {"revenue": 0.0, "transactions": 0}
            for offset in range(days - 1, -1, -1)
        }
        for created_at, amount in [(o.created_at, o.total) for o in orders] + [
            (a.created_at, a.price) for a in appointments
        ]:
            bucket = timeline.get(created_at.date().isoformat()) if created_at else None
            if bucket is not None:
                bucket["revenue"] += to_float(amount) or 0
                bucket["transactions"] += 1

        return {
            "timeline": [{"period": day, **values} for day, values in timeline.items()],
            "bySource": [
                {"source": "appointments", "revenue": appointment_revenue, "transactions": len(appointments)},
                {"source": "orders", "revenue": order_revenue, "transactions": len(orders)},
            ],
            "summary": {
                "totalRevenue": total,
                "totalTransactions": transactions,
                "averageTransaction": total / transactions if transactions else 0,
                "growthRate": growth,
            },
        }
