import csv
import io
from datetime import datetime, time, timedelta
from decimal import Decimal

import pytest

from halo_optom.domain.analytics.service import AnalyticsService
from halo_optom.models import Order
from halo_optom.shared.dates import utcnow


@pytest.fixture
def revenue_data(db, patient, optometrist, make_appointment):
    db.add(Order(patient_id=patient.id, total=Decimal("200000"), status="paid"))
    db.add(Order(patient_id=patient.id, total=Decimal("50000"), status="delivered"))
    db.add(Order(patient_id=patient.id, total=Decimal("999999"), status="pending"))
    make_appointment(patient, optometrist, payment_status="paid", status="confirmed", price=Decimal("100000"))
    make_appointment(patient, optometrist, price=Decimal("75000"))
    db.commit()


# ----------------------------------------------------------------------
# Analytics
# ----------------------------------------------------------------------


def test_dashboard_stats(client, admin, revenue_data, auth):
    stats = client.get("/api/analytics/stats", headers=auth(admin)).json()

    assert stats["totalUsers"] == 3
    assert stats["totalOptometrists"] == 1
    assert stats["totalPatients"] == 1
    assert stats["totalOrders"] == 3
    assert stats["pendingOrders"] == 1
    assert stats["totalRevenue"] == 350000
    assert stats["activeAppointments"] == 1


def test_revenue_window(db, revenue_data):
    result = AnalyticsService(db).revenue(7)

    assert len(result["timeline"]) == 7
    assert result["timeline"][-1]["period"] == utcnow().date().isoformat()
    assert result["timeline"][-1]["revenue"] == 350000
    assert result["timeline"][-1]["transactions"] == 3
    assert {s["source"]: s["revenue"] for s in result["bySource"]} == {"appointments": 100000, "orders": 250000}
    assert result["summary"]["totalTransactions"] == 3
    assert result["summary"]["growthRate"] == 100


def test_growth_against_previous_window(db, patient):
    old = Order(patient_id=patient.id, total=Decimal("100000"), status="paid", created_at=utcnow() - timedelta(days=10))
    new = Order(patient_id=patient.id, total=Decimal("150000"), status="paid")
    db.add_all([old, new])
    db.commit()

    summary = AnalyticsService(db).revenue(7)["summary"]

    assert summary["totalRevenue"] == 150000
    assert summary["growthRate"] == pytest.approx(50.0)


def test_timeline_adds_up_to_summary(db, patient):
    today_start = datetime.combine(utcnow().date(), time.min)
    window_start = today_start - timedelta(days=6)
    first_day = Order(patient_id=patient.id, total=Decimal("40000"), status="paid", created_at=window_start + timedelta(hours=1))
    before_window = Order(patient_id=patient.id, total=Decimal("70000"), status="paid", created_at=window_start - timedelta(hours=1))
    db.add_all([first_day, before_window])
    db.commit()

    result = AnalyticsService(db).revenue(7)

    assert result["timeline"][0]["revenue"] == 40000
    assert sum(day["revenue"] for day in result["timeline"]) == result["summary"]["totalRevenue"] == 40000
    assert result["summary"]["growthRate"] == pytest.approx(-42.857, rel=1e-3)


def test_empty_revenue(db):
    summary = AnalyticsService(db).revenue(30)["summary"]
    assert summary == {"totalRevenue": 0, "totalTransactions": 0, "averageTransaction": 0, "growthRate": 0}


def test_analytics_requires_admin(client, patient, auth):
    assert client.get("/api/analytics/stats", headers=auth(patient)).status_code == 403
    assert client.get("/api/analytics/revenue", headers=auth(patient)).status_code == 403


# ----------------------------------------------------------------------
# Reports
# ----------------------------------------------------------------------


def test_generate_and_download_revenue_report(client, admin, revenue_data, auth):
    generated = client.post("/api/reports/generate", headers=auth(admin), json={"type": "revenue", "period": 30})

    assert generated.status_code == 200
    report = generated.json()
    assert report["status"] == "completed"
    assert report["recordCount"] == 3
    assert report["downloadUrl"] == f"/api/reports/download/{report['id']}"

    download = client.get(report["downloadUrl"], headers=auth(admin))
    assert download.status_code == 200
    rows = list(csv.reader(io.StringIO(download.text)))
    assert rows[0] == ["Date", "Source", "Amount", "Reference ID"]
    assert sorted(r[1] for r in rows[1:]) == ["Appointment", "Order", "Order"]

    listed = client.get("/api/reports", headers=auth(admin)).json()
    assert [r["id"] for r in listed] == [report["id"]]


def test_report_preview(client, admin, patient, optometrist, auth):
    report_id = client.post("/api/reports/generate", headers=auth(admin), json={"type": "users"}).json()["id"]

    preview = client.get(f"/api/reports/preview/{report_id}", headers=auth(admin)).json()

    assert preview["total"] == 3
    assert preview["columns"][0] == {"key": "id", "header": "ID"}
    assert {row["role"] for row in preview["rows"]} == {"admin", "pasien", "optometris"}


def test_report_errors(client, admin, patient, auth):
    assert client.post("/api/reports/generate", headers=auth(admin), json={"type": "inventory"}).status_code == 400
    assert client.get("/api/reports/download/missing", headers=auth(admin)).status_code == 404
    assert client.get("/api/reports", headers=auth(patient)).status_code == 403
