from decimal import Decimal

import pytest
from fastapi import HTTPException

from halo_optom.domain.wallets.service import WalletService
from halo_optom.models import Notification, Wallet, WithdrawRequest

WITHDRAWAL = {
    "amount": 60000,
    "bank_name": "BCA",
    "bank_account_number": "1234567890",
    "bank_account_name": "Dr. Sari",
}


@pytest.fixture
def funded_optometrist(db, optometrist):
    WalletService(db).add_commission(optometrist.id, Decimal("100000"))
    return optometrist


def wallet_of(db, user):
    db.expire_all()
    return db.query(Wallet).filter(Wallet.user_id == user.id).one()


def test_balance_creates_wallet_lazily(client, optometrist, auth):
    response = client.get("/api/wallet/balance", headers=auth(optometrist))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["balance"] == 0
    assert data["hold_balance"] == 0
    assert data["formatted"]["balance"] == "Rp 0"


def test_balance_is_optometrist_only(client, patient, auth):
    assert client.get("/api/wallet/balance", headers=auth(patient)).status_code == 403


def test_optometrist_balance_alias(client, funded_optometrist, auth):
    response = client.get("/api/optometrists/balance", headers=auth(funded_optometrist))

    assert response.status_code == 200
    assert response.json()["data"]["available_balance"] == 100000
    assert response.json()["data"]["formatted"]["available_balance"] == "Rp 100.000"


def test_hold_and_release(db, optometrist):
    service = WalletService(db)
    service.add_commission(optometrist.id, 50000)

    service.hold_balance(optometrist.id, 20000)
    wallet = wallet_of(db, optometrist)
    assert wallet.balance == Decimal("30000.00")
    assert wallet.hold_balance == Decimal("20000.00")

    service.release_hold(optometrist.id, 20000)
    wallet = wallet_of(db, optometrist)
    assert wallet.balance == Decimal("50000.00")
    assert wallet.hold_balance == Decimal("0.00")


def test_hold_more_than_balance_fails(db, optometrist):
    service = WalletService(db)
    service.add_commission(optometrist.id, 10000)

    with pytest.raises(HTTPException) as exc:
        service.hold_balance(optometrist.id, 20000)
    assert exc.value.status_code == 400


def test_non_positive_commission_rejected(db, optometrist):
    with pytest.raises(HTTPException):
        WalletService(db).add_commission(optometrist.id, 0)


def test_withdrawal_below_minimum(client, funded_optometrist, auth):
    response = client.post(
        "/api/withdraw-requests", headers=auth(funded_optometrist), json={**WITHDRAWAL, "amount": 10000}
    )
    assert response.status_code == 400
    assert "Rp 50.000" in response.json()["detail"]


def test_withdrawal_exceeding_balance(client, funded_optometrist, auth):
    response = client.post(
        "/api/withdraw-requests", headers=auth(funded_optometrist), json={**WITHDRAWAL, "amount": 150000}
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Insufficient balance"


def test_withdrawal_holds_funds_and_notifies_admins(client, db, funded_optometrist, admin, auth):
    response = client.post("/api/withdraw-requests", headers=auth(funded_optometrist), json=WITHDRAWAL)

    assert response.status_code == 201
    assert response.json()["data"]["status"] == "PENDING"
    wallet = wallet_of(db, funded_optometrist)
    assert wallet.balance == Decimal("40000.00")
    assert wallet.hold_balance == Decimal("60000.00")
    assert db.query(Notification).filter(Notification.user_id == admin.id).count() == 1


def test_withdrawal_approve_then_mark_paid(client, db, funded_optometrist, admin, auth):
    request_id = client.post(
        "/api/withdraw-requests", headers=auth(funded_optometrist), json=WITHDRAWAL
    ).json()["data"]["id"]

    # mark-paid needs an approved request
    assert client.patch(f"/api/withdraw-requests/{request_id}/mark-paid", headers=auth(admin)).status_code == 400

    approved = client.patch(f"/api/withdraw-requests/{request_id}/approve", headers=auth(admin))
    assert approved.status_code == 200
    assert approved.json()["data"]["status"] == "APPROVED"
    assert approved.json()["data"]["reviewed_by_admin_id"] == admin.id

    paid = client.patch(f"/api/withdraw-requests/{request_id}/mark-paid", headers=auth(admin))
    assert paid.status_code == 200
    assert paid.json()["data"]["status"] == "PAID"

    wallet = wallet_of(db, funded_optometrist)
    assert wallet.balance == Decimal("40000.00")
    assert wallet.hold_balance == Decimal("0.00")


def test_withdrawal_reject_requires_reason_and_returns_funds(client, db, funded_optometrist, admin, auth):
    request_id = client.post(
        "/api/withdraw-requests", headers=auth(funded_optometrist), json=WITHDRAWAL
    ).json()["data"]["id"]

    no_reason = client.patch(f"/api/withdraw-requests/{request_id}/reject", headers=auth(admin), json={})
    assert no_reason.status_code == 400

    rejected = client.patch(
        f"/api/withdraw-requests/{request_id}/reject",
        headers=auth(admin),
        json={"reason": "Nama rekening tidak cocok"},
    )
    assert rejected.status_code == 200
    assert rejected.json()["data"]["status"] == "REJECTED"
    assert rejected.json()["data"]["note"] == "Nama rekening tidak cocok"

    wallet = wallet_of(db, funded_optometrist)
    assert wallet.balance == Decimal("100000.00")
    assert wallet.hold_balance == Decimal("0.00")

    again = client.patch(f"/api/withdraw-requests/{request_id}/approve", headers=auth(admin))
    assert again.status_code == 400


def test_list_withdrawals_scoped_to_optometrist(client, db, funded_optometrist, make_user, admin, auth):
    client.post("/api/withdraw-requests", headers=auth(funded_optometrist), json=WITHDRAWAL)
    other = make_user("optometris")

    assert client.get("/api/withdraw-requests", headers=auth(other)).json()["data"] == []
    assert len(client.get("/api/withdraw-requests", headers=auth(funded_optometrist)).json()["data"]) == 1
    assert len(client.get("/api/withdraw-requests", headers=auth(admin)).json()["data"]) == 1
    assert client.get(
        "/api/withdraw-requests", headers=auth(admin), params={"status": "BOGUS"}
    ).status_code == 400


def test_patient_cannot_list_withdrawals(client, patient, auth):
    assert client.get("/api/withdraw-requests", headers=auth(patient)).status_code == 403


def test_withdrawal_row_counts(db, client, funded_optometrist, auth):
    client.post("/api/withdraw-requests", headers=auth(funded_optometrist), json=WITHDRAWAL)
    assert db.query(WithdrawRequest).count() == 1
