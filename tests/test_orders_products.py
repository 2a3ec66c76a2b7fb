from decimal import Decimal

from halo_optom.domain.orders.service import effective_price
from halo_optom.models import Product

SHIPPING = {
    "receiver_name": "Budi Santoso",
    "phone": "08123456789",
    "full_address": "Jl. Merdeka 1 <script>alert(1)</script>",
    "city": "Bandung",
}


def order_items(*pairs):
    return {"items": [{"product_id": product.id, "quantity": quantity} for product, quantity in pairs]}


# ----------------------------------------------------------------------
# Products
# ----------------------------------------------------------------------


def test_product_crud_requires_admin(client, admin, patient, auth):
    payload = {"name": "Lensa Kontak", "price": 80000, "stock": 20, "category": "lens"}

    assert client.post("/api/products", headers=auth(patient), json=payload).status_code == 403

    created = client.post("/api/products", headers=auth(admin), json=payload)
    assert created.status_code == 201
    product_id = created.json()["id"]

    updated = client.put(f"/api/products/{product_id}", headers=auth(admin), json={"stock": 5})
    assert updated.status_code == 200
    assert updated.json()["stock"] == 5
    assert updated.json()["name"] == "Lensa Kontak"

    assert client.delete(f"/api/products/{product_id}", headers=auth(admin)).status_code == 200
    assert client.get(f"/api/products/{product_id}").status_code == 404


def test_product_validation(client, admin, auth):
    negative = client.post("/api/products", headers=auth(admin), json={"name": "X", "price": -1})
    assert negative.status_code == 422

    discount_too_high = client.post(
        "/api/products", headers=auth(admin), json={"name": "X", "price": 100, "discount_price": 150}
    )
    assert discount_too_high.status_code == 400


def test_product_listing_filters(client, make_product):
    make_product(name="Kacamata Baca", category="glasses")
    make_product(name="Cairan Lensa", category="care", description="Pembersih lensa kontak")
    make_product(name="Frame Lama", category="glasses", is_active=False)
    make_product(name="Habis", category="glasses", stock=0)

    assert len(client.get("/api/products").json()) == 4
    assert {p["name"] for p in client.get("/api/products", params={"category": "care"}).json()} == {"Cairan Lensa"}
    assert {p["name"] for p in client.get("/api/products", params={"search": "lensa"}).json()} == {"Cairan Lensa"}
    assert len(client.get("/api/products", params={"is_active": "false"}).json()) == 1

    recommended = {p["name"] for p in client.get("/api/products/recommended").json()}
    assert recommended == {"Kacamata Baca", "Cairan Lensa"}


def test_effective_price_prefers_discount():
    assert effective_price(Product(price=Decimal("150000"), discount_price=Decimal("120000"))) == Decimal("120000")
    assert effective_price(Product(price=Decimal("150000"), discount_price=None)) == Decimal("150000")
    assert effective_price(Product(price=Decimal("150000"), discount_price=Decimal("0"))) == Decimal("150000")


# ----------------------------------------------------------------------
# Orders
# ----------------------------------------------------------------------


def test_order_reserves_stock_and_prices_items(client, db, patient, make_product, auth):
    glasses = make_product(price=Decimal("150000"), discount_price=Decimal("120000"), stock=3)
    drops = make_product(name="Obat Tetes", price=Decimal("25000"), stock=10)

    response = client.post(
        "/api/orders",
        headers=auth(patient),
        json={**order_items((glasses, 2), (drops, 1)), "shipping_address": SHIPPING},
    )

    assert response.status_code == 201
    order = response.json()["order"]
    assert order["status"] == "pending"
    assert order["total"] == 265000
    assert {item["product_name"] for item in order["items"]} == {"Kacamata Baca", "Obat Tetes"}
    assert "<script>" not in order["shipping_address"]["full_address"]

    db.refresh(glasses)
    db.refresh(drops)
    assert glasses.stock == 1
    assert drops.stock == 9


def test_order_rejections(client, patient, make_product, auth):
    inactive = make_product(is_active=False)
    scarce = make_product(stock=1)

    assert client.post("/api/orders", headers=auth(patient), json={"items": []}).status_code == 400
    assert client.post("/api/orders", headers=auth(patient), json=order_items((inactive, 1))).status_code == 400
    assert client.post("/api/orders", headers=auth(patient), json=order_items((scarce, 2))).status_code == 400
    assert client.post(
        "/api/orders", headers=auth(patient), json={"items": [{"product_id": "missing", "quantity": 1}]}
    ).status_code == 404
    assert client.post(
        "/api/orders", headers=auth(patient), json={"items": [{"product_id": scarce.id, "quantity": 0}]}
    ).status_code == 422


def test_failed_order_keeps_stock(client, db, patient, make_product, auth):
    plenty = make_product(stock=5)
    scarce = make_product(name="Langka", stock=1)

    response = client.post("/api/orders", headers=auth(patient), json=order_items((plenty, 2), (scarce, 3)))

    assert response.status_code == 400
    db.rollback()
    db.refresh(plenty)
    assert plenty.stock == 5


def test_order_visibility(client, patient, admin, make_user, make_product, auth):
    product = make_product()
    order_id = client.post("/api/orders", headers=auth(patient), json=order_items((product, 1))).json()["order"]["id"]
    stranger = make_user("pasien")

    assert len(client.get("/api/orders", headers=auth(patient)).json()) == 1
    assert client.get("/api/orders", headers=auth(stranger)).json() == []
    assert len(client.get("/api/orders", headers=auth(admin)).json()) == 1
    assert client.get(f"/api/orders/{order_id}", headers=auth(stranger)).status_code == 403
    assert client.get(f"/api/orders/{order_id}", headers=auth(patient)).status_code == 200


def test_admin_cancel_restocks_once(client, db, admin, patient, make_product, auth):
    product = make_product(stock=4)
    order_id = client.post("/api/orders", headers=auth(patient), json=order_items((product, 3))).json()["order"]["id"]

    assert client.patch(
        f"/api/orders/{order_id}/status", headers=auth(patient), json={"status": "cancelled"}
    ).status_code == 403

    for _ in range(2):
        response = client.patch(f"/api/orders/{order_id}/status", headers=auth(admin), json={"status": "cancelled"})
        assert response.status_code == 200

    db.refresh(product)
    assert product.stock == 4


def test_shipped_order_cancel_does_not_restock(client, db, admin, patient, make_product, auth):
    product = make_product(stock=4)
    order_id = client.post("/api/orders", headers=auth(patient), json=order_items((product, 1))).json()["order"]["id"]

    client.patch(f"/api/orders/{order_id}/status", headers=auth(admin), json={"status": "shipped"})
    client.patch(f"/api/orders/{order_id}/status", headers=auth(admin), json={"status": "cancelled"})

    db.refresh(product)
    assert product.stock == 3


def test_invalid_order_status(client, admin, patient, make_product, auth):
    product = make_product()
    order_id = client.post("/api/orders", headers=auth(patient), json=order_items((product, 1))).json()["order"]["id"]
    response = client.patch(f"/api/orders/{order_id}/status", headers=auth(admin), json={"status": "lost"})
    assert response.status_code == 422
