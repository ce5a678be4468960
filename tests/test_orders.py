from decimal import Decimal

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models.product import Product, ProductVariation, Variation
from app.models.seller import Seller


def _create_seller(db: Session, name: str = "Order Test Seller") -> Seller:
    seller = Seller(name=name, contact_number="9876543211", is_active=True)
    db.add(seller)
    db.commit()
    db.refresh(seller)
    return seller


def _create_variant(db: Session, *, key: str, stock: int, box_quantity: int = 10) -> ProductVariation:
    product = Product(name=f"Order Product {key}", gst_percent=Decimal("18"), is_active=True)
    variation = Variation(name=f"Order Pack {key}", is_active=True)
    db.add_all([product, variation])
    db.flush()

    variant = ProductVariation(
        product_id=product.id,
        variation_id=variation.id,
        price=Decimal("100.00"),
        box_quantity=box_quantity,
        stock_in_hand=stock,
        product_qr_code=f"ORD-{key}-U",
        box_qr_code=f"ORD-{key}-B",
        is_active=True,
    )
    db.add(variant)
    db.commit()
    db.refresh(variant)
    return variant


def _stock(db: Session, variant_id: int) -> int:
    db.expire_all()
    return db.get(ProductVariation, variant_id).stock_in_hand


def _create_order(client: TestClient, seller_id: int, variant_id: int, quantity: int) -> dict:
    response = client.post(
        "/api/v1/orders/",
        json={"seller_id": seller_id, "items": [{"variant_id": variant_id, "quantity": quantity}]},
    )
    assert response.status_code == 201
    return response.json()["data"]


def test_create_order_returns_priced_order(client: TestClient, db_session: Session):
    seller = _create_seller(db_session)
    variant = _create_variant(db_session, key="create", stock=20)

    response = client.post(
        "/api/v1/orders/",
        json={
            "seller_id": seller.id,
            "items": [{"variant_id": variant.id, "quantity": 10}],
            "notes": "<b>Deliver</b> before noon",
        },
    )

    assert response.status_code == 201
    payload = response.json()
    assert payload["success"] is True
    data = payload["data"]
    assert data["status"] == "completed"
    assert data["seller_name"] == "Order Test Seller"
    assert data["notes"] == "Deliver before noon"
    assert data["subtotal"] == "1000.00"
    assert data["gst_total"] == "180.00"
    assert data["grand_total"] == "1180.00"
    assert data["items"][0]["unit_price"] == "100.00"
    assert data["items"][0]["gst_percent"] == "18.00"
    assert data["items"][0]["boxes"] == 1
    assert data["items"][0]["remaining_strips"] == 0
    assert _stock(db_session, variant.id) == 10


def test_create_order_insufficient_stock(client: TestClient, db_session: Session):
    seller = _create_seller(db_session)
    variant = _create_variant(db_session, key="short", stock=1)

    response = client.post(
        "/api/v1/orders/",
        json={"seller_id": seller.id, "items": [{"variant_id": variant.id, "quantity": 2}]},
    )

    assert response.status_code == 400
    payload = response.json()
    assert payload["kind"] == "insufficient_stock"
    assert "Insufficient stock" in payload["message"]
    assert payload["errors"][0]["available_quantity"] == 1
    assert payload["errors"][0]["requested_quantity"] == 2
    assert _stock(db_session, variant.id) == 1


def test_create_order_unknown_seller(client: TestClient, db_session: Session):
    variant = _create_variant(db_session, key="noseller", stock=5)

    response = client.post(
        "/api/v1/orders/",
        json={"seller_id": 999, "items": [{"variant_id": variant.id, "quantity": 1}]},
    )

    assert response.status_code == 404
    assert response.json()["kind"] == "not_found"


def test_create_order_rejects_non_positive_quantity(client: TestClient, db_session: Session):
    seller = _create_seller(db_session)
    variant = _create_variant(db_session, key="zero", stock=5)

    response = client.post(
        "/api/v1/orders/",
        json={"seller_id": seller.id, "items": [{"variant_id": variant.id, "quantity": 0}]},
    )

    assert response.status_code == 422
    assert response.json()["kind"] == "validation_error"
    assert _stock(db_session, variant.id) == 5


def test_create_order_rejects_empty_items(client: TestClient, db_session: Session):
    seller = _create_seller(db_session)

    response = client.post("/api/v1/orders/", json={"seller_id": seller.id, "items": []})

    assert response.status_code == 422


def test_get_update_and_delete_order(client: TestClient, db_session: Session):
    seller = _create_seller(db_session)
    variant = _create_variant(db_session, key="lifecycle", stock=10)
    order = _create_order(client, seller.id, variant.id, 5)

    detail = client.get(f"/api/v1/orders/{order['id']}")
    assert detail.status_code == 200
    assert detail.json()["data"]["items"][0]["quantity"] == 5

    updated = client.put(
        f"/api/v1/orders/{order['id']}",
        json={"items": [{"variant_id": variant.id, "quantity": 2}]},
    )
    assert updated.status_code == 200
    assert updated.json()["data"]["subtotal"] == "200.00"
    assert _stock(db_session, variant.id) == 8

    too_many = client.put(
        f"/api/v1/orders/{order['id']}",
        json={"items": [{"variant_id": variant.id, "quantity": 11}]},
    )
    assert too_many.status_code == 400
    assert too_many.json()["kind"] == "insufficient_stock"
    assert _stock(db_session, variant.id) == 8

    deleted = client.delete(f"/api/v1/orders/{order['id']}")
    assert deleted.status_code == 200
    assert deleted.json()["data"]["restored_units"] == 2
    assert _stock(db_session, variant.id) == 10

    missing = client.get(f"/api/v1/orders/{order['id']}")
    assert missing.status_code == 404


def test_cancel_order(client: TestClient, db_session: Session):
    seller = _create_seller(db_session)
    variant = _create_variant(db_session, key="cancel", stock=10)
    order = _create_order(client, seller.id, variant.id, 4)

    response = client.put(f"/api/v1/orders/{order['id']}/cancel")

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "cancelled"
    assert _stock(db_session, variant.id) == 10

    again = client.put(f"/api/v1/orders/{order['id']}/cancel")
    assert again.status_code == 400
    assert again.json()["kind"] == "validation_error"


def test_list_orders_paginates(client: TestClient, db_session: Session):
    seller = _create_seller(db_session)
    variant = _create_variant(db_session, key="list", stock=50)
    for _ in range(3):
        _create_order(client, seller.id, variant.id, 1)

    response = client.get("/api/v1/orders/", params={"seller_id": seller.id, "limit": 2})

    assert response.status_code == 200
    payload = response.json()
    assert len(payload["data"]) == 2
    assert payload["meta"] == {"total": 3, "page": 1, "limit": 2, "total_pages": 2}

    filtered = client.get("/api/v1/orders/", params={"status": "draft"})
    assert filtered.json()["meta"]["total"] == 0


def test_order_invoice_pdf(client: TestClient, db_session: Session):
    seller = _create_seller(db_session)
    variant = _create_variant(db_session, key="invoice", stock=30)
    order = _create_order(client, seller.id, variant.id, 25)

    response = client.get(f"/api/v1/orders/{order['id']}/invoice")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")


def test_order_invoice_missing(client: TestClient):
    response = client.get("/api/v1/orders/12345/invoice")

    assert response.status_code == 404


def test_scan_flow(client: TestClient, db_session: Session):
    seller = _create_seller(db_session)
    variant = _create_variant(db_session, key="scan", stock=50, box_quantity=12)

    lookup = client.get("/api/v1/scan/ORD-scan-B")
    assert lookup.status_code == 200
    assert lookup.json()["data"]["type"] == "BOX_QR"
    assert lookup.json()["data"]["units_per_scan"] == 12
    assert _stock(db_session, variant.id) == 50

    boxed = client.post("/api/v1/scan/", json={"seller_id": seller.id, "barcode": "ORD-scan-B"})
    assert boxed.status_code == 200
    assert boxed.json()["data"]["scan"]["stock_in_hand"] == 38

    loose = client.post("/api/v1/scan/", json={"seller_id": seller.id, "barcode": " ORD-scan-U "})
    assert loose.status_code == 200
    data = loose.json()["data"]
    assert data["order"]["status"] == "draft"
    assert data["order"]["items"][0]["quantity"] == 13
    assert _stock(db_session, variant.id) == 37

    finalized = client.put(f"/api/v1/orders/{data['order']['id']}/finalize")
    assert finalized.status_code == 200
    assert finalized.json()["data"]["status"] == "completed"


def test_scan_unknown_barcode(client: TestClient, db_session: Session):
    seller = _create_seller(db_session)

    lookup = client.get("/api/v1/scan/UNKNOWN-CODE")
    assert lookup.status_code == 404
    assert lookup.json()["message"] == "No product found with this barcode. Create a new one."

    scanned = client.post("/api/v1/scan/", json={"seller_id": seller.id, "barcode": "UNKNOWN-CODE"})
    assert scanned.status_code == 404


def test_scan_add_new_product(client: TestClient, db_session: Session):
    response = client.post(
        "/api/v1/scan/add-new",
        json={
            "product": {"name": "Dolo 650", "gst_percent": "12"},
            "variation": {"name": "15 Tablets"},
            "product_variation": {
                "price": "30.50",
                "box_quantity": 20,
                "stock_in_hand": 100,
                "product_qr_code": "DOLO-U",
                "box_qr_code": "DOLO-B",
            },
        },
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["product_name"] == "Dolo 650"
    assert data["variation_name"] == "15 Tablets"
    assert data["stock_in_hand"] == 100
    assert data["price"] == "30.50"
    assert data["gst_percent"] == "12.00"

    duplicate = client.post(
        "/api/v1/scan/add-new",
        json={
            "product": {"name": "Dolo 650 copy"},
            "variation": {"name": "15 Tablets"},
            "product_variation": {"price": "30.50", "product_qr_code": "DOLO-B"},
        },
    )
    assert duplicate.status_code == 400
    assert duplicate.json()["errors"] == [{"barcode": "DOLO-B"}]
