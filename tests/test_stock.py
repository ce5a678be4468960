from decimal import Decimal

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models.product import Product, ProductVariation, Variation


def _create_variant(db: Session, *, suffix: str, stock: int) -> ProductVariation:
    product = Product(name=f"Stock Product {suffix}", gst_percent=Decimal("5"), is_active=True)
    variation = Variation(name=f"Stock Pack {suffix}", is_active=True)
    db.add_all([product, variation])
    db.flush()

    variant = ProductVariation(
        product_id=product.id,
        variation_id=variation.id,
        price=Decimal("49.00"),
        box_quantity=6,
        stock_in_hand=stock,
        product_qr_code=f"STOCK-{suffix.upper()}-U",
        box_qr_code=f"STOCK-{suffix.upper()}-B",
        is_active=True,
    )
    db.add(variant)
    db.commit()
    db.refresh(variant)
    return variant


def test_stock_check_post_happy_and_insufficient(client: TestClient, db_session: Session):
    variant = _create_variant(db_session, suffix="post", stock=2)

    ok_response = client.post(
        "/api/v1/stock/check",
        json={"items": [{"variant_id": variant.id, "quantity": 1}]},
    )
    assert ok_response.status_code == 200
    ok_payload = ok_response.json()
    assert ok_payload["success"] is True
    assert ok_payload["data"]["available"] is True
    assert ok_payload["data"]["insufficient_items"] == []

    insufficient_response = client.post(
        "/api/v1/stock/check",
        json={"items": [{"variant_id": variant.id, "quantity": 3}]},
    )
    assert insufficient_response.status_code == 200
    insufficient_payload = insufficient_response.json()
    assert insufficient_payload["data"]["available"] is False
    assert len(insufficient_payload["data"]["insufficient_items"]) == 1
    assert insufficient_payload["data"]["insufficient_items"][0]["variant_id"] == variant.id
    assert insufficient_payload["data"]["insufficient_items"][0]["available_quantity"] == 2

    db_session.expire_all()
    assert db_session.get(ProductVariation, variant.id).stock_in_hand == 2


def test_stock_check_sums_repeated_variants_and_reports_missing(client: TestClient, db_session: Session):
    variant = _create_variant(db_session, suffix="sum", stock=5)

    response = client.post(
        "/api/v1/stock/check",
        json={
            "items": [
                {"variant_id": variant.id, "quantity": 3},
                {"variant_id": variant.id, "quantity": 3},
                {"variant_id": 9999, "quantity": 1},
            ]
        },
    )

    assert response.status_code == 200
    items = {item["variant_id"]: item for item in response.json()["data"]["insufficient_items"]}
    assert items[variant.id]["requested_quantity"] == 6
    assert items[9999]["available_quantity"] == 0
    assert items[9999]["message"] == "Product variation 9999 not found"


def test_product_variations_search_and_low_stock(client: TestClient, db_session: Session):
    plenty = _create_variant(db_session, suffix="plenty", stock=500)
    low = _create_variant(db_session, suffix="low", stock=3)

    everything = client.get("/api/v1/product-variations")
    assert everything.status_code == 200
    assert everything.json()["meta"]["total"] == 2

    by_barcode = client.get("/api/v1/product-variations", params={"search": "STOCK-PLENTY"})
    assert [item["id"] for item in by_barcode.json()["data"]] == [plenty.id]

    low_stock = client.get("/api/v1/product-variations", params={"low_stock": "true"})
    assert [item["id"] for item in low_stock.json()["data"]] == [low.id]

    detail = client.get(f"/api/v1/product-variations/{low.id}")
    assert detail.status_code == 200
    assert detail.json()["data"]["stock_in_hand"] == 3
    assert detail.json()["data"]["gst_percent"] == "5.00"


def test_product_variation_missing(client: TestClient):
    response = client.get("/api/v1/product-variations/777")

    assert response.status_code == 404
    assert response.json()["kind"] == "not_found"
