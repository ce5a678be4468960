from decimal import Decimal

import pytest
from sqlalchemy.orm import Session

from app.core.exceptions import OrderValidationError, UnknownBarcode
from app.db.unit_of_work import UnitOfWork
from app.models.product import Product, ProductVariation, Variation
from app.schemas.product import ScanProductCreate
from app.services.barcode_service import BOX_QR, PRODUCT_QR, BarcodeService


def _create_variant(
    db: Session,
    *,
    box_quantity: int = 12,
    product_code: str = "UNIT-1",
    box_code: str = "BOX-1",
) -> ProductVariation:
    product = Product(name="Cetirizine", gst_percent=Decimal("12"), is_active=True)
    variation = Variation(name=f"Strip {product_code}", is_active=True)
    db.add_all([product, variation])
    db.flush()

    variant = ProductVariation(
        product_id=product.id,
        variation_id=variation.id,
        price=Decimal("22.00"),
        box_quantity=box_quantity,
        stock_in_hand=50,
        product_qr_code=product_code,
        box_qr_code=box_code,
        is_active=True,
    )
    db.add(variant)
    db.commit()
    db.refresh(variant)
    return variant


def test_unit_code_resolves_with_multiplier_one(db_session: Session):
    variant = _create_variant(db_session)

    match = BarcodeService(db_session).resolve("UNIT-1")

    assert match.variant.id == variant.id
    assert match.code_type == PRODUCT_QR
    assert match.multiplier == 1
    assert not match.is_box


def test_box_code_resolves_with_box_quantity(db_session: Session):
    variant = _create_variant(db_session)

    match = BarcodeService(db_session).resolve("BOX-1")

    assert match.variant.id == variant.id
    assert match.code_type == BOX_QR
    assert match.multiplier == 12
    assert match.is_box


def test_box_code_with_zero_box_quantity_counts_as_one(db_session: Session):
    _create_variant(db_session, box_quantity=0)

    assert BarcodeService(db_session).resolve("BOX-1").multiplier == 1


def test_unknown_code_raises(db_session: Session):
    with pytest.raises(UnknownBarcode) as exc_info:
        BarcodeService(db_session).resolve("NOPE")

    assert exc_info.value.kind == "not_found"
    assert exc_info.value.status_code == 404


def test_describe_reports_scan_shape(db_session: Session):
    variant = _create_variant(db_session)

    lookup = BarcodeService(db_session).describe("BOX-1")

    assert lookup.type == "BOX_QR"
    assert lookup.scanned_qr == "box_qr_code"
    assert lookup.variant_id == variant.id
    assert lookup.units_per_scan == 12
    assert lookup.gst_percent == Decimal("12")
    assert lookup.stock_in_hand == 50


def _scan_payload(product_code="NEW-U", box_code="NEW-B", variation="10 Tablets"):
    return ScanProductCreate(
        product={"name": "Azithromycin 500", "gst_percent": "12", "hsn_code": "3004"},
        variation={"name": variation},
        product_variation={
            "price": "95.50",
            "box_quantity": 10,
            "stock_in_hand": 30,
            "product_qr_code": product_code,
            "box_qr_code": box_code,
        },
    )


def test_create_product_from_scan(db_session: Session):
    service = BarcodeService(db_session)

    with UnitOfWork(db_session):
        variant_id = service.create_product_from_scan(_scan_payload()).id

    match = service.resolve("NEW-B")
    assert match.variant.id == variant_id
    assert match.multiplier == 10
    assert match.variant.product_name == "Azithromycin 500"
    assert match.variant.stock_in_hand == 30


def test_create_product_from_scan_reuses_variation_by_name(db_session: Session):
    service = BarcodeService(db_session)

    with UnitOfWork(db_session):
        first = service.create_product_from_scan(_scan_payload())
        first_variation_id = first.variation_id
    with UnitOfWork(db_session):
        second = service.create_product_from_scan(_scan_payload(product_code="NEW2-U", box_code="NEW2-B"))
        second_variation_id = second.variation_id

    assert first_variation_id == second_variation_id
    assert db_session.query(Variation).count() == 1


def test_create_product_from_scan_rejects_taken_barcode(db_session: Session):
    _create_variant(db_session)
    service = BarcodeService(db_session)

    with pytest.raises(OrderValidationError) as exc_info:
        with UnitOfWork(db_session):
            service.create_product_from_scan(_scan_payload(product_code="BOX-1", box_code="OTHER-B"))

    assert exc_info.value.errors == [{"barcode": "BOX-1"}]
    assert db_session.query(Product).count() == 1


def test_create_product_from_scan_reports_barcode_taken_during_insert(monkeypatch, db_session: Session):
    _create_variant(db_session)
    service = BarcodeService(db_session)
    # A concurrent insert lands between the availability check and the flush.
    monkeypatch.setattr(service.variants, "barcodes_in_use", lambda codes: [])

    with pytest.raises(OrderValidationError) as exc_info:
        with UnitOfWork(db_session):
            service.create_product_from_scan(_scan_payload(product_code="UNIT-1", box_code="OTHER-B"))

    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "Barcode already assigned to another product variation"
    assert exc_info.value.errors == [{"barcode": "UNIT-1"}, {"barcode": "OTHER-B"}]
    assert db_session.query(Product).count() == 1
    assert db_session.query(ProductVariation).count() == 1


def test_scan_payload_requires_a_code():
    with pytest.raises(ValueError):
        _scan_payload(product_code=None, box_code=None)


def test_scan_payload_rejects_identical_codes():
    with pytest.raises(ValueError):
        _scan_payload(product_code="SAME", box_code="SAME")
