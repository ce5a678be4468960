from dataclasses import dataclass

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictOnUpdate, OrderValidationError, UnknownBarcode
from app.models.product import Product, ProductVariation, Variation
from app.repositories.variant import VariantRepository
from app.schemas.product import BarcodeLookupResponse, ScanProductCreate

logger = structlog.get_logger()

PRODUCT_QR = "product_qr"
BOX_QR = "box_qr"


@dataclass(frozen=True)
class BarcodeMatch:
    variant: ProductVariation
    code_type: str
    multiplier: int

    @property
    def is_box(self) -> bool:
        return self.code_type == BOX_QR


class BarcodeService:
    def __init__(self, db: Session, variants: VariantRepository = None):
        self.db = db
        self.variants = variants or VariantRepository(db)

    def resolve(self, code: str) -> BarcodeMatch:
        """Map a scanned unit or box code to its variant and unit multiplier."""
        variant = self.variants.find_by_barcode(code)
        if variant is None:
            raise UnknownBarcode(code)

        # Unit codes win when a code is (mis)configured as both.
        if variant.product_qr_code == code:
            return BarcodeMatch(variant=variant, code_type=PRODUCT_QR, multiplier=1)
        return BarcodeMatch(
            variant=variant,
            code_type=BOX_QR,
            multiplier=max(variant.box_quantity or 0, 1),
        )

    def describe(self, code: str) -> BarcodeLookupResponse:
        match = self.resolve(code)
        variant = match.variant
        return BarcodeLookupResponse(
            type="BOX_QR" if match.is_box else "PRODUCT_QR",
            scanned_qr="box_qr_code" if match.is_box else "product_qr_code",
            variant_id=variant.id,
            product_id=variant.product_id,
            variation_id=variant.variation_id,
            product_name=variant.product_name,
            variation_name=variant.variation_name,
            price_per_unit=variant.price,
            gst_percent=variant.gst_percent,
            box_quantity=variant.box_quantity,
            units_per_scan=match.multiplier,
            stock_in_hand=variant.stock_in_hand,
        )

    def create_product_from_scan(self, payload: ScanProductCreate) -> ProductVariation:
        """Create product, variation (reused by name) and variant in the caller's unit of work."""
        pv_data = payload.product_variation
        codes = [code for code in (pv_data.product_qr_code, pv_data.box_qr_code) if code]
        taken = self.variants.barcodes_in_use(codes)
        if taken:
            raise OrderValidationError(
                "Barcode already assigned to another product variation",
                errors=[{"barcode": code} for code in taken],
            )

        product = Product(
            name=payload.product.name,
            gst_percent=payload.product.gst_percent,
            hsn_code=payload.product.hsn_code,
            is_active=True,
        )
        self.variants.add(product)

        variation = self.variants.get_variation_by_name(payload.variation.name)
        if variation is None:
            try:
                variation = self.variants.add(Variation(name=payload.variation.name, is_active=True))
            except IntegrityError as exc:
                raise ConflictOnUpdate(
                    f"Variation '{payload.variation.name}' was created concurrently. Please retry."
                ) from exc

        variant = ProductVariation(
            product_id=product.id,
            variation_id=variation.id,
            price=pv_data.price,
            box_quantity=pv_data.box_quantity,
            stock_in_hand=pv_data.stock_in_hand,
            product_qr_code=pv_data.product_qr_code,
            box_qr_code=pv_data.box_qr_code,
            is_active=True,
        )
        variant.product = product
        variant.variation = variation
        try:
            self.variants.add(variant)
        except IntegrityError as exc:
            # Another request took one of the codes after the check above.
            logger.warning("product_barcode_conflict", barcodes=codes)
            raise OrderValidationError(
                "Barcode already assigned to another product variation",
                errors=[{"barcode": code} for code in codes],
            ) from exc

        logger.info(
            "product_created_from_scan",
            product_id=product.id,
            variant_id=variant.id,
            stock_in_hand=variant.stock_in_hand,
        )
        return variant
