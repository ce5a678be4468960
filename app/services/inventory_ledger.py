from typing import Optional

import structlog
from sqlalchemy.orm import Session

from app.core.exceptions import InsufficientStock, OrderValidationError
from app.models.product import ProductVariation
from app.repositories.variant import VariantRepository

logger = structlog.get_logger()


class InventoryLedger:
    """Stock reservations against ``ProductVariation.stock_in_hand``.

    Must be used inside an open unit of work; nothing here commits.
    """

    def __init__(self, db: Session, variants: Optional[VariantRepository] = None):
        self.db = db
        self.variants = variants or VariantRepository(db)

    def reserve(self, variant: ProductVariation, quantity: int) -> None:
        if quantity <= 0:
            raise OrderValidationError("Reservation quantity must be a positive integer")

        granted = self.variants.conditional_decrement(variant.id, quantity)
        self.db.expire(variant, ["stock_in_hand"])
        if not granted:
            available = self.variants.stock_of(variant.id)
            logger.warning(
                "stock_reservation_rejected",
                variant_id=variant.id,
                requested=quantity,
                available=available,
            )
            raise InsufficientStock(
                variant_id=variant.id,
                product_name=variant.product_name,
                variant_name=variant.variation_name,
                available=available,
                requested=quantity,
            )

    def release(self, variant: ProductVariation, quantity: int) -> None:
        if quantity <= 0:
            return
        self.variants.increment(variant.id, quantity)
        self.db.expire(variant, ["stock_in_hand"])

    def adjust(self, variant: ProductVariation, old_quantity: int, new_quantity: int) -> int:
        """Move stock by the difference only; returns the applied diff."""
        diff = new_quantity - old_quantity
        if diff > 0:
            self.reserve(variant, diff)
        elif diff < 0:
            self.release(variant, -diff)
        return diff

    def lookup_by_barcode(self, code: str) -> Optional[ProductVariation]:
        return self.variants.find_by_barcode(code)
