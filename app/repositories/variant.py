from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from app.models.product import Product, ProductVariation, Variation


class VariantRepository:
    """Row access for ``ProductVariation``; stock writes are single statements."""

    def __init__(self, db: Session):
        self.db = db

    def _active(self):
        return (
            self.db.query(ProductVariation)
            .options(joinedload(ProductVariation.product), joinedload(ProductVariation.variation))
            .filter(ProductVariation.deleted_at.is_(None))
        )

    def get(self, variant_id: int) -> Optional[ProductVariation]:
        return self._active().filter(ProductVariation.id == variant_id).first()

    def get_for_update(self, variant_id: int, *, include_deleted: bool = False) -> Optional[ProductVariation]:
        query = self.db.query(ProductVariation).filter(ProductVariation.id == variant_id)
        if not include_deleted:
            query = query.filter(ProductVariation.deleted_at.is_(None))
        return query.with_for_update().first()

    def get_by_product_and_variation_for_update(
        self, product_id: int, variation_id: int, *, include_deleted: bool = False
    ) -> Optional[ProductVariation]:
        query = self.db.query(ProductVariation).filter(
            ProductVariation.product_id == product_id,
            ProductVariation.variation_id == variation_id,
        )
        if not include_deleted:
            query = query.filter(ProductVariation.deleted_at.is_(None))
        return query.with_for_update().first()

    def find_by_barcode(self, code: str) -> Optional[ProductVariation]:
        return (
            self._active()
            .filter(or_(ProductVariation.product_qr_code == code, ProductVariation.box_qr_code == code))
            .first()
        )

    def barcodes_in_use(self, codes: List[str]) -> List[str]:
        if not codes:
            return []
        rows = (
            self.db.query(ProductVariation.product_qr_code, ProductVariation.box_qr_code)
            .filter(or_(ProductVariation.product_qr_code.in_(codes), ProductVariation.box_qr_code.in_(codes)))
            .all()
        )
        used = {code for row in rows for code in row if code}
        return [code for code in codes if code in used]

    def stock_of(self, variant_id: int) -> int:
        stock = (
            self.db.query(ProductVariation.stock_in_hand)
            .filter(ProductVariation.id == variant_id)
            .scalar()
        )
        return stock or 0

    def conditional_decrement(self, variant_id: int, quantity: int) -> bool:
        """``UPDATE ... SET stock = stock - q WHERE id = :id AND stock >= q``.

        Returns False when the guard rejected the write.
        """
        updated = (
            self.db.query(ProductVariation)
            .filter(
                ProductVariation.id == variant_id,
                ProductVariation.stock_in_hand >= quantity,
            )
            .update(
                {ProductVariation.stock_in_hand: ProductVariation.stock_in_hand - quantity},
                synchronize_session=False,
            )
        )
        return updated == 1

    def increment(self, variant_id: int, quantity: int) -> None:
        (
            self.db.query(ProductVariation)
            .filter(ProductVariation.id == variant_id)
            .update(
                {ProductVariation.stock_in_hand: ProductVariation.stock_in_hand + quantity},
                synchronize_session=False,
            )
        )

    def get_variation_by_name(self, name: str) -> Optional[Variation]:
        return self.db.query(Variation).filter(Variation.name == name).first()

    def add(self, instance):
        self.db.add(instance)
        self.db.flush()
        return instance

    def list(
        self,
        *,
        search: Optional[str],
        include_deleted: bool,
        low_stock_only: bool,
        low_stock_threshold: int,
        offset: int,
        limit: int,
    ) -> Tuple[List[ProductVariation], int]:
        query = (
            self.db.query(ProductVariation)
            .join(Product, ProductVariation.product_id == Product.id)
            .join(Variation, ProductVariation.variation_id == Variation.id)
            .options(joinedload(ProductVariation.product), joinedload(ProductVariation.variation))
        )
        if not include_deleted:
            query = query.filter(ProductVariation.deleted_at.is_(None))
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    Product.name.ilike(pattern),
                    Variation.name.ilike(pattern),
                    ProductVariation.product_qr_code.ilike(pattern),
                    ProductVariation.box_qr_code.ilike(pattern),
                )
            )
        if low_stock_only:
            query = query.filter(ProductVariation.stock_in_hand <= low_stock_threshold)

        total = query.count()
        variants = query.order_by(ProductVariation.id.desc()).offset(offset).limit(limit).all()
        return variants, total
