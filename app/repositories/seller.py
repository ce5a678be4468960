from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.models.seller import Seller


class SellerRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, seller_id: int) -> Optional[Seller]:
        return (
            self.db.query(Seller)
            .filter(Seller.id == seller_id, Seller.deleted_at.is_(None))
            .first()
        )

    def add(self, seller: Seller) -> Seller:
        self.db.add(seller)
        self.db.flush()
        return seller

    def list(self, *, search: Optional[str], offset: int, limit: int) -> Tuple[List[Seller], int]:
        query = self.db.query(Seller).filter(Seller.deleted_at.is_(None))
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Seller.name.ilike(pattern), Seller.contact_number.ilike(pattern)))
        total = query.count()
        sellers = query.order_by(Seller.name).offset(offset).limit(limit).all()
        return sellers, total
