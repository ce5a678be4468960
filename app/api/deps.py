from fastapi import Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.services.barcode_service import BarcodeService
from app.services.order_service import OrderService


def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    return OrderService(db)


def get_barcode_service(db: Session = Depends(get_db)) -> BarcodeService:
    return BarcodeService(db)
