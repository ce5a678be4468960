from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.rate_limiter import limiter
from app.db.session import get_db
from app.models.product import ProductVariation
from app.schemas.stock import InsufficientStockItem, StockCheckRequest, StockCheckResponse
from app.utils.response import success

router = APIRouter()


def _build_stock_response(payload: StockCheckRequest, db: Session) -> dict:
    requested_quantities: dict[int, int] = {}
    for item in payload.items:
        requested_quantities[item.variant_id] = requested_quantities.get(item.variant_id, 0) + item.quantity

    variants = (
        db.query(ProductVariation)
        .filter(
            ProductVariation.id.in_(sorted(requested_quantities.keys())),
            ProductVariation.deleted_at.is_(None),
        )
        .all()
    )
    variants_by_id = {variant.id: variant for variant in variants}

    insufficient_items: list[InsufficientStockItem] = []
    for variant_id, requested_quantity in requested_quantities.items():
        variant = variants_by_id.get(variant_id)
        available_quantity = variant.stock_in_hand if variant else 0
        if available_quantity < requested_quantity:
            insufficient_items.append(
                InsufficientStockItem(
                    variant_id=variant_id,
                    available_quantity=available_quantity,
                    requested_quantity=requested_quantity,
                    message=(
                        f"Insufficient stock for {variant.product_name} {variant.variation_name}"
                        if variant
                        else f"Product variation {variant_id} not found"
                    ),
                )
            )

    response = StockCheckResponse(
        available=len(insufficient_items) == 0,
        insufficient_items=insufficient_items,
    )
    return success(data=response.model_dump())


@router.post("/check", response_model=dict)
@limiter.limit("120/minute")
def check_stock(
    request: Request,
    payload: StockCheckRequest,
    db: Session = Depends(get_db),
):
    """Check stock availability for variant quantities without deducting inventory."""
    return _build_stock_response(payload, db)
