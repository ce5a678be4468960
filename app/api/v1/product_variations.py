from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import Optional

from app.core.config import settings
from app.core.exceptions import VariantNotFound
from app.core.rate_limiter import limiter
from app.db.session import get_db
from app.repositories.variant import VariantRepository
from app.schemas.product import ProductVariationResponse
from app.utils.response import paginated_response, success

router = APIRouter()


@router.get("", response_model=dict)
@router.get("/", response_model=dict)
@limiter.limit("100/minute")
def list_product_variations(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=100),
    search: Optional[str] = Query(None, max_length=100),
    deleted: bool = False,
    low_stock: bool = False,
    db: Session = Depends(get_db),
):
    """
    List product variations with stock and barcodes.
    Search matches product name, variation name and either barcode.
    """
    variants, total = VariantRepository(db).list(
        search=search.strip() if search else None,
        include_deleted=deleted,
        low_stock_only=low_stock,
        low_stock_threshold=settings.LOW_STOCK_THRESHOLD,
        offset=(page - 1) * limit,
        limit=limit,
    )
    return paginated_response(
        items=[ProductVariationResponse.model_validate(variant).model_dump() for variant in variants],
        total=total,
        page=page,
        limit=limit,
    )


@router.get("/{variant_id}", response_model=dict)
@limiter.limit("100/minute")
def get_product_variation(
    request: Request,
    variant_id: int,
    db: Session = Depends(get_db),
):
    variant = VariantRepository(db).get(variant_id)
    if variant is None:
        raise VariantNotFound(variant_id)
    return success(data=ProductVariationResponse.model_validate(variant).model_dump())
