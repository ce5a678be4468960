from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.deps import get_barcode_service, get_order_service
from app.core.rate_limiter import limiter
from app.db.session import get_db
from app.db.unit_of_work import UnitOfWork
from app.schemas.order import ScanRequest
from app.schemas.product import ProductVariationResponse, ScanProductCreate
from app.services.barcode_service import BarcodeService
from app.services.order_service import OrderService
from app.utils.response import success

router = APIRouter()


@router.get("/{barcode}", response_model=dict)
@limiter.limit("240/minute")
def check_barcode(
    request: Request,
    barcode: str,
    barcodes: BarcodeService = Depends(get_barcode_service),
):
    """Resolve a scanned code without touching stock"""
    lookup = barcodes.describe(barcode.strip())
    return success(data=lookup.model_dump(), message="Product found")


@router.post("/", response_model=dict)
@limiter.limit("240/minute")
def scan_barcode(
    request: Request,
    scan: ScanRequest,
    service: OrderService = Depends(get_order_service),
):
    """
    Add one scan to the seller's open cart for today.

    Unit codes add one strip, box codes add a full box.
    """
    result = service.scan_order(scan)
    return success(data=result.model_dump(), message="Item added to order")


@router.post("/add-new", response_model=dict, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_product_from_scan(
    request: Request,
    payload: ScanProductCreate,
    db: Session = Depends(get_db),
):
    """Create product, variation and stock entry for an unknown barcode"""
    barcodes = BarcodeService(db)
    with UnitOfWork(db, name="create_product_from_scan"):
        variant = barcodes.create_product_from_scan(payload)
        variant_id = variant.id

    created = barcodes.variants.get(variant_id)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=success(
            data=ProductVariationResponse.model_validate(created).model_dump(),
            message="New product created successfully",
        ),
    )
