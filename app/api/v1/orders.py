from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse, StreamingResponse
from sqlalchemy.orm import Session
from typing import Optional

from app.api.deps import get_order_service
from app.core.config import settings
from app.core.exceptions import OrderNotFound
from app.core.rate_limiter import limiter
from app.db.session import get_db
from app.models.order import OrderStatus
from app.repositories.order import OrderRepository
from app.schemas.order import OrderCreate, OrderUpdate
from app.services.order_service import OrderService
from app.utils.invoice_generator import generate_order_invoice
from app.utils.response import paginated_response, success


router = APIRouter()


@router.post(
    "/",
    response_model=dict,
    status_code=status.HTTP_201_CREATED,
    summary="Create new order",
    description="""
Creates a completed order for a seller from an explicit item list.

Process:
1. Validates seller and items (positive integer quantities, no duplicates)
2. Locks each product variation in the order given
3. Reserves stock with a guarded decrement, failing on the first shortage
4. Snapshots current price and GST per line
5. Writes subtotal, GST total and grand total

Any failure rolls back every reservation made by the request.
""",
    responses={
        201: {"description": "Order created successfully"},
        400: {"description": "Invalid items or insufficient stock"},
        404: {"description": "Seller or product variation not found"},
        409: {"description": "Concurrent modification, retry"},
    },
)
@limiter.limit("60/minute")
def create_order(
    request: Request,
    order_data: OrderCreate,
    service: OrderService = Depends(get_order_service),
):
    """Create order from item list"""
    order = service.create_order(order_data)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=success(data=order.model_dump(), message="Order created successfully"),
    )


@router.get("/", response_model=dict)
@limiter.limit("60/minute")
def list_orders(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=100),
    seller_id: Optional[int] = Query(None, gt=0),
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    service: OrderService = Depends(get_order_service),
):
    """List orders, newest first"""
    orders, total = service.list_orders(
        seller_id=seller_id,
        status=status_filter,
        page=page,
        limit=limit,
    )
    return paginated_response(
        items=[order.model_dump() for order in orders],
        total=total,
        page=page,
        limit=limit,
    )


@router.get("/{order_id}", response_model=dict)
@limiter.limit("60/minute")
def get_order_detail(
    request: Request,
    order_id: int,
    service: OrderService = Depends(get_order_service),
):
    """Get order details"""
    order = service.get_order(order_id)
    return success(data=order.model_dump(), message="Order detail retrieved")


@router.put("/{order_id}", response_model=dict)
@limiter.limit("60/minute")
def update_order(
    request: Request,
    order_id: int,
    order_data: OrderUpdate,
    service: OrderService = Depends(get_order_service),
):
    """Replace the order's item set, moving only the stock differences"""
    order = service.update_order(order_id, order_data)
    return success(data=order.model_dump(), message="Order updated successfully")


@router.delete("/{order_id}", response_model=dict)
@limiter.limit("30/minute")
def delete_order(
    request: Request,
    order_id: int,
    service: OrderService = Depends(get_order_service),
):
    """Soft-delete order and restore its stock"""
    result = service.delete_order(order_id)
    return success(data=result, message="Order deleted successfully")


@router.put("/{order_id}/cancel", response_model=dict)
@limiter.limit("30/minute")
def cancel_order(
    request: Request,
    order_id: int,
    service: OrderService = Depends(get_order_service),
):
    """Cancel order"""
    order = service.cancel_order(order_id)
    return success(data=order.model_dump(), message="Order cancelled successfully")


@router.put("/{order_id}/finalize", response_model=dict)
@limiter.limit("30/minute")
def finalize_order(
    request: Request,
    order_id: int,
    service: OrderService = Depends(get_order_service),
):
    """Close a scan cart so later scans start a new order"""
    order = service.finalize_order(order_id)
    return success(data=order.model_dump(), message="Order finalized successfully")


@router.get("/{order_id}/invoice")
@limiter.limit("20/minute")
def download_invoice(
    request: Request,
    order_id: int,
    db: Session = Depends(get_db),
):
    order = OrderRepository(db).get(order_id)
    if not order:
        raise OrderNotFound(order_id)

    pdf_buffer = generate_order_invoice(order)

    return StreamingResponse(
        pdf_buffer,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"inline; filename=order-form-{order.id}.pdf"
        },
    )
