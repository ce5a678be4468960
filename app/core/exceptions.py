from fastapi import status
from typing import Any, List, Optional


class APIError(Exception):
    kind: str = "error"

    def __init__(
        self,
        status_code: int,
        message: str,
        errors: Optional[List[Any]] = None,
        kind: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.errors = errors or []
        if kind is not None:
            self.kind = kind


class OrderError(APIError):
    """Base for failures raised by the order coordinator.

    Every subclass aborts the enclosing unit of work; callers only ever see
    the discriminated ``kind`` plus a human readable message.
    """

    kind = "unexpected"
    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, errors: Optional[List[Any]] = None):
        super().__init__(self.default_status, message, errors)


class OrderValidationError(OrderError):
    kind = "validation_error"
    default_status = status.HTTP_400_BAD_REQUEST


class NotFound(OrderError):
    kind = "not_found"
    default_status = status.HTTP_404_NOT_FOUND


class SellerNotFound(NotFound):
    def __init__(self, seller_id: int):
        self.seller_id = seller_id
        super().__init__(f"Seller {seller_id} not found")


class OrderNotFound(NotFound):
    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


class VariantNotFound(NotFound):
    def __init__(self, variant_id: int):
        self.variant_id = variant_id
        super().__init__(f"Product variation {variant_id} not found")


class UnknownBarcode(NotFound):
    def __init__(self, barcode: str):
        self.barcode = barcode
        super().__init__("No product found with this barcode. Create a new one.")


class InsufficientStock(OrderError):
    kind = "insufficient_stock"
    default_status = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        *,
        variant_id: int,
        product_name: str,
        variant_name: str,
        available: int,
        requested: int,
    ):
        self.variant_id = variant_id
        self.product_name = product_name
        self.variant_name = variant_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock: requested {requested}, available {available}, "
            f"product {product_name} variant {variant_name}",
            errors=[
                {
                    "variant_id": variant_id,
                    "product_name": product_name,
                    "variant_name": variant_name,
                    "available_quantity": available,
                    "requested_quantity": requested,
                }
            ],
        )


class ConflictOnUpdate(OrderError):
    kind = "conflict"
    default_status = status.HTTP_409_CONFLICT


class UnexpectedOrderError(OrderError):
    kind = "unexpected"
    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR
