from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from datetime import date, datetime
from typing import Callable, Iterable, List, Optional, Tuple
import time
import structlog

from app.core.config import settings
from app.core.exceptions import (
    ConflictOnUpdate,
    OrderError,
    OrderNotFound,
    OrderValidationError,
    SellerNotFound,
    UnexpectedOrderError,
    VariantNotFound,
)
from app.db.unit_of_work import UnitOfWork
from app.models.order import Order, OrderStatus
from app.models.product import ProductVariation
from app.models.seller import Seller
from app.repositories.order import OrderRepository
from app.repositories.seller import SellerRepository
from app.repositories.variant import VariantRepository
from app.schemas.order import (
    OrderCreate,
    OrderItemIn,
    OrderResponse,
    OrderSummaryResponse,
    OrderUpdate,
    ScanDetail,
    ScanRequest,
    ScanResponse,
)
from app.services.barcode_service import BarcodeService
from app.services.inventory_ledger import InventoryLedger
from app.services.order_aggregate import OrderAggregate
from app.services.pricing import ZERO

logger = structlog.get_logger()

# Lock waits, deadlocks, optimistic version clashes and unique-key races
# (two first scans of the day creating the same cart) are all worth a retry:
# the next attempt sees the winner's committed state.
RETRYABLE_ERRORS = (OperationalError, StaleDataError, IntegrityError)


class OrderService:
    """Runs every order mutation as one all-or-nothing unit of work.

    Each public mutation opens a ``UnitOfWork``, locks the rows it reads,
    moves stock through the ``InventoryLedger`` and lets the
    ``OrderAggregate`` derive the totals. Any failure rolls everything back.
    """

    def __init__(
        self,
        db: Session,
        *,
        max_attempts: Optional[int] = None,
        retry_backoff: Optional[float] = None,
        today: Callable[[], date] = date.today,
    ):
        self.db = db
        self.sellers = SellerRepository(db)
        self.variants = VariantRepository(db)
        self.orders = OrderRepository(db)
        self.ledger = InventoryLedger(db, self.variants)
        self.barcodes = BarcodeService(db, self.variants)
        self.max_attempts = max_attempts or settings.ORDER_TX_MAX_ATTEMPTS
        self.retry_backoff = (
            settings.ORDER_TX_RETRY_BACKOFF_SECONDS if retry_backoff is None else retry_backoff
        )
        self.today = today

    # ------------------------------------------------------------------
    # Transaction boundary
    # ------------------------------------------------------------------

    def _run(self, operation: str, work: Callable):
        attempt = 0
        while True:
            attempt += 1
            try:
                with UnitOfWork(self.db, name=operation):
                    result = work()
                return result
            except OrderError as exc:
                logger.info(
                    "order_operation_rejected",
                    operation=operation,
                    kind=exc.kind,
                    detail=exc.message,
                )
                raise
            except RETRYABLE_ERRORS as exc:
                if attempt < self.max_attempts:
                    delay = self.retry_backoff * (2 ** (attempt - 1))
                    logger.warning(
                        "order_tx_retry",
                        operation=operation,
                        attempt=attempt,
                        delay=delay,
                        error_type=type(exc).__name__,
                    )
                    time.sleep(delay)
                    continue
                logger.error(
                    "order_tx_failed",
                    operation=operation,
                    attempts=attempt,
                    error_type=type(exc).__name__,
                )
                raise ConflictOnUpdate(
                    "The order was modified concurrently. Please retry."
                ) from exc
            except SQLAlchemyError as exc:
                logger.exception(
                    "order_tx_failed",
                    operation=operation,
                    attempts=attempt,
                    error_type=type(exc).__name__,
                )
                raise UnexpectedOrderError(self._unexpected_message(operation, exc)) from exc

    @staticmethod
    def _unexpected_message(operation: str, exc: Exception) -> str:
        if settings.DEBUG and not settings.is_production:
            return f"{operation} failed: {exc}"
        return "Order operation failed"

    # ------------------------------------------------------------------
    # Validation / lookups (always inside a unit of work)
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_items(items: Iterable[OrderItemIn], *, allow_overrides: bool) -> List[OrderItemIn]:
        items = list(items or [])
        if not items:
            raise OrderValidationError("At least one item is required")

        errors = []
        seen = set()
        for index, line in enumerate(items):
            if isinstance(line.quantity, bool) or not isinstance(line.quantity, int) or line.quantity <= 0:
                errors.append({"index": index, "field": "quantity", "message": "Quantity must be a positive integer"})
            key = (line.product_id, line.variant_id)
            if key in seen:
                errors.append({"index": index, "field": "variant_id", "message": "Duplicate variant in items"})
            seen.add(key)
            if not allow_overrides and (line.unit_price is not None or line.gst_percent is not None):
                errors.append(
                    {
                        "index": index,
                        "field": "unit_price",
                        "message": "Price and GST overrides are only accepted when updating an order",
                    }
                )
        if errors:
            raise OrderValidationError("Invalid order items", errors=errors)
        return items

    def _require_seller(self, seller_id: int) -> Seller:
        seller = self.sellers.get(seller_id)
        if seller is None:
            raise SellerNotFound(seller_id)
        return seller

    def _lock_order(self, order_id: int) -> Order:
        order = self.orders.get_for_update(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return order

    def _resolve_variant(self, line: OrderItemIn, aggregate: Optional[OrderAggregate] = None) -> ProductVariation:
        on_order = set(aggregate.variant_ids()) if aggregate is not None else set()
        variant = self._reachable(
            self.variants.get_for_update(line.variant_id, include_deleted=True), on_order
        )
        if variant is None and line.product_id is not None:
            variant = self._reachable(
                self.variants.get_by_product_and_variation_for_update(
                    line.product_id, line.variant_id, include_deleted=True
                ),
                on_order,
            )
        if variant is None:
            raise VariantNotFound(line.variant_id)
        return variant

    @staticmethod
    def _reachable(variant: Optional[ProductVariation], on_order: set) -> Optional[ProductVariation]:
        # Soft-deleted variants stay reachable only through lines already on the order.
        if variant is not None and variant.deleted_at is not None and variant.id not in on_order:
            return None
        return variant

    @staticmethod
    def _require_active(variant: ProductVariation) -> None:
        if not variant.is_active:
            raise OrderValidationError(
                f"Product variation {variant.id} ({variant.product_name} {variant.variation_name}) is inactive"
            )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_order(self, payload: OrderCreate) -> OrderResponse:
        def work() -> int:
            items = self._validate_items(payload.items, allow_overrides=False)
            seller = self._require_seller(payload.seller_id)
            order = self.orders.add(
                Order(
                    seller_id=seller.id,
                    status=OrderStatus.COMPLETED,
                    subtotal=ZERO,
                    gst_total=ZERO,
                    grand_total=ZERO,
                    notes=payload.notes,
                )
            )
            aggregate = OrderAggregate(order)
            for line in items:
                variant = self._resolve_variant(line)
                self._require_active(variant)
                if aggregate.item_for(variant.id) is not None:
                    raise OrderValidationError(
                        f"Product variation {variant.id} appears more than once in items"
                    )
                self.ledger.reserve(variant, line.quantity)
                aggregate.add_or_replace_item(variant, line.quantity)
            self.db.flush()
            return order.id

        order_id = self._run("create_order", work)
        response = self.get_order(order_id)
        logger.info(
            "order_created",
            order_id=order_id,
            seller_id=response.seller_id,
            item_count=len(response.items),
            grand_total=str(response.grand_total),
        )
        return response

    def scan_order(self, payload: ScanRequest) -> ScanResponse:
        def work() -> Tuple[int, ScanDetail]:
            seller = self._require_seller(payload.seller_id)
            match = self.barcodes.resolve(payload.barcode)

            # Order row before variant rows, the same order update/cancel/delete lock in.
            cart = self._open_cart_for_update(seller.id)
            variant = self.variants.get_for_update(match.variant.id)
            if variant is None:
                raise VariantNotFound(match.variant.id)
            self._require_active(variant)
            aggregate = OrderAggregate(cart)

            units = match.multiplier * payload.quantity
            new_quantity = aggregate.quantity_of(variant.id) + units
            # Only the increment is reserved; the earlier scans already hold theirs.
            self.ledger.reserve(variant, units)
            aggregate.add_or_replace_item(variant, new_quantity)
            self.db.flush()

            return cart.id, ScanDetail(
                barcode=payload.barcode,
                code_type=match.code_type,
                variant_id=variant.id,
                units_added=units,
                item_quantity=new_quantity,
                stock_in_hand=variant.stock_in_hand,
            )

        order_id, detail = self._run("scan_order", work)
        logger.info(
            "order_scanned",
            order_id=order_id,
            seller_id=payload.seller_id,
            variant_id=detail.variant_id,
            code_type=detail.code_type,
            units_added=detail.units_added,
        )
        return ScanResponse(order=self.get_order(order_id), scan=detail)

    def _open_cart_for_update(self, seller_id: int) -> Order:
        cart_day = self.today()
        cart = self.orders.find_open_cart_for_update(seller_id, cart_day)
        if cart is not None:
            return cart
        return self.orders.add(
            Order(
                seller_id=seller_id,
                status=OrderStatus.DRAFT,
                cart_date=cart_day,
                subtotal=ZERO,
                gst_total=ZERO,
                grand_total=ZERO,
            )
        )

    def update_order(self, order_id: int, payload: OrderUpdate) -> OrderResponse:
        def work() -> None:
            items = self._validate_items(payload.items, allow_overrides=True)
            order = self._lock_order(order_id)
            if order.status == OrderStatus.CANCELLED:
                raise OrderValidationError("Cancelled orders cannot be modified")

            aggregate = OrderAggregate(order)
            kept = set()
            for line in items:
                variant = self._resolve_variant(line, aggregate)
                if aggregate.item_for(variant.id) is None:
                    self._require_active(variant)
                if variant.id in kept:
                    raise OrderValidationError(
                        f"Product variation {variant.id} appears more than once in items"
                    )
                kept.add(variant.id)

                # Stock already reflects the old quantity; only the diff moves.
                self.ledger.adjust(variant, aggregate.quantity_of(variant.id), line.quantity)
                aggregate.add_or_replace_item(
                    variant,
                    line.quantity,
                    unit_price=line.unit_price,
                    gst_percent=line.gst_percent,
                )

            for variant_id in aggregate.variant_ids():
                if variant_id in kept:
                    continue
                item = aggregate.item_for(variant_id)
                self.ledger.release(item.variant, item.quantity)
                aggregate.remove_item(variant_id)

            if "notes" in payload.model_fields_set:
                order.notes = payload.notes
            self.db.flush()

        self._run("update_order", work)
        response = self.get_order(order_id)
        logger.info(
            "order_updated",
            order_id=order_id,
            item_count=len(response.items),
            grand_total=str(response.grand_total),
        )
        return response

    def delete_order(self, order_id: int) -> dict:
        """Soft-delete an order and hand its reserved stock back."""

        def work() -> int:
            order = self._lock_order(order_id)
            restored = 0
            if order.status != OrderStatus.CANCELLED:
                for item in order.items:
                    self.ledger.release(item.variant, item.quantity)
                    restored += item.quantity
            order.deleted_at = datetime.utcnow()
            order.cart_date = None
            self.db.flush()
            return restored

        restored = self._run("delete_order", work)
        logger.info("order_deleted", order_id=order_id, restored_units=restored)
        return {"order_id": order_id, "restored_units": restored}

    def cancel_order(self, order_id: int) -> OrderResponse:
        def work() -> None:
            order = self._lock_order(order_id)
            if order.status == OrderStatus.CANCELLED:
                raise OrderValidationError("Order is already cancelled")
            for item in order.items:
                self.ledger.release(item.variant, item.quantity)
            order.status = OrderStatus.CANCELLED
            order.cart_date = None
            self.db.flush()

        self._run("cancel_order", work)
        logger.info("order_cancelled", order_id=order_id)
        return self.get_order(order_id)

    def finalize_order(self, order_id: int) -> OrderResponse:
        def work() -> None:
            order = self._lock_order(order_id)
            if order.status != OrderStatus.DRAFT:
                raise OrderValidationError("Only draft orders can be finalized")
            order.status = OrderStatus.COMPLETED
            order.cart_date = None
            self.db.flush()

        self._run("finalize_order", work)
        logger.info("order_finalized", order_id=order_id)
        return self.get_order(order_id)

    def finalize_stale_carts(self) -> int:
        """Complete scan carts left open from previous days."""

        def work() -> int:
            carts = self.orders.stale_carts_for_update(self.today())
            for cart in carts:
                cart.status = OrderStatus.COMPLETED
                cart.cart_date = None
                logger.info("order_finalized", order_id=cart.id, seller_id=cart.seller_id, automatic=True)
            self.db.flush()
            return len(carts)

        return self._run("finalize_stale_carts", work)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_order(self, order_id: int) -> OrderResponse:
        order = self.orders.get(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return OrderResponse.model_validate(order)

    def list_orders(
        self,
        *,
        seller_id: Optional[int] = None,
        status: Optional[OrderStatus] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[OrderSummaryResponse], int]:
        orders, total = self.orders.list(
            seller_id=seller_id,
            status=status,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return [OrderSummaryResponse.from_order(order) for order in orders], total


def finalize_stale_carts(db: Session) -> int:
    """
    Complete draft scan carts whose day has passed.

    Args:
        db (Session): Database session

    Returns:
        int: Number of carts finalized
    """
    return OrderService(db).finalize_stale_carts()
