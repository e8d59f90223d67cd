"""FastAPI routes for the Ordering domain: orders and checkout validation.

The acting user arrives in the ``X-Actor-Id`` / ``X-Actor-Role`` headers,
set by the gateway in front of this service after authentication.
"""

from fastapi import APIRouter, Header

from ordering.api.schemas import (
    AddTrackingRequest,
    CancelOrderRequest,
    CartValidationResponse,
    CreateOrderRequest,
    ItemCheckResponse,
    OrderPageResponse,
    OrderResponse,
    OrderSummaryResponse,
    ProcessPaymentRequest,
    RefundRequest,
    StatisticsResponse,
    UpdateStatusRequest,
)
from ordering.order.manager import OrderManager

manager = OrderManager()

# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def create_order(body: CreateOrderRequest) -> OrderResponse:
    order = manager.create_order(
        customer_id=body.customer_id,
        items=[item.model_dump() for item in body.items],
        payment_method=body.payment_method,
        shipping_address=body.shipping_address.model_dump(),
        shipping_method=body.shipping_method,
        tax_rate=body.tax_rate,
        shipping_cost=body.shipping_cost,
        discount=body.discount,
        currency=body.currency,
        notes=body.notes.model_dump(exclude_none=True) if body.notes else None,
    )
    return OrderResponse.from_order(order)


@order_router.get("", response_model=OrderPageResponse)
async def list_customer_orders(
    customer_id: str,
    status: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> OrderPageResponse:
    result = manager.customer_orders(customer_id, status=status, page=page, limit=limit)
    return OrderPageResponse(
        orders=[OrderSummaryResponse.from_order(order) for order in result.orders],
        page=result.page,
        limit=result.limit,
        total=result.total,
        pages=result.pages,
    )


@order_router.get("/requiring-action", response_model=list[OrderSummaryResponse])
async def orders_requiring_action() -> list[OrderSummaryResponse]:
    return [OrderSummaryResponse.from_order(order) for order in manager.orders_requiring_action()]


@order_router.get("/statistics", response_model=StatisticsResponse)
async def order_statistics(period_days: int = 30) -> StatisticsResponse:
    stats = manager.order_statistics(period_days=period_days)
    return StatisticsResponse(
        period_days=stats.period_days,
        total_orders=stats.total_orders,
        total_revenue=stats.total_revenue,
        average_order_value=stats.average_order_value,
        delivered_orders=stats.delivered_orders,
        pending_orders=stats.pending_orders,
    )


@order_router.get("/number/{order_number}", response_model=OrderResponse)
async def get_order_by_number(
    order_number: str,
    x_actor_id: str | None = Header(default=None),
    x_actor_role: str | None = Header(default=None),
) -> OrderResponse:
    order = manager.get_order_by_number(order_number, actor_id=x_actor_id, actor_role=x_actor_role)
    return OrderResponse.from_order(order)


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    x_actor_id: str | None = Header(default=None),
    x_actor_role: str | None = Header(default=None),
) -> OrderResponse:
    order = manager.get_order(order_id, actor_id=x_actor_id, actor_role=x_actor_role)
    return OrderResponse.from_order(order)


@order_router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str,
    body: UpdateStatusRequest,
    x_actor_id: str | None = Header(default=None),
) -> OrderResponse:
    order = manager.update_status(order_id, body.status, actor_id=x_actor_id, note=body.note)
    return OrderResponse.from_order(order)


@order_router.post("/{order_id}/payment", response_model=OrderResponse)
async def process_payment(order_id: str, body: ProcessPaymentRequest) -> OrderResponse:
    order = manager.process_payment(order_id, body.transaction_id)
    return OrderResponse.from_order(order)


@order_router.post("/{order_id}/payment/capture", response_model=OrderResponse)
async def capture_payment(order_id: str) -> OrderResponse:
    order = manager.capture_payment(order_id)
    return OrderResponse.from_order(order)


@order_router.post("/{order_id}/refund", response_model=OrderResponse)
async def refund_order(
    order_id: str,
    body: RefundRequest,
    x_actor_id: str | None = Header(default=None),
) -> OrderResponse:
    order = manager.process_refund(order_id, refund_amount=body.refund_amount, actor_id=x_actor_id)
    return OrderResponse.from_order(order)


@order_router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: str,
    body: CancelOrderRequest,
    x_actor_id: str = Header(),
    x_actor_role: str = Header(default="customer"),
) -> OrderResponse:
    order = manager.cancel_order(order_id, actor_id=x_actor_id, actor_role=x_actor_role, reason=body.reason)
    return OrderResponse.from_order(order)


@order_router.post("/{order_id}/tracking", response_model=OrderResponse)
async def add_tracking(
    order_id: str,
    body: AddTrackingRequest,
    x_actor_id: str | None = Header(default=None),
) -> OrderResponse:
    order = manager.add_tracking(
        order_id,
        body.tracking_number,
        shipped_at=body.shipped_at,
        carrier=body.carrier,
        estimated_delivery_at=body.estimated_delivery_at,
        actor_id=x_actor_id,
    )
    return OrderResponse.from_order(order)


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.get("/{customer_id}/validation", response_model=CartValidationResponse)
async def validate_cart(customer_id: str) -> CartValidationResponse:
    report = manager.validate_cart_for_checkout(customer_id)
    return CartValidationResponse(
        is_valid=report.is_valid,
        message=report.message,
        items=[
            ItemCheckResponse(
                product_id=check.product_id,
                name=check.name,
                requested_quantity=check.requested_quantity,
                available_stock=check.available_stock,
                is_valid=check.is_valid,
                message=check.message,
            )
            for check in report.items
        ],
    )
