"""Pydantic request/response schemas for the Ordering API.

These are external contracts, kept separate from the internal Protean
commands. Business rules (quantity limits, supported currencies) are
enforced by the domain and come back as 400 responses, not 422s.
"""

from datetime import datetime

from pydantic import BaseModel


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    street: str
    city: str
    state: str
    zip_code: str
    country: str


class OrderItemRequest(BaseModel):
    product_id: str
    quantity: int


class NotesSchema(BaseModel):
    customer: str | None = None
    admin: str | None = None
    internal: str | None = None


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class CreateOrderRequest(BaseModel):
    customer_id: str
    items: list[OrderItemRequest]
    payment_method: str
    shipping_address: AddressSchema
    shipping_method: str = "standard"
    tax_rate: float = 0.0
    shipping_cost: float = 0.0
    discount: float = 0.0
    currency: str = "USD"
    notes: NotesSchema | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_id": "cust-001",
                    "items": [{"product_id": "prod-001", "quantity": 2}],
                    "payment_method": "credit_card",
                    "shipping_address": {
                        "street": "1 Ring Road",
                        "city": "Accra",
                        "state": "Greater Accra",
                        "zip_code": "00233",
                        "country": "GH",
                    },
                    "tax_rate": 0.1,
                    "shipping_cost": 5.0,
                }
            ]
        }
    }


class UpdateStatusRequest(BaseModel):
    status: str
    note: str | None = None


class ProcessPaymentRequest(BaseModel):
    transaction_id: str


class RefundRequest(BaseModel):
    refund_amount: float | None = None


class CancelOrderRequest(BaseModel):
    reason: str | None = None


class AddTrackingRequest(BaseModel):
    tracking_number: str
    carrier: str | None = None
    shipped_at: datetime | None = None
    estimated_delivery_at: datetime | None = None


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class OrderLineResponse(BaseModel):
    product_id: str
    name: str
    unit_price: float
    quantity: int
    line_total: float


class PaymentResponse(BaseModel):
    method: str
    status: str
    transaction_id: str | None = None
    paid_at: datetime | None = None
    refunded_at: datetime | None = None
    refund_amount: float | None = None


class StatusChangeResponse(BaseModel):
    status: str
    changed_at: datetime
    actor_id: str | None = None
    note: str | None = None


class OrderResponse(BaseModel):
    id: str
    order_number: str
    customer_id: str
    status: str
    items: list[OrderLineResponse]
    subtotal: float
    tax: float
    shipping_cost: float
    discount: float
    total: float
    currency: str
    payment: PaymentResponse
    shipping_method: str
    tracking_number: str | None = None
    carrier: str | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    cancellation_reason: str | None = None
    history: list[StatusChangeResponse]
    created_at: datetime

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        return cls(
            id=str(order.id),
            order_number=order.order_number,
            customer_id=str(order.customer_id),
            status=order.status,
            items=[
                OrderLineResponse(
                    product_id=str(line.product_id),
                    name=line.name,
                    unit_price=line.unit_price,
                    quantity=line.quantity,
                    line_total=line.line_total,
                )
                for line in order.items
            ],
            subtotal=order.subtotal,
            tax=order.tax,
            shipping_cost=order.shipping_cost,
            discount=order.discount,
            total=order.total,
            currency=order.currency,
            payment=PaymentResponse(
                method=order.payment.method,
                status=order.payment.status,
                transaction_id=order.payment.transaction_id,
                paid_at=order.payment.paid_at,
                refunded_at=order.payment.refunded_at,
                refund_amount=order.payment.refund_amount,
            ),
            shipping_method=order.shipping_method,
            tracking_number=order.tracking_number,
            carrier=order.carrier,
            shipped_at=order.shipped_at,
            delivered_at=order.delivered_at,
            cancellation_reason=order.cancellation_reason,
            history=[
                StatusChangeResponse(
                    status=change.status,
                    changed_at=change.changed_at,
                    actor_id=str(change.actor_id) if change.actor_id else None,
                    note=change.note,
                )
                for change in order.history
            ],
            created_at=order.created_at,
        )


class OrderSummaryResponse(BaseModel):
    id: str
    order_number: str
    customer_id: str
    status: str
    total: float
    currency: str
    created_at: datetime

    @classmethod
    def from_order(cls, order) -> "OrderSummaryResponse":
        return cls(
            id=str(order.id),
            order_number=order.order_number,
            customer_id=str(order.customer_id),
            status=order.status,
            total=order.total,
            currency=order.currency,
            created_at=order.created_at,
        )


class OrderPageResponse(BaseModel):
    orders: list[OrderSummaryResponse]
    page: int
    limit: int
    total: int
    pages: int


class StatisticsResponse(BaseModel):
    period_days: int
    total_orders: int
    total_revenue: float
    average_order_value: float
    delivered_orders: int
    pending_orders: int


class ItemCheckResponse(BaseModel):
    product_id: str
    name: str | None = None
    requested_quantity: int
    available_stock: int
    is_valid: bool
    message: str


class CartValidationResponse(BaseModel):
    is_valid: bool
    message: str
    items: list[ItemCheckResponse]
