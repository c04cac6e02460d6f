"""FastAPI routes for the Checkout domain — checkout, orders and discounts."""

from fastapi import APIRouter, Header, HTTPException
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from checkout.api.schemas import (
    CheckoutRequestSchema,
    DiscountSchema,
    OrderDetailResponse,
    OrderLineSchema,
    OrderResponse,
)
from checkout.discount.discount import Discount
from checkout.exceptions import UnauthorizedAccess
from checkout.identity import get_identity_provider
from checkout.order.order import Order
from checkout.placement.orchestrator import CheckoutRequest, place_order


def _authenticated_user_id(authorization: str) -> str:
    user_id = get_identity_provider().authenticate(authorization)
    if user_id is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user_id


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("", status_code=201, response_model=OrderResponse)
async def checkout_cart(body: CheckoutRequestSchema, authorization: str = Header(default="")) -> OrderResponse:
    """Price and place an order for the requested products and discount codes."""
    authenticated_user_id = _authenticated_user_id(authorization)
    result = place_order(
        CheckoutRequest(
            user_id=str(body.user_id),
            product_ids=[str(pid) for pid in body.product_ids],
            discount_codes=body.discount_codes,
        ),
        authenticated_user_id,
    )
    return OrderResponse(
        message=result.message,
        order_id=result.order_id,
        original_subtotal=result.original_subtotal,
        final_price=result.final_price,
        applied_discount_codes=result.applied_discount_codes,
    )


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("/{order_id}", response_model=OrderDetailResponse)
async def get_order(order_id: str, authorization: str = Header(default="")) -> OrderDetailResponse:
    """Return a placed order to the user who placed it."""
    authenticated_user_id = _authenticated_user_id(authorization)
    try:
        order = current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found") from None

    if str(order.user_id) != str(authenticated_user_id):
        raise UnauthorizedAccess("User cannot view another user's order")

    return OrderDetailResponse(
        order_id=str(order.id),
        user_id=str(order.user_id),
        product_ids=order.resolved_product_ids,
        discount_codes=order.applied_discount_codes,
        lines=[
            OrderLineSchema(
                product_id=str(line.product_id),
                unit_price=str(line.unit_price),
                discounted_price=str(line.discounted_price),
            )
            for line in order.lines
        ],
        original_subtotal=order.subtotal_amount,
        final_price=order.final_amount,
        created_at=order.created_at,
    )


# ---------------------------------------------------------------------------
# Discount Router
# ---------------------------------------------------------------------------
discount_router = APIRouter(prefix="/discounts", tags=["discounts"])


@discount_router.get("", response_model=list[DiscountSchema])
async def list_discounts() -> list[DiscountSchema]:
    """List every discount code with its window and remaining uses."""
    discounts = current_domain.repository_for(Discount).list_all()
    return [
        DiscountSchema(
            code=discount.code,
            discount_type=discount.discount_type,
            percentage=str(discount.percentage),
            valid_from=discount.valid_from,
            valid_until=discount.valid_until,
            remaining_uses=discount.remaining_uses,
            applicable_product_ids=sorted(discount.product_ids),
        )
        for discount in discounts
    ]
