"""Pydantic request/response schemas for the Checkout API.

These are external contracts, separate from the internal checkout
request/result types and Protean aggregates. Money amounts are fixed-point
decimals and serialize as strings.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class CheckoutRequestSchema(BaseModel):
    user_id: int | str
    product_ids: list[int | str] = Field(default_factory=list)
    discount_codes: list[str] | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "user_id": "user-001",
                    "product_ids": ["prod-001", "prod-002"],
                    "discount_codes": ["GENERAL10", "PRODUCT20"],
                }
            ]
        }
    }


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class OrderResponse(BaseModel):
    message: str
    order_id: str
    original_subtotal: Decimal
    final_price: Decimal
    applied_discount_codes: list[str] = Field(default_factory=list)


class OrderLineSchema(BaseModel):
    product_id: str
    unit_price: Decimal
    discounted_price: Decimal


class OrderDetailResponse(BaseModel):
    order_id: str
    user_id: str
    product_ids: list[str]
    discount_codes: list[str]
    lines: list[OrderLineSchema]
    original_subtotal: Decimal
    final_price: Decimal
    created_at: datetime | None = None


class DiscountSchema(BaseModel):
    code: str
    discount_type: str
    percentage: Decimal
    valid_from: date
    valid_until: date
    remaining_uses: int
    applicable_product_ids: list[str] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    status: int
    error: str
    message: str
    path: str
    code: str | None = None
    reason: str | None = None
