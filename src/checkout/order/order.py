"""Order aggregate — the record of a committed checkout.

An Order is written exactly once, by the checkout orchestrator, inside the
same unit of work that deducts stock and consumes discount uses. It is never
modified afterwards.
"""

import json
from datetime import UTC, datetime
from decimal import Decimal

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Text

from checkout.domain import checkout
from checkout.order.events import OrderPlaced


@checkout.entity(part_of="Order")
class OrderLine:
    """One requested unit and what it cost after product-specific discounts."""

    product_id = Identifier(required=True)
    unit_price = Float(required=True, min_value=0.0)
    discounted_price = Float(required=True, min_value=0.0)


@checkout.aggregate
class Order:
    user_id = Identifier(required=True)
    lines = HasMany(OrderLine)
    product_ids = Text()  # JSON array of distinct product ids
    discount_codes = Text()  # JSON array of applied discount codes
    original_subtotal = Float(default=0.0, min_value=0.0)
    final_price = Float(default=0.0, min_value=0.0)
    created_at = DateTime()

    @invariant.post
    def final_price_cannot_exceed_subtotal(self):
        if (self.final_price or 0.0) > (self.original_subtotal or 0.0):
            raise ValidationError({"final_price": ["Final price cannot exceed the original subtotal"]})

    @classmethod
    def place(cls, user_id, breakdown):
        """Create the order for a priced cart (a ``PriceBreakdown``)."""
        now = datetime.now(UTC)
        product_ids = list(dict.fromkeys(line.product_id for line in breakdown.lines))
        discount_codes = breakdown.applied_discount_codes

        order = cls(
            user_id=user_id,
            product_ids=json.dumps(product_ids),
            discount_codes=json.dumps(discount_codes),
            original_subtotal=float(breakdown.original_subtotal),
            final_price=float(breakdown.final_price),
            created_at=now,
        )
        for line in breakdown.lines:
            order.add_lines(
                OrderLine(
                    product_id=line.product_id,
                    unit_price=float(line.unit_price),
                    discounted_price=float(line.discounted_price),
                )
            )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                user_id=str(user_id),
                unit_count=len(breakdown.lines),
                discount_codes=json.dumps(discount_codes),
                original_subtotal=float(breakdown.original_subtotal),
                final_price=float(breakdown.final_price),
                placed_at=now,
            )
        )
        return order

    @property
    def applied_discount_codes(self) -> list[str]:
        return json.loads(self.discount_codes) if self.discount_codes else []

    @property
    def resolved_product_ids(self) -> list[str]:
        return json.loads(self.product_ids) if self.product_ids else []

    @property
    def final_amount(self) -> Decimal:
        return Decimal(str(self.final_price)).quantize(Decimal("0.01"))

    @property
    def subtotal_amount(self) -> Decimal:
        return Decimal(str(self.original_subtotal)).quantize(Decimal("0.01"))
