"""Cart pricing: discount stacking and the excessive-discount cap.

Pricing runs in two stages:

    1. Product-specific discounts, per unit. Every occurrence of a product in
       the cart is a separate unit. The percentages of all product-specific
       discounts that list the unit's product are summed and taken off the
       unit price. The sum is clamped at 100% so no unit goes negative.
    2. General discounts, per cart. Their percentages are summed and taken
       off the intermediate subtotal produced by stage 1.

The effective ratio (original - final) / original must not exceed
``MAX_DISCOUNT_RATIO``. Rounding to the currency quantum happens once, on
the final amounts, half-up.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from checkout.discount.discount import Discount, applicable_discounts
from checkout.exceptions import ExcessiveDiscount

MAX_DISCOUNT_RATIO = Decimal("0.75")
CURRENCY_QUANTUM = Decimal("0.01")

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class LinePrice:
    """Price of one requested unit before and after product-specific discounts."""

    product_id: str
    unit_price: Decimal
    discounted_price: Decimal
    discount_codes: tuple[str, ...] = ()


@dataclass(frozen=True)
class PriceBreakdown:
    lines: tuple[LinePrice, ...]
    original_subtotal: Decimal
    intermediate_subtotal: Decimal
    final_price: Decimal
    discount_ratio: Decimal
    applied_discounts: tuple[Discount, ...]

    @property
    def applied_discount_codes(self) -> list[str]:
        return [discount.code for discount in self.applied_discounts]

    @property
    def discount_total(self) -> Decimal:
        return self.original_subtotal - self.final_price


def round_currency(amount: Decimal) -> Decimal:
    return amount.quantize(CURRENCY_QUANTUM, rounding=ROUND_HALF_UP)


def _apply_percentage(amount: Decimal, percentage: Decimal) -> Decimal:
    return amount * (_HUNDRED - percentage) / _HUNDRED


def price_line(product, discounts) -> LinePrice:
    """Price one unit of ``product`` under the product-specific discounts in ``discounts``."""
    matching = [d for d in applicable_discounts(product.id, discounts) if not d.is_general]
    unit_price = product.unit_price
    if not matching:
        return LinePrice(product_id=str(product.id), unit_price=unit_price, discounted_price=unit_price)

    combined = min(sum((d.rate for d in matching), _ZERO), _HUNDRED)
    return LinePrice(
        product_id=str(product.id),
        unit_price=unit_price,
        discounted_price=_apply_percentage(unit_price, combined),
        discount_codes=tuple(d.code for d in matching),
    )


def discount_ratio(original: Decimal, final: Decimal) -> Decimal:
    """Share of ``original`` removed by discounting; zero for an empty cart."""
    if original == _ZERO:
        return _ZERO
    return (original - final) / original


def price_cart(products, discounts) -> PriceBreakdown:
    """Price the requested units.

    ``products`` holds one Product per requested unit (duplicates included),
    ``discounts`` the validated discounts for the checkout.

    Raises ``ExcessiveDiscount`` when the discounts would remove more than
    ``MAX_DISCOUNT_RATIO`` of the original subtotal.
    """
    lines = tuple(price_line(product, discounts) for product in products)

    original_subtotal = sum((line.unit_price for line in lines), _ZERO)
    intermediate_subtotal = sum((line.discounted_price for line in lines), _ZERO)

    general = [discount for discount in discounts if discount.is_general]
    general_rate = sum((discount.rate for discount in general), _ZERO)
    final_price = _apply_percentage(intermediate_subtotal, general_rate)

    ratio = discount_ratio(original_subtotal, final_price)
    if ratio > MAX_DISCOUNT_RATIO:
        raise ExcessiveDiscount(MAX_DISCOUNT_RATIO, ratio=ratio)

    used_codes = {code for line in lines for code in line.discount_codes}
    applied = tuple(discount for discount in discounts if discount.is_general or discount.code in used_codes)

    return PriceBreakdown(
        lines=lines,
        original_subtotal=round_currency(original_subtotal),
        intermediate_subtotal=round_currency(intermediate_subtotal),
        final_price=round_currency(final_price),
        discount_ratio=ratio,
        applied_discounts=applied,
    )
