"""Domain events for the Discount aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from checkout.domain import checkout


@checkout.event(part_of="Discount")
class DiscountRedeemed:
    """One use of a discount code was consumed by a committed checkout."""

    __version__ = 1

    discount_id = Identifier(required=True)
    code = String(required=True)
    remaining_uses = Integer(required=True)
    redeemed_at = DateTime(required=True)
