"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, Text

from checkout.domain import checkout


@checkout.event(part_of="Order")
class OrderPlaced:
    """A checkout was committed and its order persisted."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    unit_count = Integer(required=True)
    discount_codes = Text()  # JSON array
    original_subtotal = Float(required=True)
    final_price = Float(required=True)
    placed_at = DateTime(required=True)
