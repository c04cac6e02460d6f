"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Identifier, Integer

from checkout.domain import checkout


@checkout.event(part_of="Product")
class StockDeducted:
    """Units of a product were taken out of stock by a committed checkout."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
    deducted_at = DateTime(required=True)
