"""Product aggregate: the slice of the catalogue the checkout engine reads.

Products are owned by the catalogue; checkout only reads price and stock and
requests a stock deduction when an order is committed.
"""

from datetime import UTC, datetime
from decimal import Decimal

from protean.exceptions import ValidationError
from protean.fields import Float, Integer, String

from checkout.catalogue.events import StockDeducted
from checkout.domain import checkout
from checkout.exceptions import InsufficientStock


@checkout.aggregate
class Product:
    name = String(max_length=255)
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0, min_value=0)

    @classmethod
    def create(cls, name, price, stock=0, product_id=None):
        kwargs = {"name": name, "price": float(price), "stock": stock}
        if product_id is not None:
            kwargs["id"] = product_id
        return cls(**kwargs)

    @property
    def unit_price(self) -> Decimal:
        """Price as a fixed-point amount; the float field is read via its string form."""
        return Decimal(str(self.price))

    def deduct_stock(self, quantity):
        """Take ``quantity`` units out of stock."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        if quantity > self.stock:
            raise InsufficientStock(self.id, requested=quantity, available=self.stock)

        previous_stock = self.stock
        self.stock = previous_stock - quantity

        self.raise_(
            StockDeducted(
                product_id=str(self.id),
                quantity=quantity,
                previous_stock=previous_stock,
                new_stock=self.stock,
                deducted_at=datetime.now(UTC),
            )
        )


@checkout.repository(part_of=Product)
class ProductRepository:
    def find_by_ids(self, product_ids) -> dict[str, Product]:
        """Fetch products for a list of ids in one query; ids that do not resolve are left out."""
        product_ids = list(dict.fromkeys(str(pid) for pid in product_ids))
        if not product_ids:
            return {}
        results = self._dao.query.filter(id__in=product_ids).limit(len(product_ids)).all().items
        return {str(product.id): product for product in results}
