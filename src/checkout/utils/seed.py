"""Demo catalogue and discount codes for local runs."""

from datetime import date, timedelta

from protean.utils.globals import current_domain

from checkout.catalogue.product import Product
from checkout.discount.discount import Discount, DiscountType


def seed_demo_data(today: date | None = None) -> dict:
    """Add two products and a general plus a product-specific code.

    Returns the created ids keyed by a short name.
    """
    today = today or date.today()
    window = {"valid_from": today - timedelta(days=1), "valid_until": today + timedelta(days=30)}

    ebook = Product.create(name="Python Patterns eBook", price="100.00", stock=10, product_id="prod-001")
    course = Product.create(name="Async IO Video Course", price="50.00", stock=5, product_id="prod-002")
    product_repo = current_domain.repository_for(Product)
    product_repo.add(ebook)
    product_repo.add(course)

    general = Discount.create(code="GENERAL10", percentage="10.00", remaining_uses=10, **window)
    specific = Discount.create(
        code="PRODUCT20",
        percentage="20.00",
        discount_type=DiscountType.PRODUCT_SPECIFIC,
        remaining_uses=5,
        applicable_product_ids=[ebook.id],
        **window,
    )
    discount_repo = current_domain.repository_for(Discount)
    discount_repo.add(general)
    discount_repo.add(specific)

    return {
        "ebook": str(ebook.id),
        "course": str(course.id),
        "GENERAL10": str(general.id),
        "PRODUCT20": str(specific.id),
    }
