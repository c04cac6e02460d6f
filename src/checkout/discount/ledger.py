"""Discount usage ledger, the usage half of the checkout commit.

Each discount applied to a committed checkout loses exactly one use, however
many units it discounted. Discounts are re-read under the commit lock so a
code that ran out while the cart was being priced is rejected with
``DiscountExhausted`` instead of going negative.
"""

from protean.utils.globals import current_domain

from checkout.discount.discount import Discount
from checkout.exceptions import DiscountExhausted


class DiscountRedemption:
    def __init__(self, discounts: list[Discount]):
        self.discounts = discounts

    @classmethod
    def load(cls, discounts) -> "DiscountRedemption":
        current_by_code = current_domain.repository_for(Discount).find_by_codes([d.code for d in discounts])
        fresh = []
        for discount in discounts:
            current = current_by_code.get(discount.code)
            if current is None or current.remaining_uses <= 0:
                raise DiscountExhausted(discount.code)
            fresh.append(current)
        return cls(fresh)

    def commit(self) -> None:
        repo = current_domain.repository_for(Discount)
        for discount in self.discounts:
            discount.redeem()
            repo.add(discount)
