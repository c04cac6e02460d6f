"""Repository for the Discount aggregate."""

from checkout.discount.discount import Discount
from checkout.domain import checkout


@checkout.repository(part_of=Discount)
class DiscountRepository:
    def find_by_code(self, code: str) -> Discount | None:
        results = self._dao.query.filter(code=code).all().items
        return results[0] if results else None

    def find_by_codes(self, codes) -> dict[str, Discount]:
        """Fetch discounts for a list of codes in one query, keyed by code. Unknown codes are absent."""
        codes = list(dict.fromkeys(codes))
        if not codes:
            return {}
        results = self._dao.query.filter(code__in=codes).limit(len(codes)).all().items
        return {discount.code: discount for discount in results}

    def list_all(self) -> list[Discount]:
        return sorted(self._dao.query.all().items, key=lambda discount: discount.code)
