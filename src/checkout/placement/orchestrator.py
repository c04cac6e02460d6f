"""Checkout orchestration — from a cart request to a committed Order.

State Machine:
    RECEIVED → AUTHORIZED → PRODUCTS_RESOLVED → DISCOUNTS_VALIDATED →
    PRICED → COMMITTED
    REJECTED (from any non-terminal state)

Only the final transition has side effects. Everything before it reads the
stores and computes in memory, so a rejection before COMMITTED guarantees
nothing was written. A rejection is terminal for the attempt; callers fix the
cause and submit a new request.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

from protean.exceptions import ExpectedVersionError, ValidationError
from protean.utils.globals import current_domain

from checkout.catalogue.product import Product
from checkout.catalogue.reservation import StockReservation, ensure_stock_available, requested_quantities
from checkout.discount.discount import Discount
from checkout.discount.ledger import DiscountRedemption
from checkout.discount.validation import validate_discount_codes
from checkout.exceptions import (
    CheckoutError,
    CheckoutInternalError,
    DiscountExhausted,
    InsufficientStock,
    ProductNotFound,
    UnauthorizedAccess,
)
from checkout.order.order import Order
from checkout.placement.transaction import checkout_transaction
from checkout.pricing.engine import PriceBreakdown, price_cart
from checkout.utils.logging import checkout_log_context, get_logger

logger = get_logger(__name__)

ORDER_CREATED_MESSAGE = "Order created successfully!"


class CheckoutState(Enum):
    RECEIVED = "Received"
    AUTHORIZED = "Authorized"
    PRODUCTS_RESOLVED = "Products_Resolved"
    DISCOUNTS_VALIDATED = "Discounts_Validated"
    PRICED = "Priced"
    COMMITTED = "Committed"
    REJECTED = "Rejected"


_VALID_TRANSITIONS = {
    CheckoutState.RECEIVED: {CheckoutState.AUTHORIZED, CheckoutState.REJECTED},
    CheckoutState.AUTHORIZED: {CheckoutState.PRODUCTS_RESOLVED, CheckoutState.REJECTED},
    CheckoutState.PRODUCTS_RESOLVED: {CheckoutState.DISCOUNTS_VALIDATED, CheckoutState.REJECTED},
    CheckoutState.DISCOUNTS_VALIDATED: {CheckoutState.PRICED, CheckoutState.REJECTED},
    CheckoutState.PRICED: {CheckoutState.COMMITTED, CheckoutState.REJECTED},
    CheckoutState.COMMITTED: set(),  # Terminal
    CheckoutState.REJECTED: set(),  # Terminal
}


@dataclass(frozen=True)
class CheckoutRequest:
    user_id: str
    product_ids: list = field(default_factory=list)
    discount_codes: list | None = None


@dataclass(frozen=True)
class CheckoutResult:
    order_id: str
    original_subtotal: Decimal
    final_price: Decimal
    applied_discount_codes: list[str]
    message: str = ORDER_CREATED_MESSAGE


class CheckoutOrchestrator:
    """Runs one checkout attempt through the state machine.

    An orchestrator instance is single-use: once it reaches COMMITTED or
    REJECTED it cannot be run again.
    """

    def __init__(self, request: CheckoutRequest, authenticated_user_id, today: date | None = None):
        self.request = request
        self.authenticated_user_id = authenticated_user_id
        self.today = today
        self.state = CheckoutState.RECEIVED
        self.history = [CheckoutState.RECEIVED]
        self.error: CheckoutError | None = None
        self.products: dict[str, Product] = {}

    def _transition(self, new_state: CheckoutState) -> None:
        if new_state not in _VALID_TRANSITIONS[self.state]:
            raise ValidationError(
                {"state": [f"Cannot transition from {self.state.value} to {new_state.value}"]}
            )
        logger.debug("Checkout state changed", from_state=self.state.value, to_state=new_state.value)
        self.state = new_state
        self.history.append(new_state)

    def run(self) -> CheckoutResult:
        if self.state != CheckoutState.RECEIVED:
            raise ValidationError({"state": ["Checkout attempt has already been run"]})

        with checkout_log_context(user_id=self.request.user_id):
            try:
                self._authorize()
                units = self._resolve_products()
                discounts = self._validate_discounts()
                breakdown = self._price(units, discounts)
                order = self._commit(breakdown)
            except CheckoutError as exc:
                self._reject(exc)
                raise
            except Exception as exc:
                logger.exception("Checkout failed unexpectedly", state=self.state.value)
                internal = CheckoutInternalError()
                self._reject(internal)
                raise internal from exc

        logger.info(
            "Checkout committed",
            order_id=str(order.id),
            original_subtotal=str(breakdown.original_subtotal),
            final_price=str(breakdown.final_price),
            discount_codes=breakdown.applied_discount_codes,
        )
        return CheckoutResult(
            order_id=str(order.id),
            original_subtotal=breakdown.original_subtotal,
            final_price=breakdown.final_price,
            applied_discount_codes=breakdown.applied_discount_codes,
        )

    def _reject(self, error: CheckoutError) -> None:
        logger.info(
            "Checkout rejected",
            state=self.state.value,
            kind=error.kind,
            reason=error.message,
        )
        self.error = error
        self._transition(CheckoutState.REJECTED)

    # -------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------
    def _authorize(self) -> None:
        if self.authenticated_user_id is None or str(self.request.user_id) != str(self.authenticated_user_id):
            raise UnauthorizedAccess()
        self._transition(CheckoutState.AUTHORIZED)

    def _resolve_products(self) -> list[Product]:
        product_ids = [str(pid) for pid in self.request.product_ids or []]
        products = current_domain.repository_for(Product).find_by_ids(product_ids) if product_ids else {}

        for product_id in product_ids:
            if product_id not in products:
                raise ProductNotFound(product_id)

        self.products = products
        self._transition(CheckoutState.PRODUCTS_RESOLVED)
        return [products[product_id] for product_id in product_ids]

    def _validate_discounts(self):
        discounts = validate_discount_codes(self.request.discount_codes, today=self.today)
        self._transition(CheckoutState.DISCOUNTS_VALIDATED)
        return discounts

    def _price(self, units, discounts) -> PriceBreakdown:
        breakdown = price_cart(units, discounts)
        self._transition(CheckoutState.PRICED)
        return breakdown

    def _commit(self, breakdown: PriceBreakdown) -> Order:
        quantities = requested_quantities(line.product_id for line in breakdown.lines)

        # First pass against the products read for pricing; re-checked under the lock below.
        ensure_stock_available(self.products, quantities)

        try:
            with checkout_transaction():
                reservation = StockReservation.load(quantities)
                redemption = DiscountRedemption.load(breakdown.applied_discounts)

                reservation.commit()
                redemption.commit()

                order = Order.place(str(self.request.user_id), breakdown)
                current_domain.repository_for(Order).add(order)
        except ExpectedVersionError as exc:
            # Another writer changed a product or discount row after it was re-read.
            logger.warning("Checkout commit conflicted with a concurrent write", error=str(exc))
            raise _conflict_error(quantities, breakdown.applied_discounts) from exc

        self._transition(CheckoutState.COMMITTED)
        return order


def place_order(request: CheckoutRequest, authenticated_user_id, today: date | None = None) -> CheckoutResult:
    """Run a fresh checkout attempt for ``request``."""
    return CheckoutOrchestrator(request, authenticated_user_id, today=today).run()


def _conflict_error(quantities, discounts) -> CheckoutError:
    """Name the rejection for a commit that lost a concurrent write.

    Rows are read again as committed: the first product now short of the
    requested quantity gives ``InsufficientStock``, otherwise the first
    applied discount without uses gives ``DiscountExhausted``. When neither
    is short the conflict is reported as ``InsufficientStock`` on the first
    requested product.
    """
    products = current_domain.repository_for(Product).find_by_ids(quantities.keys())
    for product_id, quantity in quantities.items():
        available = products[product_id].stock if product_id in products else 0
        if quantity > available:
            return InsufficientStock(product_id, requested=quantity, available=available)

    current = current_domain.repository_for(Discount).find_by_codes([discount.code for discount in discounts])
    for discount in discounts:
        fresh = current.get(discount.code)
        if fresh is None or fresh.remaining_uses <= 0:
            return DiscountExhausted(discount.code)

    if quantities:
        product_id, quantity = next(iter(quantities.items()))
        available = products[product_id].stock if product_id in products else 0
        return InsufficientStock(product_id, requested=quantity, available=available)
    return DiscountExhausted(discounts[0].code) if discounts else CheckoutInternalError()
