"""Application tests for demo seeding and the fake identity provider."""

from decimal import Decimal

from checkout.catalogue.product import Product
from checkout.discount.discount import Discount
from checkout.identity import get_identity_provider, reset_identity_provider, set_identity_provider
from checkout.identity.fake_adapter import FakeIdentityProvider
from checkout.placement.orchestrator import CheckoutRequest, place_order
from checkout.utils.seed import seed_demo_data
from protean.utils.globals import current_domain


class TestSeedDemoData:
    def test_seeds_products_and_codes(self, today):
        ids = seed_demo_data(today=today)

        ebook = current_domain.repository_for(Product).get(ids["ebook"])
        assert ebook.stock == 10
        assert ebook.unit_price == Decimal("100")

        codes = [d.code for d in current_domain.repository_for(Discount).list_all()]
        assert codes == ["GENERAL10", "PRODUCT20"]

    def test_seeded_data_prices_the_reference_cart(self, today):
        ids = seed_demo_data(today=today)
        request = CheckoutRequest(
            user_id="user-1",
            product_ids=[ids["ebook"], ids["course"]],
            discount_codes=["GENERAL10", "PRODUCT20"],
        )

        result = place_order(request, "user-1", today=today)
        assert result.final_price == Decimal("117.00")


class TestFakeIdentityProvider:
    def test_bearer_token_resolves(self):
        provider = FakeIdentityProvider({"tok-1": "user-1"})
        assert provider.authenticate("Bearer tok-1") == "user-1"

    def test_unknown_token(self):
        assert FakeIdentityProvider().authenticate("Bearer nope") is None

    def test_missing_or_malformed_header(self):
        provider = FakeIdentityProvider({"tok-1": "user-1"})
        assert provider.authenticate("") is None
        assert provider.authenticate("tok-1") is None

    def test_issue_records_string_user_id(self):
        provider = FakeIdentityProvider()
        provider.issue("tok-7", 7)
        assert provider.authenticate("Bearer tok-7") == "7"

    def test_calls_are_recorded(self):
        provider = FakeIdentityProvider()
        provider.authenticate("Bearer a")
        assert provider.calls == ["Bearer a"]


class TestIdentityProviderFactory:
    def test_defaults_to_fake(self):
        assert isinstance(get_identity_provider(), FakeIdentityProvider)

    def test_set_and_reset(self):
        custom = FakeIdentityProvider({"t": "u"})
        set_identity_provider(custom)
        assert get_identity_provider() is custom

        reset_identity_provider()
        assert get_identity_provider() is not custom
