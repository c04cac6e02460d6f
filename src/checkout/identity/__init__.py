"""Identity provider factory.

Provides get_identity_provider() / set_identity_provider() to swap
implementations. Defaults to FakeIdentityProvider.
"""

from checkout.identity.fake_adapter import FakeIdentityProvider
from checkout.identity.port import IdentityProvider

_current_provider: IdentityProvider | None = None


def get_identity_provider() -> IdentityProvider:
    """Return the current identity provider. Defaults to FakeIdentityProvider."""
    global _current_provider
    if _current_provider is None:
        _current_provider = FakeIdentityProvider()
    return _current_provider


def set_identity_provider(provider: IdentityProvider) -> None:
    """Override the active identity provider (useful for tests)."""
    global _current_provider
    _current_provider = provider


def reset_identity_provider() -> None:
    """Reset to default identity provider."""
    global _current_provider
    _current_provider = None
