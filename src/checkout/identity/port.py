"""Identity provider port (abstract interface).

The checkout engine does not authenticate anyone. It receives the
authenticated user id from an identity provider and only compares it with
the user id stated in the checkout request.
"""

from abc import ABC, abstractmethod


class IdentityProvider(ABC):
    """Resolves request credentials to an authenticated user id."""

    @abstractmethod
    def authenticate(self, authorization: str) -> str | None:
        """Return the user id for an ``Authorization`` header value, or None if unauthenticated."""
        ...
