"""Token-table identity provider for development and testing.

Accepts ``Bearer <token>`` headers and looks the token up in an in-memory
table. Register tokens with ``issue()``.
"""

from checkout.identity.port import IdentityProvider

_BEARER_PREFIX = "Bearer "


class FakeIdentityProvider(IdentityProvider):
    def __init__(self, tokens: dict[str, str] | None = None) -> None:
        self.tokens: dict[str, str] = dict(tokens or {})
        self.calls: list[str] = []

    def issue(self, token: str, user_id) -> None:
        self.tokens[token] = str(user_id)

    def authenticate(self, authorization: str) -> str | None:
        self.calls.append(authorization)
        if not authorization or not authorization.startswith(_BEARER_PREFIX):
            return None
        return self.tokens.get(authorization[len(_BEARER_PREFIX) :].strip())
