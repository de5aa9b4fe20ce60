"""In-memory identity provider for development and testing."""

from ordering.auth.port import Identity, IdentityProvider


class FakeIdentityProvider(IdentityProvider):
    """Token table kept in memory; tokens are registered explicitly."""

    def __init__(self) -> None:
        self.tokens: dict[str, Identity] = {}

    def register(self, token: str, identity: Identity) -> None:
        self.tokens[token] = identity

    def resolve(self, token: str) -> Identity | None:
        return self.tokens.get(token)

    def reset(self) -> None:
        self.tokens.clear()
