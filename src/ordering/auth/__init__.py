"""Identity provider factory.

Uses FakeIdentityProvider by default. Set IDENTITY_PROVIDER=jwt to verify
real bearer tokens with JWT_SECRET, or install a provider with
set_identity_provider().
"""

import os

from ordering.auth.port import IdentityProvider

_provider_instance: IdentityProvider | None = None


def get_identity_provider() -> IdentityProvider:
    """Return the configured identity provider (singleton)."""
    global _provider_instance
    if _provider_instance is None:
        adapter = os.environ.get("IDENTITY_PROVIDER", "fake")
        if adapter == "fake":
            from ordering.auth.fake_adapter import FakeIdentityProvider

            _provider_instance = FakeIdentityProvider()
        elif adapter == "jwt":
            from ordering.auth.jwt_adapter import JWTIdentityProvider

            _provider_instance = JWTIdentityProvider(os.environ.get("JWT_SECRET", ""))
        else:
            raise ValueError(f"Unknown identity provider: {adapter}")
    return _provider_instance


def set_identity_provider(provider: IdentityProvider) -> None:
    global _provider_instance
    _provider_instance = provider


def reset_identity_provider() -> None:
    """Reset the provider singleton (useful for testing)."""
    global _provider_instance
    _provider_instance = None
