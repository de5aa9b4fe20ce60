"""Request dependencies — bearer-token identity resolution."""

from fastapi import Header

from ordering.auth import get_identity_provider
from ordering.auth.port import Identity
from ordering.errors import AuthorizationError


def _bearer_token(authorization: str) -> str | None:
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def optional_identity(authorization: str = Header(default="")) -> Identity | None:
    """The caller's identity, or None when no bearer token was sent."""
    token = _bearer_token(authorization)
    if token is None:
        return None
    identity = get_identity_provider().resolve(token)
    if identity is None:
        raise AuthorizationError("Not authorized, token failed", authenticated=False)
    return identity


def current_identity(authorization: str = Header(default="")) -> Identity:
    """The caller's identity. Anonymous requests are rejected with 401."""
    identity = optional_identity(authorization)
    if identity is None:
        raise AuthorizationError("Not authorized, no token", authenticated=False)
    return identity
