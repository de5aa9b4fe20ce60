"""JWT identity provider.

Verifies HS256 bearer tokens signed by the storefront's auth service with
``JWT_SECRET``. The customer id is read from the ``id`` claim (falling back
to ``sub``). Role and contact details come from the optional ``isAdmin``,
``email`` and ``name`` claims.
"""

import jwt
import structlog

from ordering.auth.port import Identity, IdentityProvider

logger = structlog.get_logger(__name__)


class JWTIdentityProvider(IdentityProvider):
    def __init__(self, secret: str, algorithms: tuple[str, ...] = ("HS256",)) -> None:
        if not secret:
            raise ValueError("JWT_SECRET must be set to use the jwt identity provider")
        self.secret = secret
        self.algorithms = list(algorithms)

    def resolve(self, token: str) -> Identity | None:
        try:
            claims = jwt.decode(token, self.secret, algorithms=self.algorithms)
        except jwt.InvalidTokenError as exc:
            logger.info("Bearer token rejected", reason=str(exc))
            return None

        customer_id = claims.get("id") or claims.get("sub")
        if not customer_id:
            logger.info("Bearer token has no customer id")
            return None
        return Identity(
            customer_id=str(customer_id),
            is_admin=bool(claims.get("isAdmin", claims.get("is_admin", False))),
            email=claims.get("email"),
            name=claims.get("name"),
        )
