"""Identity provider port — resolves bearer tokens to caller identities.

Authentication itself (token issuance, passwords) lives outside the
ordering context. The pipeline only needs to know who is calling and
whether they are an admin.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    customer_id: str
    is_admin: bool = False
    email: str | None = None
    name: str | None = None

    def can_access(self, owner_id) -> bool:
        return self.is_admin or str(owner_id) == self.customer_id


class IdentityProvider(ABC):
    @abstractmethod
    def resolve(self, token: str) -> Identity | None:
        """Return the identity for ``token``, or None if it is not valid."""
        ...
