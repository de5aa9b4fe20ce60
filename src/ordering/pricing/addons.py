"""Optional order-level add-ons (gift wrap, express shipping, ...).

Add-ons are requested as an ordered list of ``{"type": ..., "enabled": ...}``
entries. They are applied in the caller's order; disabled entries are ignored
and unknown types are logged and skipped. The returned list keeps the
requested order.

Insurance is priced as 2% of the pre-add-on total, so the final total does
not depend on the order add-ons were requested in.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

import structlog

logger = structlog.get_logger(__name__)


class AddOnKind(Enum):
    GIFT_WRAP = "giftWrap"
    EXPRESS_SHIPPING = "expressShipping"
    INSURANCE = "insurance"
    PRIORITY_PACKAGING = "priorityPackaging"


@dataclass(frozen=True)
class AddOnSpec:
    name: str
    description: str
    icon: str
    flat_cost: int = 0
    rate: Decimal | None = None

    def cost(self, base_total: int) -> int:
        if self.rate is None:
            return self.flat_cost
        return int((Decimal(base_total) * self.rate).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


ADD_ONS = {
    AddOnKind.GIFT_WRAP: AddOnSpec(
        name="Gift wrap",
        description="Premium gift wrapping",
        icon="🎁",
        flat_cost=25_000,
    ),
    AddOnKind.EXPRESS_SHIPPING: AddOnSpec(
        name="Express shipping",
        description="Express delivery (1-2 days)",
        icon="🚀",
        flat_cost=50_000,
    ),
    AddOnKind.INSURANCE: AddOnSpec(
        name="Insurance",
        description="Goods insurance (2% of order value)",
        icon="🛡️",
        rate=Decimal("0.02"),
    ),
    AddOnKind.PRIORITY_PACKAGING: AddOnSpec(
        name="Priority packaging",
        description="Shock-proof packaging",
        icon="📦",
        flat_cost=15_000,
    ),
}

_BY_VALUE = {kind.value.lower(): kind for kind in AddOnKind}


@dataclass(frozen=True)
class AppliedAddOn:
    kind: str
    name: str
    description: str
    icon: str
    cost: int

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "cost": self.cost,
        }


@dataclass(frozen=True)
class AddOnResult:
    final_total: int
    applied: tuple[AppliedAddOn, ...]

    @property
    def add_ons_total(self) -> int:
        return sum(add_on.cost for add_on in self.applied)


def resolve_kind(kind: str | None) -> AddOnKind | None:
    if not kind:
        return None
    return _BY_VALUE.get(str(kind).strip().lower())


def apply_add_ons(base_total: int, requested: list[dict] | None) -> AddOnResult:
    """Apply enabled add-ons in request order and return the new total."""
    running_total = base_total
    applied = []
    for request in requested or []:
        if not request.get("enabled"):
            continue
        kind = resolve_kind(request.get("type"))
        if kind is None:
            logger.warning("Skipping unknown add-on", add_on_type=request.get("type"))
            continue

        spec = ADD_ONS[kind]
        cost = spec.cost(base_total)
        running_total += cost
        applied.append(
            AppliedAddOn(
                kind=kind.value,
                name=spec.name,
                description=spec.description,
                icon=spec.icon,
                cost=cost,
            )
        )

    return AddOnResult(final_total=running_total, applied=tuple(applied))
