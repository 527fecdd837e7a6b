from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Tuple

from payopt.money import Number, to_decimal, to_money

# Loyalty points are just another method in the input files; this id marks them.
POINTS_METHOD_ID = "PUNKTY"


@dataclass(frozen=True, slots=True)
class Order:
    id: str
    value: Decimal
    promotions: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", to_money(self.value))
        object.__setattr__(self, "promotions", tuple(self.promotions or ()))


@dataclass(slots=True)
class PaymentMethod:
    """
    A way to pay: `discount` is a percentage (0-100) granted when the method
    covers a whole order, `limit` is what can still be spent with it.
    """

    id: str
    discount: Decimal
    limit: Decimal

    def __post_init__(self) -> None:
        self.discount = to_decimal(self.discount)
        self.limit = to_money(self.limit)

    @property
    def is_points(self) -> bool:
        return False

    def can_cover(self, amount: Decimal) -> bool:
        return self.limit >= amount


@dataclass(slots=True)
class PointsMethod(PaymentMethod):
    @property
    def is_points(self) -> bool:
        return True


def make_method(method_id: str, discount: Number, limit: Number) -> PaymentMethod:
    cls = PointsMethod if method_id == POINTS_METHOD_ID else PaymentMethod
    return cls(id=method_id, discount=discount, limit=limit)


@dataclass(frozen=True, slots=True)
class Allocation:
    """Part of an order charged to one method."""

    method_id: str
    amount: Decimal


class Tier(Enum):
    POINTS_FULL = "points-full"
    PROMO_CARD = "promo-card"
    POINTS_PARTIAL = "points-partial"
    ANY_METHOD = "any-method"


@dataclass(frozen=True, slots=True)
class AllocationOutcome:
    order_id: str
    tier: Tier
    allocations: Tuple[Allocation, ...]
    discount: Decimal

    @property
    def total_charged(self) -> Decimal:
        return sum((a.amount for a in self.allocations), Decimal("0.00"))


@dataclass(frozen=True, slots=True)
class UnpayableOrder:
    order_id: str
    value: Decimal
    reason: str


@dataclass(slots=True)
class OptimizationResult:
    spendings: Dict[str, Decimal]
    outcomes: List[AllocationOutcome] = field(default_factory=list)
    failures: List[UnpayableOrder] = field(default_factory=list)

    @property
    def paid_order_ids(self) -> List[str]:
        return [o.order_id for o in self.outcomes]

    @property
    def failed_order_ids(self) -> List[str]:
        return [f.order_id for f in self.failures]

    def outcome_for(self, order_id: str) -> Optional[AllocationOutcome]:
        for outcome in self.outcomes:
            if outcome.order_id == order_id:
                return outcome
        return None
