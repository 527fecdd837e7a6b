from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Union

from payopt.models import (
    Allocation,
    AllocationOutcome,
    OptimizationResult,
    Order,
    PaymentMethod,
    Tier,
    UnpayableOrder,
)
from payopt.money import HUNDRED, percent_of
from payopt.store import MethodRegistry, PaymentContext

# Flat order discount (percent) when points pay only part of the order.
# Not the points method's own discount rate.
PARTIAL_POINTS_DISCOUNT = Decimal("10")

NO_DISCOUNT = Decimal("0.00")


@dataclass(slots=True)
class PaymentPlan:
    allocations: List[Allocation]
    discount: Decimal


def first_covering_method(registry: MethodRegistry, amount: Decimal) -> Optional[PaymentMethod]:
    """First non-points method, in registration order, whose limit covers `amount`."""
    for method in registry.non_points():
        if method.can_cover(amount):
            return method
    return None


def best_promotion(registry: MethodRegistry, order: Order) -> Optional[PaymentMethod]:
    """
    Highest-discount promotion of the order that can pay it in full.

    Unknown ids are skipped. On equal discounts the one listed first in the
    order's promotions wins (only a strictly higher discount replaces it).
    """
    best: Optional[PaymentMethod] = None
    for method_id in order.promotions:
        method = registry.get(method_id)
        if method is None or not method.can_cover(order.value):
            continue
        if best is None or method.discount > best.discount:
            best = method
    return best


class PaymentTier(ABC):
    tier: Tier

    def __init__(self, context: PaymentContext):
        self.context = context

    @property
    def registry(self) -> MethodRegistry:
        return self.context.registry

    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def plan(self, order: Order) -> Optional[PaymentPlan]:
        """Charges that would pay the order, or None. Must not mutate state."""


class FullPointsPayment(PaymentTier):
    tier = Tier.POINTS_FULL

    def name(self) -> str:
        return "FullPointsPayment"

    def plan(self, order: Order) -> Optional[PaymentPlan]:
        points = self.registry.points
        if points is None or order.value <= 0 or not points.can_cover(order.value):
            return None
        discount = percent_of(order.value, points.discount)
        return PaymentPlan([Allocation(points.id, order.value - discount)], discount)


class PromotionCardPayment(PaymentTier):
    tier = Tier.PROMO_CARD

    def name(self) -> str:
        return "PromotionCardPayment"

    def plan(self, order: Order) -> Optional[PaymentPlan]:
        if not order.promotions:
            return None
        method = best_promotion(self.registry, order)
        if method is None:
            return None
        discount = percent_of(order.value, method.discount)
        return PaymentPlan([Allocation(method.id, order.value - discount)], discount)


class PartialPointsPayment(PaymentTier):
    tier = Tier.POINTS_PARTIAL

    def name(self) -> str:
        return "PartialPointsPayment"

    def plan(self, order: Order) -> Optional[PaymentPlan]:
        points = self.registry.points
        if points is None or order.value <= 0:
            return None
        # Threshold is compared unrounded: limit >= exactly 10% of the order value.
        if points.limit < order.value * PARTIAL_POINTS_DISCOUNT / HUNDRED:
            return None

        discount = percent_of(order.value, PARTIAL_POINTS_DISCOUNT)
        to_pay = order.value - discount
        points_used = min(points.limit, to_pay)
        remaining = to_pay - points_used

        card = first_covering_method(self.registry, remaining)
        if card is None:
            return None
        return PaymentPlan(
            [Allocation(points.id, points_used), Allocation(card.id, remaining)],
            discount,
        )


class AnyMethodPayment(PaymentTier):
    tier = Tier.ANY_METHOD

    def name(self) -> str:
        return "AnyMethodPayment"

    def plan(self, order: Order) -> Optional[PaymentPlan]:
        card = first_covering_method(self.registry, order.value)
        if card is None:
            return None
        return PaymentPlan([Allocation(card.id, order.value)], NO_DISCOUNT)


class AllocationEngine:
    """
    Pays one order at a time against a shared PaymentContext.

    Tiers are tried in a fixed order and the first one that produces a plan
    wins. Plans are built from the current limits without touching them, so
    a tier that cannot pay the whole order leaves no trace.
    """

    def __init__(self, context: PaymentContext):
        self.context = context
        self.tiers: List[PaymentTier] = [
            FullPointsPayment(context),
            PromotionCardPayment(context),
            PartialPointsPayment(context),
            AnyMethodPayment(context),
        ]

    def allocate(self, order: Order) -> Union[AllocationOutcome, UnpayableOrder]:
        self.context.log(f"[order={order.id}] ALLOCATE value={order.value} promotions={list(order.promotions)}")

        if order.value < 0:
            return self._reject(order, "negative value")

        for tier in self.tiers:
            plan = tier.plan(order)
            if plan is None:
                self.context.log(f"[order={order.id}] TIER {tier.name()} not applicable")
                continue
            for allocation in plan.allocations:
                self._charge(order, allocation)
            self.context.log(f"[order={order.id}] TIER {tier.name()} OK discount={plan.discount}")
            return AllocationOutcome(
                order_id=order.id,
                tier=tier.tier,
                allocations=tuple(plan.allocations),
                discount=plan.discount,
            )

        return self._reject(order, "no payment method can cover the order")

    def _charge(self, order: Order, allocation: Allocation) -> None:
        method = self.context.registry.get(allocation.method_id)
        if method.limit < allocation.amount:
            raise ValueError(f"Insufficient limit for {method.id}: have={method.limit}, need={allocation.amount}")
        method.limit -= allocation.amount
        self.context.ledger.record(method.id, allocation.amount)
        self.context.log(
            f"[order={order.id}] charged method={method.id} amount={allocation.amount} (limit={method.limit})"
        )

    def _reject(self, order: Order, reason: str) -> UnpayableOrder:
        self.context.log(f"Failed to pay for order: {order.id}", level=logging.WARNING)
        self.context.log(f"[order={order.id}] UNPAYABLE: {reason}")
        return UnpayableOrder(order_id=order.id, value=order.value, reason=reason)


def allocate(order: Order, context: PaymentContext) -> Union[AllocationOutcome, UnpayableOrder]:
    return AllocationEngine(context).allocate(order)


class PaymentOptimizer:
    """Runs a batch of orders, strictly in the given order, over one context."""

    def __init__(self, methods: Iterable[PaymentMethod]):
        self.context = PaymentContext(methods)
        self.engine = AllocationEngine(self.context)

        self.outcomes: List[AllocationOutcome] = []
        self.failures: List[UnpayableOrder] = []

    def optimize(self, orders: Iterable[Order]) -> OptimizationResult:
        for order in orders:
            result = self.engine.allocate(order)
            if isinstance(result, UnpayableOrder):
                self.failures.append(result)
            else:
                self.outcomes.append(result)
        return self.result()

    def result(self) -> OptimizationResult:
        return OptimizationResult(
            spendings=self.get_method_spendings(),
            outcomes=list(self.outcomes),
            failures=list(self.failures),
        )

    def get_method_spendings(self) -> Dict[str, Decimal]:
        return self.context.ledger.snapshot()

    def get_remaining_limits(self) -> Dict[str, Decimal]:
        return self.context.registry.remaining_limits()
