from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, Iterable, Iterator, List, Optional

from payopt.models import PaymentMethod, PointsMethod, make_method

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


class MethodRegistry:
    """
    Payment methods keyed by id, iterated in the order they were registered.

    The fallback tier scans this order, so it is part of the policy. Methods
    are rebuilt on the way in: only the reserved points id becomes a
    PointsMethod, whatever class the caller used, and the caller's objects
    keep their own limits.
    """

    def __init__(self, methods: Iterable[PaymentMethod]) -> None:
        self._methods: Dict[str, PaymentMethod] = {}
        for method in methods:
            if method.id in self._methods:
                raise ValueError(f"Duplicate payment method id {method.id}")
            self._methods[method.id] = make_method(method.id, method.discount, method.limit)

    def __contains__(self, method_id: object) -> bool:
        return method_id in self._methods

    def __iter__(self) -> Iterator[PaymentMethod]:
        return iter(self._methods.values())

    def __len__(self) -> int:
        return len(self._methods)

    def get(self, method_id: str) -> Optional[PaymentMethod]:
        return self._methods.get(method_id)

    @property
    def ids(self) -> List[str]:
        return list(self._methods)

    @property
    def points(self) -> Optional[PointsMethod]:
        for method in self._methods.values():
            if isinstance(method, PointsMethod):
                return method
        return None

    def non_points(self) -> Iterator[PaymentMethod]:
        return (m for m in self._methods.values() if not m.is_points)

    def remaining_limits(self) -> Dict[str, Decimal]:
        return {m.id: m.limit for m in self._methods.values()}


class SpendingLedger:
    """Cumulative amount charged per method over one run."""

    def __init__(self, method_ids: Iterable[str]) -> None:
        self._spent: Dict[str, Decimal] = {method_id: ZERO for method_id in method_ids}

    def __contains__(self, method_id: object) -> bool:
        return method_id in self._spent

    def __getitem__(self, method_id: str) -> Decimal:
        return self._spent[method_id]

    def record(self, method_id: str, amount: Decimal) -> None:
        if method_id not in self._spent:
            raise KeyError(method_id)
        if amount < 0:
            raise ValueError(f"Negative charge for {method_id}: {amount}")
        self._spent[method_id] += amount

    def snapshot(self) -> Dict[str, Decimal]:
        return dict(self._spent)


class PaymentContext:
    """
    Mutable state of one batch run: method limits, spendings and log lines.

    The same method list can seed several runs.
    """

    def __init__(self, methods: Iterable[PaymentMethod]) -> None:
        self.registry = MethodRegistry(methods)
        self.ledger = SpendingLedger(self.registry.ids)

        self.logs: List[str] = []

    def log(self, message: str, level: int = logging.INFO) -> None:
        self.logs.append(message)
        logger.log(level, message)
