from __future__ import annotations

import sys
from decimal import Decimal
from typing import Iterable, List, Mapping, Optional, TextIO

from payopt.models import UnpayableOrder
from payopt.money import format_money


def format_report(spendings: Mapping[str, Decimal]) -> List[str]:
    """One `<method id> <amount>` line per method that was actually used."""
    return [f"{method_id} {format_money(amount)}" for method_id, amount in spendings.items() if amount > 0]


def format_failures(failures: Iterable[UnpayableOrder]) -> List[str]:
    return [f"Failed to pay for order: {failure.order_id}" for failure in failures]


def print_report(spendings: Mapping[str, Decimal], stream: Optional[TextIO] = None) -> None:
    out = stream or sys.stdout
    for line in format_report(spendings):
        print(line, file=out)
