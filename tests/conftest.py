"""Pytest fixtures: the reference methods/orders scenario and a fresh context."""

from decimal import Decimal
from typing import List

import pytest

from payopt.models import Order, PaymentMethod, make_method
from payopt.store import PaymentContext


@pytest.fixture
def methods() -> List[PaymentMethod]:
    return [
        make_method("PUNKTY", discount=Decimal("15"), limit=Decimal("100.00")),
        make_method("mZysk", discount=Decimal("10"), limit=Decimal("180.00")),
        make_method("BosBankrut", discount=Decimal("5"), limit=Decimal("200.00")),
    ]


@pytest.fixture
def orders() -> List[Order]:
    return [
        Order("ORDER1", Decimal("100.00"), ("mZysk",)),
        Order("ORDER2", Decimal("200.00"), ("BosBankrut",)),
        Order("ORDER3", Decimal("150.00"), ("mZysk", "BosBankrut")),
        Order("ORDER4", Decimal("50.00")),
    ]


@pytest.fixture
def context(methods) -> PaymentContext:
    return PaymentContext(methods)
