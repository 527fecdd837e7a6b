from decimal import Decimal

import pytest

from payopt.models import Order, PaymentMethod, PointsMethod, make_method
from payopt.store import MethodRegistry, PaymentContext, SpendingLedger


def test_points_method_is_a_separate_type(methods):
    registry = MethodRegistry(methods)

    assert isinstance(registry.points, PointsMethod)
    assert registry.points.is_points is True
    assert registry.get("mZysk").is_points is False
    assert [m.id for m in registry.non_points()] == ["mZysk", "BosBankrut"]


def test_registry_keeps_registration_order(methods):
    registry = MethodRegistry(methods)

    assert registry.ids == ["PUNKTY", "mZysk", "BosBankrut"]
    assert "mZysk" in registry
    assert "nope" not in registry
    assert registry.get("nope") is None


def test_registry_without_points():
    registry = MethodRegistry([make_method("card", "5", "10")])

    assert registry.points is None


def test_duplicate_method_ids_are_rejected():
    with pytest.raises(ValueError):
        MethodRegistry([make_method("card", "5", "10"), make_method("card", "1", "20")])


def test_ledger_starts_at_zero_for_every_method():
    ledger = SpendingLedger(["a", "b"])

    assert ledger.snapshot() == {"a": Decimal("0.00"), "b": Decimal("0.00")}


def test_ledger_rejects_unknown_and_negative():
    ledger = SpendingLedger(["a"])

    with pytest.raises(KeyError):
        ledger.record("b", Decimal("1.00"))
    with pytest.raises(ValueError):
        ledger.record("a", Decimal("-1.00"))
    assert ledger.snapshot() == {"a": Decimal("0.00")}


def test_ledger_snapshot_is_a_copy():
    ledger = SpendingLedger(["a"])
    ledger.record("a", Decimal("2.50"))

    snapshot = ledger.snapshot()
    snapshot["a"] = Decimal("0")

    assert ledger["a"] == Decimal("2.50")


def test_context_copies_methods(methods):
    context = PaymentContext(methods)
    context.registry.get("PUNKTY").limit = Decimal("0.00")

    assert methods[0].limit == Decimal("100.00")
    assert isinstance(context.registry.get("PUNKTY"), PointsMethod)


def test_order_normalizes_input():
    order = Order("O1", "12.5", None)

    assert order.value == Decimal("12.50")
    assert order.promotions == ()


def test_registry_rebuilds_points_by_id():
    registry = MethodRegistry([
        PointsMethod("bonus", Decimal("15"), Decimal("10")),
        PaymentMethod("PUNKTY", Decimal("15"), Decimal("10")),
    ])

    assert registry.points.id == "PUNKTY"
    assert [m.id for m in registry.non_points()] == ["bonus"]
