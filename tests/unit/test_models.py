import uuid
from decimal import Decimal

import pytest
from pydantic import ValidationError

from cart_service.core.config import Settings
from cart_service.core.flags import BUG_ALIASES, FlagRegistry
from cart_service.models.cart import CartSummaryResponse, LineItem
from cart_service.models.flags import FEATURE_CONTROLS, FlagSet
from cart_service.models.order import PaymentMethod


def test_flag_set_is_frozen() -> None:
    flags = FlagSet()
    with pytest.raises(ValidationError):
        flags.enable_overflow_bug = True


def test_flag_defaults() -> None:
    flags = FlagSet()

    assert not any(flags.bug_flags.values())
    assert flags.cart_item_limit == 50
    assert flags.enable_order_service_integration


def test_bug_flags_and_controls_are_disjoint() -> None:
    flags = FlagSet()

    assert set(flags.feature_controls) == set(FEATURE_CONTROLS)
    assert not set(flags.bug_flags) & set(FEATURE_CONTROLS)
    assert "enable_duplicate_cart_item_bug" in flags.bug_flags


def test_cart_item_limit_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        FlagSet(cart_item_limit=0)


def test_registry_update_swaps_snapshot() -> None:
    registry = FlagRegistry()
    before = registry.snapshot()

    after = registry.update(enable_response_bug=True, cart_item_limit=10)

    assert registry.snapshot() is after
    assert after.enable_response_bug and after.cart_item_limit == 10
    assert not before.enable_response_bug


def test_registry_rejects_unknown_flag() -> None:
    registry = FlagRegistry()
    with pytest.raises(KeyError):
        registry.update(enable_teleport_bug=True)


def test_toggle_bug_by_short_name() -> None:
    registry = FlagRegistry()

    for name, field in BUG_ALIASES.items():
        registry.toggle_bug(name.upper(), True)
        assert getattr(registry.snapshot(), field)

    registry.toggle_bug("overflow", False)
    assert not registry.snapshot().enable_overflow_bug

    with pytest.raises(KeyError):
        registry.toggle_bug("gravity", True)


def test_settings_read_nested_flags(monkeypatch) -> None:
    monkeypatch.setenv("FEATURE_FLAGS__BREAK_ORDER_CREATION", "true")
    monkeypatch.setenv("FEATURE_FLAGS__CART_ITEM_LIMIT", "7")
    monkeypatch.setenv("ENVIRONMENT", "production")

    settings = Settings(_env_file=None)

    assert settings.feature_flags.break_order_creation
    assert settings.feature_flags.cart_item_limit == 7
    assert not settings.is_development


def test_payment_method_parse() -> None:
    assert PaymentMethod.parse("card_online") == PaymentMethod.CARD_ONLINE
    assert PaymentMethod.parse(" Cash_Courier ") == PaymentMethod.CASH_COURIER
    assert PaymentMethod.parse("bitcoin") is None
    assert PaymentMethod.parse("") is None
    assert PaymentMethod.parse(None) is None


def test_line_item_requires_positive_quantity() -> None:
    with pytest.raises(ValidationError):
        LineItem(basket_id="b", dish_id=uuid.uuid4(), name="x", unit_price=Decimal("1"), quantity=0)


def test_summary_from_items() -> None:
    items = [
        LineItem(basket_id="b", dish_id=uuid.uuid4(), name="a", unit_price=Decimal("10.50"), quantity=2),
        LineItem(basket_id="b", dish_id=uuid.uuid4(), name="b", unit_price=Decimal("4"), quantity=1),
    ]

    summary = CartSummaryResponse.from_items("b", items)
    dumped = summary.model_dump(mode="json")

    assert summary.item_count == 3
    assert summary.total == Decimal("25.00")
    assert dumped["has_items"] is True
    assert dumped["is_empty"] is False
    assert len(dumped["items"]) == 2

    bare = CartSummaryResponse.from_items("b", items, include_items=False)
    assert bare.items is None


def test_empty_summary() -> None:
    summary = CartSummaryResponse.from_items("b", [])
    assert summary.is_empty and not summary.has_items
    assert summary.total == Decimal("0")
