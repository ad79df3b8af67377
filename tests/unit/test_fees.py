"""Unit tests for fee structure resolution and deduction calculation"""

import pytest
from decimal import Decimal
from produce_ledger.domain.exceptions import InvalidCategoryError, InvalidInputError
from produce_ledger.domain.fees import (
    MAXIMUM_AMOUNT,
    calculate_deductions,
    calculate_net_price_per_kg,
    get_fee_structure,
    get_minimum_quantity,
    parse_shipment_size,
    to_money,
)
from produce_ledger.domain.models import ShipmentSize


def test_platform_fee_step_function():
    """Smaller shipments pay a higher platform fee"""
    expected = {
        "1ton": 10, "2ton": 10,
        "3ton": 8, "4ton": 8,
        "5ton": 6, "6ton": 6,
        "7ton": 5, "8ton": 5, "10ton": 5,
    }

    for tier in ShipmentSize:
        fees = get_fee_structure(tier)
        assert fees.platform_fee_percentage in {10, 8, 6, 5}
        assert fees.platform_fee_percentage == expected[tier.value]


def test_fee_structure_constant_components():
    """Per-kg fees and finance facilitation do not depend on tier"""
    fees = get_fee_structure("1ton")

    assert fees.transport_fee_per_kg == Decimal("5")
    assert fees.grading_fee_per_kg == Decimal("2.5")
    assert fees.finance_facilitation_percentage == Decimal("1")
    assert fees.compulsory_savings_per_kg == Decimal("2")
    assert get_fee_structure("10ton").transport_fee_per_kg == fees.transport_fee_per_kg


def test_calculate_deductions_six_ton_example():
    """200,000 KES for 500 kg on a 6 ton truck"""
    breakdown = calculate_deductions(200000, 500, "6ton")

    assert breakdown.platform_fee == 12000  # 6%
    assert breakdown.transport_fee == 2500  # 500 * 5
    assert breakdown.grading_fee == 1250  # 500 * 2.5
    assert breakdown.finance_facilitation_fee == 2000  # 1%
    assert breakdown.compulsory_savings == 1000  # 500 * 2
    assert breakdown.total_deductions == 18750
    assert breakdown.net_amount == 181250


@pytest.mark.parametrize(
    "gross, quantity, tier",
    [
        (200000, 500, "6ton"),
        ("1234.57", "33.3", "1ton"),
        (0.1, 0.1, "2ton"),
        (Decimal("999999.99"), Decimal("9999.999"), "10ton"),
    ],
)
def test_deductions_plus_net_equals_gross(gross, quantity, tier):
    """No rounding leaks between total deductions and net amount"""
    breakdown = calculate_deductions(gross, quantity, tier)

    assert breakdown.total_deductions + breakdown.net_amount == breakdown.gross_amount


def test_calculate_deductions_keeps_float_inputs_exact():
    """Floats are read through their decimal repr"""
    breakdown = calculate_deductions(0.1, 0.3, "1ton")

    assert breakdown.gross_amount == Decimal("0.1")
    assert breakdown.quantity_kg == Decimal("0.3")
    assert breakdown.grading_fee == Decimal("0.75")


def test_net_amount_may_go_negative_for_tiny_orders():
    """Per-kg fees can exceed a very low sale value; reported, not rejected"""
    breakdown = calculate_deductions(100, 100, "1ton")

    assert breakdown.net_amount < 0


def test_calculate_net_price_per_kg_matches_deductions():
    """Per-kg path uses the same computation as the full breakdown"""
    # 400 - (24 platform + 5 transport + 2.5 grading + 4 finance + 2 savings)
    assert calculate_net_price_per_kg(400, "6ton") == Decimal("362.5")

    breakdown = calculate_deductions(400 * 750, 750, "6ton")
    assert breakdown.net_price_per_kg == calculate_net_price_per_kg(400, "6ton")


@pytest.mark.parametrize("tier", ["9ton", "", "six", "12ton", None])
def test_unknown_shipment_size_rejected(tier):
    with pytest.raises(InvalidCategoryError):
        calculate_deductions(1000, 10, tier)


def test_parse_shipment_size_normalizes_case_and_whitespace():
    assert parse_shipment_size(" 6TON ") is ShipmentSize.SIX_TON
    assert parse_shipment_size(ShipmentSize.TEN_TON) is ShipmentSize.TEN_TON


@pytest.mark.parametrize("bad", [0, -5, "abc", True, float("nan"), float("inf"), None])
def test_non_positive_or_non_numeric_amount_rejected(bad):
    with pytest.raises(InvalidInputError):
        calculate_deductions(bad, 10, "3ton")

    with pytest.raises(InvalidInputError):
        calculate_deductions(1000, bad, "3ton")


def test_minimum_quantity_is_one_ton():
    assert get_minimum_quantity() == 1000


def test_to_money_rounds_half_up_to_cents():
    assert to_money(Decimal("1.005")) == Decimal("1.01")
    assert to_money(Decimal("181250")) == Decimal("181250.00")
    assert str(to_money(Decimal("2.344"))) == "2.34"


@pytest.mark.parametrize("huge", ["1e12", "1e27", Decimal("999999999999999"), 10**30])
def test_amounts_at_or_above_maximum_rejected(huge):
    with pytest.raises(InvalidInputError):
        calculate_deductions(huge, 500, "6ton")

    with pytest.raises(InvalidInputError):
        calculate_deductions(200000, huge, "6ton")


def test_amount_just_below_maximum_accepted():
    breakdown = calculate_deductions(MAXIMUM_AMOUNT - 1, 1000, "10ton")

    assert breakdown.platform_fee == (MAXIMUM_AMOUNT - 1) * 5 / 100
    assert to_money(breakdown.net_amount) > 0


@pytest.mark.parametrize("too_fine", ["0.00004", "1.00001", Decimal("250.123456")])
def test_more_than_four_decimal_places_rejected(too_fine):
    with pytest.raises(InvalidInputError):
        calculate_deductions(too_fine, 500, "6ton")

    with pytest.raises(InvalidInputError):
        calculate_deductions(200000, too_fine, "6ton")


def test_four_decimal_places_and_trailing_zeros_accepted():
    breakdown = calculate_deductions("100.0001", "1.000100000", "3ton")

    assert breakdown.gross_amount == Decimal("100.0001")
    assert breakdown.platform_fee == Decimal("8.000008")
    assert breakdown.grading_fee == Decimal("2.50025")
