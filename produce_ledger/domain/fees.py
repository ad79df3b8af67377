"""Fee structure resolution and sale deduction calculation"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Dict, Union

from produce_ledger.domain.exceptions import InvalidCategoryError, InvalidInputError
from produce_ledger.domain.models import DeductionBreakdown, FeeStructure, ShipmentSize

Number = Union[Decimal, int, float, str]

# Per-kg and percentage fees shared by every tier (KES)
TRANSPORT_FEE_PER_KG = Decimal("5")
GRADING_FEE_PER_KG = Decimal("2.5")
FINANCE_FACILITATION_PERCENTAGE = Decimal("1")
COMPULSORY_SAVINGS_PER_KG = Decimal("2")

MINIMUM_QUANTITY_KG = 1000  # One ton

# Smaller shipments pay a higher platform fee
PLATFORM_FEE_PERCENTAGE: Dict[ShipmentSize, Decimal] = {
    ShipmentSize.ONE_TON: Decimal("10"),
    ShipmentSize.TWO_TON: Decimal("10"),
    ShipmentSize.THREE_TON: Decimal("8"),
    ShipmentSize.FOUR_TON: Decimal("8"),
    ShipmentSize.FIVE_TON: Decimal("6"),
    ShipmentSize.SIX_TON: Decimal("6"),
    ShipmentSize.SEVEN_TON: Decimal("5"),
    ShipmentSize.EIGHT_TON: Decimal("5"),
    ShipmentSize.TEN_TON: Decimal("5"),
}

_HUNDRED = Decimal("100")
_CENT = Decimal("0.01")

# Largest accepted amount or quantity and the finest accepted fraction
MAXIMUM_AMOUNT = Decimal("1e12")
AMOUNT_PLACES = 4


def parse_shipment_size(value: Union[str, ShipmentSize]) -> ShipmentSize:
    """Resolve a tier name such as "6ton", raising InvalidCategoryError for unknown tiers"""
    if isinstance(value, ShipmentSize):
        return value
    try:
        return ShipmentSize(str(value).strip().lower())
    except ValueError:
        raise InvalidCategoryError(f"Unknown shipment size: {value!r}") from None


def to_positive_decimal(value: Number, name: str) -> Decimal:
    """
    Convert a caller-supplied number to Decimal.

    Floats go through str() so 0.1 stays 0.1. Booleans, NaN, infinities,
    anything <= 0, anything >= MAXIMUM_AMOUNT and anything finer than
    AMOUNT_PLACES decimal places raise InvalidInputError.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidInputError(f"{name} must be a number")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidInputError(f"{name} must be a number, got {value!r}") from None

    if not amount.is_finite():
        raise InvalidInputError(f"{name} must be finite")
    if amount <= 0:
        raise InvalidInputError(f"{name} must be positive, got {amount}")
    if amount >= MAXIMUM_AMOUNT:
        raise InvalidInputError(f"{name} must be below {MAXIMUM_AMOUNT:,f}, got {amount}")
    if amount.normalize().as_tuple().exponent < -AMOUNT_PLACES:
        raise InvalidInputError(f"{name} allows at most {AMOUNT_PLACES} decimal places, got {amount}")
    return amount


def to_money(value: Decimal) -> Decimal:
    """Round to cents for display; internal arithmetic never calls this"""
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def get_fee_structure(shipment_size: Union[str, ShipmentSize]) -> FeeStructure:
    """Fee schedule for a tier; only the platform fee varies by tier"""
    tier = parse_shipment_size(shipment_size)
    return FeeStructure(
        platform_fee_percentage=PLATFORM_FEE_PERCENTAGE[tier],
        transport_fee_per_kg=TRANSPORT_FEE_PER_KG,
        grading_fee_per_kg=GRADING_FEE_PER_KG,
        finance_facilitation_percentage=FINANCE_FACILITATION_PERCENTAGE,
        compulsory_savings_per_kg=COMPULSORY_SAVINGS_PER_KG,
    )


def calculate_deductions(
    gross_amount: Number,
    quantity_kg: Number,
    shipment_size: Union[str, ShipmentSize],
) -> DeductionBreakdown:
    """
    Apply the tier's fee schedule to a sale.

    Requirements:
    - Percentage fees (platform, finance facilitation) apply to the gross amount
    - Per-kg fees (transport, grading, compulsory savings) apply to the quantity
    - total_deductions + net_amount == gross_amount exactly (no rounding here)

    Args:
        gross_amount: Sale value in KES
        quantity_kg: Quantity sold in kilograms
        shipment_size: Tier name or ShipmentSize

    Returns:
        DeductionBreakdown at full precision

    Example:
        200000 KES, 500 kg, "6ton" (6%)
        → platform 12000, transport 2500, grading 1250, finance 2000,
          savings 1000 → net 181250
    """
    tier = parse_shipment_size(shipment_size)
    gross = to_positive_decimal(gross_amount, "gross_amount")
    quantity = to_positive_decimal(quantity_kg, "quantity_kg")
    fees = get_fee_structure(tier)

    platform_fee = gross * fees.platform_fee_percentage / _HUNDRED
    transport_fee = quantity * fees.transport_fee_per_kg
    grading_fee = quantity * fees.grading_fee_per_kg
    finance_fee = gross * fees.finance_facilitation_percentage / _HUNDRED
    compulsory_savings = quantity * fees.compulsory_savings_per_kg

    total_deductions = platform_fee + transport_fee + grading_fee + finance_fee + compulsory_savings

    return DeductionBreakdown(
        shipment_size=tier,
        gross_amount=gross,
        quantity_kg=quantity,
        platform_fee=platform_fee,
        transport_fee=transport_fee,
        grading_fee=grading_fee,
        finance_facilitation_fee=finance_fee,
        compulsory_savings=compulsory_savings,
        total_deductions=total_deductions,
        net_amount=gross - total_deductions,
    )


def calculate_net_price_per_kg(price_per_kg: Number, shipment_size: Union[str, ShipmentSize]) -> Decimal:
    """Net price per kg, computed as the deductions on a single kilogram"""
    return calculate_deductions(price_per_kg, 1, shipment_size).net_amount


def get_minimum_quantity() -> int:
    """Minimum order quantity in kg"""
    return MINIMUM_QUANTITY_KG
