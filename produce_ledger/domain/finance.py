"""Finance facilitation - down payment and balance split"""

from decimal import Decimal, InvalidOperation
from typing import Tuple

from produce_ledger.domain.exceptions import InvalidInputError
from produce_ledger.domain.fees import Number, to_positive_decimal


def split_down_payment(total_amount: Number, down_payment_percentage: Number) -> Tuple[Decimal, Decimal]:
    """
    Split an order total into down payment and balance.

    Example:
        100000 at 30% → (30000, 70000)

    Raises:
        InvalidInputError: total is not positive or percentage outside 0-100
    """
    total = to_positive_decimal(total_amount, "total_amount")
    try:
        percentage = Decimal(str(down_payment_percentage))
    except (InvalidOperation, ValueError):
        raise InvalidInputError(f"down_payment_percentage must be a number, got {down_payment_percentage!r}") from None

    if not percentage.is_finite() or not Decimal("0") <= percentage <= Decimal("100"):
        raise InvalidInputError(f"down_payment_percentage must be between 0 and 100, got {percentage}")

    down_payment = total * percentage / Decimal("100")
    return down_payment, total - down_payment
