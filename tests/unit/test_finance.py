"""Unit tests for down payment / balance split"""

import pytest
from decimal import Decimal
from produce_ledger.domain.exceptions import InvalidInputError
from produce_ledger.domain.finance import split_down_payment


def test_split_down_payment():
    down_payment, balance = split_down_payment(100000, 30)

    assert down_payment == 30000
    assert balance == 70000


def test_split_down_payment_fractional_percentage():
    down_payment, balance = split_down_payment("250000", "12.5")

    assert down_payment == Decimal("31250")
    assert down_payment + balance == 250000


def test_split_down_payment_bounds():
    assert split_down_payment(5000, 0) == (0, 5000)
    assert split_down_payment(5000, 100) == (5000, 0)


@pytest.mark.parametrize("percentage", [-1, 100.01, "half"])
def test_split_down_payment_rejects_bad_percentage(percentage):
    with pytest.raises(InvalidInputError):
        split_down_payment(5000, percentage)


def test_split_down_payment_rejects_non_positive_total():
    with pytest.raises(InvalidInputError):
        split_down_payment(0, 30)
