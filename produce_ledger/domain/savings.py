"""Compulsory savings ledger - pure state transitions over FarmerSavings"""

import uuid
from dataclasses import replace
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple

from produce_ledger.domain.exceptions import DuplicateDepositError, InsufficientFundsError
from produce_ledger.domain.fees import COMPULSORY_SAVINGS_PER_KG, Number, to_positive_decimal
from produce_ledger.domain.models import FarmerSavings, SavingsTransaction, TransactionKind

DEFAULT_ANNUAL_INTEREST_RATE = Decimal("8")  # Percent


def new_transaction_id() -> str:
    return f"SAV-{uuid.uuid4().hex[:12].upper()}"


def open_account(
    producer_id: str,
    producer_name: str,
    now: datetime,
    annual_interest_rate: Decimal = DEFAULT_ANNUAL_INTEREST_RATE,
) -> FarmerSavings:
    """Empty account, created on a producer's first deposit"""
    return FarmerSavings(
        producer_id=producer_id,
        producer_name=producer_name,
        total_savings=Decimal("0"),
        available_for_withdrawal=Decimal("0"),
        last_updated=now,
        annual_interest_rate=annual_interest_rate,
    )


def _post(
    account: FarmerSavings,
    amount: Decimal,
    kind: TransactionKind,
    now: datetime,
    order_id: Optional[str] = None,
    last_rollover_date: Optional[datetime] = None,
) -> Tuple[FarmerSavings, SavingsTransaction]:
    # Every entry moves total and withdrawable balances by the same signed amount
    transaction = SavingsTransaction(
        transaction_id=new_transaction_id(),
        producer_id=account.producer_id,
        order_id=order_id,
        amount=amount,
        timestamp=now,
        kind=kind,
        balance=account.total_savings + amount,
    )
    updated = replace(
        account,
        total_savings=account.total_savings + amount,
        available_for_withdrawal=account.available_for_withdrawal + amount,
        last_updated=now,
        transactions=account.transactions + (transaction,),
        last_rollover_date=last_rollover_date or account.last_rollover_date,
    )
    return updated, transaction


def deposit(
    account: FarmerSavings,
    order_id: str,
    quantity_kg: Number,
    now: datetime,
    savings_per_kg: Decimal = COMPULSORY_SAVINGS_PER_KG,
) -> Tuple[FarmerSavings, SavingsTransaction]:
    """
    Credit compulsory savings for a finalized sale.

    Amount is quantity_kg * savings_per_kg (KES 2/kg). Each order can be
    credited once per producer.

    Raises:
        InvalidInputError: quantity is not a positive number
        DuplicateDepositError: the order is already on this ledger
    """
    quantity = to_positive_decimal(quantity_kg, "quantity_kg")
    if account.has_deposit_for(order_id):
        raise DuplicateDepositError(account.producer_id, order_id)

    return _post(account, quantity * savings_per_kg, TransactionKind.DEPOSIT, now, order_id=order_id)


def withdraw(account: FarmerSavings, amount: Number, now: datetime) -> Tuple[FarmerSavings, SavingsTransaction]:
    """
    Debit the withdrawable balance.

    Raises:
        InvalidInputError: amount is not a positive number
        InsufficientFundsError: amount exceeds available_for_withdrawal
    """
    value = to_positive_decimal(amount, "amount")
    if value > account.available_for_withdrawal:
        raise InsufficientFundsError(
            f"Insufficient funds available for withdrawal: requested {value}, "
            f"available {account.available_for_withdrawal}"
        )

    return _post(account, -value, TransactionKind.WITHDRAWAL, now)


def calculate_interest(total_savings: Decimal, annual_interest_rate: Decimal) -> Decimal:
    """Annual interest rounded half-up to whole currency units"""
    return (total_savings * annual_interest_rate / Decimal("100")).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def apply_annual_interest(account: FarmerSavings, now: datetime) -> Tuple[FarmerSavings, SavingsTransaction]:
    """
    Credit one year of interest on total savings and stamp the rollover date.

    Cadence is not checked here; see is_rollover_due.
    """
    interest = calculate_interest(account.total_savings, account.annual_interest_rate)
    return _post(account, interest, TransactionKind.INTEREST, now, last_rollover_date=now)


def is_rollover_due(account: FarmerSavings, now: datetime, interval_days: int = 365) -> bool:
    """True if the account never rolled over or the last rollover is interval_days old"""
    if account.last_rollover_date is None:
        return True
    return now - account.last_rollover_date >= timedelta(days=interval_days)
