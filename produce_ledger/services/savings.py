"""Savings ledger application service - locking, idempotency and persistence"""

import logging
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterator, List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from produce_ledger.config import settings
from produce_ledger.domain import savings as ledger
from produce_ledger.domain.exceptions import DuplicateDepositError, NotFoundError
from produce_ledger.domain.fees import Number
from produce_ledger.domain.models import FarmerSavings, SavingsTransaction
from produce_ledger.infrastructure.database.repositories import SavingsRepository
from produce_ledger.infrastructure.observability.metrics import (
    duplicate_deposit_counter,
    record_savings_transaction,
)
from produce_ledger.utils.date_utils import utcnow
from produce_ledger.utils.locks import KeyedLock, producer_locks

logger = logging.getLogger(__name__)


class SavingsService:
    """
    Producer savings operations over an injected session.

    Every mutation for a producer runs under that producer's in-process lock
    plus a row lock on the account, and commits before the lock is released.
    """

    def __init__(
        self,
        db: Session,
        annual_interest_rate: Optional[Decimal] = None,
        locks: Optional[KeyedLock] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.repository = SavingsRepository(db)
        self.annual_interest_rate = (
            settings.savings_annual_interest_rate if annual_interest_rate is None else annual_interest_rate
        )
        self.locks = locks or producer_locks
        self.clock = clock

    @contextmanager
    def unit_of_work(self, producer_id: str) -> Iterator[None]:
        """Serialize writes for one producer and commit on success"""
        with self.locks.hold(producer_id):
            try:
                yield
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

    def get_account(self, producer_id: str) -> FarmerSavings:
        account = self.repository.get_account(producer_id)
        if account is None:
            raise NotFoundError(f"Savings account not found for producer {producer_id}")
        return account

    def _load_for_update(self, producer_id: str) -> FarmerSavings:
        account = self.repository.get_account(producer_id, for_update=True)
        if account is None:
            raise NotFoundError(f"Savings account not found for producer {producer_id}")
        return account

    def record_deposit(
        self,
        producer_id: str,
        producer_name: str,
        order_id: str,
        quantity_kg: Number,
    ) -> SavingsTransaction:
        """
        Credit compulsory savings without committing.

        Callers must hold unit_of_work(producer_id). A replayed order returns
        the original deposit and credits nothing.
        """
        now = self.clock()
        account = self.repository.get_account(producer_id, for_update=True)
        if account is None:
            account = ledger.open_account(producer_id, producer_name, now, self.annual_interest_rate)

        try:
            account, transaction = ledger.deposit(account, order_id, quantity_kg, now)
        except DuplicateDepositError:
            duplicate_deposit_counter.inc()
            logger.info(
                "Deposit replayed",
                extra={"producer_id": producer_id, "order_id": order_id},
            )
            return self.repository.get_deposit(producer_id, order_id)

        self.repository.save(account, transaction)
        record_savings_transaction(transaction.kind.value)
        return transaction

    def deposit(
        self,
        producer_id: str,
        producer_name: str,
        order_id: str,
        quantity_kg: Number,
    ) -> SavingsTransaction:
        """Credit quantity_kg * KES 2 to the producer, opening the account if needed"""
        try:
            with self.unit_of_work(producer_id):
                return self.record_deposit(producer_id, producer_name, order_id, quantity_kg)
        except IntegrityError:
            # Another process inserted the same order between our read and commit
            existing = self.repository.get_deposit(producer_id, order_id)
            if existing is None:
                raise
            duplicate_deposit_counter.inc()
            return existing

    def withdraw(self, producer_id: str, amount: Number) -> SavingsTransaction:
        """
        Raises:
            NotFoundError: producer has no savings account
            InvalidInputError: amount is not positive
            InsufficientFundsError: amount exceeds the withdrawable balance
        """
        with self.unit_of_work(producer_id):
            account = self._load_for_update(producer_id)
            account, transaction = ledger.withdraw(account, amount, self.clock())
            self.repository.save(account, transaction)

        record_savings_transaction(transaction.kind.value)
        logger.info(
            "Savings withdrawn",
            extra={"producer_id": producer_id, "transaction_id": transaction.transaction_id},
        )
        return transaction

    def apply_annual_interest(self, producer_id: str) -> SavingsTransaction:
        """Credit a year of interest regardless of when the last rollover happened"""
        with self.unit_of_work(producer_id):
            account = self._load_for_update(producer_id)
            account, transaction = ledger.apply_annual_interest(account, self.clock())
            self.repository.save(account, transaction)

        record_savings_transaction(transaction.kind.value)
        return transaction

    def apply_due_interest(self, interval_days: Optional[int] = None) -> List[SavingsTransaction]:
        """Roll over every account whose last rollover is at least interval_days old"""
        interval = interval_days if interval_days is not None else settings.interest_rollover_days
        applied = []

        for producer_id in self.repository.list_producer_ids():
            with self.unit_of_work(producer_id):
                account = self._load_for_update(producer_id)
                now = self.clock()
                if not ledger.is_rollover_due(account, now, interval):
                    continue
                account, transaction = ledger.apply_annual_interest(account, now)
                self.repository.save(account, transaction)

            record_savings_transaction(transaction.kind.value)
            applied.append(transaction)

        logger.info("Interest rollover completed", extra={"accounts_credited": len(applied)})
        return applied
