"""Data access layer for savings, settlements and access tokens"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import update
from sqlalchemy.orm import Session
from produce_ledger.infrastructure.database.models import AccessToken, SavingsAccount, SavingsLedgerEntry, Settlement
from produce_ledger.domain.models import (
    DeductionBreakdown,
    FarmerSavings,
    SavingsTransaction,
    TransactionKind,
)
from produce_ledger.utils.date_utils import as_utc


def _to_transaction(entry: SavingsLedgerEntry) -> SavingsTransaction:
    return SavingsTransaction(
        transaction_id=entry.id,
        producer_id=entry.producer_id,
        order_id=entry.order_id,
        amount=Decimal(entry.amount),
        timestamp=as_utc(entry.created_at),
        kind=TransactionKind(entry.kind),
        balance=Decimal(entry.balance),
    )


def _to_savings(account: SavingsAccount) -> FarmerSavings:
    return FarmerSavings(
        producer_id=account.producer_id,
        producer_name=account.producer_name,
        total_savings=Decimal(account.total_savings),
        available_for_withdrawal=Decimal(account.available_for_withdrawal),
        last_updated=as_utc(account.updated_at),
        annual_interest_rate=Decimal(account.annual_interest_rate),
        transactions=tuple(_to_transaction(entry) for entry in account.transactions),
        last_rollover_date=as_utc(account.last_rollover_at),
    )


class SavingsRepository:
    """Repository for producer savings accounts and their ledger"""

    def __init__(self, db: Session):
        self.db = db

    def get_account(self, producer_id: str, for_update: bool = False) -> Optional[FarmerSavings]:
        """Load account with its full ledger; for_update takes a row lock where supported"""
        query = self.db.query(SavingsAccount).filter(SavingsAccount.producer_id == producer_id)
        if for_update:
            query = query.with_for_update()
        account = query.first()
        return _to_savings(account) if account else None

    def get_deposit(self, producer_id: str, order_id: str) -> Optional[SavingsTransaction]:
        """Deposit previously recorded for an order, if any"""
        entry = (
            self.db.query(SavingsLedgerEntry)
            .filter(
                SavingsLedgerEntry.producer_id == producer_id,
                SavingsLedgerEntry.order_id == order_id,
                SavingsLedgerEntry.kind == TransactionKind.DEPOSIT.value,
            )
            .first()
        )
        return _to_transaction(entry) if entry else None

    def list_producer_ids(self) -> List[str]:
        rows = self.db.query(SavingsAccount.producer_id).order_by(SavingsAccount.producer_id).all()
        return [row.producer_id for row in rows]

    def save(self, savings: FarmerSavings, transaction: SavingsTransaction) -> None:
        """Write new balances and append the transaction (flushes, does not commit)"""
        account = self.db.get(SavingsAccount, savings.producer_id)
        if account is None:
            account = SavingsAccount(producer_id=savings.producer_id)
            self.db.add(account)

        account.producer_name = savings.producer_name
        account.total_savings = savings.total_savings
        account.available_for_withdrawal = savings.available_for_withdrawal
        account.annual_interest_rate = savings.annual_interest_rate
        account.last_rollover_at = savings.last_rollover_date
        account.updated_at = savings.last_updated

        self.db.add(
            SavingsLedgerEntry(
                id=transaction.transaction_id,
                producer_id=transaction.producer_id,
                position=len(savings.transactions) - 1,
                order_id=transaction.order_id,
                kind=transaction.kind.value,
                amount=transaction.amount,
                balance=transaction.balance,
                created_at=transaction.timestamp,
            )
        )
        self.db.flush()
        # Next get_account must rebuild the ledger from rows, not the stale collection
        self.db.expire(account, ["transactions"])


class SettlementRepository:
    """Repository for settled sales"""

    def __init__(self, db: Session):
        self.db = db

    def create_settlement(
        self,
        order_id: str,
        producer_id: str,
        producer_name: str,
        breakdown: DeductionBreakdown,
    ) -> Settlement:
        """Persist the breakdown for an order"""
        db_settlement = Settlement(
            order_id=order_id,
            producer_id=producer_id,
            producer_name=producer_name,
            shipment_size=breakdown.shipment_size.value,
            gross_amount=breakdown.gross_amount,
            quantity_kg=breakdown.quantity_kg,
            platform_fee=breakdown.platform_fee,
            transport_fee=breakdown.transport_fee,
            grading_fee=breakdown.grading_fee,
            finance_facilitation_fee=breakdown.finance_facilitation_fee,
            compulsory_savings=breakdown.compulsory_savings,
            total_deductions=breakdown.total_deductions,
            net_amount=breakdown.net_amount,
        )
        self.db.add(db_settlement)
        self.db.flush()  # Get ID without committing
        return db_settlement

    def get_by_order_id(self, order_id: str) -> Optional[Settlement]:
        return self.db.query(Settlement).filter(Settlement.order_id == order_id).first()

    def get_settlements_by_producer(self, producer_id: str, limit: int = 20) -> List[Settlement]:
        """Most recent settlements for a producer"""
        return (
            self.db.query(Settlement)
            .filter(Settlement.producer_id == producer_id)
            .order_by(Settlement.created_at.desc())
            .limit(limit)
            .all()
        )


class AccessTokenRepository:
    """Repository for one-time access tokens"""

    def __init__(self, db: Session):
        self.db = db

    def create_token(self, token: str, producer_id: str, expires_at: datetime) -> AccessToken:
        db_token = AccessToken(token=token, producer_id=producer_id, expires_at=expires_at, used=False)
        self.db.add(db_token)
        self.db.flush()
        return db_token

    def get_token(self, token: str) -> Optional[AccessToken]:
        return self.db.query(AccessToken).filter(AccessToken.token == token).first()

    def mark_used(self, token: str) -> bool:
        """Flip used to true; False when another request got there first"""
        result = self.db.execute(
            update(AccessToken)
            .where(AccessToken.token == token, AccessToken.used.is_(False))
            .values(used=True)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
