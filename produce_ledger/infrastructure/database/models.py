"""SQLAlchemy ORM models for savings, settlements and access tokens"""

import uuid
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()

# KES amounts and kilograms. Inputs carry at most 4 places; derived fees need up to 6
Money = Numeric(24, 8)


class SavingsAccount(Base):
    """Compulsory savings balance for one producer"""

    __tablename__ = "savings_account"

    producer_id = Column(Text, primary_key=True)
    producer_name = Column(Text, nullable=False)
    total_savings = Column(Money, nullable=False, default=0)
    available_for_withdrawal = Column(Money, nullable=False, default=0)
    annual_interest_rate = Column(Numeric(6, 3), nullable=False)
    last_rollover_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    transactions = relationship(
        "SavingsLedgerEntry",
        back_populates="account",
        order_by="SavingsLedgerEntry.position",
        cascade="all, delete-orphan",
    )


class SavingsLedgerEntry(Base):
    """Append-only savings transaction"""

    __tablename__ = "savings_transaction"
    # Dedup key for deposits; withdrawals and interest have no order (NULLs never collide)
    __table_args__ = (UniqueConstraint("producer_id", "order_id", name="uq_savings_transaction_order"),)

    id = Column(Text, primary_key=True)
    producer_id = Column(Text, ForeignKey("savings_account.producer_id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    order_id = Column(Text, nullable=True)
    kind = Column(Text, nullable=False)
    amount = Column(Money, nullable=False)
    balance = Column(Money, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    account = relationship("SavingsAccount", back_populates="transactions")


class Settlement(Base):
    """Finalized sale with its deduction breakdown"""

    __tablename__ = "settlement"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id = Column(Text, nullable=False, unique=True)
    producer_id = Column(Text, nullable=False, index=True)
    producer_name = Column(Text, nullable=False)
    shipment_size = Column(Text, nullable=False)
    gross_amount = Column(Money, nullable=False)
    quantity_kg = Column(Money, nullable=False)
    platform_fee = Column(Money, nullable=False)
    transport_fee = Column(Money, nullable=False)
    grading_fee = Column(Money, nullable=False)
    finance_facilitation_fee = Column(Money, nullable=False)
    compulsory_savings = Column(Money, nullable=False)
    total_deductions = Column(Money, nullable=False)
    net_amount = Column(Money, nullable=False)
    savings_transaction_id = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class AccessToken(Base):
    """One-time dashboard access token"""

    __tablename__ = "access_token"

    token = Column(Text, primary_key=True)
    producer_id = Column(Text, nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    used = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
