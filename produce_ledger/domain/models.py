"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Tuple


class ShipmentSize(str, Enum):
    """Shipment-size tier by truck capacity"""

    ONE_TON = "1ton"
    TWO_TON = "2ton"
    THREE_TON = "3ton"
    FOUR_TON = "4ton"
    FIVE_TON = "5ton"
    SIX_TON = "6ton"
    SEVEN_TON = "7ton"
    EIGHT_TON = "8ton"
    TEN_TON = "10ton"


class TransactionKind(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    INTEREST = "interest"


class PaymentType(str, Enum):
    DOWN_PAYMENT = "downpayment"
    BALANCE = "balance"


@dataclass(frozen=True)
class FeeStructure:
    """Fee schedule resolved from a shipment-size tier"""

    platform_fee_percentage: Decimal
    transport_fee_per_kg: Decimal
    grading_fee_per_kg: Decimal
    finance_facilitation_percentage: Decimal
    compulsory_savings_per_kg: Decimal


@dataclass(frozen=True)
class DeductionBreakdown:
    """Fees deducted from a sale and the resulting net amount (full precision)"""

    shipment_size: ShipmentSize
    gross_amount: Decimal
    quantity_kg: Decimal
    platform_fee: Decimal
    transport_fee: Decimal
    grading_fee: Decimal
    finance_facilitation_fee: Decimal
    compulsory_savings: Decimal
    total_deductions: Decimal
    net_amount: Decimal

    @property
    def gross_price_per_kg(self) -> Decimal:
        return self.gross_amount / self.quantity_kg

    @property
    def net_price_per_kg(self) -> Decimal:
        return self.net_amount / self.quantity_kg


@dataclass(frozen=True)
class SavingsTransaction:
    """Immutable entry on a producer's savings ledger"""

    transaction_id: str
    producer_id: str
    order_id: Optional[str]  # Only deposits carry an order
    amount: Decimal  # Negative for withdrawals
    timestamp: datetime
    kind: TransactionKind
    balance: Decimal  # Total savings after this entry


@dataclass(frozen=True)
class FarmerSavings:
    """Savings account state for one producer"""

    producer_id: str
    producer_name: str
    total_savings: Decimal
    available_for_withdrawal: Decimal
    last_updated: datetime
    annual_interest_rate: Decimal  # Percent
    transactions: Tuple[SavingsTransaction, ...] = ()
    last_rollover_date: Optional[datetime] = None

    def has_deposit_for(self, order_id: str) -> bool:
        return any(
            t.kind == TransactionKind.DEPOSIT and t.order_id == order_id
            for t in self.transactions
        )


@dataclass
class MemberContribution:
    """Share of an order supplied by one group member"""

    farmer_id: str
    farmer_name: str
    quantity_kg: Decimal
    percentage: Decimal


@dataclass
class FinanceSubmission:
    """Order submitted to the finance partner for facilitation"""

    order_id: str
    buyer_id: str
    buyer_name: str
    group_id: str
    group_name: str
    produce_type: str
    quantity_kg: Decimal
    price_per_kg: Decimal
    total_amount: Decimal
    down_payment_percentage: Decimal
    estimated_delivery_date: date
    contributions: List[MemberContribution] = field(default_factory=list)


@dataclass
class FinanceDecision:
    """Finance partner outcome for a submitted order"""

    reference_id: str
    message: str
    down_payment_amount: Decimal
    balance_amount: Decimal
    approved_at: Optional[datetime] = None
