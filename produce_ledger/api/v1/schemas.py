"""Pydantic schemas for API request/response validation

Money and quantities are Decimals; responses round to two places.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from produce_ledger.domain.fees import to_money
from produce_ledger.domain.models import DeductionBreakdown, FarmerSavings, FeeStructure, SavingsTransaction


class FeeStructureResponse(BaseModel):
    """Response for GET /v1/fees/structure/{shipment_size}"""

    shipment_size: str
    platform_fee_percentage: Decimal
    transport_fee_per_kg: Decimal
    grading_fee_per_kg: Decimal
    finance_facilitation_percentage: Decimal
    compulsory_savings_per_kg: Decimal
    minimum_quantity_kg: int

    @classmethod
    def from_domain(cls, shipment_size: str, fees: FeeStructure, minimum_quantity_kg: int) -> "FeeStructureResponse":
        return cls(
            shipment_size=shipment_size,
            platform_fee_percentage=fees.platform_fee_percentage,
            transport_fee_per_kg=fees.transport_fee_per_kg,
            grading_fee_per_kg=fees.grading_fee_per_kg,
            finance_facilitation_percentage=fees.finance_facilitation_percentage,
            compulsory_savings_per_kg=fees.compulsory_savings_per_kg,
            minimum_quantity_kg=minimum_quantity_kg,
        )


class DeductionRequest(BaseModel):
    """Request body for POST /v1/fees/deductions"""

    gross_amount: Decimal = Field(..., description="Sale value in KES")
    quantity_kg: Decimal = Field(..., description="Quantity sold in kg")
    shipment_size: str = Field(..., description="Tier, e.g. 6ton")


class DeductionResponse(BaseModel):
    """Deduction breakdown rounded for display"""

    shipment_size: str
    gross_amount: Decimal
    quantity_kg: Decimal
    platform_fee: Decimal
    transport_fee: Decimal
    grading_fee: Decimal
    finance_facilitation_fee: Decimal
    compulsory_savings: Decimal
    total_deductions: Decimal
    net_amount: Decimal
    gross_price_per_kg: Decimal
    net_price_per_kg: Decimal

    @classmethod
    def from_domain(cls, breakdown: DeductionBreakdown) -> "DeductionResponse":
        return cls(
            shipment_size=breakdown.shipment_size.value,
            gross_amount=to_money(breakdown.gross_amount),
            quantity_kg=breakdown.quantity_kg,
            platform_fee=to_money(breakdown.platform_fee),
            transport_fee=to_money(breakdown.transport_fee),
            grading_fee=to_money(breakdown.grading_fee),
            finance_facilitation_fee=to_money(breakdown.finance_facilitation_fee),
            compulsory_savings=to_money(breakdown.compulsory_savings),
            total_deductions=to_money(breakdown.total_deductions),
            net_amount=to_money(breakdown.net_amount),
            gross_price_per_kg=to_money(breakdown.gross_price_per_kg),
            net_price_per_kg=to_money(breakdown.net_price_per_kg),
        )


class NetPriceResponse(BaseModel):
    """Response for GET /v1/fees/net-price"""

    shipment_size: str
    price_per_kg: Decimal
    net_price_per_kg: Decimal


class SavingsTransactionSchema(BaseModel):
    """Single savings ledger entry"""

    transaction_id: str
    producer_id: str
    order_id: Optional[str] = None
    amount: Decimal
    timestamp: datetime
    kind: str
    balance: Decimal

    @classmethod
    def from_domain(cls, transaction: SavingsTransaction) -> "SavingsTransactionSchema":
        return cls(
            transaction_id=transaction.transaction_id,
            producer_id=transaction.producer_id,
            order_id=transaction.order_id,
            amount=to_money(transaction.amount),
            timestamp=transaction.timestamp,
            kind=transaction.kind.value,
            balance=to_money(transaction.balance),
        )


class SavingsAccountResponse(BaseModel):
    """Response for GET /v1/savings/{producer_id}"""

    producer_id: str
    producer_name: str
    total_savings: Decimal
    available_for_withdrawal: Decimal
    annual_interest_rate: Decimal
    last_updated: datetime
    last_rollover_date: Optional[datetime] = None
    transactions: List[SavingsTransactionSchema]

    @classmethod
    def from_domain(cls, account: FarmerSavings) -> "SavingsAccountResponse":
        return cls(
            producer_id=account.producer_id,
            producer_name=account.producer_name,
            total_savings=to_money(account.total_savings),
            available_for_withdrawal=to_money(account.available_for_withdrawal),
            annual_interest_rate=account.annual_interest_rate,
            last_updated=account.last_updated,
            last_rollover_date=account.last_rollover_date,
            transactions=[SavingsTransactionSchema.from_domain(t) for t in account.transactions],
        )


class DepositRequest(BaseModel):
    """Request body for POST /v1/savings/{producer_id}/deposits"""

    producer_name: str = Field(..., min_length=1)
    order_id: str = Field(..., min_length=1, description="Dedup key: one deposit per order")
    quantity_kg: Decimal


class WithdrawalRequest(BaseModel):
    """Request body for POST /v1/savings/{producer_id}/withdrawals"""

    amount: Decimal = Field(..., description="KES to withdraw")


class RolloverResponse(BaseModel):
    """Response for POST /v1/savings/rollover"""

    accounts_credited: int
    transactions: List[SavingsTransactionSchema]


class SettlementRequest(BaseModel):
    """Request body for POST /v1/settlements"""

    order_id: str = Field(..., min_length=1)
    producer_id: str = Field(..., min_length=1, description="Producer or producer group identifier")
    producer_name: str = Field(..., min_length=1)
    gross_amount: Decimal
    quantity_kg: Decimal
    shipment_size: str


class SettlementResponse(BaseModel):
    """Response for POST /v1/settlements"""

    settlement_id: str
    order_id: str
    producer_id: str
    deductions: DeductionResponse
    savings_transaction: SavingsTransactionSchema


class AccessTokenRequest(BaseModel):
    """Request body for POST /v1/access-tokens"""

    producer_id: str = Field(..., min_length=1)


class AccessTokenResponse(BaseModel):
    token: str
    expires_at: datetime


class TokenVerificationResponse(BaseModel):
    """Response for GET /v1/verify-token"""

    producer_id: str


class ContributionSchema(BaseModel):
    """One member's share of a financed order"""

    farmer_id: str
    farmer_name: str
    quantity_kg: Decimal
    percentage: Decimal


class FinanceSubmissionRequest(BaseModel):
    """Request body for POST /v1/finance/submissions"""

    order_id: str = Field(..., min_length=1)
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
    contributions: List[ContributionSchema] = []


class FinanceDecisionResponse(BaseModel):
    """Response for POST /v1/finance/submissions"""

    reference_id: str
    message: str
    down_payment_amount: Decimal
    balance_amount: Decimal
    approved_at: Optional[datetime] = None
