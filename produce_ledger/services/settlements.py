"""Sale settlement - deductions, persisted breakdown and compulsory savings in one commit"""

import logging
from dataclasses import dataclass
from typing import Optional, Union
from sqlalchemy.orm import Session

from produce_ledger.domain.exceptions import DuplicateSettlementError
from produce_ledger.domain.fees import Number, calculate_deductions
from produce_ledger.domain.models import DeductionBreakdown, SavingsTransaction, ShipmentSize
from produce_ledger.infrastructure.database.models import Settlement
from produce_ledger.infrastructure.database.repositories import SettlementRepository
from produce_ledger.services.savings import SavingsService

logger = logging.getLogger(__name__)


@dataclass
class SettlementResult:
    settlement: Settlement
    breakdown: DeductionBreakdown
    savings_transaction: SavingsTransaction


class SettlementService:
    """Finalizes sales for producers"""

    def __init__(self, db: Session, savings: Optional[SavingsService] = None):
        self.db = db
        self.repository = SettlementRepository(db)
        self.savings = savings or SavingsService(db)

    def settle(
        self,
        order_id: str,
        producer_id: str,
        producer_name: str,
        gross_amount: Number,
        quantity_kg: Number,
        shipment_size: Union[str, ShipmentSize],
    ) -> SettlementResult:
        """
        Settle a sale for a producer.

        Flow:
        1. Compute the deduction breakdown (validates tier and inputs)
        2. Reject orders that already have a settlement
        3. Persist the settlement and deposit compulsory savings, then commit

        Raises:
            InvalidCategoryError, InvalidInputError: bad tier or amounts
            DuplicateSettlementError: order already settled
        """
        breakdown = calculate_deductions(gross_amount, quantity_kg, shipment_size)

        with self.savings.unit_of_work(producer_id):
            if self.repository.get_by_order_id(order_id) is not None:
                raise DuplicateSettlementError(f"Order {order_id} has already been settled")

            settlement = self.repository.create_settlement(order_id, producer_id, producer_name, breakdown)
            transaction = self.savings.record_deposit(producer_id, producer_name, order_id, breakdown.quantity_kg)
            settlement.savings_transaction_id = transaction.transaction_id

        logger.info(
            "Settlement recorded",
            extra={"order_id": order_id, "producer_id": producer_id, "settlement_id": str(settlement.id)},
        )
        return SettlementResult(settlement=settlement, breakdown=breakdown, savings_transaction=transaction)
