"""POST /v1/settlements - finalize a sale"""

import time
import logging
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from sqlalchemy.exc import IntegrityError

from produce_ledger.api.dependencies import get_finance_client, get_request_id, get_settlement_service
from produce_ledger.api.v1.schemas import DeductionResponse, SavingsTransactionSchema, SettlementRequest, SettlementResponse
from produce_ledger.domain.exceptions import DuplicateSettlementError, InvalidCategoryError, InvalidInputError
from produce_ledger.domain.models import PaymentType
from produce_ledger.infrastructure.clients.finance_partner import FinancePartnerClient
from produce_ledger.infrastructure.observability.logging import log_settlement
from produce_ledger.infrastructure.observability.metrics import record_settlement
from produce_ledger.services.settlements import SettlementService

router = APIRouter()


@router.post("/settlements", response_model=SettlementResponse)
def create_settlement(
    request_body: SettlementRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    service: SettlementService = Depends(get_settlement_service),
    finance_client: FinancePartnerClient = Depends(get_finance_client),
):
    """
    Settle a sale for a producer.

    Flow:
    1. Compute deductions for the shipment-size tier
    2. Persist settlement + compulsory savings deposit in one commit
    3. Schedule net amount disbursement through the finance partner
    4. Return breakdown and savings transaction
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        result = service.settle(
            order_id=request_body.order_id,
            producer_id=request_body.producer_id,
            producer_name=request_body.producer_name,
            gross_amount=request_body.gross_amount,
            quantity_kg=request_body.quantity_kg,
            shipment_size=request_body.shipment_size,
        )

    except InvalidCategoryError as e:
        raise HTTPException(status_code=422, detail=str(e))

    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    except DuplicateSettlementError as e:
        logging.warning(f"Duplicate settlement: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))

    except IntegrityError as e:
        # A concurrent settlement for the same order won the unique constraint
        logging.warning(f"Settlement conflict: {e.orig}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=f"Order {request_body.order_id} has already been settled")

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    breakdown = result.breakdown
    if breakdown.net_amount > 0:
        background_tasks.add_task(
            finance_client.request_disbursement,
            request_body.order_id,
            PaymentType.BALANCE,
            breakdown.net_amount,
        )

    # Record metrics and logs
    duration_ms = (time.time() - start_time) * 1000
    record_settlement(breakdown.shipment_size.value, breakdown.platform_fee)
    log_settlement(request_id, request_body.order_id, request_body.producer_id, breakdown, duration_ms)

    return SettlementResponse(
        settlement_id=str(result.settlement.id),
        order_id=request_body.order_id,
        producer_id=request_body.producer_id,
        deductions=DeductionResponse.from_domain(breakdown),
        savings_transaction=SavingsTransactionSchema.from_domain(result.savings_transaction),
    )
