"""POST /v1/finance/submissions - submit an order for finance facilitation"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from produce_ledger.api.dependencies import get_finance_client, get_request_id
from produce_ledger.api.v1.schemas import FinanceDecisionResponse, FinanceSubmissionRequest
from produce_ledger.domain.exceptions import FinancePartnerError, InvalidInputError
from produce_ledger.domain.fees import to_money
from produce_ledger.domain.models import FinanceSubmission, MemberContribution
from produce_ledger.infrastructure.clients.finance_partner import FinancePartnerClient
from produce_ledger.infrastructure.observability.metrics import finance_partner_failures_counter

router = APIRouter()


@router.post("/finance/submissions", response_model=FinanceDecisionResponse)
async def submit_for_financing(
    request_body: FinanceSubmissionRequest,
    request: Request,
    finance_client: FinancePartnerClient = Depends(get_finance_client),
):
    """Forward an order to the finance partner and split down payment from balance"""
    request_id = get_request_id(request)
    submission = FinanceSubmission(
        order_id=request_body.order_id,
        buyer_id=request_body.buyer_id,
        buyer_name=request_body.buyer_name,
        group_id=request_body.group_id,
        group_name=request_body.group_name,
        produce_type=request_body.produce_type,
        quantity_kg=request_body.quantity_kg,
        price_per_kg=request_body.price_per_kg,
        total_amount=request_body.total_amount,
        down_payment_percentage=request_body.down_payment_percentage,
        estimated_delivery_date=request_body.estimated_delivery_date,
        contributions=[
            MemberContribution(
                farmer_id=c.farmer_id,
                farmer_name=c.farmer_name,
                quantity_kg=c.quantity_kg,
                percentage=c.percentage,
            )
            for c in request_body.contributions
        ],
    )

    try:
        decision = await finance_client.submit_order(submission)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except FinancePartnerError as e:
        finance_partner_failures_counter.inc()
        logging.error(f"Finance partner error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Finance partner unavailable")

    logging.info(
        "Order submitted for financing",
        extra={"request_id": request_id, "order_id": submission.order_id, "reference_id": decision.reference_id},
    )
    return FinanceDecisionResponse(
        reference_id=decision.reference_id,
        message=decision.message,
        down_payment_amount=to_money(decision.down_payment_amount),
        balance_amount=to_money(decision.balance_amount),
        approved_at=decision.approved_at,
    )
