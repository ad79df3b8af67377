"""Producer savings ledger endpoints"""

import logging
from fastapi import APIRouter, Depends, HTTPException

from produce_ledger.api.dependencies import get_savings_service
from produce_ledger.api.v1.schemas import (
    DepositRequest,
    RolloverResponse,
    SavingsAccountResponse,
    SavingsTransactionSchema,
    WithdrawalRequest,
)
from produce_ledger.domain.exceptions import InsufficientFundsError, InvalidInputError, NotFoundError
from produce_ledger.infrastructure.observability.metrics import withdrawal_rejection_counter
from produce_ledger.services.savings import SavingsService

router = APIRouter()


@router.post("/savings/rollover", response_model=RolloverResponse)
def rollover_interest(service: SavingsService = Depends(get_savings_service)):
    """Credit annual interest to every account due for its yearly rollover"""
    transactions = service.apply_due_interest()
    return RolloverResponse(
        accounts_credited=len(transactions),
        transactions=[SavingsTransactionSchema.from_domain(t) for t in transactions],
    )


@router.get("/savings/{producer_id}", response_model=SavingsAccountResponse)
def get_savings(producer_id: str, service: SavingsService = Depends(get_savings_service)):
    """Balances and full transaction history for a producer"""
    try:
        account = service.get_account(producer_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return SavingsAccountResponse.from_domain(account)


@router.post("/savings/{producer_id}/deposits", response_model=SavingsTransactionSchema)
def create_deposit(
    producer_id: str,
    request_body: DepositRequest,
    service: SavingsService = Depends(get_savings_service),
):
    """
    Credit compulsory savings for an order.

    Replaying the same order_id returns the original transaction.
    """
    try:
        transaction = service.deposit(
            producer_id,
            request_body.producer_name,
            request_body.order_id,
            request_body.quantity_kg,
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return SavingsTransactionSchema.from_domain(transaction)


@router.post("/savings/{producer_id}/withdrawals", response_model=SavingsTransactionSchema)
def create_withdrawal(
    producer_id: str,
    request_body: WithdrawalRequest,
    service: SavingsService = Depends(get_savings_service),
):
    """Withdraw from the balance available for withdrawal"""
    try:
        transaction = service.withdraw(producer_id, request_body.amount)
    except NotFoundError as e:
        withdrawal_rejection_counter.labels(reason="not_found").inc()
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidInputError as e:
        withdrawal_rejection_counter.labels(reason="invalid_input").inc()
        raise HTTPException(status_code=400, detail=str(e))
    except InsufficientFundsError as e:
        withdrawal_rejection_counter.labels(reason="insufficient_funds").inc()
        logging.warning(f"Withdrawal refused: {e}", extra={"producer_id": producer_id})
        raise HTTPException(status_code=409, detail=str(e))

    return SavingsTransactionSchema.from_domain(transaction)


@router.post("/savings/{producer_id}/interest", response_model=SavingsTransactionSchema)
def apply_interest(producer_id: str, service: SavingsService = Depends(get_savings_service)):
    """Credit annual interest now; the caller is responsible for yearly cadence"""
    try:
        transaction = service.apply_annual_interest(producer_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return SavingsTransactionSchema.from_domain(transaction)
