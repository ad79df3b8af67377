"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session
from produce_ledger.infrastructure.clients.finance_partner import FinancePartnerClient
from produce_ledger.infrastructure.database.session import get_db
from produce_ledger.services.savings import SavingsService
from produce_ledger.services.settlements import SettlementService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_finance_client() -> FinancePartnerClient:
    """Provide finance partner client instance"""
    return FinancePartnerClient()


def get_savings_service(db: Session = Depends(get_db)) -> SavingsService:
    """Savings service bound to the request's session"""
    return SavingsService(db)


def get_settlement_service(savings: SavingsService = Depends(get_savings_service)) -> SettlementService:
    return SettlementService(savings.db, savings=savings)
