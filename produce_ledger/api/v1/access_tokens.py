"""One-time dashboard access token endpoints"""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from produce_ledger.api.v1.schemas import AccessTokenRequest, AccessTokenResponse, TokenVerificationResponse
from produce_ledger.infrastructure.database.session import get_db
from produce_ledger.services.access_tokens import issue_access_token, redeem_access_token

router = APIRouter()


@router.post("/access-tokens", response_model=AccessTokenResponse)
def create_access_token(request_body: AccessTokenRequest, db: Session = Depends(get_db)):
    """Issue a short-lived token for a producer's dashboard link"""
    token, expires_at = issue_access_token(db, request_body.producer_id)
    return AccessTokenResponse(token=token, expires_at=expires_at)


@router.get("/verify-token", response_model=TokenVerificationResponse)
def verify_token(token: Optional[str] = Query(None), db: Session = Depends(get_db)):
    """
    Redeem a token once.

    Returns:
        400 without a token, 401 when unknown, expired or already used
    """
    if not token:
        raise HTTPException(status_code=400, detail="No token provided")

    producer_id = redeem_access_token(db, token)
    if producer_id is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    return TokenVerificationResponse(producer_id=producer_id)
