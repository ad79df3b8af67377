"""Issue and redeem one-time dashboard access tokens"""

import logging
from datetime import datetime
from typing import Optional, Tuple
from sqlalchemy.orm import Session

from produce_ledger.config import settings
from produce_ledger.domain.tokens import generate_token, is_token_usable, token_expiry
from produce_ledger.infrastructure.database.repositories import AccessTokenRepository
from produce_ledger.infrastructure.observability.metrics import token_verification_counter
from produce_ledger.utils.date_utils import utcnow

logger = logging.getLogger(__name__)


def issue_access_token(
    db: Session,
    producer_id: str,
    ttl_minutes: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Tuple[str, datetime]:
    """Create and store a token valid for ttl_minutes (default from settings)"""
    now = now or utcnow()
    token = generate_token(producer_id, now)
    ttl = settings.access_token_ttl_minutes if ttl_minutes is None else ttl_minutes
    expires_at = token_expiry(now, ttl)

    AccessTokenRepository(db).create_token(token, producer_id, expires_at)
    db.commit()
    return token, expires_at


def redeem_access_token(db: Session, token: str, now: Optional[datetime] = None) -> Optional[str]:
    """
    Return the producer id for a valid token and burn it.

    Returns None for unknown, expired or already-used tokens.
    """
    now = now or utcnow()
    repo = AccessTokenRepository(db)
    record = repo.get_token(token)

    if record is None:
        token_verification_counter.labels(outcome="unknown").inc()
        logger.warning("Access token not found")
        return None

    if not is_token_usable(record.expires_at, record.used, now):
        outcome = "used" if record.used else "expired"
        token_verification_counter.labels(outcome=outcome).inc()
        logger.info("Access token rejected", extra={"reason": outcome, "producer_id": record.producer_id})
        return None

    producer_id = record.producer_id

    # Conditional update so two concurrent redemptions cannot both succeed
    if not repo.mark_used(token):
        db.rollback()
        token_verification_counter.labels(outcome="used").inc()
        return None

    db.commit()
    token_verification_counter.labels(outcome="accepted").inc()
    return producer_id
