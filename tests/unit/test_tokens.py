"""Unit tests for access token generation, validity and redemption"""

import string
from datetime import datetime, timedelta, timezone
from sqlalchemy.orm import Session
from produce_ledger.config import settings
from produce_ledger.domain.tokens import TOKEN_LENGTH, generate_token, is_token_usable, token_expiry
from produce_ledger.services.access_tokens import issue_access_token, redeem_access_token


def test_generate_token_is_short_hex():
    now = datetime.now(timezone.utc)
    token = generate_token("farmer_001", now)

    assert len(token) == TOKEN_LENGTH == 12
    assert all(c in string.hexdigits for c in token)


def test_generate_token_is_random_per_call():
    now = datetime.now(timezone.utc)
    tokens = {generate_token("farmer_001", now) for _ in range(20)}

    assert len(tokens) == 20


def test_token_expiry_adds_ttl():
    now = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
    assert token_expiry(now, 30) == datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc)


def test_is_token_usable():
    now = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
    later = now + timedelta(minutes=30)

    assert is_token_usable(later, used=False, now=now) is True
    assert is_token_usable(later, used=True, now=now) is False
    assert is_token_usable(now - timedelta(seconds=1), used=False, now=now) is False
    assert is_token_usable(now, used=False, now=now) is False  # Expiry instant is exclusive


def test_is_token_usable_treats_naive_expiry_as_utc():
    now = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    assert is_token_usable(datetime(2024, 3, 1, 12, 5), used=False, now=now) is True
    assert is_token_usable(datetime(2024, 3, 1, 11, 55), used=False, now=now) is False


def test_zero_ttl_token_is_expired_on_issue(db: Session, harvest_day: datetime):
    token, expires_at = issue_access_token(db, "farmer_001", ttl_minutes=0, now=harvest_day)

    assert expires_at == harvest_day
    assert redeem_access_token(db, token, now=harvest_day) is None


def test_default_ttl_comes_from_settings(db: Session, harvest_day: datetime):
    token, expires_at = issue_access_token(db, "farmer_001", now=harvest_day)

    assert expires_at == harvest_day + timedelta(minutes=settings.access_token_ttl_minutes)
    assert redeem_access_token(db, token, now=harvest_day) == "farmer_001"
