"""One-time dashboard access tokens"""

import hashlib
import secrets
from datetime import datetime, timedelta

from produce_ledger.utils.date_utils import as_utc

TOKEN_LENGTH = 12  # Short enough for an SMS link


def generate_token(producer_id: str, now: datetime) -> str:
    """Hash a random value with the producer id and issue time"""
    random_part = secrets.token_hex(16)
    issued_ms = int(now.timestamp() * 1000)
    digest = hashlib.sha256(f"{random_part}:{producer_id}:{issued_ms}".encode()).hexdigest()
    return digest[:TOKEN_LENGTH]


def token_expiry(now: datetime, ttl_minutes: int) -> datetime:
    return now + timedelta(minutes=ttl_minutes)


def is_token_usable(expires_at: datetime, used: bool, now: datetime) -> bool:
    return not used and as_utc(expires_at) > now
