"""Finance partner HTTP client for order financing and payment disbursement"""

import asyncio
import httpx
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional
from produce_ledger.config import settings
from produce_ledger.domain.exceptions import FinancePartnerError
from produce_ledger.domain.finance import split_down_payment
from produce_ledger.domain.models import FinanceDecision, FinanceSubmission, PaymentType
from produce_ledger.infrastructure.observability.metrics import (
    disbursement_failure_counter,
    disbursement_latency_histogram,
)


def _submission_payload(submission: FinanceSubmission) -> Dict[str, Any]:
    return {
        "order_id": submission.order_id,
        "buyer_id": submission.buyer_id,
        "buyer_name": submission.buyer_name,
        "group_id": submission.group_id,
        "group_name": submission.group_name,
        "produce_type": submission.produce_type,
        "quantity": str(submission.quantity_kg),
        "price_per_kg": str(submission.price_per_kg),
        "total_amount": str(submission.total_amount),
        "down_payment_percentage": str(submission.down_payment_percentage),
        "estimated_delivery_date": submission.estimated_delivery_date.isoformat(),
        "contributions": [
            {
                "farmer_id": c.farmer_id,
                "farmer_name": c.farmer_name,
                "quantity": str(c.quantity_kg),
                "percentage": str(c.percentage),
            }
            for c in submission.contributions
        ],
    }


class FinancePartnerClient:
    """Client for the external finance partner API"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_base: float | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.finance_partner_base
        self.timeout = settings.http_timeout_seconds if timeout is None else timeout
        self.max_retries = settings.disbursement_max_retries if max_retries is None else max_retries
        self.backoff_base = settings.disbursement_backoff_base if backoff_base is None else backoff_base
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport)

    async def submit_order(self, submission: FinanceSubmission) -> FinanceDecision:
        """
        Submit an order for finance facilitation.

        Down payment and balance are computed locally from the submission;
        the partner supplies the reference id and approval time.

        Raises:
            InvalidInputError: total or down payment percentage out of range
            FinancePartnerError: On timeout, HTTP errors, or invalid response
        """
        down_payment, balance = split_down_payment(submission.total_amount, submission.down_payment_percentage)

        async with self._client() as client:
            try:
                response = await client.post("/financing/orders", json=_submission_payload(submission))
                response.raise_for_status()
                data = response.json()

                approved_at = data.get("approved_at")
                return FinanceDecision(
                    reference_id=data["reference_id"],
                    message=data.get("message", "Order financing approved"),
                    down_payment_amount=down_payment,
                    balance_amount=balance,
                    approved_at=datetime.fromisoformat(approved_at) if approved_at else None,
                )

            except httpx.TimeoutException as e:
                raise FinancePartnerError(f"Finance partner timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise FinancePartnerError(f"Finance partner error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise FinancePartnerError(f"Finance partner unreachable: {e}") from e
            except (KeyError, ValueError, TypeError) as e:
                raise FinancePartnerError(f"Invalid response from finance partner: {e}") from e

    async def request_disbursement(self, order_id: str, payment_type: PaymentType, amount: Decimal) -> str:
        """
        Ask the partner to pay out a down payment or balance.

        Retry strategy:
        - Exponential backoff: 1s, 2s, 4s, 8s (base * 2^(attempt-1))
        - Retries on 5xx errors and network failures; 4xx fails immediately
        - Tracks latency histogram and failure counter

        Returns:
            Partner transaction id
        """
        payload = {
            "order_id": order_id,
            "payment_type": PaymentType(payment_type).value,
            "amount": str(amount),
        }
        attempt = 0
        async with self._client() as client:
            while True:
                try:
                    with disbursement_latency_histogram.time():
                        response = await client.post("/disbursements", json=payload)
                        response.raise_for_status()
                    return response.json()["transaction_id"]

                except (KeyError, ValueError, TypeError) as e:
                    disbursement_failure_counter.inc()
                    raise FinancePartnerError(f"Invalid disbursement response for order {order_id}: {e}") from e

                except (httpx.HTTPStatusError, httpx.RequestError) as e:
                    attempt += 1
                    disbursement_failure_counter.inc()

                    client_error = isinstance(e, httpx.HTTPStatusError) and e.response.status_code < 500
                    if client_error or attempt >= self.max_retries:
                        raise FinancePartnerError(
                            f"Disbursement for order {order_id} failed after {attempt} attempt(s): {e}"
                        ) from e

                    backoff = self.backoff_base * (2 ** (attempt - 1))
                    await asyncio.sleep(backoff)
