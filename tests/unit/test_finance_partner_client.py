"""Unit tests for the finance partner HTTP client"""

import asyncio
import json
import httpx
import pytest
from datetime import date
from decimal import Decimal
from produce_ledger.domain.exceptions import FinancePartnerError
from produce_ledger.domain.models import FinanceSubmission, MemberContribution, PaymentType
from produce_ledger.infrastructure.clients.finance_partner import FinancePartnerClient


@pytest.fixture
def submission() -> FinanceSubmission:
    return FinanceSubmission(
        order_id="ORD-100",
        buyer_id="buyer_001",
        buyer_name="Nairobi Fresh Ltd",
        group_id="group_001",
        group_name="Nyeri Farmers Cooperative",
        produce_type="potatoes",
        quantity_kg=Decimal("5000"),
        price_per_kg=Decimal("40"),
        total_amount=Decimal("200000"),
        down_payment_percentage=Decimal("30"),
        estimated_delivery_date=date(2024, 3, 15),
        contributions=[
            MemberContribution("farmer_001", "Wanjiku Kamau", Decimal("3000"), Decimal("60")),
            MemberContribution("farmer_002", "Otieno Ouma", Decimal("2000"), Decimal("40")),
        ],
    )


def _client(handler, **kwargs) -> FinancePartnerClient:
    return FinancePartnerClient(
        base_url="http://finance.test",
        backoff_base=0,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def test_submit_order_returns_decision_with_local_split(submission):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "reference_id": "FIN-1234",
                "message": "Order financing approved",
                "approved_at": "2024-03-01T10:00:00+00:00",
            },
        )

    decision = asyncio.run(_client(handler).submit_order(submission))

    assert seen["path"] == "/financing/orders"
    assert seen["body"]["order_id"] == "ORD-100"
    assert len(seen["body"]["contributions"]) == 2
    assert decision.reference_id == "FIN-1234"
    assert decision.down_payment_amount == 60000
    assert decision.balance_amount == 140000
    assert decision.approved_at is not None


def test_submit_order_http_error_raises(submission):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "down"})

    with pytest.raises(FinancePartnerError):
        asyncio.run(_client(handler).submit_order(submission))


def test_submit_order_malformed_body_raises(submission):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"message": "no reference"})

    with pytest.raises(FinancePartnerError):
        asyncio.run(_client(handler).submit_order(submission))


def test_disbursement_retries_server_errors_then_succeeds():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(json.loads(request.content))
        if len(calls) < 3:
            return httpx.Response(503)
        return httpx.Response(200, json={"transaction_id": "TRANS-1"})

    transaction_id = asyncio.run(
        _client(handler).request_disbursement("ORD-100", PaymentType.BALANCE, Decimal("181250"))
    )

    assert transaction_id == "TRANS-1"
    assert len(calls) == 3
    assert calls[0] == {"order_id": "ORD-100", "payment_type": "balance", "amount": "181250"}


def test_disbursement_client_error_is_not_retried():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(400, json={"error": "bad amount"})

    with pytest.raises(FinancePartnerError):
        asyncio.run(_client(handler).request_disbursement("ORD-100", PaymentType.DOWN_PAYMENT, Decimal("1")))

    assert len(calls) == 1


def test_disbursement_gives_up_after_max_retries():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(FinancePartnerError):
        asyncio.run(
            _client(handler, max_retries=3).request_disbursement("ORD-100", PaymentType.BALANCE, Decimal("10"))
        )

    assert len(calls) == 3


def test_disbursement_malformed_success_body_raises():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"status": "queued"})

    with pytest.raises(FinancePartnerError):
        asyncio.run(_client(handler).request_disbursement("ORD-100", PaymentType.BALANCE, Decimal("10")))

    assert len(calls) == 1


def test_disbursement_non_json_success_body_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"OK")

    with pytest.raises(FinancePartnerError):
        asyncio.run(_client(handler).request_disbursement("ORD-100", PaymentType.BALANCE, Decimal("10")))


def test_explicit_zero_settings_are_kept():
    client = FinancePartnerClient(base_url="http://finance.test", max_retries=0, backoff_base=0)

    assert client.max_retries == 0
    assert client.backoff_base == 0
