"""Prometheus metrics for settlements, savings activity, tokens and partner calls"""

from decimal import Decimal
from prometheus_client import Counter, Histogram

# Settlement metrics
settlement_counter = Counter(
    "produce_settlement_total",
    "Sales settled",
    ["shipment_size"],
)

platform_fee_counter = Counter(
    "produce_platform_fee_kes_total",
    "Platform fees collected in KES",
    ["shipment_size"],
)

# Savings metrics
savings_transaction_counter = Counter(
    "savings_transactions_total",
    "Savings ledger entries written",
    ["kind"],  # deposit | withdrawal | interest
)

withdrawal_rejection_counter = Counter(
    "savings_withdrawal_rejections_total",
    "Withdrawals refused",
    ["reason"],  # insufficient_funds | not_found | invalid_input
)

duplicate_deposit_counter = Counter(
    "savings_duplicate_deposits_total",
    "Deposits replayed for an order already on the ledger",
)

# Access token metrics
token_verification_counter = Counter(
    "access_token_verifications_total",
    "Access token redemption attempts",
    ["outcome"],  # accepted | unknown | expired | used
)

# Finance partner metrics
disbursement_latency_histogram = Histogram(
    "disbursement_latency_seconds",
    "Finance partner disbursement response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

disbursement_failure_counter = Counter(
    "disbursement_failures_total",
    "Failed disbursement attempts",
)

finance_partner_failures_counter = Counter(
    "finance_partner_failures_total",
    "Failed finance partner submissions",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_settlement(shipment_size: str, platform_fee: Decimal) -> None:
    """Count the settlement and the platform fee it earned"""
    settlement_counter.labels(shipment_size=shipment_size).inc()
    platform_fee_counter.labels(shipment_size=shipment_size).inc(float(platform_fee))


def record_savings_transaction(kind: str) -> None:
    savings_transaction_counter.labels(kind=kind).inc()
