"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from produce_ledger.domain.fees import to_money
from produce_ledger.domain.models import DeductionBreakdown


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding timestamp, level and service name to every record"""

    def __init__(self, *args: Any, service_name: str = "produce-ledger", **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service_name


def setup_logging(level: str = "INFO", service_name: str = "produce-ledger") -> None:
    """Configure structured JSON logging on the root logger"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s",
        service_name=service_name,
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_settlement(
    request_id: str,
    order_id: str,
    producer_id: str,
    breakdown: DeductionBreakdown,
    duration_ms: float,
) -> None:
    """Log one structured line per settled sale"""
    logging.info(
        "Settlement completed",
        extra={
            "request_id": request_id,
            "order_id": order_id,
            "producer_id": producer_id,
            "step": "settlement_complete",
            "shipment_size": breakdown.shipment_size.value,
            "gross_amount": str(to_money(breakdown.gross_amount)),
            "total_deductions": str(to_money(breakdown.total_deductions)),
            "net_amount": str(to_money(breakdown.net_amount)),
            "duration_ms": duration_ms,
        },
    )
