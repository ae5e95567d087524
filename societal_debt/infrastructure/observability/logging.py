"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from societal_debt.domain.validation import DataQualityIssue


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = "societal-debt-service"


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


logger = logging.getLogger("societal_debt")


def log_scoring(
    request_id: str,
    user_id: str,
    transaction_count: int,
    total_societal_debt: float,
    debt_percentage: float,
    duration_ms: float,
) -> None:
    """Log structured scoring outcome for analysis"""
    logger.info(
        "Scoring completed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "scoring_complete",
            "transaction_count": transaction_count,
            "total_societal_debt": total_societal_debt,
            "debt_percentage": debt_percentage,
            "duration_ms": duration_ms,
        },
    )


def log_credit_application(
    request_id: str,
    user_id: str,
    applied_amount: float,
    resulting_debt: float,
) -> None:
    """Log an applied credit"""
    logger.info(
        "Credit applied",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "credit_applied",
            "applied_amount": applied_amount,
            "resulting_debt": resulting_debt,
        },
    )


def log_data_quality_issue(issue: DataQualityIssue, request_id: Optional[str] = None) -> None:
    """Log a tolerated classifier defect as a warning"""
    logger.warning(
        f"Classification data quality: {issue.detail}",
        extra={
            "request_id": request_id,
            "step": "data_quality",
            "transaction_id": issue.transaction_id,
            "practice_label": issue.practice_label,
            "issue_code": issue.code,
        },
    )
