"""
Structured logging utilities for pipeline stages and billing writes.
Uses JSON format for better analysis and observability.
"""
import json
import logging
from typing import Dict, Any, Optional
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


def log_event(
    event_type: str,
    user_id: Optional[str] = None,
    stage: Optional[str] = None,
    **kwargs
) -> None:
    """
    Log an event with structured JSON format.

    Args:
        event_type: Type of event (pipeline_stage, pipeline_failed, quote_saved, ...)
        user_id: Caller identity, when resolved
        stage: Pipeline stage or write operation name
        **kwargs: Additional context fields
    """
    log_data = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event_type": event_type,
        "user_id": user_id,
        "stage": stage,
        **kwargs
    }

    # Remove None values for cleaner logs
    log_data = {k: v for k, v in log_data.items() if v is not None}

    logger.info(f"EVENT: {json.dumps(log_data, ensure_ascii=False, default=str)}")


def log_pipeline_stage(
    stage: str,
    user_id: Optional[str] = None,
    duration_ms: Optional[float] = None,
    **kwargs
) -> None:
    """Log completion of one ticket extraction stage."""
    log_event(
        event_type="pipeline_stage",
        user_id=user_id,
        stage=stage,
        duration_ms=round(duration_ms, 1) if duration_ms is not None else None,
        **kwargs
    )


def log_pipeline_failure(
    stage: str,
    error_type: str,
    error: str,
    user_id: Optional[str] = None,
    **kwargs
) -> None:
    """Log the terminal error of a ticket extraction run."""
    log_event(
        event_type="pipeline_failed",
        user_id=user_id,
        stage=stage,
        error_type=error_type,
        error=error,
        **kwargs
    )


def log_billing_write(
    document: str,
    operation: str,
    document_id: str,
    user_id: Optional[str] = None,
    totals: Optional[Dict[str, Any]] = None,
    **kwargs
) -> None:
    """Log a quote or invoice write together with the totals that were stored."""
    log_event(
        event_type=f"{document}_{operation}",
        user_id=user_id,
        stage=operation,
        document_id=document_id,
        totals=totals,
        **kwargs
    )
