"""
Structured logging utilities for the voting, approval and retrieval pipeline.
Uses JSON format for better analysis and observability.
"""
import json
import logging
from typing import Any, Optional
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


def log_pipeline_event(event_type: str, level: int = logging.INFO, **kwargs) -> None:
    """
    Log a pipeline event with structured JSON format.

    Args:
        event_type: Type of event (vote_applied, status_transition, promotion, chat_retrieval)
        level: Logging level to emit at
        **kwargs: Event fields; ``None`` values are dropped
    """
    log_data = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event_type": event_type,
        **kwargs
    }

    # Remove None values for cleaner logs
    log_data = {k: v for k, v in log_data.items() if v is not None}

    logger.log(level, f"PIPELINE_EVENT: {json.dumps(log_data, ensure_ascii=False, default=str)}")


def log_vote_applied(
    post_id: int,
    user_id: int,
    value: int,
    action: str,
    vote_count: int,
    status: str,
) -> None:
    """Log a ledger mutation (cast, retracted or switched)."""
    log_pipeline_event(
        event_type="vote_applied",
        post_id=post_id,
        user_id=user_id,
        value=value,
        action=action,
        vote_count=vote_count,
        status=status,
    )


def log_status_transition(
    post_id: int,
    from_status: str,
    to_status: str,
    vote_count: int,
    cascaded_post_ids: Optional[list] = None,
) -> None:
    """Log a post leaving the pending state."""
    log_pipeline_event(
        event_type="status_transition",
        post_id=post_id,
        transition_from=from_status,
        transition_to=to_status,
        vote_count=vote_count,
        cascaded_post_ids=cascaded_post_ids,
    )


def log_promotion(
    stage: str,
    source_post_id: Optional[int] = None,
    entry_id: Optional[int] = None,
    error: Optional[str] = None,
    **kwargs: Any
) -> None:
    """Log a promotion step (started, stored, skipped, failed)."""
    log_pipeline_event(
        event_type="promotion",
        level=logging.ERROR if stage == "failed" else logging.INFO,
        stage=stage,
        source_post_id=source_post_id,
        entry_id=entry_id,
        error=error,
        **kwargs
    )


def log_chat_retrieval(
    matched: bool,
    top_similarity: Optional[float],
    candidates: int,
    used: int = 0,
) -> None:
    """Log the threshold decision for a chat query."""
    log_pipeline_event(
        event_type="chat_retrieval",
        matched=matched,
        top_similarity=round(top_similarity, 4) if top_similarity is not None else None,
        candidates=candidates,
        used=used,
    )
