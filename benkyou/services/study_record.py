"""Review audit trail helpers.

After every review the caller persists the new card state and an audit
record of the transition. These helpers build both from the scheduler's
output so callers do not have to repeat the field mapping.
"""
from __future__ import annotations

from datetime import datetime
from typing import Iterable

from benkyou.schemas.scheduling import (
    CardData,
    Rating,
    ReviewResult,
    SessionSummary,
    StudyRecord,
)
from benkyou.services.scheduler import compute_elapsed_days, compute_scheduled_days
from benkyou.utils.timezones import ensure_utc


def apply_review_result(card: CardData, result: ReviewResult, reviewed_at: datetime) -> CardData:
    """Return ``card`` updated with a scheduling result, ready to persist."""

    return card.model_copy(
        update={
            "state": result.state,
            "difficulty": result.difficulty,
            "stability": result.stability,
            "last_review": reviewed_at,
            "due_date": result.due_date,
            "interval": result.interval,
            "repetitions": result.repetitions,
            "lapses": result.lapses,
            "elapsed_days": result.elapsed_days,
        }
    )


def build_study_record(
    card_id: str,
    card: CardData,
    rating: Rating | int,
    result: ReviewResult,
    reviewed_at: datetime,
    *,
    session_id: str | None = None,
    response_time_ms: int | None = None,
) -> StudyRecord:
    """Describe the transition from ``card`` to ``result`` for the audit trail."""

    reviewed_at = ensure_utc(reviewed_at)

    return StudyRecord(
        card_id=card_id,
        session_id=session_id,
        rating=Rating(rating),
        reviewed_at=reviewed_at,
        response_time_ms=response_time_ms,
        previous_state=card.state,
        new_state=result.state,
        previous_difficulty=card.difficulty,
        new_difficulty=result.difficulty,
        previous_stability=card.stability,
        new_stability=result.stability,
        elapsed_days=compute_elapsed_days(card, reviewed_at),
        scheduled_days=compute_scheduled_days(card, reviewed_at),
    )


def summarize_session(records: Iterable[StudyRecord]) -> SessionSummary:
    """Count studied, correct and incorrect cards across ``records``."""

    summary = SessionSummary()
    for record in records:
        summary.cards_studied += 1
        if record.is_correct:
            summary.cards_correct += 1
        else:
            summary.cards_incorrect += 1
    return summary


__all__ = ["apply_review_result", "build_study_record", "summarize_session"]
