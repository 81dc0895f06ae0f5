"""Study queue assembly.

Selects which cards to show right now from an in-memory collection:
learning and relearning cards whose step has elapsed, review cards that are
due, and as many new cards as the daily allowance leaves room for.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterable

from loguru import logger

from benkyou.schemas.scheduling import (
    CardState,
    QueueCard,
    StudyQueue,
    StudyRecord,
    StudySettings,
)
from benkyou.utils.timezones import ensure_utc, utc_now

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _due_key(item: QueueCard) -> tuple[int, datetime]:
    due_date = ensure_utc(item.card.due_date)
    # Undated cards sort first
    return (0, _EPOCH) if due_date is None else (1, due_date)


def _created_key(item: QueueCard) -> datetime:
    return ensure_utc(item.created_at) or _EPOCH


def count_studied_today(
    records: Iterable[StudyRecord],
    now: datetime | None = None,
    previous_state: CardState | None = None,
) -> int:
    """Count records reviewed on ``now``'s UTC calendar day.

    Pass ``previous_state=CardState.NEW`` to count new cards introduced today.
    """

    now = ensure_utc(now) or utc_now()
    day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    day_end = day_start + timedelta(days=1)

    count = 0
    for record in records:
        reviewed_at = ensure_utc(record.reviewed_at)
        if not day_start <= reviewed_at < day_end:
            continue
        if previous_state is not None and record.previous_state != previous_state:
            continue
        count += 1
    return count


def build_study_queue(
    cards: Iterable[QueueCard],
    settings: StudySettings,
    now: datetime | None = None,
    *,
    new_cards_studied_today: int = 0,
    reviews_done_today: int = 0,
    new_card_limit: int | None = None,
) -> StudyQueue:
    """Return the cards to study at ``now`` grouped by lifecycle stage."""

    now = ensure_utc(now) or utc_now()

    learning: list[QueueCard] = []
    review: list[QueueCard] = []
    new: list[QueueCard] = []

    for item in cards:
        state = item.card.state
        due_date = ensure_utc(item.card.due_date)
        if state == CardState.NEW:
            new.append(item)
        elif state in (CardState.LEARNING, CardState.RELEARNING):
            if due_date is None or due_date <= now:
                learning.append(item)
        elif due_date is not None and due_date <= now:
            review.append(item)

    learning.sort(key=_due_key)
    review.sort(key=_due_key)
    new.sort(key=_created_key)

    review_budget = max(0, settings.max_reviews_per_day - reviews_done_today)
    new_budget = max(0, settings.new_cards_per_day - new_cards_studied_today)
    if new_card_limit is not None:
        new_budget = min(new_budget, max(0, new_card_limit))

    queue = StudyQueue(learning=learning, review=review[:review_budget], new=new[:new_budget])
    logger.info(
        "Built study queue",
        learning=len(queue.learning),
        review=len(queue.review),
        review_due=len(review),
        new=len(queue.new),
        new_available=len(new),
    )
    return queue


__all__ = ["build_study_queue", "count_studied_today"]
