"""Service layer package."""

from benkyou.services.scheduler import (
    CardScheduler,
    current_retrievability,
    default_study_settings,
    preview_reviews,
    review_card,
)
from benkyou.services.study_queue import build_study_queue, count_studied_today
from benkyou.services.study_record import (
    apply_review_result,
    build_study_record,
    summarize_session,
)

__all__ = [
    "CardScheduler",
    "apply_review_result",
    "build_study_queue",
    "build_study_record",
    "count_studied_today",
    "current_retrievability",
    "default_study_settings",
    "preview_reviews",
    "review_card",
    "summarize_session",
]
