"""Pydantic schemas package."""

from benkyou.schemas.scheduling import (
    CardData,
    CardState,
    QueueCard,
    Rating,
    ReviewPreview,
    ReviewResult,
    SessionSummary,
    StudyQueue,
    StudyRecord,
    StudySettings,
)

__all__ = [
    "CardData",
    "CardState",
    "QueueCard",
    "Rating",
    "ReviewPreview",
    "ReviewResult",
    "SessionSummary",
    "StudyQueue",
    "StudyRecord",
    "StudySettings",
]
