"""Spaced-repetition scheduling built on the FSRS memory model."""

from benkyou.schemas.scheduling import (
    CardData,
    CardState,
    Rating,
    ReviewPreview,
    ReviewResult,
    StudySettings,
)
from benkyou.services.scheduler import preview_reviews, review_card

__version__ = "0.1.0"

__all__ = [
    "CardData",
    "CardState",
    "Rating",
    "ReviewPreview",
    "ReviewResult",
    "StudySettings",
    "preview_reviews",
    "review_card",
]
