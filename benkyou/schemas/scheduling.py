"""Pydantic models describing card memory state and scheduling results."""
from __future__ import annotations

from datetime import datetime
from enum import Enum, IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from benkyou.config import settings


class CardState(str, Enum):
    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    RELEARNING = "relearning"


class Rating(IntEnum):
    """Learner's self-reported recall quality."""

    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4


class CardData(BaseModel):
    """Persisted memory state of a single card."""

    model_config = ConfigDict(frozen=True)

    state: CardState = CardState.NEW
    difficulty: float = Field(0.3, description="Intrinsic difficulty on a 0-1 scale")
    stability: float = Field(0.0, description="Memory stability in days")
    last_review: datetime | None = None
    due_date: datetime | None = None
    interval: float = Field(0.0, description="Days until due; 0 while steps control timing")
    repetitions: int = 0
    lapses: int = 0
    elapsed_days: float = 0.0


class StudySettings(BaseModel):
    """Per-user study configuration, read-only for a scheduling call."""

    model_config = ConfigDict(frozen=True)

    new_cards_per_day: int = Field(default_factory=lambda: settings.DEFAULT_NEW_CARDS_PER_DAY, ge=0)
    max_reviews_per_day: int = Field(
        default_factory=lambda: settings.DEFAULT_MAX_REVIEWS_PER_DAY, ge=0
    )
    learning_steps: list[int] = Field(
        default_factory=lambda: list(settings.DEFAULT_LEARNING_STEPS), description="Minutes"
    )
    relearning_steps: list[int] = Field(
        default_factory=lambda: list(settings.DEFAULT_RELEARNING_STEPS), description="Minutes"
    )
    graduating_interval: int = Field(
        default_factory=lambda: settings.DEFAULT_GRADUATING_INTERVAL, ge=0, description="Days"
    )
    easy_interval: int = Field(
        default_factory=lambda: settings.DEFAULT_EASY_INTERVAL, ge=0, description="Days"
    )
    minimum_interval: int = Field(
        default_factory=lambda: settings.DEFAULT_MINIMUM_INTERVAL, ge=0, description="Days"
    )
    maximum_interval: int = Field(
        default_factory=lambda: settings.DEFAULT_MAXIMUM_INTERVAL, ge=1, description="Days"
    )
    fsrs_parameters: dict[str, Any] | None = Field(
        None, description="Overrides merged into the memory model parameters"
    )
    enable_fuzz: bool = Field(default_factory=lambda: settings.DEFAULT_ENABLE_FUZZ)


class ReviewResult(BaseModel):
    """Card state immediately after applying one rating."""

    state: CardState
    difficulty: float
    stability: float
    due_date: datetime
    interval: float
    repetitions: int
    lapses: int
    elapsed_days: float = 0.0


class ReviewPreview(BaseModel):
    """Outcome of a hypothetical rating, shown before the learner answers."""

    due_date: datetime
    interval: float


class StudyRecord(BaseModel):
    """Audit entry describing one review transition."""

    card_id: str
    session_id: str | None = None
    rating: Rating
    reviewed_at: datetime
    response_time_ms: int | None = Field(None, ge=0)
    previous_state: CardState
    new_state: CardState
    previous_difficulty: float
    new_difficulty: float
    previous_stability: float
    new_stability: float
    elapsed_days: float
    scheduled_days: float

    @property
    def is_correct(self) -> bool:
        return self.rating >= Rating.GOOD


class SessionSummary(BaseModel):
    """Aggregate counters for a study session."""

    cards_studied: int = 0
    cards_correct: int = 0
    cards_incorrect: int = 0


class QueueCard(BaseModel):
    """Card candidate for the study queue."""

    card_id: str
    card: CardData
    created_at: datetime | None = None


class StudyQueue(BaseModel):
    """Cards to study now, grouped by lifecycle stage."""

    learning: list[QueueCard] = Field(default_factory=list)
    review: list[QueueCard] = Field(default_factory=list)
    new: list[QueueCard] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.learning) + len(self.review) + len(self.new)

    def ordered(self) -> list[QueueCard]:
        """Return learning cards first, then reviews, then new cards."""

        return [*self.learning, *self.review, *self.new]
