"""FSRS scheduling for flashcards.

The forgetting-curve model itself comes from the ``fsrs`` package. This module
translates the persisted card vocabulary (``CardState``, 1-4 ratings, a 0-1
difficulty, calendar due dates) to and from the library's representation,
projects all four rating branches per call and applies the interval policies
the library has no parameter for (easy and graduating intervals, minimum
interval).

Every function is pure: ``now`` is an explicit input and nothing outside the
call is read or mutated, so results are reproducible whenever fuzzing is off.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Mapping

from fsrs import Card as FSRSCard
from fsrs import Rating as FSRSRating
from fsrs import Scheduler, State
from fsrs.scheduler import STABILITY_MIN
from loguru import logger

from benkyou.config import settings as config
from benkyou.core.srs.steps import format_step, locate_step, to_step_durations
from benkyou.schemas.scheduling import (
    CardData,
    CardState,
    Rating,
    ReviewPreview,
    ReviewResult,
    StudySettings,
)
from benkyou.utils.exceptions import InvalidStudySettingsError
from benkyou.utils.timezones import ensure_utc, utc_now

SECONDS_PER_DAY = 86400.0

# Difficulty range used by the memory model
MODEL_DIFFICULTY_MIN = 1.0
MODEL_DIFFICULTY_MAX = 10.0

# Learning/relearning cards due sooner than this report a zero interval
STEP_WINDOW = timedelta(hours=24)

_STATE_TO_FSRS = {
    CardState.NEW: State.Learning,
    CardState.LEARNING: State.Learning,
    CardState.REVIEW: State.Review,
    CardState.RELEARNING: State.Relearning,
}

_FSRS_TO_STATE = {
    State.Learning: CardState.LEARNING,
    State.Review: CardState.REVIEW,
    State.Relearning: CardState.RELEARNING,
}

_RATING_TO_FSRS = {
    Rating.AGAIN: FSRSRating.Again,
    Rating.HARD: FSRSRating.Hard,
    Rating.GOOD: FSRSRating.Good,
    Rating.EASY: FSRSRating.Easy,
}

# Accepts both ts-fsrs and py-fsrs spellings of the tunable parameters
_PARAMETER_ALIASES = {
    "w": "parameters",
    "parameters": "parameters",
    "request_retention": "desired_retention",
    "desired_retention": "desired_retention",
    "maximum_interval": "maximum_interval",
    "enable_fuzz": "enable_fuzzing",
    "enable_fuzzing": "enable_fuzzing",
    "learning_steps": "learning_steps",
    "relearning_steps": "relearning_steps",
}

_UNGRADUATED_STATES = (CardState.NEW, CardState.LEARNING)
_STEP_STATES = (CardState.LEARNING, CardState.RELEARNING)


@dataclass(slots=True)
class ModelInput:
    """A card translated for the memory model, with the day math that produced it."""

    card: FSRSCard
    elapsed_days: float
    scheduled_days: float


def _resolve_now(now: datetime | None) -> datetime:
    return ensure_utc(now or utc_now())


def _days_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / SECONDS_PER_DAY


def _minimum_due(now: datetime) -> datetime:
    return now + timedelta(seconds=config.MINIMUM_DUE_OFFSET_SECONDS)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# ----------------------------------------------------------------------
# Day math
# ----------------------------------------------------------------------
def compute_elapsed_days(card: CardData, now: datetime | None = None) -> float:
    """Days since the last review as a real number, never negative.

    Cards without a review history fall back to their stored
    ``elapsed_days``.
    """
    now = _resolve_now(now)
    last_review = ensure_utc(card.last_review)
    if last_review is None:
        return max(0.0, card.elapsed_days or 0.0)

    elapsed = _days_between(last_review, now)
    if elapsed < 0:
        logger.warning(
            "Last review lies after the review time, using zero elapsed days",
            last_review=last_review.isoformat(),
            now=now.isoformat(),
        )
        return 0.0
    return elapsed


def compute_scheduled_days(card: CardData, now: datetime | None = None) -> float:
    """Days the card was scheduled for before this review, never negative."""
    if card.interval > 0:
        return float(card.interval)

    due_date = ensure_utc(card.due_date)
    if due_date is None:
        return 0.0
    return max(0.0, _days_between(_resolve_now(now), due_date))


# ----------------------------------------------------------------------
# Model parameters
# ----------------------------------------------------------------------
def _custom_parameters(raw: Mapping[str, Any] | None) -> dict[str, Any]:
    """Translate a stored parameter blob into ``fsrs.Scheduler`` keyword arguments."""
    if not raw:
        return {}

    merged: dict[str, Any] = {}
    for key, value in raw.items():
        target = _PARAMETER_ALIASES.get(key)
        if target is None:
            logger.warning("Ignoring unsupported memory model parameter", key=key)
            continue
        if target in ("learning_steps", "relearning_steps"):
            value = to_step_durations(value)
        elif target == "parameters":
            value = tuple(float(weight) for weight in value)
        elif target == "desired_retention":
            value = float(value)
        elif target == "maximum_interval":
            value = int(value)
        elif target == "enable_fuzzing":
            value = bool(value)
        merged[target] = value
    return merged


def build_model_scheduler(settings: StudySettings) -> Scheduler:
    """Create the ``fsrs`` scheduler configured from study settings.

    Easy and graduating intervals have no counterpart in the model; they are
    applied afterwards by ``_apply_interval_policy``.
    """
    try:
        options: dict[str, Any] = {
            "desired_retention": config.DEFAULT_DESIRED_RETENTION,
            "learning_steps": to_step_durations(settings.learning_steps),
            "relearning_steps": to_step_durations(settings.relearning_steps),
            "maximum_interval": settings.maximum_interval,
            "enable_fuzzing": settings.enable_fuzz,
        }
        options.update(_custom_parameters(settings.fsrs_parameters))
        scheduler = Scheduler(**options)
    except (TypeError, ValueError) as exc:
        raise InvalidStudySettingsError(
            "Memory model rejected the study settings",
            details={"error": str(exc)},
        ) from exc

    logger.debug(
        "Configured memory model",
        learning_steps=[format_step(step) for step in scheduler.learning_steps],
        relearning_steps=[format_step(step) for step in scheduler.relearning_steps],
        maximum_interval=scheduler.maximum_interval,
        desired_retention=scheduler.desired_retention,
        enable_fuzzing=scheduler.enable_fuzzing,
    )
    return scheduler


# ----------------------------------------------------------------------
# Conversions
# ----------------------------------------------------------------------
def _to_model_difficulty(difficulty: float) -> float:
    if not math.isfinite(difficulty):
        difficulty = 0.0
    scaled = MODEL_DIFFICULTY_MIN + _clamp(difficulty, 0.0, 1.0) * (
        MODEL_DIFFICULTY_MAX - MODEL_DIFFICULTY_MIN
    )
    return scaled


def _from_model_difficulty(difficulty: float | None) -> float:
    if difficulty is None or not math.isfinite(difficulty):
        logger.warning("Memory model returned no usable difficulty", difficulty=difficulty)
        return 0.0
    normalized = (difficulty - MODEL_DIFFICULTY_MIN) / (MODEL_DIFFICULTY_MAX - MODEL_DIFFICULTY_MIN)
    if not 0.0 <= normalized <= 1.0:
        logger.warning("Clamped difficulty into range", difficulty=normalized)
    return _clamp(normalized, 0.0, 1.0)


def _step_gap(card: CardData) -> timedelta | None:
    last_review = ensure_utc(card.last_review)
    due_date = ensure_utc(card.due_date)
    if last_review is None or due_date is None:
        return None
    return due_date - last_review


def to_model_card(card: CardData, scheduler: Scheduler, now: datetime) -> ModelInput:
    """Translate persisted card data into an ``fsrs.Card``."""
    elapsed_days = compute_elapsed_days(card, now)
    scheduled_days = compute_scheduled_days(card, now)
    due = ensure_utc(card.due_date) or now

    if card.state == CardState.NEW:
        # The model initialises stability and difficulty from the first rating
        model_card = FSRSCard(card_id=0, state=State.Learning, step=0, due=due)
        return ModelInput(card=model_card, elapsed_days=elapsed_days, scheduled_days=scheduled_days)

    stability: float | None = card.stability
    difficulty: float | None = _to_model_difficulty(card.difficulty)
    if not math.isfinite(card.stability) or card.stability <= 0:
        if card.state == CardState.LEARNING:
            stability = None
            difficulty = None
        else:
            logger.warning(
                "Card has no usable stability, using the model minimum",
                state=card.state.value,
                stability=card.stability,
            )
            stability = STABILITY_MIN

    step = None
    if card.state == CardState.LEARNING:
        step = locate_step(_step_gap(card), scheduler.learning_steps)
    elif card.state == CardState.RELEARNING:
        step = locate_step(_step_gap(card), scheduler.relearning_steps)

    model_card = FSRSCard(
        card_id=0,
        state=_STATE_TO_FSRS[card.state],
        step=step,
        stability=stability,
        difficulty=difficulty,
        due=due,
        last_review=now - timedelta(days=elapsed_days),
    )
    return ModelInput(card=model_card, elapsed_days=elapsed_days, scheduled_days=scheduled_days)


def resolve_due_date(
    due: datetime | None, scheduled_days: float, stability: float, now: datetime
) -> datetime:
    """Return a due date strictly after ``now``.

    Missing dates are derived from the scheduled days, then from stability,
    then fall back to the minimum offset.
    """
    if due is None:
        if scheduled_days > 0:
            due = now + timedelta(days=scheduled_days)
        elif stability > 0:
            due = now + timedelta(days=stability)
        else:
            due = _minimum_due(now)
        logger.warning("Memory model returned no due date", derived_due_date=due.isoformat())

    if due <= now:
        logger.warning(
            "Due date is not in the future, pushing it forward",
            due_date=due.isoformat(),
            now=now.isoformat(),
        )
        due = _minimum_due(now)
    return due


def from_model_card(
    model_card: FSRSCard, previous: CardData, rating: Rating, now: datetime
) -> ReviewResult:
    """Translate a projected ``fsrs.Card`` back to calendar terms."""
    state = _FSRS_TO_STATE[model_card.state]
    difficulty = _from_model_difficulty(model_card.difficulty)

    stability = model_card.stability
    if stability is None or not math.isfinite(stability) or stability < 0:
        logger.warning("Clamped stability to zero", stability=stability)
        stability = 0.0

    model_due = ensure_utc(model_card.due)
    scheduled_days = 0.0
    if model_due is not None:
        scheduled_days = max(0.0, _days_between(now, model_due))
    due_date = resolve_due_date(model_due, scheduled_days, stability, now)

    interval = max(0.0, _days_between(now, due_date))
    if state in _STEP_STATES and due_date - now < STEP_WINDOW:
        interval = 0.0

    repetitions = max(0, previous.repetitions)
    lapses = max(0, previous.lapses)
    if rating == Rating.AGAIN:
        if previous.state == CardState.REVIEW:
            lapses += 1
    else:
        repetitions += 1

    return ReviewResult(
        state=state,
        difficulty=difficulty,
        stability=stability,
        due_date=due_date,
        interval=interval,
        repetitions=repetitions,
        lapses=lapses,
        elapsed_days=0.0,
    )


def _apply_interval_policy(
    result: ReviewResult,
    previous_state: CardState,
    rating: Rating,
    settings: StudySettings,
    maximum_interval: int,
    now: datetime,
) -> ReviewResult:
    """Apply the day-interval settings the memory model does not know about.

    Cards graduating from ``new``/``learning`` take the configured easy or
    graduating interval, since their stability estimate is not settled yet.
    Already graduated cards keep the model's interval. Every review interval
    is then bounded by the minimum and maximum interval, the maximum taking
    precedence when the two conflict.
    """
    if result.state != CardState.REVIEW:
        return result

    interval = result.interval
    policy = "bounds"
    if previous_state in _UNGRADUATED_STATES:
        if rating == Rating.EASY and settings.easy_interval:
            interval = float(settings.easy_interval)
            policy = "easy_interval"
        elif rating in (Rating.HARD, Rating.GOOD) and settings.graduating_interval:
            interval = float(settings.graduating_interval)
            policy = "graduating_interval"

    bounded = min(max(interval, float(settings.minimum_interval)), float(maximum_interval))
    if bounded == result.interval:
        return result

    due_date = now + timedelta(days=bounded)
    if due_date <= now:
        due_date = _minimum_due(now)

    logger.debug(
        "Overrode model interval",
        policy=policy,
        rating=rating.name,
        previous_state=previous_state.value,
        model_interval=result.interval,
        interval=bounded,
    )
    return result.model_copy(update={"interval": bounded, "due_date": due_date})


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------
class CardScheduler:
    """Schedules reviews for one set of study settings.

    Building the memory model is the only non-trivial setup, so callers
    scheduling many cards for the same user can reuse one instance.
    """

    def __init__(self, settings: StudySettings | None = None) -> None:
        self.settings = settings or StudySettings()
        self.model = build_model_scheduler(self.settings)

    def project(self, card: CardData, now: datetime | None = None) -> dict[Rating, ReviewResult]:
        """Return the outcome of every possible rating for ``card``."""
        now = _resolve_now(now)
        model_input = to_model_card(card, self.model, now)

        logger.debug(
            "Projecting review branches",
            state=card.state.value,
            step=model_input.card.step,
            elapsed_days=model_input.elapsed_days,
            scheduled_days=model_input.scheduled_days,
        )

        branches: dict[Rating, ReviewResult] = {}
        for rating in Rating:
            projected, _ = self.model.review_card(
                model_input.card, _RATING_TO_FSRS[rating], review_datetime=now
            )
            result = from_model_card(projected, card, rating, now)
            branches[rating] = _apply_interval_policy(
                result, card.state, rating, self.settings, self.model.maximum_interval, now
            )
        return branches

    def review(self, card: CardData, rating: Rating | int, now: datetime | None = None) -> ReviewResult:
        """Return the card state after applying ``rating``."""
        rating = Rating(rating)
        now = _resolve_now(now)
        result = self.project(card, now)[rating]

        logger.debug(
            "Scheduled review",
            rating=rating.name,
            previous_state=card.state.value,
            state=result.state.value,
            interval=result.interval,
            due_date=result.due_date.isoformat(),
        )
        return result

    def preview(self, card: CardData, now: datetime | None = None) -> dict[Rating, ReviewPreview]:
        """Return due date and interval for each rating without committing to one."""
        return {
            rating: ReviewPreview(due_date=result.due_date, interval=result.interval)
            for rating, result in self.project(card, now).items()
        }

    def retrievability(self, card: CardData, now: datetime | None = None) -> float:
        """Probability of recalling ``card`` at ``now`` according to the model."""
        if card.state == CardState.NEW:
            return 0.0
        now = _resolve_now(now)
        model_card = to_model_card(card, self.model, now).card
        if model_card.stability is None:
            return 0.0
        return _clamp(float(self.model.get_card_retrievability(model_card, now)), 0.0, 1.0)


def review_card(
    card: CardData,
    rating: Rating | int,
    settings: StudySettings,
    now: datetime | None = None,
) -> ReviewResult:
    """Compute the next memory state of ``card`` after a review rated ``rating``."""
    return CardScheduler(settings).review(card, rating, now)


def preview_reviews(
    card: CardData, settings: StudySettings, now: datetime | None = None
) -> dict[Rating, ReviewPreview]:
    """Compute due date and interval for all four ratings of ``card``."""
    return CardScheduler(settings).preview(card, now)


def current_retrievability(
    card: CardData, settings: StudySettings, now: datetime | None = None
) -> float:
    return CardScheduler(settings).retrievability(card, now)


def default_study_settings() -> StudySettings:
    """Return study settings populated from configuration defaults."""
    return StudySettings()


__all__ = [
    "CardScheduler",
    "ModelInput",
    "build_model_scheduler",
    "compute_elapsed_days",
    "compute_scheduled_days",
    "current_retrievability",
    "default_study_settings",
    "from_model_card",
    "preview_reviews",
    "resolve_due_date",
    "review_card",
    "to_model_card",
]
