"""Pytest fixtures for scheduler tests."""

from datetime import datetime, timedelta, timezone

import pytest

from benkyou.schemas.scheduling import CardData, CardState, StudySettings


@pytest.fixture()
def now() -> datetime:
    return datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture()
def study_settings() -> StudySettings:
    """Default settings with fuzzing off so intervals are exact."""

    return StudySettings(enable_fuzz=False)


@pytest.fixture()
def new_card() -> CardData:
    return CardData(
        state=CardState.NEW,
        difficulty=0.3,
        stability=0.0,
        last_review=None,
        due_date=None,
        interval=0.0,
        repetitions=0,
        lapses=0,
        elapsed_days=0.0,
    )


@pytest.fixture()
def graduated_card(now: datetime) -> CardData:
    return CardData(
        state=CardState.REVIEW,
        difficulty=0.3,
        stability=10.0,
        last_review=now - timedelta(days=10),
        due_date=now,
        interval=10.0,
        repetitions=5,
        lapses=0,
        elapsed_days=0.0,
    )
