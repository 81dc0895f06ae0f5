from benkyou.config import Settings, get_settings
from benkyou.schemas.scheduling import StudySettings


def test_defaults():
    config = Settings()

    assert config.DEFAULT_NEW_CARDS_PER_DAY == 20
    assert config.DEFAULT_LEARNING_STEPS == [1, 10]
    assert config.DEFAULT_RELEARNING_STEPS == [10]
    assert config.DEFAULT_MAXIMUM_INTERVAL == 36500
    assert config.MINIMUM_DUE_OFFSET_SECONDS == 60


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("DEFAULT_EASY_INTERVAL", "7")
    monkeypatch.setenv("DEFAULT_LEARNING_STEPS", "[2, 15]")
    monkeypatch.setenv("DEFAULT_ENABLE_FUZZ", "false")

    config = Settings()

    assert config.DEFAULT_EASY_INTERVAL == 7
    assert config.DEFAULT_LEARNING_STEPS == [2, 15]
    assert config.DEFAULT_ENABLE_FUZZ is False


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_study_settings_copy_default_steps():
    first = StudySettings()
    second = StudySettings()

    assert first.learning_steps == second.learning_steps
    assert first.learning_steps is not second.learning_steps
