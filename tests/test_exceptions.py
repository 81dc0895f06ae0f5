import pytest

from benkyou.schemas.scheduling import StudySettings
from benkyou.services.scheduler import CardScheduler
from benkyou.utils.exceptions import (
    BenkyouException,
    InvalidStudySettingsError,
    handle_scheduling_error,
)


def test_invalid_settings_error_is_a_value_error():
    error = InvalidStudySettingsError("bad steps", details={"key": "learning_steps"})

    assert isinstance(error, ValueError)
    assert isinstance(error, BenkyouException)
    assert error.message == "bad steps"
    assert error.details == {"key": "learning_steps"}


def test_handle_scheduling_error_for_settings_failure():
    with pytest.raises(InvalidStudySettingsError) as exc_info:
        CardScheduler(StudySettings(fsrs_parameters={"learning_steps": ["soon"]}))

    payload = handle_scheduling_error(exc_info.value)

    assert payload["error"] == "Failed to review card"
    assert payload["message"] == "Memory model rejected the study settings"
    assert "soon" in payload["details"]["error"]


def test_handle_scheduling_error_for_unexpected_failure():
    payload = handle_scheduling_error(RuntimeError())

    assert payload == {"error": "Failed to review card", "message": "RuntimeError", "details": {}}
