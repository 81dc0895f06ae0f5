"""Utility helpers package."""

from benkyou.utils.exceptions import (
    BenkyouException,
    InvalidStudySettingsError,
    handle_scheduling_error,
)
from benkyou.utils.timezones import ensure_utc, utc_now

__all__ = [
    "BenkyouException",
    "InvalidStudySettingsError",
    "ensure_utc",
    "handle_scheduling_error",
    "utc_now",
]
