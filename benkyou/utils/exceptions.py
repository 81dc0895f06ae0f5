"""Custom exception classes and error handling utilities."""
from typing import Any, Dict, Optional

from loguru import logger


class BenkyouException(Exception):
    """Base exception for the scheduler package."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class InvalidStudySettingsError(BenkyouException, ValueError):
    """Study settings the memory model cannot be configured with."""
    pass


def handle_scheduling_error(error: Exception) -> Dict[str, Any]:
    """Log a scheduling failure and return the payload shown to the learner."""
    if isinstance(error, BenkyouException):
        logger.bind(details=error.details).error("Scheduling error: {}", error.message)
        details = error.details
    else:
        logger.opt(exception=error).error("Unexpected scheduling failure: {}", error)
        details = {}
    return {
        "error": "Failed to review card",
        "message": str(error) or error.__class__.__name__,
        "details": details,
    }
