"""
Utility functions and helpers for AssignScore.

This package provides configuration management, input validation,
exception handling, and rounding helpers.
"""

from .config import Config, Settings
from .validators import InputValidator
from .exceptions import (
    AssignScoreError,
    ValidationError,
    InvalidRequestError,
    UnauthorizedError,
    NotFoundError,
    AlreadyEvaluatedError,
    ProcessingError,
    StoreError,
    EvaluationWriteError,
    ConfigurationError,
)
from .numbers import round_half_up, to_percent_label

__all__ = [
    "Config",
    "Settings",
    "InputValidator",
    "AssignScoreError",
    "ValidationError",
    "InvalidRequestError",
    "UnauthorizedError",
    "NotFoundError",
    "AlreadyEvaluatedError",
    "ProcessingError",
    "StoreError",
    "EvaluationWriteError",
    "ConfigurationError",
    "round_half_up",
    "to_percent_label",
]
