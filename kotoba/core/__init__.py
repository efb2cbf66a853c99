"""
Core vocabulary for the kotoba engine: enums, errors and clocks.
"""

from kotoba.core.clock import Clock, utcnow
from kotoba.core.enums import (
    ALL_EXERCISE_KINDS,
    DEFAULT_LEVEL,
    ExerciseKind,
    Level,
    PeriodType,
    StudyMode,
)
from kotoba.core.exceptions import (
    ContentExhaustedError,
    ContentNotFoundError,
    InvalidLevelError,
    InvalidLimitError,
    InvalidStateError,
    KotobaError,
    NoOutstandingItemError,
    NotFoundError,
    OutstandingItemError,
    StorageFailure,
    UserNotFoundError,
)

__all__ = [
    # Clock
    "Clock",
    "utcnow",
    # Enums
    "ALL_EXERCISE_KINDS",
    "DEFAULT_LEVEL",
    "ExerciseKind",
    "Level",
    "PeriodType",
    "StudyMode",
    # Errors
    "KotobaError",
    "NotFoundError",
    "UserNotFoundError",
    "ContentNotFoundError",
    "ContentExhaustedError",
    "InvalidStateError",
    "OutstandingItemError",
    "NoOutstandingItemError",
    "InvalidLevelError",
    "InvalidLimitError",
    "StorageFailure",
]
