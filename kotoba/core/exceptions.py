"""
Engine error taxonomy.

Every error is per-request: none of them is fatal to the process, and a
raised error always leaves persistent state as it was before the call.
"""

from __future__ import annotations


class KotobaError(Exception):
    """Base class for all engine errors."""


# =============================================================================
# NotFound - recoverable, surfaced as "nothing available"
# =============================================================================


class NotFoundError(KotobaError):
    """A requested entity or eligible item does not exist."""


class UserNotFoundError(NotFoundError):
    """No user with the given external id."""

    def __init__(self, external_id: int):
        super().__init__(f"User {external_id} not found")
        self.external_id = external_id


class ContentNotFoundError(NotFoundError):
    """No exercise, word or submission with the given id."""


class ContentExhaustedError(NotFoundError):
    """No eligible exercise or word remains for the level/kind set."""


# =============================================================================
# InvalidState - guard rejections
# =============================================================================


class InvalidStateError(KotobaError):
    """The operation is not allowed in the learner's current state."""


class OutstandingItemError(InvalidStateError):
    """The learner already has an item awaiting an answer."""


class NoOutstandingItemError(InvalidStateError):
    """There is no outstanding item to answer (or it was settled concurrently)."""


class InvalidLevelError(KotobaError, ValueError):
    """Unknown difficulty level."""


class InvalidLimitError(KotobaError, ValueError):
    """Page size below 1."""


# =============================================================================
# StorageFailure - transient, never retried inside the engine
# =============================================================================


class StorageFailure(KotobaError):
    """The persistence layer failed; the transaction was rolled back."""
