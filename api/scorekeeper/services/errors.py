"""Typed failures raised by the ingestion and statistics services."""

from __future__ import annotations


class ScorekeeperError(Exception):
    """Base class for service-level failures surfaced to API callers."""


class ValidationError(ScorekeeperError):
    """Missing or malformed input, or a team that is not playing in the game.

    Detected before any write. Never retried.
    """

    def __init__(self, errors: list[str] | str) -> None:
        self.errors = [errors] if isinstance(errors, str) else list(errors)
        super().__init__("; ".join(self.errors))


class NotFoundError(ScorekeeperError):
    """A referenced record (game, event) does not exist. Never retried."""

    def __init__(self, kind: str, identifier: str) -> None:
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")


class StoreUnavailableError(ScorekeeperError):
    """The event store failed or timed out. Safe to retry; no partial write occurred."""

    def __init__(self, operation: str, retry_after_seconds: int = 2) -> None:
        self.operation = operation
        self.retry_after_seconds = retry_after_seconds
        super().__init__(f"Event store unavailable during {operation}")
