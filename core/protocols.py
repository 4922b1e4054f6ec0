"""Shared protocol definitions."""

from typing import Any, Protocol


class RequestLogger(Protocol):
    """Protocol for structured event logging (Dashboard, ConsoleLogger)."""

    def log(self, event: str, fields: dict[str, Any]) -> None: ...
