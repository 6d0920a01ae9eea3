from __future__ import annotations

"""Error taxonomy for the vector search request lifecycle."""

from typing import Any


class UserError(RuntimeError):
    """Raised for caller-caused failures that are safe to expose."""

    def __init__(self, message: str, data: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.data = data


class ApplicationError(RuntimeError):
    """Raised for backend failures; the payload is logged, never returned."""

    def __init__(self, message: str, data: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.data = data
