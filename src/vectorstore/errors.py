from __future__ import annotations


class SearchError(RuntimeError):
    """Raised when the section search backend fails."""

    def __init__(self, message: str, data: object = None) -> None:
        super().__init__(message)
        self.data = data
