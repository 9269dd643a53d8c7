"""Exceptions raised at the widget boundary."""

from __future__ import annotations


class InvalidBoundsError(ValueError):
    """Raised when ``max_date`` does not lie strictly after ``min_date``."""

    def __init__(self, min_date, max_date) -> None:
        super().__init__(f"max_date ({max_date}) must be later than min_date ({min_date}).")
        self.min_date = min_date
        self.max_date = max_date
