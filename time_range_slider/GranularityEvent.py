"""Standardized granularity-change event payloads.

This module defines ``GranularityEvent``, the immutable structure emitted by
range controllers when the displayed level changes and consumed by
``on_granularity_change`` observers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class GranularityEvent:
    """Normalized granularity change event emitted by range controllers.

    Parameters
    ----------
    old : str or None
        The previously displayed level (``None`` on first initialization).
    new : str
        The level now displayed.
    label : str
        Human-readable label of ``new`` (e.g. ``"Months"``).
    reason : str
        What triggered the change: ``"initialize"``, ``"slider"``,
        ``"zoom_in"``, ``"zoom_out"`` or ``"reset"``.
    source : Any, optional
        The emitting controller (or ``None`` when synthesized).

    Examples
    --------
    >>> from time_range_slider.GranularityEvent import GranularityEvent
    >>> GranularityEvent(old="years", new="months", label="Months", reason="slider")
    GranularityEvent(old='years', new='months', label='Months', reason='slider', source=None)
    """
    old: Optional[str]
    new: str
    label: str
    reason: str
    source: Any = None
