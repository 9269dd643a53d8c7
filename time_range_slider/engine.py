"""Granularity engine capability shared by both zoom models."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Protocol, Union, runtime_checkable

from .adaptive import AdaptiveGranularityService
from .snap import DEFAULT_MAX_TICKS, SnapGranularityService
from .ticks import Tick

EngineMode = Literal["adaptive", "snap"]
ENGINE_MODES: tuple[EngineMode, ...] = ("adaptive", "snap")


@runtime_checkable
class GranularityEngine(Protocol):
    order: tuple[str, ...]

    def resolve_level(self, width_ms: float, current_level: str) -> str: ...

    def extent_for(self, level: str, start: datetime, end: datetime) -> tuple[datetime, datetime]: ...

    def ticks_for(self, extent_start: datetime, extent_end: datetime, level: str) -> list[Tick]: ...

    def level_label(self, level: str) -> str: ...


def create_engine(
    mode: EngineMode, *, max_ticks: int = DEFAULT_MAX_TICKS
) -> Union[AdaptiveGranularityService, SnapGranularityService]:
    """Return the engine strategy for ``mode``.

    ``max_ticks`` is the label budget of the snap engine; adaptive ticks are
    budgeted per level and ignore it.
    """
    if mode == "adaptive":
        return AdaptiveGranularityService()
    if mode == "snap":
        return SnapGranularityService(max_ticks=max_ticks)
    raise ValueError(f"mode must be one of {set(ENGINE_MODES)}, got {mode!r}")
