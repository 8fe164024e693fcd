"""Configuration models for basin analysis."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


DEFAULT_INPUT_PATH = "data/example.txt"
MAX_HEIGHT = 9
BARRIER_HEIGHT = 9


@dataclass(frozen=True)
class BasinConfig:
    """Controls basin membership and result aggregation."""

    barrier_height: int = BARRIER_HEIGHT
    top_basin_count: int = 3


@dataclass(frozen=True)
class RenderConfig:
    """Gray levels used by the preview rasters."""

    low_point_value: int = 255
    basin_value: int = 160


@dataclass(frozen=True)
class AnalyzerConfig:
    """Primary analysis configuration."""

    debug_tier: int = 0
    basin: BasinConfig = field(default_factory=BasinConfig)
    render: RenderConfig = field(default_factory=RenderConfig)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
