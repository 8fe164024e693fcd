"""Height map low point and basin analysis package."""

from .config import BARRIER_HEIGHT, DEFAULT_INPUT_PATH, MAX_HEIGHT, AnalyzerConfig

__all__ = ["BARRIER_HEIGHT", "DEFAULT_INPUT_PATH", "MAX_HEIGHT", "AnalyzerConfig"]
