"""
SearchLens - Analysis Engine

Runs page scoring, cannibalization detection, topic clustering and action
generation over one record set in a single pass.
"""

from .engine import AnalyticsEngine, EngineConfig, EngineResult

__all__ = [
    "AnalyticsEngine",
    "EngineConfig",
    "EngineResult",
]
