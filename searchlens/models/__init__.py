"""
SearchLens - Data Models

Shared data models used across the engine.
"""

from dataclasses import dataclass
from datetime import date
from typing import Dict, Any, Optional


@dataclass(frozen=True)
class PerformanceRecord:
    """
    One search-performance row (query x page x date).

    Records are validated at the ingestion boundary (see
    `searchlens.models.validation`); the engine assumes clicks and
    impressions are non-negative and position is >= 1.
    """
    query: str
    page: str
    clicks: int
    impressions: int
    ctr: float
    position: float
    date: Optional[date] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PerformanceRecord":
        """Build a record from an already-canonical dict."""
        from .validation import parse_date

        clicks = int(data.get("clicks", 0))
        impressions = int(data.get("impressions", 0))
        ctr = data.get("ctr")
        if ctr is None:
            ctr = clicks / impressions if impressions > 0 else 0.0
        return cls(
            query=data["query"],
            page=data["page"],
            clicks=clicks,
            impressions=impressions,
            ctr=float(ctr),
            position=max(1.0, float(data.get("position", 1.0))),
            date=parse_date(data.get("date")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage."""
        return {
            "query": self.query,
            "page": self.page,
            "clicks": self.clicks,
            "impressions": self.impressions,
            "ctr": self.ctr,
            "position": self.position,
            "date": self.date.isoformat() if self.date else None,
        }


__all__ = ["PerformanceRecord"]
