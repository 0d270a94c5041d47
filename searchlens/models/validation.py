"""
Record Validation Layer

Normalizes raw search-console export rows into PerformanceRecord values
BEFORE they reach the engine.

Design Philosophy:
- Heterogeneous export headers ("Query", "Top queries", ...) map to one
  canonical field set
- Malformed numbers are clamped here, never inside the engine
- Every adjustment is recorded so the caller can surface it
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Dict, Any, Iterable, Optional

from . import PerformanceRecord

logger = logging.getLogger(__name__)


# =============================================================================
# VALIDATION RESULT TYPES
# =============================================================================

@dataclass
class ValidationIssue:
    """A single validation issue"""
    severity: str  # critical, warning, info
    row: int       # Zero-based row index in the input
    field: str     # Which field has the issue
    message: str   # Human-readable description
    value: Any = None  # The problematic value (for debugging)


@dataclass
class RecordValidationReport:
    """Outcome of validating one batch of export rows"""
    records: List[PerformanceRecord] = field(default_factory=list)
    issues: List[ValidationIssue] = field(default_factory=list)
    total_rows: int = 0
    skipped_rows: int = 0
    critical_count: int = 0
    warning_count: int = 0
    info_count: int = 0

    def add_issue(self, severity: str, row: int, field: str, message: str, value: Any = None):
        """Add a validation issue"""
        self.issues.append(ValidationIssue(
            severity=severity,
            row=row,
            field=field,
            message=message,
            value=value,
        ))

        if severity == "critical":
            self.critical_count += 1
        elif severity == "warning":
            self.warning_count += 1
        else:
            self.info_count += 1

    @property
    def accepted_rows(self) -> int:
        return len(self.records)

    def to_dict(self) -> dict:
        """Convert to dictionary for storage"""
        return {
            "total_rows": self.total_rows,
            "accepted_rows": self.accepted_rows,
            "skipped_rows": self.skipped_rows,
            "critical_count": self.critical_count,
            "warning_count": self.warning_count,
            "info_count": self.info_count,
            "issues": [
                {
                    "severity": i.severity,
                    "row": i.row,
                    "field": i.field,
                    "message": i.message,
                }
                for i in self.issues
            ],
        }


# =============================================================================
# FIELD ALIASES
# =============================================================================

# Canonical field -> header variants seen in search-console exports
FIELD_ALIASES: Dict[str, List[str]] = {
    "date": ["date", "Date"],
    "query": ["query", "Query", "Top queries", "keyword", "Keyword"],
    "page": ["page", "Page", "Top pages", "url", "URL", "Landing Page"],
    "clicks": ["clicks", "Clicks"],
    "impressions": ["impressions", "Impressions"],
    "ctr": ["ctr", "CTR", "Url CTR"],
    "position": ["position", "Position", "Average position", "Avg. position"],
}


def _pick(row: Dict[str, Any], canonical: str) -> Any:
    """Return the first non-empty value among a field's aliases."""
    for alias in FIELD_ALIASES[canonical]:
        value = row.get(alias)
        if value is not None and value != "":
            return value
    return None


def _to_number(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", "")
        if text.endswith("%"):
            text = text[:-1]
        try:
            number = float(text)
        except ValueError:
            return None
    # nan and inf never survive ingestion
    return number if math.isfinite(number) else None


def parse_ctr(value: Any) -> Optional[float]:
    """
    Parse a CTR cell into a fraction.

    "4.5%" -> 0.045; 4.5 -> 0.045 (percent form); 0.045 -> 0.045.
    """
    number = _to_number(value)
    if number is None:
        return None
    if (isinstance(value, str) and value.strip().endswith("%")) or number > 1:
        return number / 100
    return number


def parse_date(value: Any) -> Optional[date]:
    """Parse an ISO date cell; returns None when unparseable."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


# =============================================================================
# CORE VALIDATION FUNCTION
# =============================================================================

def validate_records(rows: Iterable[Dict[str, Any]]) -> RecordValidationReport:
    """
    Normalize raw export rows into PerformanceRecord values.

    Rows without a query or page are skipped. Negative clicks/impressions
    are clamped to 0 and positions below 1 are clamped to 1. A missing CTR
    is derived from clicks/impressions.

    Args:
        rows: Iterable of dicts keyed by export headers

    Returns:
        RecordValidationReport with accepted records and issues
    """
    report = RecordValidationReport()

    for index, row in enumerate(rows):
        report.total_rows += 1

        query = _pick(row, "query")
        page = _pick(row, "page")
        if not query or not page:
            report.skipped_rows += 1
            report.add_issue(
                "critical", index, "query" if not query else "page",
                "Row has no query or page and was skipped",
            )
            continue

        raw_clicks = _pick(row, "clicks")
        clicks = _to_number(raw_clicks)
        if clicks is None:
            if raw_clicks is not None:
                report.add_issue("warning", index, "clicks", "Unparseable clicks set to 0", raw_clicks)
            clicks = 0.0
        if clicks < 0:
            report.add_issue("warning", index, "clicks", "Negative clicks clamped to 0", clicks)
            clicks = 0.0

        raw_impressions = _pick(row, "impressions")
        impressions = _to_number(raw_impressions)
        if impressions is None:
            if raw_impressions is not None:
                report.add_issue(
                    "warning", index, "impressions", "Unparseable impressions set to 0", raw_impressions
                )
            impressions = 0.0
        if impressions < 0:
            report.add_issue("warning", index, "impressions", "Negative impressions clamped to 0", impressions)
            impressions = 0.0

        position = _to_number(_pick(row, "position"))
        if position is None or position < 1:
            report.add_issue("warning", index, "position", "Position below 1 clamped to 1", position)
            position = 1.0

        raw_ctr = _pick(row, "ctr")
        ctr = parse_ctr(raw_ctr)
        if ctr is None or ctr < 0:
            ctr = clicks / impressions if impressions > 0 else 0.0
            if raw_ctr is not None:
                report.add_issue("info", index, "ctr", "Unparseable CTR derived from clicks/impressions", raw_ctr)

        raw_date = _pick(row, "date")
        row_date = parse_date(raw_date)
        if raw_date is not None and row_date is None:
            report.add_issue("info", index, "date", "Unparseable date dropped", raw_date)

        report.records.append(PerformanceRecord(
            query=str(query).strip(),
            page=str(page).strip(),
            clicks=int(clicks),
            impressions=int(impressions),
            ctr=ctr,
            position=position,
            date=row_date,
        ))

    if report.skipped_rows:
        logger.warning(f"Skipped {report.skipped_rows}/{report.total_rows} rows without query or page")
    logger.info(
        f"Validated {report.total_rows} rows: {report.accepted_rows} accepted, "
        f"{report.warning_count} clamped"
    )

    return report
