"""
Test Suite for Record Validation

Tests the ingestion boundary that turns export rows into PerformanceRecord
values.
"""

from datetime import date

import pytest

from searchlens.models import PerformanceRecord
from searchlens.models.validation import _to_number, parse_ctr, parse_date, validate_records


class TestParseCtr:
    """Test CTR cell parsing."""

    @pytest.mark.parametrize("value,expected", [
        ("4.5%", 0.045),
        (4.5, 0.045),
        (0.045, 0.045),
        ("0.12", 0.12),
        (1, 1.0),
    ])
    def test_formats(self, value, expected):
        assert parse_ctr(value) == pytest.approx(expected)

    def test_unparseable(self):
        assert parse_ctr(None) is None
        assert parse_ctr("n/a") is None

    @pytest.mark.parametrize("value", ["nan", "inf", "-inf", float("nan"), float("inf")])
    def test_non_finite_rejected(self, value):
        assert _to_number(value) is None
        assert parse_ctr(value) is None


class TestParseDate:
    """Test date cell parsing."""

    def test_iso_date(self):
        assert parse_date("2024-03-01") == date(2024, 3, 1)

    def test_iso_datetime(self):
        assert parse_date("2024-03-01T10:00:00") == date(2024, 3, 1)

    def test_invalid(self):
        assert parse_date("yesterday") is None
        assert parse_date("") is None


class TestValidateRecords:
    """Test row normalization and issue reporting."""

    def test_export_headers(self):
        report = validate_records([{
            "Top queries": "seo tools",
            "Page": "https://example.com/a",
            "Clicks": "10",
            "Impressions": "1,000",
            "CTR": "1%",
            "Position": "3.5",
        }])

        assert report.accepted_rows == 1
        assert report.issues == []
        assert report.records[0] == PerformanceRecord(
            query="seo tools",
            page="https://example.com/a",
            clicks=10,
            impressions=1000,
            ctr=pytest.approx(0.01),
            position=3.5,
        )

    def test_missing_page_is_skipped(self):
        report = validate_records([{"query": "seo tools", "clicks": 1}])

        assert report.accepted_rows == 0
        assert report.skipped_rows == 1
        assert report.critical_count == 1
        assert report.issues[0].field == "page"

    def test_negative_values_clamped(self):
        report = validate_records([{
            "query": "q", "page": "/a", "clicks": -5, "impressions": -10, "position": 4,
        }])
        record = report.records[0]

        assert record.clicks == 0
        assert record.impressions == 0
        assert report.warning_count == 2

    def test_position_below_one_clamped(self):
        report = validate_records([{"query": "q", "page": "/a", "position": 0}])

        assert report.records[0].position == 1.0
        assert report.issues[0].field == "position"

    def test_nan_position_clamped(self):
        report = validate_records([{"query": "q", "page": "/a", "position": "nan"}])

        assert report.records[0].position == 1.0
        assert report.issues[0].field == "position"

    def test_infinite_impressions_reset(self):
        report = validate_records([{
            "query": "q", "page": "/a", "clicks": "5", "impressions": "inf", "position": 2,
        }])
        record = report.records[0]

        assert record.impressions == 0
        assert record.clicks == 5
        assert record.ctr == 0.0
        assert report.warning_count == 1
        assert report.issues[0].field == "impressions"

    def test_missing_ctr_derived(self):
        report = validate_records([{
            "query": "q", "page": "/a", "clicks": 5, "impressions": 100, "position": 2,
        }])

        assert report.records[0].ctr == pytest.approx(0.05)
        assert report.info_count == 0

    def test_bad_ctr_derived_with_info(self):
        report = validate_records([{
            "query": "q", "page": "/a", "clicks": 5, "impressions": 100, "position": 2, "ctr": "n/a",
        }])

        assert report.records[0].ctr == pytest.approx(0.05)
        assert report.info_count == 1

    def test_report_to_dict(self):
        report = validate_records([
            {"query": "q", "page": "/a", "position": 2},
            {"page": "/b"},
        ])
        data = report.to_dict()

        assert data["total_rows"] == 2
        assert data["accepted_rows"] == 1
        assert data["skipped_rows"] == 1
        assert data["issues"][0]["severity"] == "critical"


class TestPerformanceRecord:
    """Test record construction helpers."""

    def test_from_dict_derives_ctr(self):
        record = PerformanceRecord.from_dict(
            {"query": "q", "page": "/a", "clicks": 3, "impressions": 30, "position": 2}
        )
        assert record.ctr == pytest.approx(0.1)

    def test_from_dict_defaults_position_to_one(self):
        record = PerformanceRecord.from_dict({"query": "q", "page": "/a"})
        assert record.position == 1.0

    def test_from_dict_parses_date(self):
        record = PerformanceRecord.from_dict(
            {"query": "q", "page": "/a", "position": 3, "date": "2024-01-05"}
        )
        assert record.date == date(2024, 1, 5)
        assert record.to_dict()["date"] == "2024-01-05"

    def test_to_dict(self):
        record = PerformanceRecord("q", "/a", 1, 10, 0.1, 2.0, date(2024, 1, 5))
        assert record.to_dict()["date"] == "2024-01-05"
