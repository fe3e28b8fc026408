"""Tests for @traced_engine fingerprinting."""

from datetime import date
from decimal import Decimal

from staffing_engines.metrics import MetricsAggregator
from staffing_engines.overlap import ReportingWindow
from staffing_engines.tracer import compute_input_fingerprint

JANUARY = ReportingWindow(date(2024, 1, 1), date(2024, 1, 31))


def _fingerprints(records) -> list[str]:
    return [r["input_fingerprint"] for r in records if r["message"] == "STAFFING_ENGINE_TRACE"]


class TestInputFingerprint:

    def test_positional_and_keyword_calls_match(self, captured_logs):
        aggregator = MetricsAggregator()
        aggregator.aggregate([], JANUARY, 4, Decimal("100"))
        aggregator.aggregate(
            assignments=[], window=JANUARY, weeks_in_window=4, default_rate=Decimal("100"),
        )
        first, second = _fingerprints(captured_logs())
        assert first == second

    def test_window_changes_fingerprint(self, captured_logs):
        aggregator = MetricsAggregator()
        aggregator.aggregate([], JANUARY, 4, Decimal("100"))
        aggregator.aggregate([], ReportingWindow.unbounded(), 4, Decimal("100"))
        first, second = _fingerprints(captured_logs())
        assert first != second

    def test_decimal_scale_ignored(self):
        a = compute_input_fingerprint(("rate",), {"rate": Decimal("100")})
        b = compute_input_fingerprint(("rate",), {"rate": Decimal("100.00")})
        assert a == b

    def test_missing_field_is_null(self):
        assert compute_input_fingerprint(("x",), {}) == compute_input_fingerprint(
            ("x",), {"x": None}
        )
