"""Unit tests for analytics date windows."""
import sys
from datetime import date, datetime, time, timezone

import pytest

from civic_warehouse.analytics.filters import DateWindow
from civic_warehouse.errors import InvalidDateWindow
from civic_warehouse.models.warehouse import FactReport


class TestFromParams:
    """Tests for DateWindow.from_params."""

    def test_no_bounds(self):
        window = DateWindow.from_params(None, None)
        assert window.start is None
        assert window.end is None

    def test_date_only_bounds_cover_whole_days(self):
        window = DateWindow.from_params("2024-03-01", "2024-03-31")
        assert window.start == datetime(2024, 3, 1, tzinfo=timezone.utc)
        assert window.end.date().isoformat() == "2024-03-31"
        assert window.end.hour == 23
        assert window.end.minute == 59

    @pytest.mark.skipif(sys.version_info < (3, 11), reason="basic-format dates need Python 3.11")
    def test_basic_format_end_date_covers_whole_day(self):
        window = DateWindow.from_params("2024-03-01", "20240301")
        assert window.end == datetime.combine(date(2024, 3, 1), time.max, tzinfo=timezone.utc)

    def test_datetime_with_zulu_suffix(self):
        window = DateWindow.from_params("2024-03-01T08:30:00Z")
        assert window.start == datetime(2024, 3, 1, 8, 30, tzinfo=timezone.utc)

    def test_offset_converted_to_utc(self):
        window = DateWindow.from_params(end_date="2024-03-01T07:00:00+07:00")
        assert window.end == datetime(2024, 3, 1, 0, 0, tzinfo=timezone.utc)

    def test_naive_datetime_treated_as_utc(self):
        window = DateWindow.from_params("2024-03-01T08:00:00")
        assert window.start.tzinfo == timezone.utc

    def test_garbage_raises(self):
        with pytest.raises(InvalidDateWindow):
            DateWindow.from_params("kemarin")

    def test_start_after_end_raises(self):
        with pytest.raises(InvalidDateWindow, match="startDate"):
            DateWindow.from_params("2024-04-01", "2024-03-01")

    def test_invalid_window_is_a_value_error(self):
        with pytest.raises(ValueError):
            DateWindow.from_params("2024-13-01")


class TestPredicates:
    """Tests for predicate composition."""

    def test_unbounded_window_adds_nothing(self):
        assert DateWindow().predicates(FactReport.created_at) == []

    def test_one_predicate_per_bound(self):
        window = DateWindow.from_params("2024-03-01", "2024-03-31")
        assert len(window.predicates(FactReport.created_at)) == 2

    def test_bounds_are_bound_parameters(self):
        """User input never appears in the SQL text."""
        window = DateWindow.from_params("2024-03-01")
        predicate = window.predicates(FactReport.created_at)[0]
        sql = str(predicate.compile())
        assert "2024" not in sql
        assert ":created_at_1" in sql
