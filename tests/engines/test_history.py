"""
Tests for the historical series engine.
"""

from datetime import date, timedelta

import pytest

from ar_engines.history import build_history, history_start, validate_months
from ar_kernel.domain.dtos import EmptyDatasetError
from ar_kernel.domain.snapshot import StoreSnapshot
from ar_kernel.exceptions import InvalidQueryParameterError
from tests.conftest import make_record


class TestValidateMonths:

    @pytest.mark.parametrize("months", [1, 12, 36])
    def test_accepts_bounds(self, months):
        assert validate_months(months) == months

    @pytest.mark.parametrize("months", [0, -3, 37, 1.5, "12", None, True])
    def test_rejects(self, months):
        with pytest.raises(InvalidQueryParameterError) as exc_info:
            validate_months(months)
        assert exc_info.value.code == "INVALID_QUERY_PARAMETER"
        assert exc_info.value.parameter == "months"

    def test_custom_bounds(self):
        with pytest.raises(InvalidQueryParameterError):
            validate_months(25, max_months=24)


class TestBuildHistory:

    def test_three_months_covers_thirteen_weeks(self):
        as_of = date(2024, 6, 3)
        assert history_start(as_of, 3) == as_of - timedelta(weeks=12)

    def test_sparse_store_returns_only_stored_weeks(self):
        snap = StoreSnapshot.from_records(
            [make_record(date(2024, 4, 1), dso=40.0), make_record(date(2024, 5, 27), dso=42.0)]
        )
        series = build_history(snapshot=snap, months=3)

        assert len(series) == 2
        assert [r.week_start for r in series.points] == [date(2024, 4, 1), date(2024, 5, 27)]
        assert series.as_of == date(2024, 5, 27)

    def test_window_excludes_older_records(self):
        records = [make_record(date(2023, 1, 2) + timedelta(weeks=i), dso=float(i)) for i in range(30)]
        series = build_history(snapshot=StoreSnapshot.from_records(records), months=3)

        assert len(series) == 13
        assert series.points[0].week_start == series.start
        assert series.points[-1].week_start == date(2023, 1, 2) + timedelta(weeks=29)

    def test_ascending_order(self):
        records = [make_record(date(2024, 1, 1) + timedelta(weeks=i)) for i in (5, 1, 3)]
        series = build_history(snapshot=StoreSnapshot.from_records(records), months=12)

        weeks = [r.week_start for r in series.points]
        assert weeks == sorted(weeks)

    def test_explicit_as_of_need_not_be_stored(self):
        records = [make_record(date(2024, 1, 1) + timedelta(weeks=i)) for i in range(10)]
        series = build_history(snapshot=StoreSnapshot.from_records(records), months=1, as_of=date(2024, 2, 7))

        assert [r.week_start for r in series.points] == [
            date(2024, 1, 22), date(2024, 1, 29), date(2024, 2, 5)
        ]

    def test_values_are_raw(self):
        snap = StoreSnapshot.from_records([make_record(date(2024, 1, 1), dso=33.3, cei=None)])
        point = build_history(snapshot=snap, months=1).points[0]

        assert point.dso == 33.3
        assert point.cei is None

    def test_empty_snapshot(self):
        assert isinstance(build_history(snapshot=StoreSnapshot(), months=6), EmptyDatasetError)

    def test_months_checked_before_emptiness(self):
        with pytest.raises(InvalidQueryParameterError):
            build_history(snapshot=StoreSnapshot(), months=0)
