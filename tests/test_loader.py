"""
Loader tests

Tidy frames and the competition's wide CSV files must load into contiguous
records, and malformed input must fail loud.
"""

import numpy as np
import pandas as pd
import pytest

from tcomp.data.loader import (collection_from_frames, load_competition_csv,
                               load_tourism)
from tcomp.data.records import Frequency, SeriesCollection, SeriesRecord
from tcomp.data.validate import (assert_valid, print_validation_report,
                                 validate_collection, validate_record)
from tests.stubs import quarterly_record, write_wide_csv


def _tidy(unique_id, start, values, freq="MS"):
    return pd.DataFrame({
        "unique_id": [unique_id] * len(values),
        "ds": pd.date_range(start, periods=len(values), freq=freq),
        "y": values,
    })


class TestCollectionFromFrames:
    """statsforecast-style [unique_id, ds, y] frames"""

    def test_builds_contiguous_records(self):
        train = pd.concat([
            _tidy("A", "2000-01-01", np.arange(1.0, 13.0)),
            _tidy("B", "2005-06-01", np.arange(20.0, 32.0)),
        ])
        test = pd.concat([
            _tidy("B", "2006-06-01", [40.0, 41.0]),
            _tidy("A", "2001-01-01", [30.0, 31.0]),
        ])

        collection = collection_from_frames(train, test, "monthly")

        assert list(collection) == ["A", "B"]
        a = collection["A"]
        assert a.frequency is Frequency.MONTHLY
        assert a.start == pd.Period("2000-01", freq="M")
        assert a.horizon == 2
        np.testing.assert_array_equal(a.test, [30.0, 31.0])

    def test_frequency_mapping(self):
        train = _tidy("A", "2000-01-01", [1.0, 2.0, 3.0], freq="YS")
        test = _tidy("A", "2003-01-01", [4.0], freq="YS")

        collection = collection_from_frames(train, test, {"A": "yearly"})
        assert collection["A"].start == pd.Period("2000", freq="Y")

    @pytest.mark.fail_loud
    def test_gap_between_train_and_test_raises(self):
        train = _tidy("A", "2000-01-01", np.arange(1.0, 13.0))
        test = _tidy("A", "2001-03-01", [1.0, 2.0])

        with pytest.raises(ValueError, match="gap or overlap"):
            collection_from_frames(train, test, "monthly")

    @pytest.mark.fail_loud
    def test_overlap_raises(self):
        train = _tidy("A", "2000-01-01", np.arange(1.0, 13.0))
        test = _tidy("A", "2000-12-01", [1.0, 2.0])

        with pytest.raises(ValueError, match="must follow training"):
            collection_from_frames(train, test, "monthly")

    @pytest.mark.fail_loud
    def test_series_mismatch_raises(self):
        train = _tidy("A", "2000-01-01", [1.0, 2.0])
        test = _tidy("B", "2000-03-01", [3.0])

        with pytest.raises(ValueError, match="mismatch"):
            collection_from_frames(train, test, "monthly")

    @pytest.mark.fail_loud
    def test_duplicates_raise(self):
        train = pd.concat([_tidy("A", "2000-01-01", [1.0, 2.0])] * 2)
        test = _tidy("A", "2000-03-01", [3.0])

        with pytest.raises(ValueError, match="duplicate"):
            collection_from_frames(train, test, "monthly")

    @pytest.mark.fail_loud
    def test_missing_columns_raise(self):
        bad = pd.DataFrame({"unique_id": ["A"], "y": [1.0]})
        with pytest.raises(ValueError, match="missing required columns"):
            collection_from_frames(bad, bad, "monthly")


class TestCompetitionCSV:
    """Wide files: ids, length, start year, [start period], observations"""

    def test_quarterly_pair(self, tmp_path):
        write_wide_csv(tmp_path / "quarterly_in.csv", {
            "Q1": [5, 1990, 3, 1.0, 2.0, 3.0, 4.0, 5.0],
            "Q2": [3, 2000, 1, 7.0, 8.0, 9.0],
        })
        write_wide_csv(tmp_path / "quarterly_oos.csv", {
            "Q1": [2, 1991, 4, 6.0, 7.0],
            "Q2": [2, 2000, 4, 10.0, 11.0],
        })

        collection = load_competition_csv(
            tmp_path / "quarterly_in.csv", tmp_path / "quarterly_oos.csv", "quarterly"
        )

        assert list(collection) == ["Q1", "Q2"]
        q1 = collection["Q1"]
        assert q1.start == pd.Period("1990Q3", freq="Q")
        np.testing.assert_array_equal(q1.train, [1.0, 2.0, 3.0, 4.0, 5.0])
        np.testing.assert_array_equal(q1.test, [6.0, 7.0])
        assert len(collection["Q2"].train) == 3

    @pytest.mark.fail_loud
    def test_misaligned_oos_raises(self, tmp_path):
        write_wide_csv(tmp_path / "in.csv", {"Y1": [3, 1990, 1.0, 2.0, 3.0]})
        write_wide_csv(tmp_path / "oos.csv", {"Y1": [1, 1995, 4.0]})

        with pytest.raises(ValueError, match="expected 1993"):
            load_competition_csv(tmp_path / "in.csv", tmp_path / "oos.csv", "yearly")

    @pytest.mark.fail_loud
    def test_short_column_raises(self, tmp_path):
        write_wide_csv(tmp_path / "in.csv", {"Y1": [5, 1990, 1.0, 2.0]})
        write_wide_csv(tmp_path / "oos.csv", {"Y1": [1, 1995, 4.0]})

        with pytest.raises(ValueError, match="declares 5 observations"):
            load_competition_csv(tmp_path / "in.csv", tmp_path / "oos.csv", "yearly")

    def test_load_tourism_directory(self, tmp_path):
        write_wide_csv(tmp_path / "yearly_in.csv", {"Y1": [3, 1990, 1.0, 2.0, 3.0]})
        write_wide_csv(tmp_path / "yearly_oos.csv", {"Y1": [4, 1993, 4.0, 5.0, 6.0, 7.0]})
        write_wide_csv(tmp_path / "monthly_in.csv", {"M1": [2, 2000, 11, 1.0, 2.0]})
        write_wide_csv(tmp_path / "monthly_oos.csv", {"M1": [1, 2001, 1, 3.0]})

        collection = load_tourism(tmp_path, frequencies=["yearly", "monthly"])

        assert list(collection) == ["Y1", "M1"]
        assert collection["M1"].start == pd.Period("2000-11", freq="M")

    @pytest.mark.fail_loud
    def test_load_tourism_missing_files(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="yearly_in.csv"):
            load_tourism(tmp_path)


class TestValidation:
    """Competition layout checks"""

    def test_horizon_mismatch_flagged(self):
        result = validate_record(quarterly_record())

        assert not result.is_valid
        assert not result.horizon_matches
        assert result.expected_horizon == 8
        assert result.has_mase_scale

    def test_valid_record(self):
        record = SeriesRecord("Y1", "yearly", train=[1.0, 2.0, 3.0], test=[4.0, 5.0, 6.0, 7.0])
        assert validate_record(record).is_valid

    @pytest.mark.fail_loud
    def test_assert_valid_raises(self):
        results = validate_collection(SeriesCollection([quarterly_record()]))
        with pytest.raises(ValueError, match="1 invalid series"):
            assert_valid(results)

    def test_report_lists_invalid_series(self, capsys):
        valid = SeriesRecord("Y1", "yearly", train=[1.0, 2.0, 3.0], test=[4.0, 5.0, 6.0, 7.0])
        print_validation_report(validate_collection(SeriesCollection([valid, quarterly_record()])))

        out = capsys.readouterr().out
        assert "Validation Report: FAIL" in out
        assert "Invalid: 1" in out
        assert "Q1: test length 4 != competition horizon 8" in out
