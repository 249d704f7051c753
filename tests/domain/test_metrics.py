"""
Tests for metrics domain models

Tests for validate_snapshot, AreaResult, HistoryEntry and the history helpers.
"""

import pytest

from dashbuild.domain.metrics import (
    MAX_METRIC_STRING_LENGTH,
    AreaResult,
    HistoryEntry,
    prune_before,
    replace_entry_for_date,
    validate_snapshot,
)


class TestValidateSnapshot:
    """Tests for validate_snapshot"""

    def test_accepts_numbers_and_short_strings(self):
        snapshot = {"open": 5, "rate": 92.5, "status": "healthy"}

        assert validate_snapshot(snapshot) == snapshot

    def test_returns_copy(self):
        snapshot = {"open": 5}

        assert validate_snapshot(snapshot) is not snapshot

    @pytest.mark.parametrize("value", [[1, 2], {"a": 1}, None, True])
    def test_rejects_non_scalar_values(self, value):
        with pytest.raises(ValueError, match="must be a number or short string"):
            validate_snapshot({"metric": value})

    def test_rejects_long_strings(self):
        with pytest.raises(ValueError, match="exceeds"):
            validate_snapshot({"metric": "x" * (MAX_METRIC_STRING_LENGTH + 1)})

    def test_rejects_non_mapping(self):
        with pytest.raises(ValueError, match="must be a mapping"):
            validate_snapshot([("open", 1)])

    def test_rejects_empty_key(self):
        with pytest.raises(ValueError, match="non-empty string"):
            validate_snapshot({"": 1})


class TestAreaResult:
    """Tests for AreaResult"""

    def test_empty(self):
        assert AreaResult.empty().is_empty

    def test_details_only_is_not_empty(self):
        assert not AreaResult(details={"languages": {}}).is_empty


class TestHistoryEntry:
    """Tests for HistoryEntry"""

    def test_round_trip(self):
        data = {"date": "2024-06-02", "metrics": {"open": 5}}

        assert HistoryEntry.from_dict(data).to_dict() == data

    @pytest.mark.parametrize(
        "data",
        [
            {"date": "2024/06/02", "metrics": {}},
            {"date": None, "metrics": {}},
            {"date": "2024-06-02", "metrics": [1]},
            "2024-06-02",
        ],
    )
    def test_malformed_entries_rejected(self, data):
        with pytest.raises(ValueError):
            HistoryEntry.from_dict(data)


class TestHistoryHelpers:
    """Tests for replace_entry_for_date and prune_before"""

    def test_replace_keeps_one_entry_per_date(self):
        history = [HistoryEntry("2024-06-01", {"open": 1}), HistoryEntry("2024-06-02", {"open": 2})]

        result = replace_entry_for_date(history, HistoryEntry("2024-06-02", {"open": 3}))

        assert [(e.date, e.metrics["open"]) for e in result] == [("2024-06-01", 1), ("2024-06-02", 3)]

    def test_replace_sorts_by_date(self):
        history = [HistoryEntry("2024-06-05", {}), HistoryEntry("2024-06-01", {})]

        result = replace_entry_for_date(history, HistoryEntry("2024-06-03", {}))

        assert [e.date for e in result] == ["2024-06-01", "2024-06-03", "2024-06-05"]

    def test_prune_before_keeps_cutoff(self):
        history = [HistoryEntry("2024-03-03", {}), HistoryEntry("2024-03-04", {}), HistoryEntry("2024-06-02", {})]

        assert [e.date for e in prune_before(history, "2024-03-04")] == ["2024-03-04", "2024-06-02"]
