#!/usr/bin/env python3
"""
Tests for the history merge & retention store

Covers the one-entry-per-date rule, ordering, retention pruning, cache
recovery and the command-line interface.
"""

import json

import pytest

from dashbuild.merge_history import finalize_output, load_history, main, merge_history


def read_json(path):
    return json.loads(path.read_text(encoding="utf-8"))


def write_cache(path, history):
    path.write_text(json.dumps({"config": {"areas": ["prs"]}, "history": history}), encoding="utf-8")


class TestMergeHistory:
    """Tests for merge_history()"""

    def test_first_run_without_cache(self, tmp_path):
        output = tmp_path / "data.json"

        data = merge_history({"open": 5}, "", ["prs"], output, today="2024-06-02")

        assert data == {"config": {"areas": ["prs"]}, "history": [{"date": "2024-06-02", "metrics": {"open": 5}}]}
        assert read_json(output) == data

    def test_appends_new_day_to_cached_history(self, tmp_path):
        cache = tmp_path / "cache.json"
        write_cache(cache, [{"date": "2024-06-01", "metrics": {"open": 4}}])

        data = merge_history({"open": 5}, cache, ["prs"], tmp_path / "data.json", today="2024-06-02")

        assert [entry["date"] for entry in data["history"]] == ["2024-06-01", "2024-06-02"]

    def test_same_day_rerun_replaces_entry(self, tmp_path):
        cache = tmp_path / "cache.json"
        write_cache(cache, [{"date": "2024-06-02", "metrics": {"open": 4}}])

        data = merge_history({"open": 9}, cache, ["prs"], tmp_path / "data.json", today="2024-06-02")

        assert data["history"] == [{"date": "2024-06-02", "metrics": {"open": 9}}]

    def test_rerun_with_same_snapshot_is_idempotent(self, tmp_path):
        cache = tmp_path / "cache.json"
        output = tmp_path / "data.json"

        first = merge_history({"open": 5}, cache, ["prs"], output, today="2024-06-02")
        second = merge_history({"open": 5}, cache, ["prs"], output, today="2024-06-02")

        assert first == second

    def test_history_sorted_ascending(self, tmp_path):
        cache = tmp_path / "cache.json"
        write_cache(
            cache,
            [
                {"date": "2024-06-03", "metrics": {}},
                {"date": "2024-05-01", "metrics": {}},
            ],
        )

        data = merge_history({"open": 1}, cache, ["prs"], tmp_path / "data.json", today="2024-06-02")

        assert [entry["date"] for entry in data["history"]] == ["2024-05-01", "2024-06-02", "2024-06-03"]

    def test_retention_prunes_old_entries(self, tmp_path):
        cache = tmp_path / "cache.json"
        write_cache(
            cache,
            [
                {"date": "2024-01-01", "metrics": {"open": 1}},
                {"date": "2024-06-01", "metrics": {"open": 2}},
            ],
        )

        data = merge_history({"open": 3}, cache, ["prs"], tmp_path / "data.json", retention_days=90, today="2024-06-02")

        assert [entry["date"] for entry in data["history"]] == ["2024-06-01", "2024-06-02"]

    def test_retention_keeps_cutoff_date(self, tmp_path):
        cache = tmp_path / "cache.json"
        write_cache(cache, [{"date": "2024-03-04", "metrics": {}}, {"date": "2024-03-03", "metrics": {}}])

        data = merge_history({}, cache, ["prs"], tmp_path / "data.json", retention_days=90, today="2024-06-02")

        assert [entry["date"] for entry in data["history"]] == ["2024-03-04", "2024-06-02"]

    def test_zero_retention_keeps_everything(self, tmp_path):
        cache = tmp_path / "cache.json"
        write_cache(cache, [{"date": "2019-01-01", "metrics": {}}])

        data = merge_history({}, cache, ["prs"], tmp_path / "data.json", retention_days=0, today="2024-06-02")

        assert len(data["history"]) == 2

    def test_retention_beyond_calendar_range_keeps_everything(self, tmp_path):
        cache = tmp_path / "cache.json"
        write_cache(cache, [{"date": "2019-01-01", "metrics": {}}])

        data = merge_history(
            {"open": 1}, cache, ["prs"], tmp_path / "data.json", retention_days=1_000_000, today="2024-06-02"
        )

        assert [entry["date"] for entry in data["history"]] == ["2019-01-01", "2024-06-02"]
        assert (tmp_path / "data.json").exists()

    def test_cache_rewritten_with_output(self, tmp_path):
        cache = tmp_path / "nested" / "cache.json"

        data = merge_history({"open": 5}, cache, ["prs"], tmp_path / "data.json", today="2024-06-02")

        assert read_json(cache) == data

    def test_output_directories_created(self, tmp_path):
        output = tmp_path / "src" / "data" / "github-statistics.json"

        merge_history({"open": 5}, None, ["prs"], output, today="2024-06-02")

        assert output.exists()

    def test_invalid_snapshot_raises_before_writing(self, tmp_path):
        output = tmp_path / "data.json"

        with pytest.raises(ValueError):
            merge_history({"open": {"nested": 1}}, "", ["prs"], output, today="2024-06-02")

        assert not output.exists()


class TestLoadHistory:
    """Tests for cache recovery"""

    def test_missing_cache(self, tmp_path):
        assert load_history(tmp_path / "absent.json") == []

    def test_corrupt_cache_starts_fresh(self, tmp_path):
        cache = tmp_path / "cache.json"
        cache.write_text("{not json", encoding="utf-8")

        assert load_history(cache) == []

    def test_cache_without_history_list(self, tmp_path):
        cache = tmp_path / "cache.json"
        cache.write_text(json.dumps({"history": "oops"}), encoding="utf-8")

        assert load_history(cache) == []

    def test_malformed_entries_skipped(self, tmp_path):
        cache = tmp_path / "cache.json"
        write_cache(
            cache,
            [
                {"date": "2024-06-01", "metrics": {"open": 1}},
                {"date": "June 2nd", "metrics": {}},
                "not an entry",
            ],
        )

        history = load_history(cache)

        assert [entry.date for entry in history] == ["2024-06-01"]

    def test_corrupt_cache_does_not_fail_merge(self, tmp_path):
        cache = tmp_path / "cache.json"
        cache.write_text("\x00\x01garbage", encoding="utf-8")

        data = merge_history({"open": 5}, cache, ["prs"], tmp_path / "data.json", today="2024-06-02")

        assert len(data["history"]) == 1
        assert read_json(cache) == data


class TestFinalizeOutput:
    """Tests for layering config and details over merged history"""

    def test_adds_config_and_details(self, tmp_path):
        output = tmp_path / "data.json"
        cache = tmp_path / "cache.json"
        history_data = merge_history({"open": 5}, cache, ["prs"], output, today="2024-06-02")

        final = finalize_output(
            history_data,
            config={"repository": "octo/widgets", "lookbackDays": 90},
            details={"openPrs": []},
            output_file_path=output,
            cache_file_path=cache,
        )

        assert final["config"] == {"areas": ["prs"], "repository": "octo/widgets", "lookbackDays": 90}
        assert final["details"] == {"openPrs": []}
        assert final["history"] == history_data["history"]
        assert read_json(output) == final
        assert read_json(cache) == final

    def test_next_run_reads_finalized_cache(self, tmp_path):
        output = tmp_path / "data.json"
        cache = tmp_path / "cache.json"
        history_data = merge_history({"open": 5}, cache, ["prs"], output, today="2024-06-01")
        finalize_output(history_data, {"repository": "octo/widgets"}, {"x": 1}, output, cache)

        data = merge_history({"open": 6}, cache, ["prs"], output, today="2024-06-02")

        assert [entry["metrics"]["open"] for entry in data["history"]] == [5, 6]


class TestMain:
    """Tests for the command-line interface"""

    @pytest.fixture(autouse=True)
    def quiet_logging(self, monkeypatch):
        monkeypatch.setattr("dashbuild.merge_history.setup_logging", lambda *args, **kwargs: None)

    def test_writes_output(self, tmp_path):
        output = tmp_path / "data.json"

        exit_code = main(['{"open": 5}', "", "prs, issues", str(output), "30"])

        assert exit_code == 0
        assert read_json(output)["config"] == {"areas": ["prs", "issues"]}

    def test_invalid_json_exits_nonzero(self, tmp_path):
        output = tmp_path / "data.json"

        assert main(["{broken", "", "prs", str(output)]) == 1
        assert not output.exists()

    def test_non_object_metrics_exits_nonzero(self, tmp_path):
        assert main(["[1, 2]", "", "prs", str(tmp_path / "data.json")]) == 1
