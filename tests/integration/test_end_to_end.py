"""End-to-end flows: payload in, dashboard numbers and frames out."""

import json

import pytest
from click.testing import CliRunner

from sugarbit.cli import cli
from sugarbit.core.exceptions import FetchFailed
from sugarbit.core.graph import Viewport
from sugarbit.core.state import AppState
from sugarbit.core.summary import format_delta, format_value
from sugarbit.core.timescale import Timescale
from sugarbit.fetch import FetchResult
from sugarbit.scheduler import UpdateScheduler
from tests.fixtures.payloads import make_payload


class TestDashboardFlow:
    """Load, summarize and project through the public API."""

    def test_two_fresh_readings(self, two_reading_payload, now_1006):
        state = AppState()
        state.refresh(two_reading_payload, now_1006)
        summary = state.summarize(now_1006, max_age=900, max_delta_age=900)

        assert format_value(summary.current) == "6.0"
        assert summary.is_stale is False
        assert format_delta(summary.delta) == "+0.5"
        assert summary.delta_is_stale_or_invalid is False

    def test_gap_hides_delta(self, gap_payload, now_1006):
        state = AppState()
        state.refresh(gap_payload, now_1006)
        summary = state.summarize(now_1006, max_age=900, max_delta_age=900)

        assert summary.current == 9.1
        assert summary.delta is None
        assert summary.shows_delta is False

    def test_malformed_entries_skipped(self, malformed_payload, now_1006):
        state = AppState()
        state.refresh(malformed_payload, now_1006)

        assert [s.value for s in state.series] == [5.5, 6.0]
        assert state.summarize(now_1006).delta == pytest.approx(0.5)

    def test_rotation_changes_projection(self, day_payload, now_1006):
        state = AppState()
        state.refresh(day_payload, now_1006)
        view = Viewport(288, 100)

        counts = []
        for _ in range(4):
            counts.append(len(state.project(now_1006, view).points))
            state.advance_timescale(now_1006)

        assert counts == [36, 72, 144, 288]
        assert state.timescale is Timescale.H3


class TestSchedulerFlow:
    """Scheduler against a source that goes away."""

    def test_new_readings_then_outage(self, now_1006):
        clock = [now_1006]
        results = [
            FetchResult(make_payload(now_1006 - 60, 12), last_modified=now_1006 - 60),
            FetchResult(make_payload(now_1006 + 30, 13), last_modified=now_1006 + 30),
        ]

        def fetch():
            if results:
                return results.pop(0)
            raise FetchFailed("https://example.net/BG.json", "connection refused")

        def sleep(seconds):
            clock[0] += seconds

        frames = []
        scheduler = UpdateScheduler(
            AppState(), fetch, lambda summary, projection, now: frames.append(summary),
            clock=lambda: clock[0], sleep=sleep,
        )
        scheduler.run(max_ticks=60)

        assert frames[0].current == pytest.approx(6.1)
        assert frames[1].current == pytest.approx(6.2)
        assert frames[1].is_stale is False
        # Last readings kept through the outage until they age out
        assert frames[-1].current == pytest.approx(6.2)
        assert frames[-1].is_stale is True
        assert isinstance(scheduler.last_error, FetchFailed)
        # Once the next upload is overdue, polling drops to the minimum interval
        assert scheduler.next_delay(scheduler.now()) == 15


class TestCliFlow:
    """CLI against a saved report."""

    def test_show_json_matches_library(self, tmp_path, monkeypatch, day_payload, now_1006):
        (tmp_path / ".git").mkdir()
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        path = tmp_path / "BG.json"
        path.write_text(json.dumps(day_payload))

        result = CliRunner().invoke(
            cli, ["show", "-f", str(path), "--now", "2024.01.01 - 10:06:00", "-t", "6h", "--json"]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)

        state = AppState()
        state.advance_timescale(now_1006)
        state.refresh(day_payload, now_1006)
        assert data["samples"] == len(state.series) == 72
        assert data["summary"]["current"] == state.series.latest(1)[0].value
        assert data["value_ceiling"] == state.value_ceiling
