"""Tests for messaging statistics, streaks and trends."""
import pytest

from export_analyzer.config import DAY_MS
from export_analyzer.data_models import Message, Participant, Reaction, Thread
from export_analyzer.messaging_analytics import (
    compute_analytics,
    compute_streaks,
    compute_trend,
    median_low,
    one_to_one_partner,
)

D0 = 19000 * DAY_MS  # a UTC midnight


def _msg(sender, ts, content=None, **kwargs):
    return Message(sender_name=sender, timestamp_ms=ts, content=content, **kwargs)


class TestStreaks:

    def test_consecutive_days(self):
        days = {D0, D0 + DAY_MS, D0 + 2 * DAY_MS}
        assert compute_streaks(days, D0 + 5, D0 + 2 * DAY_MS + 5) == {"current": 3, "longest": 3}

    def test_gap_resets_current(self):
        days = {D0, D0 + DAY_MS, D0 + 3 * DAY_MS}
        assert compute_streaks(days, D0, D0 + 3 * DAY_MS) == {"current": 1, "longest": 2}

    def test_single_day_gap(self):
        days = {D0, D0 + 2 * DAY_MS}
        assert compute_streaks(days, D0, D0 + 2 * DAY_MS) == {"current": 1, "longest": 1}

    def test_no_messages(self):
        assert compute_streaks(set(), None, None) == {"current": 0, "longest": 0}


class TestTrend:

    def test_up_from_nothing(self):
        assert compute_trend({D0: 4}, D0) == {"direction": "up", "deltaPct": 100}

    def test_flat_when_empty(self):
        assert compute_trend({}, D0) == {"direction": "flat", "deltaPct": 0}

    def test_down(self):
        daily = {D0 - 40 * DAY_MS: 10, D0: 5}
        assert compute_trend(daily, D0) == {"direction": "down", "deltaPct": -50}

    def test_up_against_busy_prior_window(self):
        daily = {D0 - 40 * DAY_MS: 100, D0: 110}
        assert compute_trend(daily, D0) == {"direction": "up", "deltaPct": 10}

    def test_half_percent_rounds_up(self):
        daily = {D0 - 40 * DAY_MS: 8, D0: 9}
        assert compute_trend(daily, D0) == {"direction": "up", "deltaPct": 13}

    def test_small_change_is_flat(self):
        daily = {D0 - 40 * DAY_MS: 100, D0: 102}
        assert compute_trend(daily, D0) == {"direction": "flat", "deltaPct": 2}


class TestHelpers:

    def test_median_picks_upper_middle(self):
        assert median_low([3, 1, 2]) == 2
        assert median_low([1, 2, 3, 4]) == 3
        assert median_low([]) == 0

    def test_one_to_one_partner_skips_me(self):
        assert one_to_one_partner(["Me", "Alice"]) == "Alice"
        assert one_to_one_partner(["Alice", "Me"]) == "Alice"


class TestComputeAnalytics:

    @pytest.fixture
    def threads(self):
        return [
            Thread(title="Alice", thread_key="a", participants=[Participant("Alice"), Participant("Me")], messages=[
                _msg("Alice", D0 + 1000, "pizza tonight \U0001F600"),
                _msg("Me", D0 + DAY_MS, "Good  Boy good boy", photos_count=2),
                _msg("Alice", D0 + 2 * DAY_MS, None, reactions=[Reaction("\U0001F525", "Me")]),
            ]),
            Thread(title="Group", thread_key="g", participants=[Participant("A"), Participant("B"), Participant("C")],
                   messages=[_msg("A", D0 + 3600 * 1000 * 5, "pizza")]),
        ]

    def test_overview(self, threads):
        result = compute_analytics(threads)
        overview = result["overview"]
        assert overview["totalMessages"] == 4
        assert overview["totalConversations"] == 2
        assert overview["rangeDays"] == 3
        assert overview["totalEmojis"] == 2
        assert overview["startDate"] == "2022-01-08"

    def test_stats(self, threads):
        stats = compute_analytics(threads)["stats"]
        assert stats["streakLongest"] == 3
        assert stats["streakCurrent"] == 3
        assert stats["uniqueActiveDays"] == 3
        assert stats["topOneToOne"] == "Alice (3 msgs)"
        assert stats["topSender"] == "Alice (2 msgs)"
        assert stats["media"]["photos"] == 2
        assert stats["media"]["messagesWithMedia"] == 1
        assert stats["reactionsTotal"] == 1
        assert stats["maxPerDayCount"] == 2

    def test_charts(self, threads):
        charts = compute_analytics(threads)["charts"]
        assert charts["wordsTop20"][0] == ("pizza", 2)
        assert charts["conversationsTop10"][0] == ("Alice", 3)
        assert charts["emojisReactionsTop15"] == [("\U0001F525", 1)]
        assert charts["phraseCounts"]["good boy"] == [("Me", 2)]
        assert [d for d, _ in charts["dailySeries"]] == ["2022-01-08", "2022-01-09", "2022-01-10"]

    def test_hours_follow_timezone(self, threads):
        utc = compute_analytics(threads)["charts"]["hoursSeries"]
        oslo = compute_analytics(threads, tz="Europe/Oslo")["charts"]["hoursSeries"]
        assert utc[5][1] == 1
        assert oslo[6][1] == 1

    def test_phrase_counters_can_be_disabled(self, threads):
        assert compute_analytics(threads, phrase_counters=())["charts"]["phraseCounts"] == {}

    def test_active_days_pct_rounds_half_up(self):
        days = [0, 1, 2, 3, 7]
        thread = Thread(title="Alice", thread_key="a", participants=[Participant("Alice"), Participant("Me")],
                        messages=[_msg("Alice", D0 + d * DAY_MS, "hi") for d in days])
        result = compute_analytics([thread])
        assert result["overview"]["rangeDays"] == 8
        assert result["stats"]["activeDaysPct"] == 63

    def test_empty(self):
        result = compute_analytics([])
        assert result["overview"]["totalMessages"] == 0
        assert result["stats"]["streakLongest"] == 0
        assert result["stats"]["trend"] == {"direction": "flat", "deltaPct": 0}
