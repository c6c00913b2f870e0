"""
Unit tests for call log flattening and call analytics.
"""

from datetime import datetime, timedelta, timezone

import pytest

from calltech.calls import (
    NO_ANALYSIS,
    CallLog,
    analysis_text,
    call_log_from_vapi,
    format_clock,
    format_duration,
    newest_first,
    summarize_calls,
    time_range_start,
)
from calltech.integrations.vapi import VapiCall

pytestmark = pytest.mark.unit

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def make_log(call_id: str, status: str = "pass", seconds: int = 60, hours_ago: int = 1) -> CallLog:
    return CallLog(
        id=call_id,
        phoneNumber="+14155550100",
        isWebCall=False,
        date="",
        time="",
        duration=format_duration(seconds),
        durationSeconds=seconds,
        status=status,
        analysis=NO_ANALYSIS,
        createdAt=NOW - timedelta(hours=hours_ago),
    )


class TestFormatting:
    @pytest.mark.parametrize(
        "seconds,expected",
        [(0, "0s"), (7, "7s"), (59, "59s"), (60, "1m 00s"), (187, "3m 07s"), (3600, "60m 00s")],
    )
    def test_format_duration(self, seconds, expected):
        assert format_duration(seconds) == expected

    @pytest.mark.parametrize(
        "hour,minute,expected",
        [(0, 5, "12:05 AM"), (9, 30, "9:30 AM"), (12, 0, "12:00 PM"), (23, 59, "11:59 PM")],
    )
    def test_format_clock(self, hour, minute, expected):
        assert format_clock(datetime(2026, 1, 1, hour, minute)) == expected


class TestAnalysisText:
    def test_missing(self):
        assert analysis_text(None) == NO_ANALYSIS

    def test_plain_string(self):
        assert analysis_text("Caller booked a table") == "Caller booked a table"

    def test_first_known_key_wins(self):
        assert analysis_text({"score": 3, "summary": "Short call", "transcript": "Hi"}) == "Short call"

    def test_unknown_dict_is_truncated_json(self):
        text = analysis_text({"score": "x" * 300})

        assert text.startswith('{"score": "xxx')
        assert text.endswith("...")
        assert len(text) == 203


class TestCallLogFromVapi:
    def test_completed_phone_call(self):
        call = VapiCall.model_validate({
            "id": "call-1",
            "status": "ended",
            "startedAt": "2026-10-18T14:05:00Z",
            "endedAt": "2026-10-18T14:06:35Z",
            "customer": {"number": "+14155559999"},
            "recordingUrl": "https://storage.test/call-1.wav",
            "analysis": {"summary": "Asked about hours"},
        })

        log = call_log_from_vapi(call, "+14155550100")

        assert log.phoneNumber == "+14155559999"
        assert log.isWebCall is False
        assert log.date == "2026-10-18"
        assert log.time == "2:06 PM"
        assert log.duration == "1m 35s"
        assert log.durationSeconds == 95
        assert log.status == "pass"
        assert log.recordingUrl == "https://storage.test/call-1.wav"
        assert log.analysis == "Asked about hours"
        assert log.createdAt == datetime(2026, 10, 18, 14, 6, 35, tzinfo=timezone.utc)

    def test_sparse_call_falls_back(self):
        call = VapiCall.model_validate({
            "id": "call-2",
            "status": "in-progress",
            "createdAt": "2026-10-18T09:00:00Z",
            "duration": 42500,
            "recording": "https://storage.test/call-2.wav",
            "summary": "Hung up",
        })

        log = call_log_from_vapi(call, "+14155550100")

        assert log.phoneNumber == "+14155550100"
        assert log.status == "fail"
        assert log.durationSeconds == 42
        assert log.recordingUrl == "https://storage.test/call-2.wav"
        assert log.analysis == "Hung up"

    def test_web_call_without_any_number(self):
        call = VapiCall.model_validate({"id": "call-3", "status": "completed"})

        log = call_log_from_vapi(call, "", now=NOW)

        assert log.isWebCall is True
        assert log.date == ""
        assert log.duration == "0s"
        assert log.analysis == NO_ANALYSIS
        assert log.createdAt == NOW


class TestSummaries:
    def test_newest_first_with_limit(self):
        logs = [make_log("old", hours_ago=5), make_log("new", hours_ago=1), make_log("mid", hours_ago=3)]

        assert [log.id for log in newest_first(logs)] == ["new", "mid", "old"]
        assert [log.id for log in newest_first(logs, limit=1)] == ["new"]

    def test_no_calls(self):
        analytics = summarize_calls([])

        assert (analytics.totalCalls, analytics.successRate, analytics.fallbackRate) == (0, 0, 0)

    def test_rates_and_average(self):
        logs = [
            make_log("a", "pass", 60),
            make_log("b", "pass", 120),
            make_log("c", "fail", 0),
        ]

        analytics = summarize_calls(logs)

        assert analytics.totalCalls == 3
        assert analytics.successRate == 67
        assert analytics.fallbackRate == 33
        assert analytics.averageDuration == 90

    @pytest.mark.parametrize("time_range,days", [("24h", 1), ("30d", 30), ("90d", 90), ("bogus", 7), (None, 7)])
    def test_time_range_start(self, time_range, days):
        assert time_range_start(time_range, now=NOW) == NOW - timedelta(days=days)
