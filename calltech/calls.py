"""
Call history.

Calls live on the voice platform. They are fetched per phone number and
flattened into the log rows and summary figures the dashboard shows.
"""

import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Optional

from pydantic import BaseModel

from calltech.integrations.vapi import VapiCall

MAX_CALL_LOGS = 500

NO_ANALYSIS = "No analysis available"
ANALYSIS_KEYS = ("text", "content", "summary", "transcript", "insights", "analysis")
PASSED_STATUSES = ("ended", "completed")

TIME_RANGES = {
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
    "90d": timedelta(days=90),
}
DEFAULT_TIME_RANGE = "7d"


class CallLog(BaseModel):
    id: str
    phoneNumber: str
    isWebCall: bool
    date: str
    time: str
    duration: str
    durationSeconds: int
    status: str
    recordingUrl: Optional[str] = None
    analysis: str
    createdAt: datetime


def format_duration(seconds: int) -> str:
    """``0s``, ``42s`` or ``3m 07s``."""
    if not seconds:
        return "0s"
    minutes, seconds = divmod(seconds, 60)
    if minutes == 0:
        return f"{seconds}s"
    return f"{minutes}m {seconds:02d}s"


def format_clock(moment: datetime) -> str:
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {suffix}"


def analysis_text(value: Any) -> str:
    """Pick something readable out of whatever the platform stored as analysis."""
    if value is None:
        return NO_ANALYSIS
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        for key in ANALYSIS_KEYS:
            if isinstance(value.get(key), str):
                return value[key]
        return json.dumps(value, default=str)[:200] + "..."
    return str(value)


def as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def call_duration_seconds(call: VapiCall) -> int:
    if call.startedAt and call.endedAt:
        return max(int((call.endedAt - call.startedAt).total_seconds()), 0)
    if call.duration:
        # Reported in milliseconds
        return int(call.duration // 1000)
    return 0


def call_log_from_vapi(call: VapiCall, assistant_phone_number: str, now: Optional[datetime] = None) -> CallLog:
    """
    Flatten a platform call into a log row.

    The caller's number is shown when known, otherwise the number the call
    came in on. A call the platform marked ended or completed counts as
    passed; anything else failed.
    """
    moment = call.endedAt or call.startedAt or call.createdAt
    created_at = as_utc(moment) if moment else (now or datetime.now(timezone.utc))

    phone_number = (call.customer.number if call.customer else None) or assistant_phone_number or ""
    duration_seconds = call_duration_seconds(call)

    recording_url = call.recordingUrl
    if not recording_url and isinstance(call.recording, str):
        recording_url = call.recording

    analysis = next(
        (value for value in (call.analysis, call.summary, call.transcript) if value is not None),
        None,
    )

    return CallLog(
        id=call.id,
        phoneNumber=phone_number,
        isWebCall=not phone_number,
        date=created_at.strftime("%Y-%m-%d") if moment else "",
        time=format_clock(created_at) if moment else "",
        duration=format_duration(duration_seconds),
        durationSeconds=duration_seconds,
        status="pass" if call.status in PASSED_STATUSES else "fail",
        recordingUrl=recording_url or None,
        analysis=analysis_text(analysis),
        createdAt=created_at,
    )


def newest_first(logs: Iterable[CallLog], limit: int = MAX_CALL_LOGS) -> list[CallLog]:
    return sorted(logs, key=lambda log: log.createdAt, reverse=True)[:limit]


@dataclass
class CallAnalytics:
    totalCalls: int = 0
    averageDuration: int = 0
    successRate: int = 0
    fallbackRate: int = 0


def summarize_calls(logs: list[CallLog]) -> CallAnalytics:
    """
    Headline figures for a set of calls.

    Rates are whole percentages of all calls. The average duration only
    counts calls that lasted at least a second.
    """
    analytics = CallAnalytics(totalCalls=len(logs))
    if not logs:
        return analytics

    passed = sum(1 for log in logs if log.status == "pass")
    analytics.successRate = round(passed * 100 / len(logs))
    analytics.fallbackRate = 100 - analytics.successRate

    durations = [log.durationSeconds for log in logs if log.durationSeconds > 0]
    if durations:
        analytics.averageDuration = round(sum(durations) / len(durations))
    return analytics


def time_range_start(time_range: Optional[str], now: Optional[datetime] = None) -> datetime:
    """Start of a ``24h``/``7d``/``30d``/``90d`` window; unknown ranges mean 7 days."""
    window = TIME_RANGES.get(time_range or DEFAULT_TIME_RANGE, TIME_RANGES[DEFAULT_TIME_RANGE])
    return (now or datetime.now(timezone.utc)) - window
