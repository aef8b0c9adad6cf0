"""Datetime helpers."""

from __future__ import annotations

from datetime import timedelta

import pendulum


def now_utc() -> pendulum.DateTime:
    return pendulum.now("UTC")


def from_mtime(value: float) -> pendulum.DateTime:
    return pendulum.from_timestamp(value, tz="UTC")


def format_timestamp(value: pendulum.DateTime) -> str:
    """ISO-8601 with millisecond precision and a ``Z`` suffix."""
    return value.in_timezone("UTC").format("YYYY-MM-DD[T]HH:mm:ss.SSS[Z]")


def is_older_than(value: pendulum.DateTime, age: timedelta, *, now: pendulum.DateTime | None = None) -> bool:
    reference = now or now_utc()
    return reference - value > age
