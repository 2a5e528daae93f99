# -*- coding: utf-8 -*-
"""Durations with day, week, month and year suffixes.

On top of the usual ``ns``, ``us``, ``ms``, ``s``, ``m`` and ``h`` units a
whole number may be suffixed with ``mo`` (30 days), ``w`` (7 days), ``d``
(24 hours) or ``y`` (365 days).
"""

import json
import re
from datetime import timedelta

NANOSECOND = 1
MICROSECOND = 1000 * NANOSECOND
MILLISECOND = 1000 * MICROSECOND
SECOND = 1000 * MILLISECOND
MINUTE = 60 * SECOND
HOUR = 60 * MINUTE

MAX_DURATION = 2 ** 63 - 1

# longest suffix first so "mo" wins over "m" style suffixes
_HOUR_PERIODS = (
    ("mo", 30 * 24),
    ("w", 7 * 24),
    ("d", 24),
    ("y", 365 * 24),
)
_UNITS = {
    "ns": NANOSECOND,
    "us": MICROSECOND,
    "µs": MICROSECOND,
    "μs": MICROSECOND,
    "ms": MILLISECOND,
    "s": SECOND,
    "m": MINUTE,
    "h": HOUR,
}
_COMPONENT = re.compile(r'([0-9]*)(?:\.([0-9]*))?([^0-9.]+)')
_INTEGER = re.compile(r'^[+-]?[0-9]+$')


def _parse_standard(text):
    orig = text
    neg = False
    if text and text[0] in "+-":
        neg = text[0] == "-"
        text = text[1:]
    if text == "0":
        return 0
    if text == "":
        raise ValueError(f"invalid duration '{orig}'")

    total = 0
    pos = 0
    while pos < len(text):
        match = _COMPONENT.match(text, pos)
        if not match or (match.group(1) == "" and not match.group(2)):
            raise ValueError(f"invalid duration '{orig}'")
        unit = _UNITS.get(match.group(3))
        if unit is None:
            raise ValueError(f"unknown unit '{match.group(3)}' in duration '{orig}'")
        whole = int(match.group(1) or "0")
        frac = match.group(2) or ""
        value = whole * unit
        if frac:
            value += int(frac) * unit // (10 ** len(frac))
        total += value
        if total > MAX_DURATION + (1 if neg else 0):
            raise ValueError(f"invalid duration '{orig}'")
        pos = match.end()
    return -total if neg else total


def parse_duration(dur):
    """
    Parse a duration string.

    An empty string is a zero duration.

    :type dur: str
    :param dur: e.g. "90s", "1h30m", "4mo", "2w"
    :return: Duration
    :raises ValueError: if the string is not a valid duration
    """
    if dur == "":
        return Duration(0)

    for suffix, hours in _HOUR_PERIODS:
        if dur.endswith(suffix):
            number = dur[:-len(suffix)]
            if not _INTEGER.match(number):
                raise ValueError(f"failed to parse integer portion of duration '{number}'")
            val = int(number)
            if abs(val) > MAX_DURATION // (hours * HOUR):
                raise ValueError(f"duration '{number}' exceeds maximum size of a 64-bit integer")
            return Duration(val * hours * HOUR)

    return Duration(_parse_standard(dur))


def _fmt_frac(value, prec):
    whole, frac = divmod(value, 10 ** prec)
    digits = f"{frac:0{prec}d}".rstrip("0")
    if digits:
        return f"{whole}.{digits}"
    return str(whole)


class Duration(int):
    """A span of time stored as whole nanoseconds."""

    def __new__(cls, value=0):
        return super(Duration, cls).__new__(cls, value)

    @classmethod
    def from_config(cls, value):
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError("a duration can not be a boolean")
        if isinstance(value, int):
            return cls(value)
        if isinstance(value, timedelta):
            return cls.from_timedelta(value)
        if isinstance(value, str):
            return parse_duration(value)
        raise ValueError(f"can not build a duration from {type(value).__name__}")

    @classmethod
    def from_timedelta(cls, value):
        return cls((value.days * 86400 + value.seconds) * SECOND + value.microseconds * MICROSECOND)

    def to_timedelta(self):
        return timedelta(microseconds=int(self) // MICROSECOND)

    def total_seconds(self):
        return int(self) / SECOND

    def __str__(self):
        if self == 0:
            return "0s"
        u = abs(int(self))
        sign = "-" if self < 0 else ""

        if u < SECOND:
            if u < MICROSECOND:
                return f"{sign}{u}ns"
            if u < MILLISECOND:
                return f"{sign}{_fmt_frac(u, 3)}µs"
            return f"{sign}{_fmt_frac(u, 6)}ms"

        text = f"{_fmt_frac(u % MINUTE, 9)}s"
        minutes = u // MINUTE
        if minutes:
            text = f"{minutes % 60}m{text}"
            hours = minutes // 60
            if hours:
                text = f"{hours}h{text}"
        return sign + text

    def __repr__(self):
        return f"Duration('{self}')"

    def to_json(self):
        return json.dumps(str(self))
