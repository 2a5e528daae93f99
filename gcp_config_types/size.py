# -*- coding: utf-8 -*-
"""Byte sizes that may be abbreviated with a suffix.

A value without a suffix must be an integer and is a size in bytes. Otherwise
one of the following (case insensitive) suffixes may follow the value:

b | bytes   bytes
k | kb      kilobytes (1000 bytes)
kib         kibibytes (1024 bytes)
m | mb      megabytes (1000^2 bytes)
mib         mebibytes (1024^2 bytes)
g | gb      gigabytes (1000^3 bytes)
gib         gibibytes (1024^3 bytes)
t | tb      terabytes (1000^4 bytes)
tib         tebibytes (1024^4 bytes)
p | pb      petabytes (1000^5 bytes)
pib         pebibytes (1024^5 bytes)
"""

import json
import re
import sys

_SIZE_PATTERN = re.compile(
    r'^(\d*\.\d+|\d+\.\d*|\d+)(\s*?)(b|bytes|k|kb|kib|m|mb|mib|g|gb|gib|t|tb|tib|p|pb|pib)$',
    re.IGNORECASE)
_INTEGER = re.compile(r'^[+-]?[0-9]+$')

_MULTIPLIERS = {
    "b": 1,
    "bytes": 1,
    "k": 1000,
    "kb": 1000,
    "kib": 1024,
    "m": 1000 ** 2,
    "mb": 1000 ** 2,
    "mib": 1024 ** 2,
    "g": 1000 ** 3,
    "gb": 1000 ** 3,
    "gib": 1024 ** 3,
    "t": 1000 ** 4,
    "tb": 1000 ** 4,
    "tib": 1024 ** 4,
    "p": 1000 ** 5,
    "pb": 1000 ** 5,
    "pib": 1024 ** 5,
}

_DISPLAY_UNITS = (
    (1000 ** 5, "PB"),
    (1000 ** 4, "TB"),
    (1000 ** 3, "GB"),
    (1000 ** 2, "MB"),
    (1000, "KB"),
)


def parse_size(size):
    """
    Parse a size string such as "512", "1.5kb" or "2 GiB" into a Size.

    An empty string is a zero size.

    :raises ValueError: if the string is not a valid size
    """
    if size == "":
        return Size(0)

    matches = _SIZE_PATTERN.match(size)
    if not matches:
        if not _INTEGER.match(size):
            raise ValueError(f"failed to parse size '{size}'")
        return Size(int(size))

    value = float(matches.group(1))
    multiplier = _MULTIPLIERS[matches.group(3).lower()]
    if value > sys.float_info.max / multiplier:
        raise ValueError("size exceeds maximum size of a 64-bit float")
    return Size(value * multiplier)


def _fmt_float(value):
    text = repr(float(value))
    if text.endswith(".0"):
        text = text[:-2]
    return text


class Size(float):
    """A number of bytes."""

    @classmethod
    def from_config(cls, value):
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError("a size can not be a boolean")
        if isinstance(value, (int, float)):
            return cls(value)
        if isinstance(value, str):
            return parse_size(value)
        raise ValueError(f"can not build a size from {type(value).__name__}")

    @property
    def bytes(self):
        return int(self)

    def __str__(self):
        if self < 1000:
            return f"{_fmt_float(self)} bytes"
        for factor, unit in _DISPLAY_UNITS:
            if self >= factor:
                return f"{_fmt_float(self / factor)}{unit}"

    def __repr__(self):
        return f"Size('{self}')"

    def to_json(self):
        return json.dumps(str(self))
