# -*- coding: utf-8 -*-

import json
import re

_OCTAL = re.compile(r'^0(?:o)?([0-7]+)$', re.IGNORECASE)
_DECIMAL = re.compile(r'^(?:0|[1-9][0-9]*)$')
MAX_FILE_MODE = 0o177777


def parse_file_mode(text):
    """
    Parse a file mode.

    Text with a leading "0" or "0o" is octal (as written by str()), anything
    else is decimal.

    :raises ValueError: if the text is not a mode or does not fit 16 bits
    """
    match = _OCTAL.match(text)
    if match:
        mode = int(match.group(1), 8)
    elif _DECIMAL.match(text):
        mode = int(text, 10)
    else:
        raise ValueError(f"invalid file mode '{text}'")
    return FileMode(mode)


class FileMode(int):
    """File or directory permission bits."""

    def __new__(cls, value=0):
        if not 0 <= int(value) <= MAX_FILE_MODE:
            raise ValueError(f"file mode {value} is out of range")
        return super(FileMode, cls).__new__(cls, value)

    @classmethod
    def from_config(cls, value):
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError("a file mode can not be a boolean")
        if isinstance(value, int):
            return cls(value)
        if isinstance(value, str):
            return parse_file_mode(value)
        raise ValueError(f"can not build a file mode from {type(value).__name__}")

    def __str__(self):
        if self == 0:
            return "0"
        return f"0{int(self):o}"

    def __repr__(self):
        return f"FileMode({self})"

    def to_json(self):
        return json.dumps(str(self))
