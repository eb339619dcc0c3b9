"""Parsing of SchoolSoft week range strings such as ``"34-43, 45-51, 3-9"``."""

import re
from typing import Iterator

from .errors import WeekRangeError

_TOKEN_PATTERN = re.compile(r"^(\d+)(?:\s*-\s*(\d+))?$")


def parse_week_range(text: str) -> Iterator[int]:
    """Yield the week numbers described by a week range string.

    Tokens are separated by commas with optional whitespace. A token is
    either a single week (``"39"``) or an inclusive range (``"30-37"``).
    Weeks are produced in the order the tokens appear and duplicates are
    kept.

    Args:
        text: Week range string, may be empty.

    Yields:
        Week numbers.

    Raises:
        WeekRangeError: On the first malformed token.
    """
    if not text or not text.strip():
        return

    for raw_token in text.split(","):
        token = raw_token.strip()
        match = _TOKEN_PATTERN.match(token)
        if not match:
            raise WeekRangeError(text, token)

        low = int(match.group(1))
        high = int(match.group(2)) if match.group(2) is not None else low
        if high < low:
            raise WeekRangeError(text, token)

        yield from range(low, high + 1)
