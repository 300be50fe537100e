"""Lenient type coercion for configuration values.

Every ``to_*`` function accepts any value and returns the requested type,
falling back to that type's zero value when the input is missing or cannot
be converted. Values read from files keep their native types; values read
from the environment are always strings, so string parsing matters most.
"""

import json
import logging
import math
import re
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)
ZERO_DURATION = timedelta(0)

_TRUE_STRINGS = {"1", "t", "T", "TRUE", "true", "True"}

# Units accepted in duration strings, expressed in microseconds.
_DURATION_UNITS = {
    "ns": 0.001,
    "us": 1,
    "µs": 1,
    "μs": 1,
    "ms": 1000,
    "s": 1_000_000,
    "m": 60 * 1_000_000,
    "h": 3600 * 1_000_000,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip() in _TRUE_STRINGS
    return False


def to_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return 0
        return int(value)
    if isinstance(value, str):
        return _parse_int(value.strip())
    return 0


def _parse_int(text: str) -> int:
    # "8080.0" is accepted the same as "8080"
    if "." in text:
        head, _, tail = text.partition(".")
        if tail.strip("0") == "":
            text = head
    # A leading zero means octal, as in "0755".
    digits = text.lstrip("+-")
    base = 8 if len(digits) > 1 and digits[0] == "0" and digits[1].isdigit() else 0
    try:
        return int(text, base)
    except ValueError:
        return 0


def to_uint(value: Any) -> int:
    result = to_int(value)
    return result if result > 0 else 0


def to_float(value: Any) -> float:
    if isinstance(value, (bool, int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return 0.0
    return 0.0


def to_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return format_duration(value)
    return ""


def _format_float(value: float) -> str:
    if not math.isfinite(value):
        return repr(value)
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def to_string_list(value: Any) -> List[str]:
    if isinstance(value, (list, tuple)):
        return [to_string(item) for item in value]
    if isinstance(value, str):
        return value.split()
    return []


def to_string_map(value: Any) -> Dict[str, Any]:
    if isinstance(value, dict):
        return {str(key): item for key, item in value.items()}
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except json.JSONDecodeError:
            return {}
        if isinstance(decoded, dict):
            return decoded
    return {}


def to_duration(value: Any) -> timedelta:
    """Coerce ``value`` to a :class:`~datetime.timedelta`.

    Numbers are seconds. Strings are either a bare number of seconds or a
    sequence of ``<number><unit>`` parts with an optional leading sign,
    e.g. ``"1h30m"``, ``"-1.5s"`` or ``"250ms"``.
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        return ZERO_DURATION
    if isinstance(value, (int, float)):
        try:
            return timedelta(seconds=value)
        except (OverflowError, ValueError):
            return ZERO_DURATION
    if isinstance(value, str):
        return _parse_duration(value.strip())
    return ZERO_DURATION


def _parse_duration(text: str) -> timedelta:
    if not text:
        return ZERO_DURATION

    try:
        return timedelta(seconds=float(text))
    except (OverflowError, ValueError):
        pass

    sign = 1
    if text[0] in "+-":
        sign = -1 if text[0] == "-" else 1
        text = text[1:]

    position = 0
    microseconds = 0.0
    while position < len(text):
        match = _DURATION_PART.match(text, position)
        if match is None:
            logger.debug(f"Invalid duration string: {text!r}")
            return ZERO_DURATION
        number, unit = match.groups()
        microseconds += float(number) * _DURATION_UNITS[unit]
        position = match.end()

    if position == 0:
        return ZERO_DURATION

    try:
        return sign * timedelta(microseconds=microseconds)
    except OverflowError:
        return ZERO_DURATION


def format_duration(value: timedelta) -> str:
    """Render a timedelta in the same ``1h2m3.5s`` syntax :func:`to_duration` reads."""
    total = value.total_seconds()
    if total == 0:
        return "0s"

    sign = "-" if total < 0 else ""
    total = abs(total)
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)

    parts = []
    if hours:
        parts.append(f"{int(hours)}h")
    if hours or minutes:
        parts.append(f"{int(minutes)}m")
    parts.append(f"{_format_float(round(seconds, 6))}s")
    return sign + "".join(parts)


def to_time(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, bool):
        return ZERO_TIME
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return ZERO_TIME
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return ZERO_TIME
        try:
            return date_parser.parse(value)
        except (ValueError, OverflowError) as e:
            logger.debug(f"Invalid time string {value!r}: {e}")
            return ZERO_TIME
    return ZERO_TIME
