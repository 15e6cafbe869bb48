"""Parse duration strings such as ``"15m"``, ``"1h30m"`` or ``"1.5s"``."""

from __future__ import annotations

import re
from datetime import timedelta

# Seconds per unit
_UNITS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(value: str) -> timedelta:
    """Convert a duration string into a :class:`~datetime.timedelta`.

    A duration is an optionally signed sequence of decimal numbers, each
    followed by a unit (``ns``, ``us``, ``ms``, ``s``, ``m``, ``h``).
    ``"0"`` is accepted on its own.  Raises :class:`ValueError` otherwise.
    """
    text = value.strip()
    if not text:
        raise ValueError("empty duration")

    sign = 1.0
    if text[0] in "+-":
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]

    if text == "0":
        return timedelta(0)

    total = 0.0
    pos = 0
    while pos < len(text):
        match = _COMPONENT.match(text, pos)
        if match is None:
            raise ValueError(f"invalid duration {value!r}")
        number, unit = match.groups()
        total += float(number) * _UNITS[unit]
        pos = match.end()

    if pos == 0:
        raise ValueError(f"invalid duration {value!r}")
    return timedelta(seconds=sign * total)
