"""Human-readable durations in Go notation (``"10m0s"``, ``"1h30m"``, ``"1.5s"``)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal, InvalidOperation

# Unit sizes in microseconds, the resolution of timedelta
_UNITS: dict[str, Decimal] = {
    "ns": Decimal("0.001"),
    "us": Decimal(1),
    "µs": Decimal(1),
    "μs": Decimal(1),
    "ms": Decimal(1_000),
    "s": Decimal(1_000_000),
    "m": Decimal(60_000_000),
    "h": Decimal(3_600_000_000),
}

_TERM = r"(?:\d+(?:\.\d*)?|\.\d+)(?:ns|us|µs|μs|ms|s|m|h)"
_DURATION_PATTERN = re.compile(rf"^[+-]?(?:{_TERM})+$")
_TERM_PATTERN = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")

_US_PER_MS = 1_000
_US_PER_S = 1_000_000
_US_PER_M = 60 * _US_PER_S
_US_PER_H = 60 * _US_PER_M


@dataclass(frozen=True, slots=True)
class Duration:
    """An elapsed time that parses from and formats to Go duration text.

    Examples
    --------
    >>> str(Duration.parse("10m"))
    '10m0s'
    >>> Duration.parse("1h30m").duration
    datetime.timedelta(seconds=5400)
    """

    duration: timedelta

    @classmethod
    def parse(cls, value: object) -> Duration:
        """Build a Duration from text, a number of seconds, or a timedelta.

        Raises
        ------
        ValueError
            If the text is not a valid duration
        """
        if isinstance(value, Duration):
            return value
        if isinstance(value, timedelta):
            return cls(value)
        if isinstance(value, bool):
            raise ValueError(f"invalid duration {value!r}")
        if isinstance(value, int | float):
            return cls(timedelta(seconds=value))
        if not isinstance(value, str):
            raise ValueError(f"invalid duration {value!r}")
        return cls(_parse_text(value))

    def total_seconds(self) -> float:
        return self.duration.total_seconds()

    def __str__(self) -> str:
        return _format(self.duration)


def _parse_text(text: str) -> timedelta:
    stripped = text.strip()
    if stripped in ("0", "+0", "-0"):
        return timedelta(0)
    if not _DURATION_PATTERN.match(stripped):
        raise ValueError(f"invalid duration {text!r}")

    total = Decimal(0)
    try:
        for number, unit in _TERM_PATTERN.findall(stripped):
            total += Decimal(number) * _UNITS[unit]
    except InvalidOperation as e:
        raise ValueError(f"invalid duration {text!r}") from e

    if stripped.startswith("-"):
        total = -total
    return timedelta(microseconds=int(total.to_integral_value()))


def _format(value: timedelta) -> str:
    micros = value // timedelta(microseconds=1)
    if micros == 0:
        return "0s"
    if micros < 0:
        return "-" + _format(-value)

    if micros < _US_PER_S:
        if micros < _US_PER_MS:
            return f"{micros}µs"
        return f"{_fraction(micros, _US_PER_MS)}ms"

    hours, rest = divmod(micros, _US_PER_H)
    minutes, rest = divmod(rest, _US_PER_M)
    out = ""
    if hours:
        out += f"{hours}h"
    if hours or minutes:
        out += f"{minutes}m"
    return f"{out}{_fraction(rest, _US_PER_S)}s"


def _fraction(value: int, unit: int) -> str:
    whole, frac = divmod(value, unit)
    if not frac:
        return str(whole)
    digits = str(frac).rjust(len(str(unit)) - 1, "0").rstrip("0")
    return f"{whole}.{digits}"
