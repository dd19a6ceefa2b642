"""Date revival while decoding Traffic Ops JSON responses.

Traffic Ops names its timestamp fields differently from endpoint to
endpoint, and encodes them either as strings (RFC3339, or its own
``2022-07-18 00:00:00+00`` form) or as Unix epoch numbers. A
:class:`DateKeySpec` names the fields to revive for one request; values
under any other key are left exactly as the JSON parser produced them.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from dateutil.parser import isoparse

# Seconds to milliseconds.
DEFAULT_UNIX_MULTIPLIER = 1000.0

DEFAULT_DATE_KEYS: tuple[str, ...] = ("lastUpdated",)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# isoparse is laxer than Traffic Ops: it accepts dates without a time or an
# offset. Anything it should see has to look like this first.
_TIMESTAMP_SHAPE = re.compile(
    r"""
    ^\d{4}-\d{2}-\d{2}
    [Tt\ ]
    \d{2}:\d{2}:\d{2}(?:\.\d+)?
    (?:[Zz]|[+-]\d{2}(?::?\d{2})?)$
    """,
    re.VERBOSE | re.ASCII,
)

_PLAIN_NUMBER = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$", re.ASCII)


@dataclass(slots=True, frozen=True)
class InvalidDate:
    """A value shaped like a timestamp that names no real instant."""

    raw: object

    @property
    def is_valid(self) -> bool:
        return False


def parse_timestamp(value: str) -> datetime | InvalidDate | None:
    """Parse an RFC3339 or Traffic Ops style timestamp.

    Returns ``None`` when ``value`` is not shaped like a timestamp at all,
    and an :class:`InvalidDate` when it is shaped like one but describes an
    impossible date or time (``2022-02-30``, hour 25, ...).
    """

    text = value.strip()
    if _TIMESTAMP_SHAPE.match(text) is None:
        return None
    try:
        parsed = isoparse(text)
        return parsed.replace(tzinfo=timezone(parsed.utcoffset()))
    except (ValueError, OverflowError):
        return InvalidDate(value)


def _coerce_number(value: object) -> float | None:
    """Read ``value`` as a JSON number or a plain decimal string.

    Raises ``OverflowError`` for integers too large for a float.
    """

    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if text == "":
            number = 0.0
        elif _PLAIN_NUMBER.match(text) is None:
            return None
        else:
            number = float(text)
    else:
        return None
    if math.isnan(number):
        return None
    return number


def parse_unix(value: object, multiplier: float) -> object:
    """Revive an epoch value; ``multiplier`` converts it to milliseconds."""

    try:
        number = _coerce_number(value)
        if number is None:
            return value
        millis = number * multiplier
        if not math.isfinite(millis):
            raise OverflowError(millis)
        return _EPOCH + timedelta(milliseconds=millis)
    except OverflowError:
        return InvalidDate(value)


UnixKey = str | tuple[str, float]


@dataclass(slots=True, frozen=True)
class DateKeySpec:
    """Names which response fields hold dates, and how they are encoded.

    ``unix`` entries are either a bare key, whose values are taken to be in
    seconds, or a ``(key, multiplier)`` pair where the multiplier turns the
    value into milliseconds (``1`` for values already in milliseconds,
    ``0.000001`` for nanoseconds).

    When a key appears in both sets, a string value under it is only ever
    treated as a date string.
    """

    date_string: Sequence[str] = ()
    unix: Sequence[UnixKey] = ()

    def __post_init__(self) -> None:
        if isinstance(self.date_string, str):
            raise TypeError("date_string must be a sequence of str, not str")
        object.__setattr__(self, "date_string", tuple(self.date_string))
        if isinstance(self.unix, str):
            raise TypeError("unix must be a sequence of keys or (key, multiplier) pairs, not str")
        normalized: list[tuple[str, float]] = []
        for entry in self.unix:
            if isinstance(entry, str):
                normalized.append((entry, DEFAULT_UNIX_MULTIPLIER))
            else:
                key, multiplier = entry
                normalized.append((key, float(multiplier)))
        object.__setattr__(self, "unix", tuple(normalized))

    @classmethod
    def default(cls) -> "DateKeySpec":
        return cls(date_string=DEFAULT_DATE_KEYS)

    @property
    def is_empty(self) -> bool:
        return not self.date_string and not self.unix

    def unix_multipliers(self) -> dict[str, float]:
        return {key: multiplier for key, multiplier in self.unix}  # type: ignore[misc]


Reviver = Callable[[str, object], object]


def build_reviver(spec: DateKeySpec) -> Reviver | None:
    if spec.is_empty:
        return None
    date_keys = frozenset(spec.date_string)
    multipliers = spec.unix_multipliers()

    def revive(key: str, value: object) -> object:
        if key in date_keys and isinstance(value, str):
            parsed = parse_timestamp(value)
            return value if parsed is None else parsed
        multiplier = multipliers.get(key)
        if multiplier is not None:
            return parse_unix(value, multiplier)
        return value

    return revive


def _pairs_hook(reviver: Reviver) -> Callable[[Iterable[tuple[str, object]]], dict[str, object]]:
    def hook(pairs: Iterable[tuple[str, object]]) -> dict[str, object]:
        return {key: reviver(key, value) for key, value in pairs}

    return hook


def decode_json(raw: str | bytes, spec: DateKeySpec | None = None) -> object:
    """Decode a JSON document, reviving the dates ``spec`` names at any depth."""

    reviver = build_reviver(spec) if spec is not None else None
    if reviver is None:
        return json.loads(raw)
    return json.loads(raw, object_pairs_hook=_pairs_hook(reviver))


def format_timestamp(value: datetime) -> str:
    """Render ``value`` the way query strings and bodies send dates: UTC, millisecond precision."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    utc = value.astimezone(timezone.utc)
    return utc.replace(tzinfo=None).isoformat(timespec="milliseconds") + "Z"


__all__ = [
    "DEFAULT_UNIX_MULTIPLIER",
    "DEFAULT_DATE_KEYS",
    "InvalidDate",
    "parse_timestamp",
    "parse_unix",
    "UnixKey",
    "DateKeySpec",
    "Reviver",
    "build_reviver",
    "decode_json",
    "format_timestamp",
]
