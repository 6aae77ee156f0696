from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone

import numpy as np
import pandas as pd
from .types import *

# unit lengths in milliseconds
UNITS = {
    "n": 1 / 1000000,
    "u": 1 / 1000,
    "l": 1,
    "s": 1000,
    "m": 60 * 1000,
    "h": 60 * 60 * 1000,
    "d": 60 * 60 * 24 * 1000,
}

_INDEX_STRING = re.compile(r"^(?:(\d+)([smhdlun])@)?(\d+)([smhdlun])(?:\+(\d+))?-(\d+)$")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def to_datetime(arg: Any) -> datetime:
    """coerce ms since epoch, iso strings, datetimes and pandas timestamps to an aware utc datetime"""
    if isinstance(arg, Time):
        return arg.timestamp()
    if isinstance(arg, bool):
        raise TypeError("cannot use a bool as a timestamp")
    if isinstance(arg, (int, np.integer)):
        return _EPOCH + timedelta(milliseconds=int(arg))
    if isinstance(arg, (float, np.floating)):
        return _EPOCH + timedelta(milliseconds=float(arg))
    if isinstance(arg, pd.Timestamp):
        stamp = arg
    elif isinstance(arg, datetime):
        return arg.replace(tzinfo=timezone.utc) if arg.tzinfo is None else arg.astimezone(timezone.utc)
    elif isinstance(arg, str):
        try:
            stamp = pd.Timestamp(arg)
        except ValueError as e:
            raise ValueError(f"cannot parse timestamp from '{arg}'") from e
    else:
        raise TypeError(f"cannot get a timestamp from {arg!r}; expected ms, datetime or string")
    stamp = stamp.tz_localize("UTC") if stamp.tzinfo is None else stamp.tz_convert("UTC")
    return stamp.to_pydatetime()


def ms(d: datetime) -> int:
    """milliseconds since the epoch"""
    return round((d - _EPOCH) / timedelta(milliseconds=1))


class Key(ABC):
    """identity of an event; orderable through timestamp() and indexed through str()"""

    @abstractmethod
    def type(self) -> str: pass

    @abstractmethod
    def timestamp(self) -> datetime: pass

    @abstractmethod
    def begin(self) -> datetime: pass

    @abstractmethod
    def end(self) -> datetime: pass

    @abstractmethod
    def to_json(self) -> Dict[str, Any]: pass

    def __str__(self) -> str:
        return json.dumps(self.to_json())

    def __eq__(self, other) -> bool:
        return isinstance(other, Key) and str(self) == str(other)

    def __hash__(self) -> int:
        return hash(str(self))

    def __lt__(self, other: 'Key') -> bool:
        return self.timestamp() < other.timestamp()


class Time(Key):
    """a single point in time"""

    def __init__(self, d: Any = None):
        self._d = datetime.now(timezone.utc) if d is None else to_datetime(d)

    def type(self) -> str: return "time"

    def timestamp(self) -> datetime: return self._d

    def begin(self) -> datetime: return self._d

    def end(self) -> datetime: return self._d

    def to_json(self) -> Dict[str, Any]:
        return {"time": ms(self._d)}

    def __repr__(self) -> str:
        return f"Time({self._d.isoformat()})"


class TimeRange(Key):
    """a closed interval between two points in time"""

    def __init__(self, begin: Any, end: Any = None):
        if isinstance(begin, TimeRange):
            self._range = begin._range
            return
        if end is None and isinstance(begin, (list, tuple)):
            if len(begin) != 2:
                raise ValueError("a time range needs exactly two boundaries")
            begin, end = begin
        if end is None:
            raise TypeError("cannot build a time range without an end")
        self._range = (to_datetime(begin), to_datetime(end))

    def type(self) -> str: return "timerange"

    def begin(self) -> datetime: return self._range[0]

    def end(self) -> datetime: return self._range[1]

    def mid(self) -> datetime:
        return self.begin() + (self.end() - self.begin()) / 2

    def timestamp(self) -> datetime: return self.mid()

    def duration(self) -> timedelta:
        return self.end() - self.begin()

    def to_json(self) -> Dict[str, Any]:
        return {"timerange": [ms(self.begin()), ms(self.end())]}

    def contains(self, other: Union['TimeRange', datetime]) -> bool:
        if isinstance(other, datetime):
            return self.begin() <= other <= self.end()
        return self.begin() <= other.begin() and self.end() >= other.end()

    def within(self, other: 'TimeRange') -> bool:
        return self.begin() >= other.begin() and self.end() <= other.end()

    def overlaps(self, other: 'TimeRange') -> bool:
        """true if exactly one of other's boundaries falls inside this range"""
        return self.contains(other.begin()) != self.contains(other.end())

    def disjoint(self, other: 'TimeRange') -> bool:
        return self.end() < other.begin() or self.begin() > other.end()

    def extents(self, other: 'TimeRange') -> 'TimeRange':
        return TimeRange(min(self.begin(), other.begin()), max(self.end(), other.end()))

    def intersection(self, other: 'TimeRange') -> Optional['TimeRange']:
        if self.disjoint(other):
            return None
        return TimeRange(max(self.begin(), other.begin()), min(self.end(), other.end()))

    def __repr__(self) -> str:
        return f"TimeRange({self.begin().isoformat()}, {self.end().isoformat()})"


def _calendar_range(s: str) -> Optional[Tuple[datetime, datetime]]:
    parts = s.split("-")
    if not all(part.isdigit() for part in parts):
        return None
    freq = {1: "Y", 2: "M", 3: "D"}.get(len(parts))
    if freq is None:
        return None
    period = pd.Period(s, freq=freq)
    begin = period.start_time.tz_localize("UTC").to_pydatetime()
    # round the inclusive end down to whole milliseconds
    end = period.end_time.floor("ms").tz_localize("UTC").to_pydatetime()
    return begin, end


def _period_range(s: str) -> Optional[Tuple[datetime, datetime]]:
    parts = _INDEX_STRING.match(s)
    if parts is None:
        return None
    window_n, window_unit, freq_n, freq_unit, _offset, i = parts.groups()
    frequency = int(freq_n) * UNITS[freq_unit]
    duration = int(window_n) * UNITS[window_unit] if window_n else frequency
    begin = int(i) * frequency
    return to_datetime(begin), to_datetime(begin + duration)


class Index(Key):
    """
    a named bucket of time. understands calendar strings ("2015", "2015-09", "2015-09-24")
    and period strings ("1d-12355", "5m-4135541", "1h@5m-4135541").
    """

    def __init__(self, s: str):
        if isinstance(s, Index):
            s = s._string
        self._string = str(s)
        bounds = _period_range(self._string) or _calendar_range(self._string)
        if bounds is None:
            raise ValueError(f"cannot derive a time range from index string '{self._string}'")
        self._range = TimeRange(*bounds)

    def type(self) -> str: return "index"

    def as_string(self) -> str: return self._string

    def to_time_range(self) -> TimeRange: return self._range

    def begin(self) -> datetime: return self._range.begin()

    def end(self) -> datetime: return self._range.end()

    def timestamp(self) -> datetime: return self._range.mid()

    def to_json(self) -> Dict[str, Any]:
        return {"index": self._string}

    def __str__(self) -> str:
        return self._string

    def __repr__(self) -> str:
        return f"Index({self._string})"
