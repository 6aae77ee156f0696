import typing
from .types import *
from .keys import Key, Time, TimeRange, Index
from .event import Event

if typing.TYPE_CHECKING:
    from .collection import Collection, ConstructionPolicy


def collection(events: Optional[Iterable[Event]] = None,
               policy: Optional['ConstructionPolicy'] = None) -> 'Collection':
    """create a collection, empty or from events in the given order"""
    from .collection import Collection
    return Collection(events, policy)


def sorted_collection(events: Optional[Iterable[Event]] = None) -> 'Collection':
    """create a collection that keeps its events in chronological order"""
    from .collection import Collection, ChronologicalPolicy
    return Collection(events, ChronologicalPolicy())


def event(key: Key, data: Any = None) -> Event:
    return Event(key, data)


def time_event(t: Any, data: Any = None) -> Event:
    """event keyed by a point in time (datetime, epoch ms or iso string)"""
    return Event(t if isinstance(t, Time) else Time(t), data)


def time_range_event(timerange: Any, data: Any = None) -> Event:
    """event keyed by a time range, given as a TimeRange or a (begin, end) pair"""
    return Event(timerange if isinstance(timerange, TimeRange) else TimeRange(timerange), data)


def indexed_event(index: Any, data: Any = None) -> Event:
    """event keyed by an index string such as "1d-12355" or "2015-09" """
    return Event(index if isinstance(index, Index) else Index(index), data)


# --- aliases ---
C = collection
