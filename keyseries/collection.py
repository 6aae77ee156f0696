from __future__ import annotations

import json
import logging

from pyrsistent import PMap, PVector, pmap, pset, pvector
from .types import *
from .event import Event
from .keys import Key, TimeRange

# --- core functionality ---
from .extensions.core import _CoreOperations
from .extensions.aggregation import _AggregationOperations

# --- accessors ---
from .extensions.terminal import TerminalAccessor

logger = logging.getLogger(__name__)


def build_key_map(events: Iterable[Event]) -> PMap:
    """inverse index of events: key string -> set of positions"""
    positions: Dict[str, List[int]] = {}
    for i, e in enumerate(events):
        positions.setdefault(str(e.get_key()), []).append(i)
    return pmap({k: pset(v) for k, v in positions.items()})


# --- construction policies ---

class ConstructionPolicy:
    """
    decides how a collection's event list is shaped. the default keeps events
    in the order they were given.
    """

    def prepare(self, events: PVector) -> PVector:
        """called when a collection is built from an explicit sequence of events"""
        return events

    def on_event_added(self, events: PVector) -> PVector:
        """called after an append, before the index is finalized"""
        return events

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class ChronologicalPolicy(ConstructionPolicy):
    """keeps events sorted by key timestamp; ties keep their insertion order"""

    @staticmethod
    def _sorted(events: PVector) -> PVector:
        return pvector(sorted(events, key=lambda e: e.timestamp()))

    @staticmethod
    def _in_order(events: PVector) -> bool:
        return all(events[i - 1].timestamp() <= events[i].timestamp() for i in range(1, len(events)))

    def prepare(self, events: PVector) -> PVector:
        return events if self._in_order(events) else self._sorted(events)

    def on_event_added(self, events: PVector) -> PVector:
        if len(events) > 1 and events[-1].timestamp() < events[-2].timestamp():
            logger.debug("appended event is out of order, re-sorting %d events", len(events))
            return self._sorted(events)
        return events


DEFAULT_POLICY = ConstructionPolicy()


class _EntryView:
    """a restartable (position, event) view over one snapshot"""

    def __init__(self, events: PVector):
        self._events = events

    def __iter__(self) -> Iterator[Tuple[int, Event]]:
        return enumerate(self._events)

    def __len__(self) -> int:
        return len(self._events)


class Collection(
    _CoreOperations,
    _AggregationOperations
):
    """
    an ordered (not necessarily sorted) immutable list of events with an index from
    key string to positions. every operation that changes it returns a new collection;
    the storage is persistent so derived collections share structure safely.

    keys index by their string form: two different keys that print the same collide.
    """

    def __init__(self, arg: Union['Collection', Iterable[Event], None] = None,
                 policy: Optional[ConstructionPolicy] = None):
        if isinstance(arg, Collection):
            self._policy = policy or arg._policy
            if self._policy is arg._policy:
                self._events, self._key_map = arg._events, arg._key_map
            else:
                self._set_from_sequence(arg._events)
        else:
            self._policy = policy or DEFAULT_POLICY
            self._set_from_sequence(arg if arg is not None else [])
        # --- initialize accessors ---
        self.to = TerminalAccessor(self)

    def _set_from_sequence(self, events: Iterable[Event]) -> None:
        self._events = self._policy.prepare(pvector(events))
        self._key_map = build_key_map(self._events)

    def _clone(self, events: PVector, key_map: Optional[PMap] = None,
               policy: Optional[ConstructionPolicy] = None) -> 'Collection':
        """a new collection over events; the index is rebuilt unless one is given"""
        c = Collection.__new__(type(self))
        c._policy = policy or self._policy
        c._events = events
        c._key_map = key_map if key_map is not None else build_key_map(events)
        c.to = TerminalAccessor(c)
        return c

    # --- lookups ---

    def size(self) -> int:
        return len(self._events)

    def size_valid(self, field_path: Any = DEFAULT_FIELD) -> int:
        """number of events whose field is neither None nor NaN"""
        return sum(1 for e in self._events if e.is_valid(field_path))

    def is_empty(self) -> bool:
        return self.size() == 0

    def at(self, pos: int) -> Event:
        """
        event at a position. positions depend on the current order, so scanning by
        key this way is the least efficient option; prefer at_key.
        """
        return self._events[pos]

    def at_key(self, key: Union[Key, str]) -> List[Event]:
        """all events whose key prints as key, in collection order"""
        indices = self._key_map.get(str(key))
        if indices is None:
            return []
        return [self._events[i] for i in sorted(indices)]

    def first_event(self) -> Optional[Event]:
        return self._events[0] if self._events else None

    def last_event(self) -> Optional[Event]:
        return self._events[-1] if self._events else None

    def event_list(self) -> PVector:
        return self._events

    def key_map(self) -> PMap:
        return self._key_map

    def policy(self) -> ConstructionPolicy:
        return self._policy

    def entries(self) -> _EntryView:
        return _EntryView(self._events)

    def for_each(self, fn: Callable[[Event, int], Any]) -> int:
        """
        call fn(event, index) for each event in order. returning False from fn stops
        the iteration. returns the number of events visited.
        """
        visited = 0
        for i, e in enumerate(self._events):
            visited += 1
            if fn(e, i) is False:
                break
        return visited

    def timerange(self):
        """the range from the earliest begin to the latest end, None when empty"""
        if not self._events:
            return None
        begin = min(e.begin() for e in self._events)
        end = max(e.end() for e in self._events)
        return TimeRange(begin, end)

    def is_chronological(self) -> bool:
        """true if timestamps never decrease in collection order"""
        return all(self._events[i - 1].timestamp() <= self._events[i].timestamp()
                   for i in range(1, len(self._events)))

    # --- python protocol ---

    def __iter__(self) -> Iterator[Event]:
        return iter(self._events)

    def __len__(self) -> int:
        return self.size()

    def __eq__(self, other) -> bool:
        if not isinstance(other, Collection):
            return NotImplemented
        return list(self._events) == list(other._events)

    __hash__ = None

    def to_json(self) -> List[Dict[str, Any]]:
        return [e.to_json() for e in self._events]

    def __str__(self) -> str:
        return json.dumps(self.to_json())

    def __repr__(self) -> str:
        return f"Collection(size={self.size()}, policy={self._policy!r})"
