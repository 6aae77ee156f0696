from __future__ import annotations
import typing
import logging
from pyrsistent import pset, pvector
from ..types import *
from ..event import Event, is_valid

if typing.TYPE_CHECKING:
    from ..collection import Collection
    from ..keys import Key

logger = logging.getLogger(__name__)


class _CoreOperations:
    """mutation-as-copy and transformation operations; each returns a new collection"""

    def add_event(self: 'Collection', event: Event,
                  dedup: Union[bool, Callable[[List[Event]], Event], None] = None) -> 'Collection':
        """
        append an event. with dedup set, events already holding this key are removed and
        replaced by the new event, or by dedup(conflicts + [event]) when dedup is callable.
        """
        k = str(event.get_key())
        events = self._events
        indices = self._key_map.get(k, pset())
        rebuild = False

        if dedup and indices:
            conflicts = self.at_key(k)
            events = pvector(e for i, e in enumerate(self._events) if i not in indices)
            if callable(dedup):
                event = dedup(conflicts + [event])
            logger.debug("resolved %d conflicting events for key %s", len(conflicts), k)
            rebuild = True

        appended = events.append(event)
        shaped = self._policy.on_event_added(appended)
        if rebuild or shaped is not appended:
            return self._clone(shaped)
        return self._clone(shaped, self._key_map.set(k, indices.add(len(shaped) - 1)))

    def remove_events(self: 'Collection', key: Union['Key', str]) -> 'Collection':
        """drop every event with this key; an absent key leaves the events unchanged"""
        k = str(key)
        indices = self._key_map.get(k)
        if indices is None:
            return self._clone(self._events, self._key_map)
        events = pvector(e for i, e in enumerate(self._events) if i not in indices)
        return self._clone(events)

    def take_last(self: 'Collection', amount: int) -> 'Collection':
        """keep only the last amount events"""
        start = max(len(self._events) - amount, 0)
        return self._clone(self._events[start:])

    def set_events(self: 'Collection', events: Iterable[Event]) -> 'Collection':
        """replace all events; the index is rebuilt from scratch"""
        return self._clone(self._policy.prepare(pvector(events)))

    def slice(self: 'Collection', begin: Optional[int] = None, end: Optional[int] = None) -> 'Collection':
        return self.set_events(self._events[begin:end])

    def rest(self: 'Collection') -> 'Collection':
        """everything but the first event"""
        return self.set_events(self._events[1:])

    def filter(self: 'Collection', predicate: Predicate[Event]) -> 'Collection':
        return self.set_events(e for e in self._events if predicate(e))

    def map(self: 'Collection', mapper: Callable[[Event], Event]) -> 'Collection':
        """transform each event into a new event (the key type may change)"""
        return self.set_events(mapper(e) for e in self._events)

    def map_keys(self: 'Collection', mapper: Callable[['Key'], 'Key']) -> 'Collection':
        """remap each event's key, keeping its data"""
        from ..collection import DEFAULT_POLICY
        events = pvector(Event(mapper(e.get_key()), e.get_data()) for e in self._events)
        return self._clone(events, policy=DEFAULT_POLICY)

    def flat_map(self: 'Collection', mapper: Callable[[Event], Iterable[Event]]) -> 'Collection':
        """transform each event into zero or more events, flattened in order"""
        return self.set_events(out for e in self._events for out in mapper(e))

    def sort_by_key(self: 'Collection') -> 'Collection':
        """stable sort by key timestamp"""
        return self.set_events(sorted(self._events, key=lambda e: e.timestamp()))

    def sort(self: 'Collection', field: Any = DEFAULT_FIELD) -> 'Collection':
        """stable sort by a field value; events missing the value go last"""
        from ..collection import DEFAULT_POLICY
        spec = field_spec(field)

        def sort_key(e: Event):
            v = e.get(spec)
            return (False, v) if is_valid(v) else (True, 0)

        return self._clone(pvector(sorted(self._events, key=sort_key)), policy=DEFAULT_POLICY)

    # --- column processors ---

    def select(self: 'Collection', fields: Iterable[Any]) -> 'Collection':
        """project every event down to the listed fields"""
        from ..processors import Select
        p = Select(fields)
        return self.flat_map(p.add_event)

    def collapse(self: 'Collection', field_spec_list: Iterable[Any], field_name: str,
                 reducer: Reducer, append: bool = False) -> 'Collection':
        """reduce several fields of each event into field_name, event by event"""
        from ..processors import Collapse
        p = Collapse(field_spec_list, field_name, reducer, append)
        return self.flat_map(p.add_event)
