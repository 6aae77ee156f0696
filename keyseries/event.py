from __future__ import annotations

import json
import math
from collections import defaultdict
from datetime import datetime

import numpy as np
from pyrsistent import PMap, PVector, freeze, pmap, thaw
from .types import *
from .keys import Key


def is_valid(v: Any) -> bool:
    """a value is missing when it is None or NaN"""
    if v is None:
        return False
    if isinstance(v, (float, np.floating)):
        return not math.isnan(v)
    return True


def _get_in(node: Any, path: Sequence[str]) -> Any:
    for segment in path:
        if isinstance(node, PMap):
            node = node.get(segment)
        elif isinstance(node, PVector) and segment.lstrip("-").isdigit():
            i = int(segment)
            node = node[i] if -len(node) <= i < len(node) else None
        else:
            return None
    return node


def _set_in(node: Any, path: Sequence[str], value: Any) -> Any:
    if not path:
        return freeze(value)
    head, rest = path[0], path[1:]
    if isinstance(node, PVector) and head.isdigit() and int(head) < len(node):
        return node.set(int(head), _set_in(node[int(head)], rest, value))
    base = node if isinstance(node, PMap) else pmap()
    return base.set(head, _set_in(base.get(head), rest, value))


def _merge_deep(a: PMap, b: PMap) -> PMap:
    merged = a
    for k, v in b.items():
        current = merged.get(k)
        if isinstance(current, PMap) and isinstance(v, PMap):
            merged = merged.set(k, _merge_deep(current, v))
        else:
            merged = merged.set(k, v)
    return merged


def _data_from_arg(arg: Any) -> PMap:
    if isinstance(arg, PMap):
        return arg
    if isinstance(arg, dict):
        return freeze(arg)
    if isinstance(arg, (int, float, str, np.number)) or arg is None:
        return pmap({DEFAULT_FIELD: arg})
    raise TypeError(f"cannot interpret event data from {arg!r}")


class Event:
    """
    an immutable pairing of a key (Time, TimeRange or Index) with a map of fields.
    every "setter" returns a new event.
    """
    __slots__ = ("_key", "_data")

    def __init__(self, key: Key, data: Any = None):
        self._key = key
        self._data = _data_from_arg({} if data is None else data)

    # --- static helpers over lists of events ---

    @staticmethod
    def is_duplicate(event1: 'Event', event2: 'Event', ignore_values: bool = True) -> bool:
        """same key type and key; when ignore_values is false the data must match too"""
        if event1.key_type() != event2.key_type():
            return False
        if ignore_values:
            return str(event1.get_key()) == str(event2.get_key())
        return event1 == event2

    @staticmethod
    def merge(events: Iterable['Event'], deep: bool = False) -> List['Event']:
        """merge the data of events sharing a key, later fields winning; one event per key"""
        grouped: Dict[str, List[Event]] = defaultdict(list)
        for e in events:
            grouped[str(e.get_key())].append(e)

        merged = []
        for per_key in grouped.values():
            data = per_key[0].get_data()
            for e in per_key[1:]:
                data = _merge_deep(data, e.get_data()) if deep else data.update(e.get_data())
            merged.append(per_key[0].set_data(data))
        return merged

    @staticmethod
    def deduper(deep: bool = False) -> Callable[[List['Event']], 'Event']:
        """a dedup function for Collection.add_event that merges the conflicting events"""
        def dedup(events: List['Event']) -> 'Event':
            merged = Event.merge(events, deep)
            if len(merged) != 1:
                raise ValueError("dedup expects events that all share one key")
            return merged[0]
        return dedup

    @staticmethod
    def combine(events: Iterable['Event'], reducer: Reducer, field_spec: Any = None) -> List['Event']:
        """
        reduce the events sharing a key into one event per key.
        for each field (all fields when field_spec is None) the values across those
        events are passed to reducer. other fields come from the first event for that key.
        """
        events = list(events)
        if not events:
            return []
        specs = field_spec_list(field_spec)[0] if field_spec is not None else None

        grouped: Dict[str, List[Event]] = defaultdict(list)
        keys: Dict[str, Key] = {}
        for e in events:
            k = str(e.get_key())
            grouped[k].append(e)
            keys.setdefault(k, e.get_key())

        combined = []
        for k, per_key in grouped.items():
            columns: Dict[str, List[Any]] = {}
            for e in per_key:
                fields = specs if specs is not None else [Field(name) for name in e.get_data().keys()]
                for spec in fields:
                    columns.setdefault(spec.label, []).append(e.get(spec))
            data = per_key[0].get_data()
            for label, values in columns.items():
                data = data.set(label, reducer(values))
            combined.append(Event(keys[k], data))
        return combined

    @staticmethod
    def combiner(field_spec: Any, reducer: Reducer) -> Callable[[List['Event']], List['Event']]:
        return lambda events: Event.combine(events, reducer, field_spec)

    @staticmethod
    def map(events: Iterable['Event'], field_spec: Any = DEFAULT_FIELD) -> Dict[str, List[Any]]:
        """
        gather field values across events: {label: [value per event]}.
        a list names several fields, None takes every top-level field.
        """
        events = list(events)
        if field_spec is None:
            result: Dict[str, List[Any]] = {}
            for e in events:
                for name, value in e.get_data().items():
                    result.setdefault(name, []).append(value)
            return result
        specs, _ = field_spec_list(field_spec)
        return {spec.label: [e.get(spec) for e in events] for spec in specs}

    @staticmethod
    def aggregate(events: Iterable['Event'], reducer: Reducer, field_spec: Any = DEFAULT_FIELD) -> Dict[str, Any]:
        """apply reducer to each gathered value list"""
        return {label: reducer(values) for label, values in Event.map(events, field_spec).items()}

    # --- accessors ---

    def get_key(self) -> Key: return self._key

    def key_type(self) -> str: return self._key.type()

    def get_data(self) -> PMap: return self._data

    def set_data(self, data: Any) -> 'Event':
        return Event(self._key, data)

    def get(self, field: Any = DEFAULT_FIELD) -> Any:
        """value at a field path, None when absent"""
        return self._get_path(field_spec(field).path)

    def _get_path(self, path: Sequence[str]) -> Any:
        return _get_in(self._data, path)

    def set(self, field: Any, value: Any) -> 'Event':
        return Event(self._key, _set_in(self._data, field_spec(field).path, value))

    def is_valid(self, fields: Any = None) -> bool:
        """true when none of the fields is missing; with no fields every top-level value is checked"""
        if fields is None:
            return all(is_valid(v) for v in self._data.values())
        if not isinstance(fields, list):
            fields = [fields]
        return all(is_valid(self.get(f)) for f in fields)

    def timestamp(self) -> datetime: return self._key.timestamp()

    def begin(self) -> datetime: return self._key.begin()

    def end(self) -> datetime: return self._key.end()

    # --- projections ---

    def select(self, fields: Iterable[Any]) -> 'Event':
        """keep only the listed fields; nested paths stay nested"""
        data = pmap()
        for f in fields:
            path = field_spec(f).path
            data = _set_in(data, path, self._get_path(path))
        return self.set_data(data)

    def collapse(self, field_spec_list: Iterable[Any], field_name: str, reducer: Reducer,
                 append: bool = False) -> 'Event':
        """reduce several fields of this one event into field_name"""
        values = [self.get(f) for f in field_spec_list]
        base = self._data if append else pmap()
        return self.set_data(base.set(field_name, reducer(values)))

    # --- serialization ---

    def to_json(self) -> Dict[str, Any]:
        key_type = self.key_type()
        return {key_type: self._key.to_json()[key_type], "data": thaw(self._data)}

    def __str__(self) -> str:
        return json.dumps(self.to_json())

    def __repr__(self) -> str:
        return f"Event({self._key!r}, {dict(thaw(self._data))})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Event):
            return NotImplemented
        return str(self._key) == str(other._key) and self._data == other._data

    def __hash__(self) -> int:
        return hash(str(self._key))
