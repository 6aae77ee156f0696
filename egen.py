'''
.------..------..------..------.
|e.--. ||g.--. ||e.--. ||n.--. |
| (\/) || :/\: || (\/) || :(): |
| :\/: || :\/: || :\/: || ()() |
| '--'e|| '--'g|| '--'e|| '--'n|
`------'`------'`------'`------'
event generator: builds random time-keyed events from a field schema.
'''

from datetime import datetime, timedelta, timezone
import numpy as np
from faker import Faker
from keyseries import Collection, ConstructionPolicy, time_event
from typing import Any, Dict, List, Optional


class Generator:
    """schema interpreter."""

    def __init__(self, seed: Optional[int] = None):
        self._fake = Faker()
        if seed is not None:
            self._fake.seed_instance(seed)
            self._rng = np.random.default_rng(seed)
        else:
            self._rng = np.random.default_rng()

    def _resolve_faker_method(self, method_name: str, kwargs: Dict = {}) -> Any:
        try:
            method = getattr(self._fake, method_name)
        except AttributeError:
            raise ValueError(f"faker has no provider '{method_name}'")
        return method(**kwargs)

    def _resolve_provider(self, config: Dict, context: Dict) -> Any:
        provider = config["_egen_provider"]
        if provider == "ref":
            key = config["key"]
            if key not in context:
                raise ValueError(f"reference to '{key}' not found in current context.")
            return context[key]

        elif provider == "choice":
            # convert numpy's choice result to a native python type
            choice_result = self._rng.choice(config["from"])
            return choice_result.item() if hasattr(choice_result, 'item') else choice_result

        elif provider == "gauss":
            return float(self._rng.normal(config.get("mean", 0.0), config.get("std", 1.0)))

        elif provider == "sometimes_missing":
            # wraps another schema, replacing its value with None at the given rate
            if self._rng.random() < config.get("rate", 0.1):
                return None
            return self.create(config["of"], context)

        elif provider == "literal":
            if "value" not in config:
                raise ValueError("_egen_provider 'literal' requires a 'value' key.")
            return config["value"]

        else:
            raise ValueError(f"unknown _egen_provider: '{provider}'")

    def create(self, schema: Any, context: Optional[Dict] = None) -> Any:
        current_context = context or {}

        if isinstance(schema, dict):
            if "_egen_provider" in schema:
                return self._resolve_provider(schema, current_context)

            # build fields in order so later fields can ref earlier ones
            generated_obj = {}
            for k, v in schema.items():
                merged_context = {**current_context, **generated_obj}
                generated_obj[k] = self.create(v, merged_context)
            return generated_obj

        if isinstance(schema, str):
            if hasattr(self._fake, schema):
                return self._resolve_faker_method(schema)
            return schema  # otherwise, it's a literal string.

        if isinstance(schema, tuple) and len(schema) == 2 and isinstance(schema[1], dict):
            return self._resolve_faker_method(schema[0], schema[1])

        return schema

    def offsets(self, count: int, step_ms: int, jitter: bool) -> List[int]:
        """millisecond offsets for count events; with jitter the order is shuffled"""
        steps = [i * step_ms for i in range(count)]
        if jitter:
            self._rng.shuffle(steps)
        return steps


class _EventProvider:
    def __init__(self, schema: Dict[str, Any], seed: Optional[int] = None):
        self._schema = schema
        self._generator = Generator(seed)

    def records(self, count: int) -> List[Dict[str, Any]]:
        """count raw field dicts"""
        return [self._generator.create(self._schema) for _ in range(count)]

    def take(self, count: int,
             start: datetime = datetime(2020, 1, 1, tzinfo=timezone.utc),
             step_ms: int = 60000,
             shuffled: bool = False,
             policy: Optional[ConstructionPolicy] = None) -> Collection:
        """
        a collection of count time events, step_ms apart from start.
        shuffled gives the same timestamps in random order.
        """
        offsets = self._generator.offsets(count, step_ms, shuffled)
        events = [time_event(start + timedelta(milliseconds=int(offset)), data)
                  for offset, data in zip(offsets, self.records(count))]
        return Collection(events, policy)


def from_schema(schema: Dict[str, Any], seed: Optional[int] = None) -> _EventProvider:
    return _EventProvider(schema, seed)
