from __future__ import annotations
import typing
import json
import numpy as np
import pandas as pd
from pyrsistent import thaw
from ..types import *

if typing.TYPE_CHECKING:
    from ..collection import Collection


class TerminalAccessor:
    def __init__(self, collection_instance: 'Collection'):
        self._collection = collection_instance

    def list(self) -> List[Any]:
        """events as a plain list"""
        return list(self._collection.event_list())

    def json(self) -> str:
        """events serialized as a json array"""
        return json.dumps(self._collection.to_json())

    def array(self, field: Any = DEFAULT_FIELD) -> np.ndarray:
        """one field across all events as a numpy array (missing values become None)"""
        return np.array([e.get(field) for e in self._collection])

    def df(self) -> pd.DataFrame:
        """
        one row per event, indexed by the key string. a 'key' column holds the key
        itself; every top-level field becomes a column.
        """
        events = self._collection.event_list()
        rows = [{"key": e.get_key(), **thaw(e.get_data())} for e in events]
        index = pd.Index([str(e.get_key()) for e in events], name="key_string")
        return pd.DataFrame(rows, index=index, columns=None if rows else ["key"])

    def points(self, columns: List[Any]) -> List[List[Any]]:
        """
        rows of [key, column values...]. time keys give epoch ms, time ranges
        [begin ms, end ms], indexes their string.
        """
        rows = []
        for e in self._collection:
            key_json = e.get_key().to_json()[e.key_type()]
            rows.append([key_json] + [e.get(c) for c in columns])
        return rows
