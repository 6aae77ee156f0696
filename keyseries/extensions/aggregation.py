from __future__ import annotations
import typing
import math
from ..types import *
from ..types import field_spec as _as_field_spec
from ..event import Event, is_valid
from .. import functions

if typing.TYPE_CHECKING:
    from ..collection import Collection


class _AggregationOperations:
    """summaries over a collection's field values, built on keyseries.functions"""

    def aggregate(self: 'Collection', reducer: Reducer, field_spec: Any = DEFAULT_FIELD) -> Any:
        """
        gather the field values of every event and reduce them.
        a single field gives the scalar result, a list of fields gives {field: result},
        None reduces every top-level field into a dict.
        """
        results = Event.aggregate(self._events, reducer, field_spec)
        if field_spec is None or isinstance(field_spec, list):
            return results
        return results[_as_field_spec(field_spec).label]

    def first(self: 'Collection', field_spec: Any = DEFAULT_FIELD, filter: Optional[Cleaner] = None) -> Any:
        return self.aggregate(functions.first(filter), field_spec)

    def last(self: 'Collection', field_spec: Any = DEFAULT_FIELD, filter: Optional[Cleaner] = None) -> Any:
        return self.aggregate(functions.last(filter), field_spec)

    def sum(self: 'Collection', field_spec: Any = DEFAULT_FIELD, filter: Optional[Cleaner] = None) -> Any:
        return self.aggregate(functions.sum(filter), field_spec)

    def avg(self: 'Collection', field_spec: Any = DEFAULT_FIELD, filter: Optional[Cleaner] = None) -> Any:
        return self.aggregate(functions.avg(filter), field_spec)

    def max(self: 'Collection', field_spec: Any = DEFAULT_FIELD, filter: Optional[Cleaner] = None) -> Any:
        return self.aggregate(functions.max(filter), field_spec)

    def min(self: 'Collection', field_spec: Any = DEFAULT_FIELD, filter: Optional[Cleaner] = None) -> Any:
        return self.aggregate(functions.min(filter), field_spec)

    def count(self: 'Collection', field_spec: Any = DEFAULT_FIELD, filter: Optional[Cleaner] = None) -> Any:
        return self.aggregate(functions.count(filter), field_spec)

    def median(self: 'Collection', field_spec: Any = DEFAULT_FIELD, filter: Optional[Cleaner] = None) -> Any:
        return self.aggregate(functions.median(filter), field_spec)

    def stdev(self: 'Collection', field_spec: Any = DEFAULT_FIELD, filter: Optional[Cleaner] = None) -> Any:
        return self.aggregate(functions.stdev(filter), field_spec)

    def percentile(self: 'Collection', q: float, field_spec: Any = DEFAULT_FIELD,
                   interp: InterpolationType = DEFAULT_INTERPOLATION,
                   filter: Optional[Cleaner] = None) -> Any:
        """value at the q-th percentile (0 <= q <= 100) of a field"""
        return self.aggregate(functions.percentile(q, interp, filter), field_spec)

    def quantile(self: 'Collection', n: int, column: Any = DEFAULT_FIELD,
                 interp: InterpolationType = DEFAULT_INTERPOLATION) -> List[Any]:
        """
        the n - 1 values splitting the collection, sorted by column, into n equal parts.
        for n = 4 these are the quartiles. events missing the column are skipped.
        raises ValueError when n exceeds the size.
        """
        if n > self.size():
            raise ValueError("subset n is greater than the collection length")
        if n <= 0:
            raise ValueError("number of quantiles (n) must be positive")
        if not isinstance(interp, InterpolationType):
            raise TypeError(f"interp must be an InterpolationType, got {interp!r}")

        # missing values sort last and are left out of the ranks
        ordered = [v for v in (e.get(column) for e in self.sort(column)) if is_valid(v)]
        size = len(ordered)
        results = []
        for i in range(1, n):
            rank = (size - 1) * (i / n)
            index = math.floor(rank)
            if 0 <= index < size - 1:
                results.append(interpolate(ordered[index], ordered[index + 1], rank - index, interp))
        return results
