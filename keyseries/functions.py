"""
aggregation functions.

each reducer is built as ``reducer(filter) -> (values -> result)``. the filter is one of the
missing-value policies on ``Filter`` and decides what happens to None/NaN before reducing.
when the filter returns UNDEFINED, or there is nothing left to reduce, the reducer returns
UNDEFINED rather than raising. a missing value that the filter lets through
(keep_missing) makes the arithmetic and ordering reducers UNDEFINED as well.

    >>> avg()([3, 5, None, 6])
    4.666666666666667
    >>> avg(Filter.propagate_missing)([3, 5, None, 6])
    UNDEFINED
"""
from __future__ import annotations

import builtins
import math

import numpy as np
from .types import *
from .event import is_valid


# --- missing-value policies ---

class Filter:
    """policies that clean a value list before it is reduced"""

    @staticmethod
    def keep_missing(values: List[Any]) -> List[Any]:
        """pass through unchanged"""
        return values

    @staticmethod
    def ignore_missing(values: List[Any]) -> List[Any]:
        """drop None and NaN"""
        return [v for v in values if is_valid(v)]

    @staticmethod
    def zero_missing(values: List[Any]) -> List[Any]:
        """replace None and NaN with 0"""
        return [v if is_valid(v) else 0 for v in values]

    @staticmethod
    def propagate_missing(values: List[Any]) -> Any:
        """
        UNDEFINED if anything is missing, otherwise the values. e.g. summing an hour of data
        where a missing reading should make the whole hour unknown.
        """
        return values if all(is_valid(v) for v in values) else UNDEFINED

    @staticmethod
    def none_if_empty(values: List[Any]) -> Any:
        """UNDEFINED for an empty list, otherwise the values"""
        return values if len(values) > 0 else UNDEFINED


DEFAULT_FILTER = Filter.ignore_missing


def _clean(clean: Optional[Cleaner], values: Iterable[Any]) -> Any:
    return (clean or DEFAULT_FILTER)(list(values))


def _has_missing(values: List[Any]) -> bool:
    return not all(is_valid(v) for v in values)


def _is_finite(v: Any) -> bool:
    try:
        return math.isfinite(v)
    except TypeError:
        return False


# --- reducers ---

def keep(clean: Optional[Cleaner] = None) -> Reducer:
    """
    the first value when every value equals it, otherwise UNDEFINED. carries a constant
    field (a category, a unit) through an aggregation of other fields.
    """
    def reduce_keep(values):
        cleaned = _clean(clean, values)
        if cleaned is UNDEFINED or not cleaned:
            return UNDEFINED
        result = cleaned[0]
        if any(v != result for v in cleaned):
            return UNDEFINED
        return result
    return reduce_keep


def sum(clean: Optional[Cleaner] = None) -> Reducer:
    """total of the values, 0 when empty"""
    def reduce_sum(values):
        cleaned = _clean(clean, values)
        if cleaned is UNDEFINED:
            return UNDEFINED
        if not cleaned:
            return 0
        if _has_missing(cleaned):
            return UNDEFINED
        # numpy would wrap python ints at 64 bits
        if all(isinstance(v, int) for v in cleaned):
            return builtins.sum(cleaned)
        result = np.sum(cleaned)
        return result.item() if hasattr(result, 'item') else result
    return reduce_sum


def avg(clean: Optional[Cleaner] = None) -> Reducer:
    """arithmetic mean"""
    def reduce_avg(values):
        cleaned = _clean(clean, values)
        if cleaned is UNDEFINED or not cleaned or _has_missing(cleaned):
            return UNDEFINED
        return sum(Filter.keep_missing)(cleaned) / len(cleaned)
    return reduce_avg


def max(clean: Optional[Cleaner] = None) -> Reducer:
    def reduce_max(values):
        cleaned = _clean(clean, values)
        if cleaned is UNDEFINED or not cleaned or _has_missing(cleaned):
            return UNDEFINED
        result = builtins.max(cleaned)
        return result if _is_finite(result) else UNDEFINED
    return reduce_max


def min(clean: Optional[Cleaner] = None) -> Reducer:
    def reduce_min(values):
        cleaned = _clean(clean, values)
        if cleaned is UNDEFINED or not cleaned or _has_missing(cleaned):
            return UNDEFINED
        result = builtins.min(cleaned)
        return result if _is_finite(result) else UNDEFINED
    return reduce_min


def count(clean: Optional[Cleaner] = None) -> Reducer:
    def reduce_count(values):
        cleaned = _clean(clean, values)
        if cleaned is UNDEFINED:
            return UNDEFINED
        return len(cleaned)
    return reduce_count


def first(clean: Optional[Cleaner] = None) -> Reducer:
    """first value; pass Filter.keep_missing to return it even when it is missing"""
    def reduce_first(values):
        cleaned = _clean(clean, values)
        if cleaned is UNDEFINED or not cleaned:
            return UNDEFINED
        return cleaned[0]
    return reduce_first


def last(clean: Optional[Cleaner] = None) -> Reducer:
    """last value; pass Filter.keep_missing to return it even when it is missing"""
    def reduce_last(values):
        cleaned = _clean(clean, values)
        if cleaned is UNDEFINED or not cleaned:
            return UNDEFINED
        return cleaned[-1]
    return reduce_last


def difference(clean: Optional[Cleaner] = None) -> Reducer:
    """max - min"""
    def reduce_difference(values):
        cleaned = _clean(clean, values)
        if cleaned is UNDEFINED or not cleaned or _has_missing(cleaned):
            return UNDEFINED
        return builtins.max(cleaned) - builtins.min(cleaned)
    return reduce_difference


def median(clean: Optional[Cleaner] = None) -> Reducer:
    def reduce_median(values):
        cleaned = _clean(clean, values)
        if cleaned is UNDEFINED or not cleaned or _has_missing(cleaned):
            return UNDEFINED
        ordered = sorted(cleaned)
        n = len(ordered)
        mid = n // 2
        return (ordered[mid] + ordered[mid - 1]) / 2 if n % 2 == 0 else ordered[mid]
    return reduce_median


def stdev(clean: Optional[Cleaner] = None) -> Reducer:
    """
    population standard deviation. the mean is taken over the cleaned values but the
    divisor is the length of the values as given, before cleaning.
    """
    def reduce_stdev(values):
        values = list(values)
        cleaned = _clean(clean, values)
        if cleaned is UNDEFINED or not cleaned or _has_missing(cleaned):
            return UNDEFINED
        arr = np.asarray(cleaned, dtype=float)
        squares = np.sum((arr - arr.mean()) ** 2)
        return math.sqrt(squares.item() / len(values))
    return reduce_stdev


def percentile(q: float, interp: InterpolationType = DEFAULT_INTERPOLATION,
               clean: Optional[Cleaner] = None) -> Reducer:
    """
    value at the q-th percentile (0 <= q <= 100) of the values.

    when the rank falls between two values, interp picks the result:
    LINEAR v0 + (v1 - v0) * fraction, LOWER v0, HIGHER v1,
    NEAREST whichever of v0/v1 is closer, MIDPOINT (v0 + v1) / 2.
    """
    if not 0 <= q <= 100: raise ValueError("percentile q must be between 0 and 100")
    if not isinstance(interp, InterpolationType):
        raise TypeError(f"interp must be an InterpolationType, got {interp!r}")

    def reduce_percentile(values):
        cleaned = _clean(clean, values)
        if cleaned is UNDEFINED or not cleaned or _has_missing(cleaned):
            return UNDEFINED
        ordered = sorted(cleaned)
        size = len(ordered)
        if size == 1 or q == 0:
            return ordered[0]
        if q == 100:
            return ordered[-1]
        rank = (size - 1) * (q / 100)
        index = math.floor(rank)
        return interpolate(ordered[index], ordered[index + 1], rank - index, interp)
    return reduce_percentile
