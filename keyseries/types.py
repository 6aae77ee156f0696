from enum import Enum
from dataclasses import dataclass
from typing import (
    TypeVar, Generic, Callable, Iterator, Iterable, Any, Optional, Union,
    Dict, List, Tuple, Set, Sequence
)

T = TypeVar('T')
U = TypeVar('U')
K = TypeVar('K')
V = TypeVar('V')

DEFAULT_FIELD = "value"


class _Undefined:
    """
    marker for an aggregation with no meaningful answer.
    distinct from None, 0 and NaN so pipelines can tell "no answer" from a real value.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool: return False

    def __repr__(self) -> str: return "UNDEFINED"

    def __reduce__(self):
        return (_Undefined, ())


UNDEFINED = _Undefined()


class InterpolationType(Enum):
    """how a rank falling between two sorted values is resolved"""
    LINEAR = "linear"
    LOWER = "lower"
    HIGHER = "higher"
    NEAREST = "nearest"
    MIDPOINT = "midpoint"


DEFAULT_INTERPOLATION = InterpolationType.LINEAR


def interpolate(v0: Any, v1: Any, fraction: float, interp: InterpolationType) -> Any:
    """resolve a value between v0 and v1, fraction being the distance from v0"""
    if fraction == 0:
        return v0
    if interp is InterpolationType.LINEAR:
        return v0 + (v1 - v0) * fraction
    if interp is InterpolationType.LOWER:
        return v0
    if interp is InterpolationType.HIGHER:
        return v1
    if interp is InterpolationType.NEAREST:
        return v0 if fraction < 0.5 else v1
    if interp is InterpolationType.MIDPOINT:
        return (v0 + v1) / 2
    raise TypeError(f"unknown interpolation type: {interp!r}")


# --- field specifications ---

@dataclass(frozen=True)
class Field:
    """a field addressed by name, dots separating nested levels ("a.b")"""
    name: str

    @property
    def path(self) -> Tuple[str, ...]: return tuple(self.name.split("."))

    @property
    def label(self) -> str: return self.name


@dataclass(frozen=True)
class FieldPath:
    """a field addressed by an explicit sequence of segments"""
    segments: Tuple[str, ...]

    @property
    def path(self) -> Tuple[str, ...]: return self.segments

    @property
    def label(self) -> str: return ".".join(self.segments)


FieldSpec = Union[Field, FieldPath]


def field_spec(arg: Any) -> FieldSpec:
    """normalize a string, segment sequence or spec object into a FieldSpec"""
    if isinstance(arg, (Field, FieldPath)):
        return arg
    if isinstance(arg, str):
        return Field(arg)
    if isinstance(arg, (list, tuple)):
        return FieldPath(tuple(str(segment) for segment in arg))
    raise TypeError(f"cannot use {arg!r} as a field specification")


def field_spec_list(arg: Any) -> Tuple[List[FieldSpec], bool]:
    """
    normalize the field argument of an aggregation.
    a list names several fields; anything else names a single one.
    returns (specs, is_multiple).
    """
    if isinstance(arg, list):
        return [field_spec(item) for item in arg], True
    return [field_spec(arg)], False


Predicate = Callable[[T], bool]
Selector = Callable[[T], U]
Reducer = Callable[[List[Any]], Any]
Cleaner = Callable[[List[Any]], Any]
