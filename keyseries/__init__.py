"""
.-----------------------------------.
|  k e y s e r i e s                |
|  keyed events . persistent . stats|
'-----------------------------------'
"""
import logging

# expose the main classes
from .collection import Collection, ConstructionPolicy, ChronologicalPolicy
from .event import Event
from .keys import Key, Time, TimeRange, Index
from .processors import Processor, Select, Collapse

# expose the factory functions
from .factories import (
    collection,
    sorted_collection,
    event,
    time_event,
    time_range_event,
    indexed_event,
    C
)

# expose the aggregation functions as a module, their names clash with builtins
from . import functions
from .functions import Filter

# expose supporting types
from .types import (
    UNDEFINED,
    InterpolationType,
    Field,
    FieldPath,
    field_spec
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

# define what `import *` does
__all__ = [
    "Collection",
    "ConstructionPolicy",
    "ChronologicalPolicy",
    "Event",
    "Key",
    "Time",
    "TimeRange",
    "Index",
    "Processor",
    "Select",
    "Collapse",
    "collection",
    "sorted_collection",
    "event",
    "time_event",
    "time_range_event",
    "indexed_event",
    "C",
    "functions",
    "Filter",
    "UNDEFINED",
    "InterpolationType",
    "Field",
    "FieldPath",
    "field_spec"
]
