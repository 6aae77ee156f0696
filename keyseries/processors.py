from abc import ABC, abstractmethod
from .types import *
from .event import Event


class Processor(ABC):
    """a stateless transform from one event to zero or more events"""

    @abstractmethod
    def add_event(self, event: Event) -> List[Event]:
        pass


class Select(Processor):
    """keeps only the listed fields of each event"""

    def __init__(self, fields: Iterable[Any]):
        self.fields = list(fields)

    def add_event(self, event: Event) -> List[Event]:
        return [event.select(self.fields)]


class Collapse(Processor):
    """
    reduces several fields of each event into one new field. the reducer sees the
    values of this single event only, never values from neighbouring events.
    with append the original fields are kept next to the new one.
    """

    def __init__(self, field_spec_list: Iterable[Any], field_name: str, reducer: Reducer, append: bool = False):
        self.field_spec_list = list(field_spec_list)
        self.field_name = field_name
        self.reducer = reducer
        self.append = append

    def add_event(self, event: Event) -> List[Event]:
        return [event.collapse(self.field_spec_list, self.field_name, self.reducer, self.append)]
