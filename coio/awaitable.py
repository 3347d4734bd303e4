"""Normalize whatever a routine yields into a single future.

A yielded value is classified once, as a whole, into a closed set of
variants. Only after the entire structure is known to be supported is
anything started, so an unsupported member deep inside an aggregate never
leaves its siblings running.
"""

from collections.abc import Callable
from collections.abc import Hashable
from collections.abc import Mapping
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any

from .aggregate import Gather
from .aggregate import GatherMap
from .aggregate import Race as RaceWrapper
from .aggregate import collect_first
from .aggregate import collect_mapping
from .aggregate import collect_sequence
from .errors import UnsupportedYieldType
from .routine import Routine
from .routine import is_template
from .routine import routine_of
from .suspension import Suspension


@dataclass(frozen=True)
class Nested:
    """A routine, or a template to create one, driven recursively."""

    target: Routine | Callable[[], Any]


@dataclass(frozen=True)
class Single:
    """A future, or a suspension that starts one."""

    source: Future[Any] | Suspension[Any]


@dataclass(frozen=True)
class Ordered:
    members: tuple["Yielded", ...]
    factory: Callable[..., Any]


@dataclass(frozen=True)
class Keyed:
    members: dict[Hashable, "Yielded"]


@dataclass(frozen=True)
class Race:
    members: tuple["Yielded", ...]


type Yielded = Nested | Single | Ordered | Keyed | Race

type Drive = Callable[[Any], Future[Any]]


def classify(value: Any, /) -> Yielded:
    """Classify a yielded value, raising UnsupportedYieldType if unsupported."""
    if is_template(value):
        return Nested(value)
    if (routine := routine_of(value)) is not None:
        return Nested(routine)

    match value:
        case Future() | Suspension():
            return Single(value)
        case Gather(members=members):
            return Ordered(tuple(map(classify, members)), tuple)
        case list():
            return Ordered(tuple(map(classify, value)), list)
        case tuple():
            return Ordered(tuple(map(classify, value)), tuple)
        case GatherMap(members=members):
            return Keyed({key: classify(member) for key, member in members.items()})
        case Mapping():
            return Keyed({key: classify(member) for key, member in value.items()})
        case RaceWrapper(members=members):
            return Race(tuple(map(classify, members)))
        case _:
            raise UnsupportedYieldType(value)


def start(yielded: Yielded, drive: Drive, /) -> Future[Any]:
    """Start a classified value, returning the future of its resolution."""
    match yielded:
        case Nested(target=target):
            return drive(target)
        case Single(source=Future() as future):
            return future
        case Single(source=Suspension() as suspension):
            return suspension.start()
        case Ordered(members=members, factory=factory):
            return collect_sequence([start(m, drive) for m in members], factory)
        case Keyed(members=members):
            return collect_mapping({k: start(m, drive) for k, m in members.items()})
        case Race(members=members):
            return collect_first([start(m, drive) for m in members])


def normalize(value: Any, /, drive: Drive | None = None) -> Future[Any]:
    """Turn a yielded value into a single future.

    Nested routines are driven with ``drive``, which defaults to driving
    them without any event sink.
    """
    if drive is None:
        from .driver import drive as default_drive

        drive = default_drive
    return start(classify(value), drive)
