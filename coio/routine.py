import inspect
from abc import ABC
from abc import abstractmethod
from collections.abc import Awaitable
from collections.abc import Callable
from collections.abc import Coroutine
from collections.abc import Generator
from dataclasses import dataclass
from functools import partial
from typing import Any

from .errors import RoutineExhausted
from .suspension import Suspendable


@dataclass(frozen=True)
class Step:
    """The outcome of advancing a routine to its next suspension point."""

    done: bool
    value: Any


class Routine(ABC):
    """A computation the driver resumes until it is done.

    Each call advances the routine to its next suspension point, where
    the step carries the suspend request, or to its end, where the step
    carries the return value. Calls are never made concurrently, and never
    after the routine is done.

    Error injection is optional. Routines that don't support it leave
    ``supports_injection`` false, and the driver fails instead of
    throwing into them.
    """

    supports_injection: bool = False

    @property
    def name(self) -> str:
        return type(self).__qualname__

    @abstractmethod
    def resume(self, value: Any, /) -> Step:
        raise NotImplementedError("Subclasses must implement this method.")

    def throw_into(self, exception: BaseException, /) -> Step:
        raise NotImplementedError(
            f"{type(self).__name__} does not accept injected errors."
        )


class GeneratorRoutine(Routine):
    """Drive anything with the generator ``send`` and ``throw`` methods."""

    supports_injection = True

    def __init__(
        self, generator: Generator[Any, Any, Any] | Coroutine[Any, Any, Any]
    ):
        self.__generator = generator
        self.__done = False

    def __repr__(self):
        return f"<{type(self).__name__} {self.__generator!r}>"

    @property
    def name(self) -> str:
        return getattr(self.__generator, "__qualname__", super().name)

    def resume(self, value: Any, /) -> Step:
        return self.__advance(partial(self.__generator.send, value))

    def throw_into(self, exception: BaseException, /) -> Step:
        return self.__advance(partial(self.__generator.throw, exception))

    def __advance(self, step: Callable[[], Any]) -> Step:
        if self.__done:
            raise RoutineExhausted(f"{self!r} is already done.")
        try:
            value = step()
        except StopIteration as stop:
            self.__done = True
            return Step(done=True, value=stop.value)
        except BaseException:
            self.__done = True
            raise
        return Step(done=False, value=value)


class Template[**A, R]:
    """A named function that creates routines when called."""

    def __init__(self, fn: Callable[A, R], *, name: str):
        self.fn = fn
        self.name = name

    def __repr__(self):
        return f"<{type(self).__name__} {self.name!r}>"

    def __call__(self, *args: A.args, **kwargs: A.kwargs) -> R:
        return self.fn(*args, **kwargs)


def routine_of(value: Any, /) -> Routine | None:
    """Adapt a routine instance to the routine contract, if it is one."""
    match value:
        case Routine():
            return value
        case Suspendable():
            # Awaitable, but awaiting it only hands it to the driver.
            return None
        case Generator() | Coroutine():
            return GeneratorRoutine(value)
        case Awaitable():
            return GeneratorRoutine(value.__await__())
        case _:
            return None


def is_template(value: Any, /) -> bool:
    """Whether calling the value with no arguments creates a routine."""
    return (
        isinstance(value, Template)
        or inspect.isgeneratorfunction(value)
        or inspect.iscoroutinefunction(value)
    )
