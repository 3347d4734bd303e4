import logging
from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass
from dataclasses import field
from typing import Any

from . import awaitable
from .event import Event
from .event import random_id
from .result import Err
from .result import Ok
from .result import Result
from .result import outcome
from .result import settle
from .routine import Routine
from .routine import Step
from .routine import Template
from .routine import routine_of
from .suspension import Suspendable

logger = logging.getLogger(__name__)

type Publish = Callable[[Event], None]


class Driver:
    """Drive one routine to completion.

    The routine is resumed with the value of each future it waits on, or
    has the error thrown into it when that future fails. Resolved futures
    are consumed in a loop, so a routine can wait on any number of them
    without growing the stack. Unresolved ones resume the routine from
    their done callback, on whichever thread resolves them.

    The outcome is reported once, on ``future``, which is running from the
    start and so cannot be cancelled.
    """

    @dataclass(eq=False, kw_only=True)
    class Started(Event):
        name: str
        parent_id: str | None = None

    @dataclass(eq=False, kw_only=True)
    class Suspended(Event):
        kind: str

    @dataclass(eq=False, kw_only=True)
    class Continued(Event): ...

    @dataclass(eq=False, kw_only=True)
    class Threw(Event):
        exception: BaseException = field(repr=False)

    @dataclass(eq=False, kw_only=True)
    class Completed(Event):
        result: Result[Any, BaseException] = field(repr=False)

    def __init__(
        self,
        target: Any,
        /,
        args: tuple[Any, ...] = (),
        kwargs: dict[str, Any] | None = None,
        *,
        publish: Publish | None = None,
        parent_id: str | None = None,
    ):
        self.id = random_id()
        self.parent_id = parent_id
        self.name = name_of(target)
        self.future = Future[Any]()
        self.suspensions = 0
        self.__target = target
        self.__args = args
        self.__kwargs = kwargs or {}
        self.__publish = publish
        self.__routine: Routine | None = None

    def __repr__(self):
        return f"<{type(self).__name__} {self.id!r} {self.name}>"

    def start(self) -> Future[Any]:
        if not self.future.set_running_or_notify_cancel():
            return self.future
        logger.debug("Starting %r", self)

        try:
            self.__emit(
                Driver.Started(id=self.id, name=self.name, parent_id=self.parent_id)
            )
            target = self.__target
            if callable(target):
                target = target(*self.__args, **self.__kwargs)
        except BaseException as exception:
            self.__finish(Err(exception))
            return self.future

        self.__routine = routine_of(target)
        if self.__routine is not None:
            self.__advance(Ok(None))
        elif isinstance(target, Future | Suspendable):
            self.__adopt(target)
        else:
            # Not awaitable at all, so it's already the final value.
            self.__finish(Ok(target))
        return self.future

    def __adopt(self, value: Any):
        """Settle the same way as an awaitable driven in place of a routine."""
        try:
            future = self.__suspend(value)
        except BaseException as exception:
            self.__finish(Err(exception))
            return
        future.add_done_callback(lambda future: self.__finish(outcome(future)))

    def __emit(self, event: Event):
        if self.__publish is not None:
            self.__publish(event)

    def __advance(self, result: Result[Any, BaseException]):
        """Run the routine until it waits on an unresolved future, or ends."""
        while True:
            try:
                step = self.__step(result)
                if step.done:
                    break
                future = self.__suspend(step.value)
            except BaseException as exception:
                self.__finish(Err(exception))
                return

            if not future.done():
                future.add_done_callback(self.__resolved)
                return
            result = outcome(future)

        self.__finish(Ok(step.value))

    def __resolved(self, future: Future[Any]):
        self.__advance(outcome(future))

    def __step(self, result: Result[Any, BaseException]) -> Step:
        routine = self.__routine
        assert routine is not None
        match result:
            case Ok(value=value):
                if self.suspensions:
                    self.__emit(Driver.Continued(id=self.id))
                return routine.resume(value)
            case Err(error=error) if routine.supports_injection:
                self.__emit(Driver.Threw(id=self.id, exception=error))
                return routine.throw_into(error)
            case Err(error=error):
                raise error

    def __suspend(self, value: Any) -> Future[Any]:
        # Unsupported values are not thrown into the routine.
        yielded = awaitable.classify(value)
        self.suspensions += 1
        self.__emit(Driver.Suspended(id=self.id, kind=type(yielded).__name__))
        try:
            return awaitable.start(yielded, self.__drive_nested)
        except Exception as exception:
            failed = Future[Any]()
            failed.set_exception(exception)
            return failed

    def __drive_nested(self, target: Any) -> Future[Any]:
        return Driver(target, publish=self.__publish, parent_id=self.id).start()

    def __finish(self, result: Result[Any, BaseException]):
        try:
            self.__emit(Driver.Completed(id=self.id, result=result))
        except BaseException as exception:
            result = Err(exception)
        logger.debug("Finished %r with %r", self, result)
        settle(self.future, result)


def name_of(target: Any, /) -> str:
    if isinstance(target, Template | Routine):
        return target.name
    return getattr(target, "__qualname__", None) or type(target).__qualname__


def drive(target: Any, /, *args: Any, **kwargs: Any) -> Future[Any]:
    """Drive a routine to completion, returning the future of its outcome.

    The target may be a routine template, which is called with the
    arguments, or a routine instance. A future or suspension is adopted,
    and anything else is treated as an already known final value. Calling
    drive never raises: every problem
    is reported on the returned future.
    """
    return Driver(target, args, kwargs).start()


def run(target: Any, /, *args: Any, **kwargs: Any) -> Any:
    """Drive a routine and block until it finishes, returning its value."""
    return drive(target, *args, **kwargs).result()
