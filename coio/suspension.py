from abc import abstractmethod
from collections.abc import Awaitable
from collections.abc import Generator
from concurrent.futures import Future
from typing import Self


class Suspendable[R](Awaitable[R]):
    """A value that is handed to the driver as is when awaited.

    Routines written as generators yield these directly. Routines written
    with ``async def`` await them, which yields them to the driver all the
    same, and get back the value the driver resolved them to.
    """

    def __await__(self) -> Generator[Self, R, R]:
        return (yield self)


class Suspension[R](Suspendable[R]):
    """An external asynchronous operation, started by the driver."""

    @abstractmethod
    def start(self) -> Future[R]:
        raise NotImplementedError("Subclasses must implement this method.")
