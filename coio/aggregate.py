from collections.abc import Callable
from collections.abc import Hashable
from collections.abc import Iterable
from collections.abc import Mapping
from collections.abc import Sequence
from concurrent.futures import Future
from threading import Lock
from typing import Any
from typing import overload

from .result import Err
from .result import Ok
from .result import Result
from .result import outcome
from .result import settle
from .suspension import Suspendable


class Gather[T](Suspendable[T]):
    """Wait for every member, resolving to a tuple of their values."""

    def __init__(self, members: Iterable[Any]):
        self.members = tuple(members)

    def __repr__(self):
        return f"<{type(self).__name__} of {len(self.members)}>"


class GatherMap[K: Hashable, V](Suspendable[dict[K, V]]):
    """Wait for every value of the mapping, keeping the keys."""

    def __init__(self, members: Mapping[K, Any]):
        self.members = dict(members)

    def __repr__(self):
        return f"<{type(self).__name__} of {list(self.members)!r}>"


class Race[T](Suspendable[T]):
    """Settle the same way as whichever member settles first."""

    def __init__(self, members: Iterable[Any]):
        self.members = tuple(members)
        if not self.members:
            raise ValueError("A race needs at least one member.")

    def __repr__(self):
        return f"<{type(self).__name__} of {len(self.members)}>"


S = Suspendable


@overload
def gather[T1](s: S[T1], /) -> Gather[tuple[T1]]: ...
@overload
def gather[T1, T2](s1: S[T1], s2: S[T2], /) -> Gather[tuple[T1, T2]]: ...
@overload
def gather[T1, T2, T3](
    s1: S[T1], s2: S[T2], s3: S[T3], /
) -> Gather[tuple[T1, T2, T3]]: ...
@overload
def gather(*members: Any) -> Gather[tuple[Any, ...]]: ...


def gather(*members: Any) -> Gather[Any]:
    return Gather(members)


def gather_map[K: Hashable](members: Mapping[K, Any], /) -> GatherMap[K, Any]:
    return GatherMap(members)


def race(*members: Any) -> Race[Any]:
    return Race(members)


def _collect[K, R](
    futures: Mapping[K, Future[Any]],
    build: Callable[[dict[K, Any]], R],
) -> Future[R]:
    """Fan in the futures, failing as soon as any one of them fails."""
    collected = Future[R]()
    # Cancellation isn't offered; losing members keep running regardless.
    collected.set_running_or_notify_cancel()

    if not futures:
        collected.set_result(build({}))
        return collected

    lock = Lock()
    values: dict[K, Any] = {}
    settled = False

    def on_done(key: K, future: Future[Any]):
        nonlocal settled
        result = outcome(future)
        # Settling resumes waiters, which may touch the members again.
        with lock:
            if settled:
                return
            match result:
                case Ok(value=value):
                    values[key] = value
                    if len(values) < len(futures):
                        return
                    result = Ok(build(values))
            settled = True
        settle(collected, result)

    for key, future in futures.items():
        future.add_done_callback(lambda future, key=key: on_done(key, future))

    return collected


def collect_sequence[T](
    futures: Sequence[Future[Any]],
    factory: Callable[[Iterable[Any]], T] = list,
) -> Future[T]:
    """Resolve to the member values in member order, made by ``factory``."""
    return _collect(
        dict(enumerate(futures)),
        lambda values: factory(values[i] for i in range(len(futures))),
    )


def collect_mapping[K](futures: Mapping[K, Future[Any]]) -> Future[dict[K, Any]]:
    """Resolve to a dict with the same keys, in the same order."""
    return _collect(futures, lambda values: {key: values[key] for key in futures})


def collect_first[T](futures: Sequence[Future[T]]) -> Future[T]:
    """Settle with the outcome of the first member future to resolve."""
    if not futures:
        raise ValueError("Cannot wait for the first of no futures.")

    first = Future[T]()
    first.set_running_or_notify_cancel()
    lock = Lock()
    settled = False

    def on_done(future: Future[T]):
        nonlocal settled
        result: Result[T, BaseException] = outcome(future)
        with lock:
            if settled:
                return
            settled = True
        settle(first, result)

    for future in futures:
        future.add_done_callback(on_done)

    return first
