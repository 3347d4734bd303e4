from collections.abc import Callable
from concurrent.futures import Future
from contextvars import copy_context
from dataclasses import dataclass
from dataclasses import field
from threading import Thread
from typing import Any

from .suspension import Suspension


@dataclass(eq=False, kw_only=True)
class Call[R](Suspension[R]):
    """Run a blocking callable on its own thread."""

    fn: Callable[..., R]
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)

    def __repr__(self):
        params_repr = ", ".join(
            (*map(repr, self.args), *(f"{k}={v!r}" for k, v in self.kwargs.items())),
        )
        name = getattr(self.fn, "__qualname__", repr(self.fn))
        return f"<{type(self).__name__} {name}({params_repr})>"

    def start(self) -> Future[R]:
        future = Future[R]()
        context = copy_context()
        thread = Thread(
            target=self.__run,
            name=f"coio-call-{getattr(self.fn, '__name__', 'fn')}",
            args=(future, context),
            daemon=True,
        )
        thread.start()
        return future

    def __run(self, future: Future[R], context):
        if not future.set_running_or_notify_cancel():
            return

        try:
            result = context.run(self.fn, *self.args, **self.kwargs)
        except BaseException as exception:
            future.set_exception(exception)
        else:
            future.set_result(result)


def call[R](fn: Callable[..., R], /, *args: Any, **kwargs: Any) -> Call[R]:
    """Suspend until a blocking call, made on another thread, returns."""
    return Call(fn=fn, args=args, kwargs=kwargs)
