from concurrent.futures import Future
from dataclasses import dataclass
from threading import Timer

from .suspension import Suspension


@dataclass(eq=False, kw_only=True)
class Pause(Suspension[None]):
    interval: float

    def start(self):
        future = Future[None]()
        timer = Timer(self.interval, elapse, args=(future,))
        timer.name = "coio-pause"
        timer.daemon = True
        future.add_done_callback(lambda _: timer.cancel())
        timer.start()
        return future


def elapse(future: Future[None], /):
    # The timer may fire just as the pause is cancelled.
    if future.set_running_or_notify_cancel():
        future.set_result(None)


def pause(interval: float, /) -> Pause:
    """Suspend for some seconds without holding a thread of the routine."""
    return Pause(interval=interval)
