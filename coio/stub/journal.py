from collections.abc import Iterator
from queue import Queue
from queue import ShutDown
from threading import Lock

from coio.journal import Journal


class StubJournal(Journal):
    """An in-memory journal, only visible within this process."""

    def __init__(self):
        self.__queue = Queue[bytes]()
        self.__shutdown_lock = Lock()
        self.__shutdown = False

    @classmethod
    def from_uri(cls, uri: str, /):
        return cls()

    def subscribe(self) -> Iterator[bytes]:
        while True:
            try:
                yield self.__queue.get()
            except ShutDown:
                return

    def publish(self, message: bytes):
        with self.__shutdown_lock:
            if self.__shutdown:
                return
            self.__queue.put(message)

    def shutdown(self):
        with self.__shutdown_lock:
            if self.__shutdown:
                return
            self.__shutdown = True
            self.__queue.shutdown()
