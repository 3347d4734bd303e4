from collections.abc import Iterable
from contextlib import suppress
from itertools import chain
from queue import Queue
from queue import ShutDown
from threading import Lock
from threading import Thread
from typing import Any

import dill

from .journal import Journal


class Stream:
    """Deliver events to subscribers here and in other processes.

    Events are written to the journal and read back by a listener, so every
    subscriber of every stream on the same journal sees them.
    """

    def __init__(self, journal: Journal):
        self.__journal = journal
        self.__lock = Lock()
        self.__subscriptions: dict[type, set[Queue[Any]]] = {}
        self.__listener = Thread(target=self.__listen, name="coio-stream-listener")
        self.__listener.start()

    def __listen(self):
        for message in self.__journal.subscribe():
            self.__remote_receive(message)

    def subscribe[T](self, types: Iterable[type[T]]) -> Queue[T]:
        queue = Queue[T]()
        with self.__lock:
            for type in types:
                self.__subscriptions.setdefault(type, set()).add(queue)
        return queue

    def unsubscribe(self, queue: Queue) -> None:
        """Unsubscribe a queue from all event types."""
        with self.__lock:
            for type, subscriptions in list(self.__subscriptions.items()):
                subscriptions.discard(queue)
                if not subscriptions:
                    del self.__subscriptions[type]
        queue.shutdown(immediate=True)

    def __distribute(self, event: Any):
        """Local-only distribution of events to subscribers."""
        with self.__lock:
            subscribers = {
                subscription
                for type, subscriptions in self.__subscriptions.items()
                for subscription in subscriptions
                if isinstance(event, type)
            }
        for subscriber in subscribers:
            # Unsubscribed while the event was being distributed.
            with suppress(ShutDown):
                subscriber.put(event)

    def __remote_receive(self, body: bytes):
        self.__distribute(dill.loads(body))

    def publish(self, event: Any):
        """Publish an event to all subscribers of the stream.

        Requires that the event is serializable.
        """
        self.__journal.publish(dill.dumps(event))

    def publish_local(self, event: Any):
        """Publish only to subscribers of this stream instance."""
        self.__distribute(event)

    def shutdown(self):
        self.__journal.shutdown()
        self.__listener.join()
        with self.__lock:
            subscribers = set(chain.from_iterable(self.__subscriptions.values()))
        for subscriber in subscribers:
            subscriber.shutdown()
