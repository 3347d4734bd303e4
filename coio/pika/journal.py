from collections.abc import Iterator
from queue import Queue
from queue import ShutDown
from threading import Lock
from threading import Thread
from typing import cast

from pika import BlockingConnection
from pika import ConnectionParameters
from pika import URLParameters

from coio.journal import Journal

EXCHANGE = "amq.topic"
ROUTING_KEY = "coio.events"


class PikaJournal(Journal):
    """A journal on a RabbitMQ topic exchange, shared between processes."""

    @classmethod
    def from_uri(cls, uri: str, /):
        """Create a journal instance from a URI."""
        amqp_uri = "amqp:" + uri.removeprefix("pika:").removeprefix("amqp:")
        return cls(URLParameters(amqp_uri))

    def __init__(self, connection_params: ConnectionParameters | URLParameters):
        self.__connection_params = connection_params
        self.__subscriber = Queue[bytes]()
        self.__subscribe_connection = BlockingConnection(self.__connection_params)
        self.__subscribe_channel = self.__subscribe_connection.channel()
        self.__queue_name = cast(
            str, self.__subscribe_channel.queue_declare("", exclusive=True).method.queue
        )
        self.__shutdown_lock = Lock()
        self.__shutdown = False
        self.__subscribe_channel.queue_bind(
            self.__queue_name, EXCHANGE, routing_key=ROUTING_KEY
        )
        self.__subscribe_thread = Thread(
            target=self.__listen, name="coio-journal-listener"
        )
        self.__subscribe_thread.start()

        self.__publish_lock = Lock()
        self.__publish_connection = BlockingConnection(self.__connection_params)
        self.__publish_channel = self.__publish_connection.channel()

    def __listen(self):
        for _, _, body in self.__subscribe_channel.consume(
            self.__queue_name, auto_ack=True
        ):
            self.__subscriber.put(body)

    def subscribe(self) -> Iterator[bytes]:
        while True:
            try:
                yield self.__subscriber.get()
            except ShutDown:
                return

    def publish(self, message: bytes):
        with self.__publish_lock:
            self.__publish_channel.basic_publish(
                exchange=EXCHANGE,
                routing_key=ROUTING_KEY,
                body=message,
            )

    def shutdown(self):
        with self.__shutdown_lock:
            if self.__shutdown:
                return
            self.__shutdown = True

            stopped = Lock()
            stopped.acquire()

            def callback():
                self.__subscribe_channel.cancel()
                stopped.release()

            self.__subscribe_connection.add_callback_threadsafe(callback)
            with stopped:
                pass

            self.__subscribe_thread.join()
            self.__subscriber.shutdown()
            with self.__publish_lock:
                self.__publish_connection.close()
            self.__subscribe_connection.close()
