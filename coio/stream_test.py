import threading
from dataclasses import dataclass
from queue import ShutDown

import pytest

from .stream import Stream
from .stub.journal import StubJournal


@dataclass
class Ping:
    n: int


@dataclass
class Pong:
    n: int


@pytest.fixture
def stream():
    stream = Stream(StubJournal())
    yield stream
    stream.shutdown()


@pytest.mark.timeout(2)
def test_subscribers_receive_published_events_by_type(stream):
    pings = stream.subscribe({Ping})
    everything = stream.subscribe({object})

    stream.publish(Ping(1))
    stream.publish(Pong(2))

    assert pings.get(timeout=1) == Ping(1)
    assert everything.get(timeout=1) == Ping(1)
    assert everything.get(timeout=1) == Pong(2)
    assert pings.empty()


@pytest.mark.timeout(2)
def test_unserializable_events_can_be_published_locally(stream):
    events = stream.subscribe({object})
    lock = threading.Lock()

    stream.publish_local(lock)

    assert events.get(timeout=1) is lock


@pytest.mark.timeout(2)
def test_unsubscribed_queues_are_shut_down(stream):
    events = stream.subscribe({Ping})
    stream.unsubscribe(events)
    stream.publish(Ping(1))

    with pytest.raises(ShutDown):
        events.get(timeout=1)


@pytest.mark.timeout(2)
def test_shutdown_ends_subscriptions():
    stream = Stream(StubJournal())
    events = stream.subscribe({Ping})
    stream.shutdown()

    with pytest.raises(ShutDown):
        events.get(timeout=1)
