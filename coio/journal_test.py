"""Base test class for journal implementations.

Example usage for a new journal implementation:

```python
# coio/myjournal/journal_test.py
import pytest
from coio.journal_test import BaseJournalTest
from .journal import MyJournal

class TestMyJournal(BaseJournalTest):
    @pytest.fixture
    def journal(self):
        journal = MyJournal("connection_string")
        yield journal
        journal.shutdown()
```
"""

import itertools
import threading
import time

import pytest


class BaseJournalTest:
    """Base class with common tests for all journal implementations."""

    @pytest.fixture
    def journal(self):
        """Subclasses must implement this fixture to provide a journal instance."""
        raise NotImplementedError("Subclasses must implement journal fixture")

    @pytest.mark.timeout(2)
    def test_multiple_messages(self, journal):
        """Messages are received in the order they were published."""
        subscriber = journal.subscribe()
        messages = [b"message1", b"message2", b"message3"]
        for message in messages:
            journal.publish(message)

        assert list(itertools.islice(subscriber, len(messages))) == messages

    @pytest.mark.timeout(2)
    def test_shutdown_ends_subscriptions(self, journal):
        """Shutdown stops subscribers once pending messages are received."""
        received = []
        started = threading.Event()

        def subscribe():
            started.set()
            for message in journal.subscribe():
                received.append(message)

        thread = threading.Thread(target=subscribe)
        thread.start()
        started.wait()
        journal.publish(b"before shutdown")
        time.sleep(0.2)
        journal.shutdown()

        thread.join(timeout=2.0)
        assert not thread.is_alive()
        assert received == [b"before shutdown"]

    def test_concurrent_shutdown_is_thread_safe(self, journal):
        """Concurrent shutdown calls are thread-safe."""
        errors = []

        def shutdown():
            try:
                journal.shutdown()
            except Exception as exception:
                errors.append(exception)

        threads = [threading.Thread(target=shutdown) for _ in range(3)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=1.0)

        assert errors == []
