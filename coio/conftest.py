import os
import threading
from threading import Thread
from time import sleep

import pytest


def pytest_sessionstart(session):
    """Ensure the test suite always exits."""
    timeout = float(session.config.getini("timeout")) + 5
    Thread(target=lambda: sleep(timeout) or os._exit(1), daemon=True).start()


@pytest.fixture(autouse=True)
def check_thread_cleanup():
    """Ensure that non-daemon threads are not left running.

    Daemon threads back pauses and calls, which a routine may abandon
    by design, for example the losers of a race.
    """
    initial_threads = set(threading.enumerate())
    yield
    new_threads = {
        t
        for t in set(threading.enumerate()) - initial_threads
        if t.is_alive() and not t.daemon
    }
    for thread in new_threads:
        thread.join(timeout=1.0)
    leaked = [t for t in new_threads if t.is_alive()]

    if leaked:
        thread_info = [f"  - {thread.name}" for thread in leaked]
        pytest.fail(
            f"Test left {len(leaked)} thread(s) running:\n" + "\n".join(thread_info)
        )
