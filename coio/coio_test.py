import os
from contextlib import contextmanager
from queue import Empty

import pytest

from .coio import Coio
from .driver import Driver
from .registry import ROUTINE_REGISTRY
from .registry import routine
from .result import Err
from .result import Ok
from .stub.journal import StubJournal


@contextmanager
def working_directory(path):
    original_cwd = os.getcwd()
    os.chdir(path)
    try:
        yield
    finally:
        os.chdir(original_cwd)


@contextmanager
def isolated_registry():
    original_registry = dict(ROUTINE_REGISTRY)
    ROUTINE_REGISTRY.clear()
    try:
        yield
    finally:
        ROUTINE_REGISTRY.clear()
        ROUTINE_REGISTRY.update(original_registry)


def drain(events):
    collected = []
    while True:
        try:
            collected.append(events.get(timeout=0.2))
        except Empty:
            return collected


@pytest.fixture
def coio():
    coio = Coio(journal=StubJournal())
    yield coio
    coio.shutdown()


@pytest.mark.timeout(5)
def test_drive_publishes_lifecycle_events(coio):
    events = coio.subscribe({Driver.Started, Driver.Completed})

    def child():
        return "child"
        yield

    def parent():
        return (yield child())

    assert coio.run(parent) == "child"

    received = drain(events)
    started = [event for event in received if isinstance(event, Driver.Started)]
    completed = [event for event in received if isinstance(event, Driver.Completed)]
    assert {event.parent_id for event in started} == {None, started[0].id}
    assert [event.result for event in completed] == [Ok("child"), Ok("child")]


@pytest.mark.timeout(5)
def test_failures_are_published(coio):
    events = coio.subscribe({Driver.Completed})

    def failing():
        raise ValueError("nope")
        yield

    with pytest.raises(ValueError):
        coio.run(failing)

    (event,) = drain(events)
    assert isinstance(event.result, Err)
    assert isinstance(event.result.error, ValueError)


@pytest.mark.timeout(5)
def test_unserializable_results_are_still_delivered(coio):
    events = coio.subscribe({Driver.Completed})

    def unserializable():
        return (n for n in range(3))
        yield

    value = coio.run(unserializable)

    (event,) = drain(events)
    assert event.result.value is value


def test_routines_are_listed(coio):
    with isolated_registry():

        @routine(name="listed")
        def listed():
            yield

        assert coio.routines() == [listed]
        assert coio.routine("listed") is listed


@pytest.mark.timeout(5)
def test_config_registers_modules_and_selects_the_journal(tmp_path, monkeypatch):
    monkeypatch.delenv("COIO_JOURNAL", raising=False)
    (tmp_path / "pyproject.toml").write_text(
        """
        [tool.coio]
        journal = "stub:"
        register = ["coio.samples.files"]
        """
    )

    with working_directory(tmp_path):
        coio = Coio()
        try:
            assert coio.routine("read_together").name == "read_together"
        finally:
            coio.shutdown()


@pytest.mark.timeout(5)
def test_without_config_events_stay_in_process(tmp_path, monkeypatch):
    monkeypatch.delenv("COIO_JOURNAL", raising=False)

    with working_directory(tmp_path):
        coio = Coio()
        try:
            events = coio.subscribe({Driver.Completed})
            assert coio.run(lambda: 7) == 7
            assert len(drain(events)) == 1
        finally:
            coio.shutdown()


def test_environment_overrides_config(tmp_path, monkeypatch):
    (tmp_path / "pyproject.toml").write_text('[tool.coio]\njournal = "stub:"\n')
    monkeypatch.setenv("COIO_JOURNAL", "redis://localhost")

    with working_directory(tmp_path):
        with pytest.raises(ValueError, match="URI scheme"):
            Coio()


def test_unknown_journal_scheme_is_rejected(tmp_path, monkeypatch):
    monkeypatch.delenv("COIO_JOURNAL", raising=False)
    (tmp_path / "pyproject.toml").write_text('[tool.coio]\njournal = "kafka://x"\n')

    with working_directory(tmp_path):
        with pytest.raises(ValueError, match="kafka://x"):
            Coio()
