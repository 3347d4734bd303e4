import importlib
import os
import pickle
import tomllib
from collections.abc import Iterable
from concurrent.futures import Future
from pathlib import Path
from queue import Queue
from typing import Any

from .driver import Driver
from .event import Event
from .journal import Journal
from .registry import ROUTINE_REGISTRY
from .routine import Template
from .stream import Stream


class Coio:
    """Drive routines with their lifecycle events published to a journal.

    The journal comes from the ``COIO_JOURNAL`` environment variable, or
    from ``journal`` in the ``[tool.coio]`` table of the nearest
    pyproject.toml. Without either, events stay within this process.
    """

    def __init__(self, *, journal: Journal | None = None):
        self.__stream = Stream(journal or self.__default_journal())
        self.__register_routines()

    def __pyproject(self) -> Path | None:
        for path in [cwd := Path.cwd(), *cwd.parents]:
            candidate = path / "pyproject.toml"
            if candidate.is_file():
                return candidate
        return None

    def __config(self) -> dict:
        if pyproject := self.__pyproject():
            with pyproject.open("rb") as f:
                config = tomllib.load(f)
            return config.get("tool", {}).get("coio", {})
        return {}

    def __default_journal(self) -> Journal:
        journal_uri = os.environ.get("COIO_JOURNAL")
        if not journal_uri:
            journal_uri = self.__config().get("journal", "stub:")

        if journal_uri.startswith("pika:"):
            from .pika.journal import PikaJournal

            return PikaJournal.from_uri(journal_uri)

        if journal_uri.startswith("stub:"):
            from .stub.journal import StubJournal

            return StubJournal.from_uri(journal_uri)

        raise ValueError(
            f"URI scheme must be 'pika:' or 'stub:', got: {journal_uri}"
        )

    def __register_routines(self):
        """Load routine modules from pyproject.toml."""
        for module_name in self.__config().get("register", []):
            importlib.import_module(module_name)

    def __publish(self, event: Event):
        try:
            self.__stream.publish(event)
        except (pickle.PicklingError, TypeError):
            # Values that can't be serialized are only seen locally.
            self.__stream.publish_local(event)

    def drive(self, target: Any, /, *args: Any, **kwargs: Any) -> Future[Any]:
        """Drive a routine, publishing its lifecycle events."""
        return Driver(target, args, kwargs, publish=self.__publish).start()

    def run(self, target: Any, /, *args: Any, **kwargs: Any) -> Any:
        """Drive a routine and block until it finishes, returning its value."""
        return self.drive(target, *args, **kwargs).result()

    def routine(self, routine_name: str, /) -> Template:
        return ROUTINE_REGISTRY[routine_name]

    def routines(self) -> list[Template]:
        """Return all registered routines."""
        return list(ROUTINE_REGISTRY.values())

    def subscribe[T](self, types: Iterable[type[T]]) -> Queue[T]:
        return self.__stream.subscribe(types)

    def unsubscribe(self, queue: Queue):
        return self.__stream.unsubscribe(queue)

    def shutdown(self):
        """Shut down the event stream and its journal."""
        self.__stream.shutdown()
