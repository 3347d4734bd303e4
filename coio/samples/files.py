"""Generator routines reading files, after the classic ``co`` examples."""

import re
from pathlib import Path

from coio import call
from coio import gather
from coio import pause
from coio import race
from coio import routine


def read_text(path: str):
    return call(Path(path).read_text)


@routine(name="read_in_turn")
def read_in_turn(first: str, second: str):
    """Read one file, then the other."""
    a = yield read_text(first)
    b = yield read_text(second)
    return a + b


@routine(name="read_together")
def read_together(first: str, second: str):
    """Read both files at once."""
    texts = yield {"first": read_text(first), "second": read_text(second)}
    return texts["first"] + texts["second"]


@routine(name="count_word")
def count_word(path: str, word: str, chunk_size: int = 64, timeout: float = 5.0):
    """Count a word in a file read chunk by chunk.

    Each read races a pause, so a stalled read ends the count instead of
    hanging it. A read that wins stops its pause, but a stalled read is
    left to finish on its own.
    """
    pattern = re.compile(rf"\b{re.escape(word)}\b", re.IGNORECASE)
    count = 0
    tail = ""
    with open(path) as stream:
        while True:
            deadline = pause(timeout).start()
            chunk = yield race(call(stream.read, chunk_size), deadline)
            deadline.cancel()
            if chunk is None:
                raise TimeoutError(f"Reading {path} stalled for {timeout}s")
            if not chunk:
                break
            # A word may straddle two chunks.
            text = tail + chunk
            cut = max(text.rfind(" "), text.rfind("\n")) + 1
            count += len(pattern.findall(text[:cut]))
            tail = text[cut:]
    return count + len(pattern.findall(tail))


@routine(name="line_counts")
async def line_counts(*paths: str):
    """Count the lines of each file, reading them all at once."""
    texts = await gather(*(read_text(path) for path in paths))
    return {path: len(text.splitlines()) for path, text in zip(paths, texts, strict=True)}
