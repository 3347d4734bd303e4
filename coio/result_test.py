from concurrent.futures import Future

import pytest

from .result import Err
from .result import Ok
from .result import outcome
from .result import settle


def test_settle_with_ok():
    future = Future()
    settle(future, Ok(1))
    assert future.result(timeout=0) == 1


def test_settle_with_err():
    future = Future()
    error = ValueError("bad")
    settle(future, Err(error))
    assert future.exception(timeout=0) is error


def test_outcome_describes_resolved_futures():
    succeeded = Future()
    succeeded.set_result("value")
    errored = Future()
    error = KeyError("key")
    errored.set_exception(error)

    assert outcome(succeeded) == Ok("value")
    assert outcome(errored) == Err(error)


def test_unwrap():
    assert Ok(3).unwrap() == 3
    with pytest.raises(LookupError):
        Err(LookupError()).unwrap()
