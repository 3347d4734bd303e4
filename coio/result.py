from concurrent.futures import Future
from dataclasses import dataclass


@dataclass
class Ok[T]:
    value: T

    def unwrap(self) -> T:
        return self.value


@dataclass
class Err[E: BaseException]:
    error: E

    def unwrap(self):
        raise self.error


type Result[T, E: BaseException] = Ok[T] | Err[E]


def settle[T](future: Future[T], result: Result[T, BaseException], /):
    """Resolve the future with the outcome the result describes."""
    match result:
        case Ok(value=value):
            future.set_result(value)
        case Err(error=error):
            future.set_exception(error)


def outcome[T](future: Future[T], /) -> Result[T, BaseException]:
    """Describe the outcome of a resolved future."""
    try:
        return Ok(future.result(timeout=0))
    except BaseException as exception:
        return Err(exception)
