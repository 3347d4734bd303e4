from typing import Any


class UnsupportedYieldType(TypeError):
    """A routine yielded something the driver cannot wait on."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(
            "You may only yield a future, suspension, routine, list, tuple, "
            f"or mapping, but the following object was passed: {value!r}"
        )


class RoutineExhausted(RuntimeError):
    """A finished routine was resumed."""
