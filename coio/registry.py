from collections.abc import Callable

from .routine import Template

ROUTINE_REGISTRY: dict[str, Template] = {}


def routine(*, name: str):
    """Decorate a generator or async function to make it a named routine."""

    def create_routine[**A, R](fn: Callable[A, R]) -> Template[A, R]:
        template = Template(fn, name=name)
        ROUTINE_REGISTRY.setdefault(template.name, template)
        assert ROUTINE_REGISTRY[template.name] == template, (
            f"Failed to register {template}"
        )
        return template

    return create_routine
