import json
from typing import Annotated

import typer
from typer import Argument
from typer import Typer

from .coio import Coio
from .monitor import Monitor

app = Typer()


def parse_argument(value: str):
    """Parse a command line argument as a JSON literal, or keep the string."""
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


@app.command()
def routines():
    """Show all registered routines."""
    coio = Coio()
    try:
        routines = coio.routines()

        if not routines:
            print("No routines registered.")
            return

        name_width = max(len("Name"), max(len(routine.name) for routine in routines))
        function_paths = []
        for routine in routines:
            module = routine.fn.__module__
            qualname = routine.fn.__qualname__
            function_paths.append(f"{module}.{qualname}")
        path_width = max(len("Path"), max(len(path) for path in function_paths))

        print(f"{'Name':<{name_width}} | {'Path':<{path_width}}")
        print(f"{'-' * name_width}-+-{'-' * path_width}")
        for routine, path in zip(routines, function_paths, strict=True):
            print(f"{routine.name:<{name_width}} | {path:<{path_width}}")
    finally:
        coio.shutdown()


@app.command()
def run(
    name: Annotated[str, Argument(help="Name of a registered routine.")],
    arguments: Annotated[
        list[str] | None,
        Argument(
            help="Arguments for the routine, parsed as JSON when possible. "
            "Examples: '3', '\"text\"', '[1, 2]'",
            metavar="[ARGUMENT]...",
        ),
    ] = None,
):
    """Drive a registered routine to completion and print its value."""
    coio = Coio()
    try:
        try:
            template = coio.routine(name)
        except KeyError:
            print(f"Error: No routine registered as {name!r}")
            raise typer.Exit(code=1) from None

        args = [parse_argument(argument) for argument in arguments or []]
        try:
            value = coio.run(template, *args)
        except Exception as exception:
            print(f"Error: {type(exception).__name__}: {exception}")
            raise typer.Exit(code=1) from None
        print(repr(value))
    finally:
        coio.shutdown()


@app.command()
def monitor(raw: bool = False):
    """Monitor coio events.

    Shows a live view of routines being driven. Use --raw for detailed
    event output.
    """
    if raw:
        coio = Coio()
        events = coio.subscribe({object})
        try:
            while True:
                print(events.get())
        except KeyboardInterrupt:
            print("Shutting down gracefully.")
        finally:
            coio.shutdown()
    else:
        Monitor().run()


if __name__ == "__main__":
    app()
