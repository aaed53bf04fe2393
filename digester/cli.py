"""Command-line interface for the digester."""

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from digester import __version__
from digester.errors import DigesterError
from digester.logging_config import setup_logging
from digester.rules import BaseRule, Digester, RuleRegistry, WildcardMatcher

app = typer.Typer(
    name="digester",
    help="Inspect how rule patterns match the elements of an XML document.",
)
console = Console()


class PathRecorder(BaseRule):
    """Records the line and match path of every element it sees."""

    def __init__(self) -> None:
        self.seen: list[tuple[int | None, str]] = []

    def begin(self, digester, namespace, name, attributes) -> None:
        self.seen.append((digester.locator.line, digester.current_path))


@app.command()
def paths(
    file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="XML document to inspect",
    ),
    pattern: list[str] = typer.Option(
        [],
        "--pattern",
        "-p",
        help="Wildcard pattern to test against every element (repeatable)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log every fired rule",
    ),
) -> None:
    """List the match path of every element, with the patterns matching it."""
    if verbose:
        setup_logging(logging.DEBUG)

    matcher = WildcardMatcher()
    recorder = PathRecorder()
    registry = RuleRegistry(matcher)
    registry.register("*", recorder)

    try:
        Digester(registry).parse(file)
    except DigesterError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e

    table = Table(title=str(file))
    table.add_column("Line", justify="right", style="dim")
    table.add_column("Path")
    if pattern:
        table.add_column("Matching patterns", style="green")

    for line, path in recorder.seen:
        row = ["" if line is None else str(line), path]
        if pattern:
            row.append(", ".join(p for p in pattern if matcher.matches(path, p)))
        table.add_row(*row)

    console.print(table)
    console.print(f"[bold]{len(recorder.seen)}[/bold] elements")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"digester {__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
