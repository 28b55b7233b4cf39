"""Click application for the ``release-link`` command."""

from __future__ import annotations

import click
from rich.console import Console

from release_link import __version__
from release_link.log import configure_logging

console = Console()
err_console = Console(stderr=True)


def _split_paths(value: str | None) -> list[str]:
    if not value:
        return []
    return [p.strip() for p in value.split(",") if p.strip()]


@click.group(name="release-link")
def app() -> None:
    """Link commits to issues and pull requests for a release."""


@app.command()
@click.option("--path", "-p", default=None, help="Repository path (default: cwd)")
@click.option("--from", "from_sha", default=None, help="Base revision (exclusive)")
@click.option("--to", "to_sha", default=None, help="Target revision (inclusive, default: HEAD)")
@click.option(
    "--include-paths",
    default=None,
    envvar="RELEASE_LINK_INCLUDE_PATHS",
    help="Comma-separated globs filtering commits by path",
)
@click.option("--json", "json_output", is_flag=True, help="Output result as JSON")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
def scan(
    path: str | None,
    from_sha: str | None,
    to_sha: str | None,
    include_paths: str | None,
    json_output: bool,
    verbose: bool,
) -> None:
    """Scan commits and classify added and reverted issues."""
    from release_link.cli.commands.scan import run_scan

    configure_logging(verbose=verbose, stderr=json_output)
    run_scan(
        path=path,
        from_sha=from_sha,
        to_sha=to_sha,
        include_paths=_split_paths(include_paths),
        json_output=json_output,
        console=console,
        err_console=err_console,
    )


@app.command()
def version() -> None:
    """Show the release-link version."""
    console.print(__version__)


def main() -> None:
    app()
