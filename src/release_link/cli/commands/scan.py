"""Implementation of the 'scan' command.

The scan command collects the commits since the base commit, classifies
their issue identifiers and pull request numbers, and prints the result.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from rich.table import Table

from release_link.ci import detect_ci_environment
from release_link.config import load_config
from release_link.core.scan import scan_commits
from release_link.exceptions import CommitNotFoundError, GitError
from release_link.vcs import GitRepository

if TYPE_CHECKING:
    from collections.abc import Mapping

    from rich.console import Console

    from release_link.core.scan import ScanResult

logger = logging.getLogger(__name__)


def _pluralize(count: int, word: str) -> str:
    return word if count == 1 else f"{word}s"


def run_scan(
    path: str | None,
    from_sha: str | None,
    to_sha: str | None,
    include_paths: list[str] | None,
    json_output: bool,
    console: Console,
    err_console: Console,
    environ: Mapping[str, str] | None = None,
) -> ScanResult | None:
    """Run the scan command.

    Args:
        path: Optional path to the repository
        from_sha: Base revision (exclusive); falls back to ``base_sha`` config
        to_sha: Target revision (inclusive); defaults to HEAD
        include_paths: Path globs from the command line
        json_output: Print the result as JSON instead of a table
        console: Console for standard output
        err_console: Console for error output
        environ: Environment used for CI detection, defaults to os.environ

    Returns:
        The scan result, or None when no commits were found
    """
    project_path = Path(path) if path else Path.cwd()
    ci = detect_ci_environment(os.environ if environ is None else environ)
    if ci is not None:
        logger.info("Running in %s", ci.name)

    # Load configuration
    try:
        config = load_config(project_path)
    except Exception as e:
        err_console.print(f"[red]Error loading config:[/] {e}")
        raise SystemExit(1) from e

    # Initialize git repository
    try:
        repo = GitRepository(project_path)
    except GitError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    effective_paths = config.effective_include_paths(include_paths)
    if include_paths and config.scan.include_paths:
        logger.info(
            "Using --include-paths %s over configured include_paths %s",
            include_paths,
            config.scan.include_paths,
        )
    elif effective_paths:
        logger.info("Using include paths %s", effective_paths)

    try:
        target = repo.resolve_commit(to_sha) if to_sha else repo.current_info().commit
        base_ref = from_sha or config.base_sha
        base = repo.resolve_commit(base_ref) if base_ref else None
    except GitError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    if not target:
        err_console.print("[red]Error:[/] Could not get current commit")
        raise SystemExit(1)

    if base is None:
        logger.info("No base commit given, only inspecting the current commit")
        base = target
    else:
        try:
            repo.ensure_commit_available(
                base,
                config.git.deepen_steps,
                remote=config.git.remote,
                unshallow=config.git.unshallow,
            )
        except CommitNotFoundError as e:
            logger.warning("%s Only inspecting the current commit.", e)
            base = target

    try:
        commits = repo.get_commits_between(base, target, effective_paths)
    except GitError as e:
        err_console.print(f"[red]Error reading commits:[/] {e}")
        raise SystemExit(1) from e

    if base == target:
        if not commits and effective_paths:
            logger.info("Current commit (%s) does not match the path filter", target)
    else:
        logger.info(
            "Found %d %s between %s and %s",
            len(commits),
            _pluralize(len(commits), "commit"),
            base,
            target,
        )

    if not commits:
        if json_output:
            console.print_json(json.dumps({"ci": ci.name if ci else None, "commits": 0, "result": None}))
        else:
            reason = f"matching {effective_paths}" if effective_paths else "in the computed range"
            console.print(f"[yellow]No commits found {reason}. Nothing to link.[/]")
        return None

    result = scan_commits(commits, effective_paths)

    if json_output:
        payload = {"ci": ci.name if ci else None, "commits": len(commits), "result": result.to_dict()}
        console.print_json(json.dumps(payload))
    else:
        _print_result(result, len(commits), console)

    return result


def _print_result(result: ScanResult, commit_count: int, console: Console) -> None:
    """Render a scan result as a rich table."""
    table = Table(title=f"Scanned {commit_count} {_pluralize(commit_count, 'commit')}")
    table.add_column("Issue", style="cyan")
    table.add_column("Action")
    table.add_column("Commit", style="dim")

    for ref in result.added_issues:
        table.add_row(ref.identifier, "[green]added[/]", ref.commit_sha[:12])
    for ref in result.reverted_issues:
        table.add_row(ref.identifier, "[red]reverted[/]", ref.commit_sha[:12])

    if result.added_issues or result.reverted_issues:
        console.print(table)
    else:
        console.print("[yellow]No issue keys found.[/]")

    if result.pull_request_numbers:
        numbers = ", ".join(f"#{n}" for n in result.pull_request_numbers)
        console.print(f"Pull requests: [cyan]{numbers}[/]")
    else:
        console.print("[dim]No pull requests found.[/]")
