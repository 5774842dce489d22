"""Command-line interface for Patchnotes.

Provides ``patchnotes serve``, ``filter`` and ``generate`` commands.  The
entry point is registered via ``pyproject.toml`` as
``patchnotes = "patchnotes.cli:cli"``.
"""

import json
import logging
from pathlib import Path

import click
import httpx

from patchnotes.config import get_policy_name, get_port
from patchnotes.errors import UnknownPolicyError
from patchnotes.filters.relevance import PRESETS, filter_all, get_policy
from patchnotes.filters.types import DiffItem
from patchnotes.stream.reducer import NoteReconstructor

logger = logging.getLogger(__name__)

_MIN_PORT = 1024
_MAX_PORT = 65535


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _setup_logging(verbose: bool) -> None:
    """Configure the root logger to write to stderr.

    A no-op when the root logger already has handlers (e.g. under uvicorn
    reloads or test runners).
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _validate_port(port: int) -> None:
    """Raise ``click.BadParameter`` if *port* is out of range."""
    if not (_MIN_PORT <= port <= _MAX_PORT):
        raise click.BadParameter(
            f"Port must be between {_MIN_PORT} and {_MAX_PORT}, got {port}."
        )


def _load_diffs(path: Path) -> list[DiffItem]:
    """Read diff items from a JSON file holding a list or ``{"diffs": [...]}``."""
    try:
        raw = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"{path} is not valid JSON: {exc}") from exc
    if isinstance(raw, dict):
        raw = raw.get("diffs", [])
    return [DiffItem.model_validate(entry) for entry in raw]


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Patchnotes -- streaming release notes for merged pull requests."""
    _setup_logging(verbose)


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--port", default=None, type=int, help="Server port (default: 7870)")
@click.option("--host", default="127.0.0.1", help="Interface to bind")
@click.option(
    "--policy",
    default=None,
    type=click.Choice(sorted(PRESETS), case_sensitive=False),
    help="Relevance filter preset",
)
def serve(port: int | None, host: str, policy: str | None) -> None:
    """Start the Patchnotes server."""
    import uvicorn

    from patchnotes.server.app import create_app

    port = port if port is not None else get_port()
    _validate_port(port)

    app = create_app(policy=get_policy(policy or get_policy_name()))
    click.echo(f"Starting Patchnotes on {host}:{port}...")
    uvicorn.run(app, host=host, port=port, log_level="info")


# ---------------------------------------------------------------------------
# filter
# ---------------------------------------------------------------------------


@cli.command("filter")
@click.argument("diffs_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--policy",
    default=None,
    type=click.Choice(sorted(PRESETS), case_sensitive=False),
    help="Relevance filter preset",
)
def filter_cmd(diffs_file: Path, policy: str | None) -> None:
    """Show which diff items in DIFFS_FILE are relevant."""
    try:
        active = get_policy(policy or get_policy_name())
    except UnknownPolicyError as exc:
        raise click.BadParameter(str(exc)) from exc

    diffs = _load_diffs(diffs_file)
    relevant = filter_all(diffs, active)
    click.echo(f"{len(relevant)} of {len(diffs)} items relevant under '{active.name}':")
    for item in relevant:
        click.echo(f"  #{item.id}  {item.description}")


# ---------------------------------------------------------------------------
# generate
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("diffs_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--port", default=None, type=int, help="Port of a running server")
@click.option("--timeout", default=120.0, type=float, help="Read timeout in seconds")
def generate(diffs_file: Path, port: int | None, timeout: float) -> None:
    """Generate notes for DIFFS_FILE through a running server."""
    port = port if port is not None else get_port()
    diffs = _load_diffs(diffs_file)
    payload = {"diffs": [item.model_dump() for item in diffs]}
    notes = NoteReconstructor()

    try:
        with httpx.stream(
            "POST",
            f"http://127.0.0.1:{port}/generate-notes",
            json=payload,
            timeout=timeout,
        ) as response:
            if response.status_code != 200:
                response.read()
                try:
                    message = response.json().get("error", response.text)
                except ValueError:
                    message = response.text
                click.echo(click.style(f"Request failed ({response.status_code}): {message}", fg="red"))
                raise SystemExit(1)
            for chunk in response.iter_bytes():
                notes.feed(chunk)
            notes.close()
    except (httpx.ConnectError, httpx.TimeoutException) as exc:
        click.echo(click.style(f"Could not reach server on port {port}: {exc}", fg="red"))
        raise SystemExit(1)

    for pr_id, state in notes.notes.items():
        marker = "" if notes.finished(pr_id) else " (incomplete)"
        click.echo(click.style(f"PR #{pr_id}{marker}", bold=True))
        click.echo(f"  Developer: {state.developer.strip()}")
        click.echo(f"  Marketing: {state.marketing.strip()}")
        if state.tools and state.tools.contributors:
            names = ", ".join(c.name for c in state.tools.contributors)
            click.echo(f"  Contributors: {names}")
        if state.tools and state.tools.related_issues:
            click.echo(f"  Related: {'; '.join(state.tools.related_issues)}")

    if notes.skipped:
        click.echo(click.style(f"{notes.skipped} malformed records skipped", fg="yellow"))
    if notes.aborted:
        click.echo(click.style(f"Stream aborted: {notes.error}", fg="red"))
        raise SystemExit(1)
