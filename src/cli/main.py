"""CLI de rust-analyzer-downloader (Typer).

Comandos:
- `download <version> [--output PATH]`
- `get-versions [--per-page N]`
- `check [--output PATH] [--nightly] [--download/--no-download]`
- `doctor`

Cualquier `DownloaderError` no recuperado se loguea y termina el proceso con
el exit code de su categoría.
"""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Awaitable, Optional, TypeVar

import typer
from rich.console import Console

from adapters.http_client import build_async_client
from adapters.installer import ArtifactInstaller
from adapters.releases import GitHubReleaseLister
from adapters.version_probe import SubprocessVersionProbe
from cli import doctor
from cli.ui_components import build_outcomes_table, build_releases_table, describe_local_version
from core.config import AppSettings
from core.domain.channel import Channel
from core.domain.models import CandidateOutcome, CheckResult, DonePage, LocalVersion, Release
from core.errors import DownloaderError, get_exit_code
from core.logging_config import setup_logging
from core.services.check_pipeline import CheckRequest, PipelineHooks, run_check

T = TypeVar("T")

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="rust-analyzer-downloader",
    no_args_is_help=True,
    help="Downloads and gets versions for Rust Analyzer.",
)
app.command(name="doctor")(doctor.run)

_console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging for this tool."),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging, including httpx."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors."),
) -> None:
    """Downloads and gets versions for Rust Analyzer."""

    settings = AppSettings()
    if debug or verbose:
        level = "DEBUG"
    elif quiet:
        level = "ERROR"
    else:
        level = settings.log_level
    setup_logging(level=level, quiet_third_party=not debug)

    ctx.obj = settings
    start = time.perf_counter()
    ctx.call_on_close(
        lambda: logger.info("Command finished, exiting..., took %.3fs", time.perf_counter() - start)
    )


def _settings(ctx: typer.Context) -> AppSettings:
    return ctx.obj if isinstance(ctx.obj, AppSettings) else AppSettings()


def _run(coro: Awaitable[T]) -> T:
    """Ejecuta la corrutina y traduce errores del Core a exit codes."""

    try:
        return asyncio.run(coro)  # type: ignore[arg-type]
    except DownloaderError as exc:
        logger.error("Some error has occurred: %s", exc.format_full())
        raise typer.Exit(code=get_exit_code(exc)) from exc


async def _download(settings: AppSettings, version: str, output: Path) -> None:
    async with build_async_client(settings) as client:
        installer = ArtifactInstaller(client, settings)
        await installer.install(version, output)


@app.command()
def download(
    ctx: typer.Context,
    version: str = typer.Argument(..., help="Release tag to install (e.g. 2022-08-17 or nightly)."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Destination path of the executable."),
) -> None:
    """Download and install a specific release."""

    settings = _settings(ctx)
    destination = output or settings.resolved_output_path()
    _run(_download(settings, version, destination))
    _console.print(f"[green]Installed rust-analyzer {version} to[/green] {destination}")


async def _get_versions(settings: AppSettings, per_page: int) -> list[Release]:
    async with build_async_client(settings) as client:
        page = await GitHubReleaseLister(client, settings).list(1, per_page)
    if isinstance(page, DonePage):
        return []
    return page.releases


@app.command(name="get-versions")
def get_versions(
    ctx: typer.Context,
    per_page: Optional[int] = typer.Option(None, "--per-page", "-p", min=1, max=100, help="Releases to list."),
) -> None:
    """List the most recent releases."""

    settings = _settings(ctx)
    releases = _run(_get_versions(settings, per_page or settings.list_per_page))
    for release in releases:
        logger.info("Version: %s Is Prerelease: %s", release.tag, release.is_prerelease)
    _console.print(build_releases_table(releases))


async def _check(settings: AppSettings, request: CheckRequest, hooks: PipelineHooks) -> CheckResult:
    async with build_async_client(settings) as client:
        installer = ArtifactInstaller(client, settings) if request.download else None
        probe = SubprocessVersionProbe.for_destination(request.destination, settings.executable_name)
        return await run_check(
            request=request,
            releases=GitHubReleaseLister(client, settings),
            probe=probe,
            installer=installer,
            hooks=hooks,
        )


@app.command()
def check(
    ctx: typer.Context,
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Destination path of the executable."),
    nightly: bool = typer.Option(False, "--nightly", "-n", help="Follow the nightly channel."),
    download: bool = typer.Option(True, "--download/--no-download", "-d/-D", help="Install newer releases."),
) -> None:
    """Check for a newer release and optionally install it."""

    settings = _settings(ctx)
    channel = Channel.NIGHTLY if nightly else settings.default_channel
    request = CheckRequest(
        destination=output or settings.resolved_output_path(),
        channel=channel,
        download=download,
        per_page=settings.check_per_page,
    )

    outcomes: list[CandidateOutcome] = []

    def show_local(local: LocalVersion | None) -> None:
        _console.print(describe_local_version(local))

    hooks = PipelineHooks(outcome=outcomes.append, local_version=show_local)
    try:
        _run(_check(settings, request, hooks))
    finally:
        if outcomes:
            _console.print(build_outcomes_table(outcomes))


def run() -> None:
    app(prog_name="rust-analyzer-downloader")


__all__ = ["app", "run"]
