"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from adapters.releases import GitHubReleaseLister
from adapters.version_probe import SubprocessVersionProbe
from core.config import AppSettings
from core.domain.models import DonePage
from core.domain.platforms import artifact_name, current_platform
from core.errors import DownloaderError

_console = Console()


async def _check_api(settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            page = await GitHubReleaseLister(client, settings).list(1, 1)
    except DownloaderError as exc:
        return False, exc.format_full()
    if isinstance(page, DonePage):
        return True, "reachable, no releases listed"
    return True, f"latest: {page.releases[0].tag}"


async def _check_local(settings: AppSettings) -> tuple[bool, str]:
    probe = SubprocessVersionProbe.for_destination(
        settings.resolved_output_path(), settings.executable_name
    )
    try:
        local = await probe.probe()
    except DownloaderError as exc:
        return False, exc.format_full()
    if local is None:
        return True, f"not installed ({probe.executable})"
    return True, f"{local.semantic_version} ({local.date_version}) via {probe.executable}"


def run(ctx: typer.Context) -> None:
    """Run baseline diagnostics and show the resolved configuration."""

    settings = ctx.obj if isinstance(ctx.obj, AppSettings) else AppSettings()

    table = Table(title="rust-analyzer-downloader doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    system, machine = current_platform()
    try:
        table.add_row("Artifact", "OK", artifact_name(system, machine))
        ok_platform = True
    except DownloaderError as exc:
        table.add_row("Artifact", "FAIL", exc.format_full())
        ok_platform = False

    output = settings.resolved_output_path()
    table.add_row("Destination", "OK" if output.parent.exists() else "MISSING DIR", str(output))
    table.add_row("Cache dir", "OK", str(settings.resolved_cache_dir()))

    ok_local, detail_local = asyncio.run(_check_local(settings))
    table.add_row("Local version", "OK" if ok_local else "FAIL", detail_local)

    ok_api, detail_api = asyncio.run(_check_api(settings))
    table.add_row("Releases API", "OK" if ok_api else "FAIL", detail_api)

    _console.print(table)

    if not (ok_platform and ok_local and ok_api):
        raise typer.Exit(code=1)
