"""Componentes de UI para CLI (Rich).

- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas en `get-versions`, `check` y `doctor`.
"""

from __future__ import annotations

from typing import Iterable

from rich.table import Table
from rich.text import Text

from core.domain.models import CandidateOutcome, CandidateStatus, LocalVersion, Release

_STATUS_STYLES: dict[CandidateStatus, str] = {
    CandidateStatus.SKIPPED: "dim",
    CandidateStatus.UP_TO_DATE: "green",
    CandidateStatus.AVAILABLE: "yellow",
    CandidateStatus.INSTALLED: "bold green",
    CandidateStatus.SUPERSEDED: "dim yellow",
    CandidateStatus.FAILED: "bold red",
}


def build_releases_table(releases: Iterable[Release]) -> Table:
    """Tabla de releases para `get-versions`."""

    table = Table(title="rust-analyzer releases")
    table.add_column("Tag", style="cyan", no_wrap=True)
    table.add_column("Name", style="white")
    table.add_column("Prerelease", style="magenta")
    for release in releases:
        table.add_row(release.tag, release.name, "yes" if release.is_prerelease else "no")
    return table


def build_outcomes_table(outcomes: Iterable[CandidateOutcome]) -> Table:
    table = Table(title="Check results")
    table.add_column("Release", style="cyan", no_wrap=True)
    table.add_column("Status")
    table.add_column("Error", style="red")
    for outcome in outcomes:
        status = Text(outcome.status.value, style=_STATUS_STYLES[outcome.status])
        table.add_row(outcome.tag, status, str(outcome.error) if outcome.error else "")
    return table


def describe_local_version(local: LocalVersion | None) -> Text:
    if local is None:
        return Text("not installed", style="yellow")
    return Text(f"{local.semantic_version} ({local.date_version})", style="cyan")
