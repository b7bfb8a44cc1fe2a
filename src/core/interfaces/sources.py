"""Contratos del pipeline de adquisición.

Protocol = contrato estructural: los adaptadores reales (GitHub, subprocess,
instalador) y los fakes de tests son intercambiables.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from core.domain.models import InstallTarget, LocalVersion, Page


@runtime_checkable
class ReleaseSource(Protocol):
    """Listado paginado de releases."""

    async def list(self, page: int, per_page: int) -> Page:
        """Devuelve `NextPage(page + 1, releases)` o `DonePage()` si la página está vacía."""

        ...


@runtime_checkable
class VersionProbe(Protocol):
    """Versión del ejecutable instalado localmente."""

    async def probe(self) -> LocalVersion | None:
        """`None` cuando el ejecutable no existe (estado de bootstrap esperado)."""

        ...


@runtime_checkable
class ArtifactSink(Protocol):
    """Descarga + descompresión + instalación de un artefacto."""

    async def install(self, release_tag: str, destination_path: Path) -> InstallTarget:
        ...
