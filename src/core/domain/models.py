"""Modelos del dominio (Pydantic v2).

Nota:
- Estos modelos describen *qué* es la información (releases, versión local,
  páginas), no *cómo* se obtiene.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class Release(BaseModel):
    """Una release publicada en el listado de GitHub.

    Identidad = `tag`. El tag es una fecha `YYYY-MM-DD` o el centinela
    `nightly`.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    name: str = Field(
        ...,
        description="Nombre visible de la release.",
    )
    tag: str = Field(
        ...,
        alias="tag_name",
        min_length=1,
        description="Tag de la release (fecha o 'nightly').",
    )
    is_prerelease: bool = Field(
        ...,
        alias="prerelease",
        description="Marcada como prerelease en GitHub.",
    )


class LocalVersion(BaseModel):
    """Versión auto-reportada por el ejecutable instalado."""

    model_config = ConfigDict(frozen=True)

    date_version: str = Field(
        ...,
        min_length=1,
        description="Fecha de build (`YYYY-MM-DD`), mismo formato que los tags.",
    )
    semantic_version: str = Field(
        ...,
        min_length=1,
        description="Token semver (p.ej. '0.4.1173-standalone').",
    )


@dataclass(frozen=True)
class NextPage:
    """Página no vacía; pueden existir más a partir de `next_page`."""

    next_page: int
    releases: list[Release]


@dataclass(frozen=True)
class DonePage:
    """Página vacía: condición terminal de la paginación."""


Page = NextPage | DonePage


@dataclass(frozen=True)
class InstallTarget:
    release_tag: str
    destination_path: Path


class CandidateStatus(str, Enum):
    SKIPPED = "skipped"
    UP_TO_DATE = "up_to_date"
    AVAILABLE = "available"
    INSTALLED = "installed"
    SUPERSEDED = "superseded"
    FAILED = "failed"


@dataclass
class CandidateOutcome:
    """Resultado del pipeline de un candidato."""

    release: Release
    status: CandidateStatus
    error: Exception | None = None

    @property
    def tag(self) -> str:
        return self.release.tag


@dataclass
class CheckResult:
    """Output of one `check` run."""

    local_version: LocalVersion | None
    outcomes: list[CandidateOutcome] = field(default_factory=list)

    def with_status(self, status: CandidateStatus) -> list[CandidateOutcome]:
        return [o for o in self.outcomes if o.status is status]
