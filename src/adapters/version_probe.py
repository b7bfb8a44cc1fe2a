"""Sondeo de la versión local de rust-analyzer.

Ejecuta `<ejecutable> --version` y parsea la primera línea:

    rust-analyzer 0.4.1173-standalone (82ff74050 2022-08-17)
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from pathlib import Path

from core.domain.models import LocalVersion
from core.errors import CommandError, ParseError
from core.interfaces.sources import VersionProbe

logger = logging.getLogger(__name__)

VERSION_FLAG = "--version"


def parse_version_line(line: str) -> LocalVersion:
    """Parsea `<programa> <semver> (<hash> <YYYY-MM-DD>)`.

    Raises:
        ParseError: falta el token semver o la fecha entre paréntesis.
    """

    line = line.strip()
    tokens = line.split()
    semantic_version = tokens[1] if len(tokens) > 1 and not tokens[1].startswith("(") else ""

    date_version = ""
    open_idx = line.rfind("(")
    if open_idx != -1:
        close_idx = line.find(")", open_idx)
        inner = line[open_idx + 1 : close_idx if close_idx != -1 else len(line)].split()
        # "(hash date)": la fecha es el último token; un único token es el hash.
        if len(inner) > 1:
            date_version = inner[-1]

    if not semantic_version:
        raise ParseError(f"no semantic version '{line}'")
    if not date_version:
        raise ParseError(f"no date version '{line}'")
    return LocalVersion(date_version=date_version, semantic_version=semantic_version)


class SubprocessVersionProbe(VersionProbe):
    """Implementación basada en `asyncio.create_subprocess_exec`."""

    def __init__(self, executable: str | Path) -> None:
        self._executable = str(executable)

    @classmethod
    def for_destination(cls, destination: Path, executable_name: str = "rust-analyzer") -> "SubprocessVersionProbe":
        """Prefiere el binario en `destination`; si no existe, el de `PATH`."""

        if destination.exists():
            return cls(destination)
        return cls(shutil.which(executable_name) or executable_name)

    @property
    def executable(self) -> str:
        return self._executable

    async def probe(self) -> LocalVersion | None:
        logger.debug("Probing local version: %s %s", self._executable, VERSION_FLAG)
        try:
            proc = await asyncio.create_subprocess_exec(
                self._executable,
                VERSION_FLAG,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            logger.info("%s not found, treating as not installed", self._executable)
            return None
        except OSError as exc:
            raise CommandError(f"failed to run '{self._executable}'", details=str(exc)) from exc

        stdout, stderr = await proc.communicate()
        if proc.returncode != 0:
            raise CommandError(
                f"'{self._executable} {VERSION_FLAG}' exited with status {proc.returncode}",
                details=stderr.decode(errors="replace").strip() or None,
            )

        lines = stdout.decode(errors="replace").splitlines()
        if not lines:
            raise ParseError(f"no output from '{self._executable} {VERSION_FLAG}'")

        version = parse_version_line(lines[0])
        logger.debug("Local version: %s (%s)", version.semantic_version, version.date_version)
        return version
