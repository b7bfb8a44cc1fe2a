"""Descarga, descompresión e instalación de artefactos de rust-analyzer.

Secuencia de `install`:
1. Resolver el artefacto para (OS, arch); se hace al construir el instalador,
   antes de cualquier request.
2. GET en streaming a `<releases_base_url>/download/<tag>/<artifact>`.
3. Volcar el cuerpo comprimido a un temporal único en el directorio de caché.
4. Descomprimir (gzip) el temporal a un fichero hermano del destino.
5. chmod 0755 (POSIX) y `os.replace` sobre el destino.

Invariante: al salir de `install` no queda ningún temporal y el destino está
en su estado previo o contiene el artefacto completo.
"""

from __future__ import annotations

import asyncio
import gzip
import logging
import os
import secrets
import shutil
import zlib
from pathlib import Path

import httpx

from adapters.http_client import describe_http_error
from core.config import AppSettings
from core.domain.models import InstallTarget
from core.domain.platforms import artifact_name
from core.errors import FileError, NetworkError
from core.interfaces.sources import ArtifactSink

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
EXECUTABLE_MODE = 0o755


def decompress_gzip(source: Path, destination: Path) -> int:
    """Descomprime `source` en `destination`; devuelve los bytes escritos.

    Raises:
        FileError: gzip inválido/truncado o fallo de escritura.
    """

    try:
        with gzip.open(source, "rb") as fin, open(destination, "wb") as fout:
            shutil.copyfileobj(fin, fout, CHUNK_SIZE)
            return fout.tell()
    except (OSError, EOFError, zlib.error) as exc:
        raise FileError("failed to decompress artifact", details=f"{source}: {exc}") from exc


def promote(staged: Path, destination: Path) -> None:
    """Marca `staged` como ejecutable y lo mueve atómicamente a `destination`."""

    try:
        if os.name == "posix":
            staged.chmod(EXECUTABLE_MODE)
        os.replace(staged, destination)
    except OSError as exc:
        raise FileError("failed to move artifact into place", details=f"{destination}: {exc}") from exc


def remove_quietly(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("Could not remove temporary file %s: %s", path, exc)


class ArtifactInstaller(ArtifactSink):
    """Instalador de binarios publicados como `.gz` en GitHub releases.

    Las instalaciones de una misma instancia se serializan con un lock.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: AppSettings | None = None,
        *,
        artifact: str | None = None,
    ) -> None:
        self._client = client
        self._settings = settings or AppSettings()
        self._artifact = artifact or artifact_name()
        self._lock = asyncio.Lock()

    @property
    def artifact(self) -> str:
        return self._artifact

    def download_url(self, release_tag: str) -> str:
        base = self._settings.releases_base_url.rstrip("/")
        return f"{base}/download/{release_tag}/{self._artifact}"

    def temp_archive_path(self, release_tag: str) -> Path:
        token = secrets.token_hex(4)
        return self._settings.resolved_cache_dir() / f"{self._artifact}.{release_tag}.{token}.part"

    async def install(self, release_tag: str, destination_path: Path) -> InstallTarget:
        target = InstallTarget(release_tag=release_tag, destination_path=Path(destination_path))
        async with self._lock:
            await self._install(target)
        logger.info("Installed rust-analyzer %s to %s", release_tag, target.destination_path)
        return target

    async def _install(self, target: InstallTarget) -> None:
        destination = target.destination_path
        archive = self.temp_archive_path(target.release_tag)
        staged = destination.with_name(f".{destination.name}.{secrets.token_hex(4)}.tmp")

        try:
            try:
                archive.parent.mkdir(parents=True, exist_ok=True)
                destination.parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise FileError("failed to prepare directories", details=str(exc)) from exc

            received = await self._download(self.download_url(target.release_tag), archive)
            if received == 0:
                raise FileError("downloaded artifact is empty", details=target.release_tag)

            logger.debug("Decompressing %s into %s", archive, staged)
            written = await asyncio.to_thread(decompress_gzip, archive, staged)
            logger.debug("Decompressed %d bytes", written)

            await asyncio.to_thread(promote, staged, destination)
        except Exception:
            logger.error(
                "Install of %s failed, cleaning up %s and %s",
                target.release_tag,
                archive,
                staged,
            )
            raise
        finally:
            remove_quietly(archive)
            remove_quietly(staged)

    async def _download(self, url: str, archive: Path) -> int:
        """Vuelca el cuerpo de la respuesta a `archive` chunk a chunk."""

        logger.debug("Downloading %s -> %s", url, archive)
        received = 0
        try:
            async with self._client.stream(
                "GET", url, headers={"Accept": "application/octet-stream"}
            ) as response:
                logger.debug("Response status: %s", response.status_code)
                response.raise_for_status()
                try:
                    with open(archive, "wb") as fh:
                        async for chunk in response.aiter_raw(CHUNK_SIZE):
                            fh.write(chunk)
                            received += len(chunk)
                except OSError as exc:
                    raise FileError("failed to write temporary file", details=f"{archive}: {exc}") from exc
        except (httpx.HTTPError, httpx.StreamError) as exc:
            raise NetworkError("failed to download artifact", details=describe_http_error(exc)) from exc

        logger.debug("Received %d bytes", received)
        return received
