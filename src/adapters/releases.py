"""Listado paginado de releases (GitHub REST API).

Contrato:
- `list(page, per_page)` -> `NextPage(page + 1, releases)` / `DonePage()`.
- `NetworkError` ante fallo de transporte o status no exitoso.
- `DecodeError` si el cuerpo no es un array JSON de objetos tipo release.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator

import httpx
from pydantic import TypeAdapter, ValidationError

from adapters.http_client import GITHUB_JSON, describe_http_error
from core.config import AppSettings
from core.domain.models import DonePage, NextPage, Page, Release
from core.errors import DecodeError, NetworkError
from core.interfaces.sources import ReleaseSource

logger = logging.getLogger(__name__)

_RELEASES = TypeAdapter(list[Release])


def decode_releases(payload: Any) -> list[Release]:
    """Valida el cuerpo ya parseado como lista de `Release`."""

    if not isinstance(payload, list):
        raise DecodeError(
            "release listing is not a JSON array",
            details=f"got {type(payload).__name__}",
        )
    try:
        return _RELEASES.validate_python(payload)
    except ValidationError as exc:
        raise DecodeError(
            "release listing contains malformed records",
            details=f"{exc.error_count()} validation error(s)",
        ) from exc


class GitHubReleaseLister(ReleaseSource):
    """Cliente del endpoint `/repos/<owner>/<repo>/releases`."""

    def __init__(self, client: httpx.AsyncClient, settings: AppSettings | None = None) -> None:
        self._client = client
        self._settings = settings or AppSettings()

    async def list(self, page: int, per_page: int) -> Page:
        url = self._settings.releases_api_url
        logger.debug("Requesting releases page=%s per_page=%s from %s", page, per_page, url)

        try:
            response = await self._client.get(
                url,
                params={"page": page, "per_page": per_page},
                headers={"Accept": GITHUB_JSON},
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise NetworkError("failed to list releases", details=describe_http_error(exc)) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise DecodeError("release listing is not valid JSON", details=str(exc)) from exc

        releases = decode_releases(payload)
        logger.debug("Received %d release(s): %s", len(releases), [r.tag for r in releases])

        if not releases:
            return DonePage()
        return NextPage(page + 1, releases)

    async def iter_releases(
        self,
        *,
        start_page: int = 1,
        per_page: int | None = None,
        max_pages: int | None = None,
    ) -> AsyncIterator[Release]:
        """Recorre páginas de forma perezosa hasta `DonePage` (o `max_pages`)."""

        per_page = per_page or self._settings.list_per_page
        page = start_page
        fetched = 0
        while max_pages is None or fetched < max_pages:
            result = await self.list(page, per_page)
            fetched += 1
            if isinstance(result, DonePage):
                return
            for release in result.releases:
                yield release
            page = result.next_page
