"""Wrapper de httpx.

- Estandariza timeouts y headers (User-Agent, compresión) para el listado de
  releases y la descarga de artefactos.
- Se puede sustituir el transport (`httpx.MockTransport`) en tests.
"""

from __future__ import annotations

import httpx

from core.config import AppSettings

GITHUB_JSON = "application/vnd.github+json"


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con defaults seguros.

    Los redirects se siguen: las descargas de GitHub responden 302 hacia el
    CDN de objetos.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept-Encoding": "gzip, deflate",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )


def describe_http_error(exc: httpx.HTTPError | httpx.StreamError) -> str:
    """Mensaje corto para logs/errores a partir de una excepción de httpx."""

    if isinstance(exc, httpx.StreamError):
        return f"{exc.__class__.__name__}: {exc}"
    if isinstance(exc, httpx.HTTPStatusError):
        return f"HTTP {exc.response.status_code} for {exc.request.url}"
    try:
        url = str(exc.request.url)
    except RuntimeError:
        return f"{exc.__class__.__name__}: {exc}"
    return f"{exc.__class__.__name__}: {exc} ({url})"
