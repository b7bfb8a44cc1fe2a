"""
Shared test fixtures.

HTTP is faked with ``httpx.MockTransport``; coroutines are driven with
``asyncio.run`` from plain pytest functions.
"""

from __future__ import annotations

import gzip
import logging
import sys
from pathlib import Path
from typing import Callable

import httpx
import pytest

from adapters.http_client import build_async_client
from core.config import AppSettings

Handler = Callable[[httpx.Request], httpx.Response]

BINARY = b"\x7fELF fake rust-analyzer binary\n" * 64


def release_payload(tag: str, *, prerelease: bool = False, name: str | None = None) -> dict:
    return {
        "name": name or tag,
        "tag_name": tag,
        "prerelease": prerelease,
        "html_url": f"https://github.com/rust-lang/rust-analyzer/releases/tag/{tag}",
        "assets": [],
    }


def streamed(body: bytes, status_code: int = 200, chunk_size: int = 4096) -> httpx.Response:
    """Response whose body is served lazily, the way a real download arrives.

    `httpx.Response(content=bytes)` is read eagerly and cannot be streamed.
    """

    async def chunks():
        for start in range(0, len(body), chunk_size):
            yield body[start : start + chunk_size]

    return httpx.Response(status_code, content=chunks())


def make_client(settings: AppSettings, handler: Handler) -> httpx.AsyncClient:
    return build_async_client(settings, transport=httpx.MockTransport(handler))


def write_fake_executable(path: Path, body: str) -> Path:
    """Write a Python script runnable as ``path --version``."""
    path.write_text(f"#!{sys.executable}\n{body}\n", encoding="utf-8")
    path.chmod(0o755)
    return path


@pytest.fixture(autouse=True)
def _restore_logging():
    """The CLI replaces root handlers; put them back after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def settings(tmp_path: Path) -> AppSettings:
    """Settings isolated from the user's .env files and home directory."""
    return AppSettings(
        _env_file=None,
        cache_dir=tmp_path / "cache",
        output_path=tmp_path / "bin" / "rust-analyzer",
        executable_name="rust-analyzer-not-installed",
    )


@pytest.fixture
def destination(settings: AppSettings) -> Path:
    return settings.resolved_output_path()


@pytest.fixture
def gz_binary() -> bytes:
    return gzip.compress(BINARY)
