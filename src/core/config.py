"""Configuración del Core.

- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Los defaults dependientes de plataforma (ruta de instalación, caché) se
  resuelven aquí y se pasan explícitamente a los adaptadores.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.channel import Channel

APP_DIR_NAME = "rust-analyzer-downloader"


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / APP_DIR_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_DIR_NAME

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / APP_DIR_NAME
    return Path.home() / ".config" / APP_DIR_NAME


def get_user_cache_dir() -> Path:
    """Directorio de caché por usuario; aquí vive el artefacto comprimido temporal."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("LOCALAPPDATA", str(Path.home())))
        return base / APP_DIR_NAME / "cache"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Caches" / APP_DIR_NAME

    xdg = os.environ.get("XDG_CACHE_HOME")
    if xdg:
        return Path(xdg) / APP_DIR_NAME
    return Path.home() / ".cache" / APP_DIR_NAME


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def get_default_output_path(executable_name: str = "rust-analyzer") -> Path:
    """`~/bin/rust-analyzer` (con `.exe` en Windows)."""

    if sys.platform.startswith("win"):
        executable_name = f"{executable_name}.exe"
    return Path.home() / "bin" / executable_name


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Un único contrato de configuración para CLI, orquestador y adaptadores.
    """

    model_config = SettingsConfigDict(
        env_prefix="RA_DOWNLOADER_",
        extra="ignore",
        case_sensitive=False,
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    releases_api_url: str = Field(
        default="https://api.github.com/repos/rust-lang/rust-analyzer/releases",
        min_length=8,
        description="Endpoint paginado del listado de releases.",
    )
    releases_base_url: str = Field(
        default="https://github.com/rust-lang/rust-analyzer/releases",
        min_length=8,
        description="Base para `<base>/download/<tag>/<artifact>`.",
    )
    user_agent: str = Field(
        default="rust-analyzer-downloader",
        min_length=1,
        description="User-Agent enviado a GitHub.",
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout por request (segundos).",
    )

    check_per_page: int = Field(
        default=2,
        ge=1,
        le=100,
        description="Releases consultadas por `check` (una sola página).",
    )
    list_per_page: int = Field(
        default=3,
        ge=1,
        le=100,
        description="Tamaño de página por defecto para `get-versions`.",
    )
    default_channel: Channel = Field(
        default=Channel.STABLE,
        description="Canal usado por `check` cuando no se pasa --nightly.",
    )

    executable_name: str = Field(
        default="rust-analyzer",
        min_length=1,
        description="Nombre del ejecutable a sondear si no existe en output_path.",
    )
    output_path: Path | None = Field(
        default=None,
        description="Ruta destino del binario instalado (default: ~/bin/rust-analyzer).",
    )
    cache_dir: Path | None = Field(
        default=None,
        description="Directorio para el artefacto comprimido temporal.",
    )

    log_level: str = Field(
        default="INFO",
        description="Nivel de logging si la CLI no recibe --verbose/--debug/--quiet.",
    )

    def resolved_output_path(self) -> Path:
        return self.output_path or get_default_output_path(self.executable_name)

    def resolved_cache_dir(self) -> Path:
        return self.cache_dir or get_user_cache_dir()
