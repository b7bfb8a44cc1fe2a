"""Tabla de artefactos por plataforma.

rust-analyzer publica un `.gz` por target; la clave es (OS, arquitectura)
normalizada a partir de `platform.system()` / `platform.machine()`.
"""

from __future__ import annotations

import platform

from core.errors import UnsupportedPlatformError

ARTIFACTS: dict[tuple[str, str], str] = {
    ("windows", "x86_64"): "rust-analyzer-x86_64-pc-windows-msvc.gz",
    ("windows", "aarch64"): "rust-analyzer-aarch64-pc-windows-msvc.gz",
    ("linux", "x86_64"): "rust-analyzer-x86_64-unknown-linux-gnu.gz",
    ("linux", "aarch64"): "rust-analyzer-aarch64-unknown-linux-gnu.gz",
    ("darwin", "x86_64"): "rust-analyzer-x86_64-apple-darwin.gz",
    ("darwin", "aarch64"): "rust-analyzer-aarch64-apple-darwin.gz",
}

_ARCH_ALIASES = {
    "amd64": "x86_64",
    "x64": "x86_64",
    "arm64": "aarch64",
}


def normalize_arch(machine: str) -> str:
    value = machine.strip().lower()
    return _ARCH_ALIASES.get(value, value)


def current_platform() -> tuple[str, str]:
    """(os, arch) of the running interpreter, normalized to the table keys."""

    return platform.system().lower(), normalize_arch(platform.machine())


def artifact_name(system: str | None = None, machine: str | None = None) -> str:
    """Resolve the artifact filename for a platform (default: this one).

    Raises:
        UnsupportedPlatformError: no artifact is published for the combination.
    """

    if system is None or machine is None:
        detected_system, detected_machine = current_platform()
        system = system or detected_system
        machine = machine or detected_machine

    key = (system.lower(), normalize_arch(machine))
    try:
        return ARTIFACTS[key]
    except KeyError:
        raise UnsupportedPlatformError(
            f"no rust-analyzer artifact for {key[0]}/{key[1]}",
            details=f"supported: {', '.join(f'{s}/{a}' for s, a in sorted(ARTIFACTS))}",
        ) from None
