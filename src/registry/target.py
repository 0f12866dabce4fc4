"""Platform detection for release asset names."""

from __future__ import annotations

import platform
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PlatformTarget:
    os_name: str
    arch: str


def _normalize_os(system: str) -> str:
    s = system.lower()
    if s.startswith("win"):
        return "windows"
    if s.startswith("darwin") or s.startswith("mac"):
        return "darwin"
    if s.startswith("freebsd"):
        return "freebsd"
    if s.startswith("openbsd"):
        return "openbsd"
    if s.startswith("sunos") or s.startswith("solaris"):
        return "solaris"
    return "linux"


def _normalize_arch(machine: str) -> str:
    m = machine.lower()
    if m in ("x86_64", "amd64", "x64"):
        return "amd64"
    if m in ("aarch64", "arm64"):
        return "arm64"
    if m in ("i386", "i686", "x86"):
        return "386"
    if m.startswith("arm"):
        return "arm"
    return m


def resolve_target(system: Optional[str] = None, machine: Optional[str] = None) -> PlatformTarget:
    """Map ``platform.system()``/``platform.machine()`` to release naming."""
    return PlatformTarget(
        os_name=_normalize_os(system if system is not None else platform.system()),
        arch=_normalize_arch(machine if machine is not None else platform.machine()),
    )
