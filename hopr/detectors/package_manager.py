"""Package manager detection and command strings."""

from __future__ import annotations

from pathlib import Path

# Checked in order; the first lockfile found wins.
_LOCKFILES: tuple[tuple[str, str], ...] = (
    ("bun.lockb", "bun"),
    ("bun.lock", "bun"),
    ("pnpm-lock.yaml", "pnpm"),
    ("yarn.lock", "yarn"),
    ("package-lock.json", "npm"),
)

_INSTALL = {
    "npm": "npm install",
    "yarn": "yarn install",
    "pnpm": "pnpm install",
    "bun": "bun install",
}


def detect_package_manager(root: Path) -> str:
    """Return the package manager implied by lockfiles, defaulting to npm."""
    for lockfile, manager in _LOCKFILES:
        if (root / lockfile).exists():
            return manager
    return "npm"


def install_command(manager: str) -> str:
    return _INSTALL.get(manager, _INSTALL["npm"])


def run_command(manager: str, script: str) -> str:
    runner = manager if manager in _INSTALL else "npm"
    return f"{runner} run {script}"


__all__ = [
    "detect_package_manager",
    "install_command",
    "run_command",
]
