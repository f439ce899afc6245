"""Jinja2 environment for the files hopr generates."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader

_TEMPLATES_DIR = Path(__file__).with_name("templates")

_environment: Environment | None = None


def create_environment(templates_dir: Path | None = None) -> Environment:
    """Build an environment that searches ``templates_dir`` before the bundled templates."""
    directories = []
    if templates_dir:
        directories.append(str(templates_dir))
    directories.append(str(_TEMPLATES_DIR))
    loader = FileSystemLoader(directories)
    return Environment(
        loader=loader,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def render_template(name: str, **context: Any) -> str:
    global _environment
    if _environment is None:
        _environment = create_environment()
    return _environment.get_template(name).render(**context)


__all__ = ["create_environment", "render_template"]
