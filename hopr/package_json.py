"""Pure rewrites of package.json, tsconfig.json and .gitignore contents."""

from __future__ import annotations

import copy
import re
from typing import Any, Dict, List, Mapping, Optional

from .models import TransformedOutput

DEFAULT_DEV_PORT = 3000

TANSTACK_SCRIPTS = {
    "build": "vite build",
    "serve": "vite preview",
    "start": "node .output/server/index.mjs",
}

DEFAULT_SCRIPTS = {
    "lint": "eslint --max-warnings 0",
    "check-types": "tsc --noEmit",
}

GITIGNORE_ENTRIES = (".output", ".vinxi", ".nitro", ".tanstack", "routeTree.gen.ts")

_PORT_PATTERNS = (
    re.compile(r"--port(?:=|\s+)(\d+)"),
    re.compile(r"(?:^|\s)-p\s+(\d+)"),
)

_NEXT_IGNORE_LINE = re.compile(r"^/?\.next(?:/.*)?$")


def extract_dev_port(script: Optional[str], default: int = DEFAULT_DEV_PORT) -> int:
    """Read the port from a dev script (``--port N``, ``--port=N`` or ``-p N``)."""
    if not script:
        return default
    for pattern in _PORT_PATTERNS:
        match = pattern.search(script)
        if match:
            return int(match.group(1))
    return default


def transform_manifest(manifest: Mapping[str, Any], output: TransformedOutput) -> Dict[str, Any]:
    """Return a copy of ``manifest`` switched over to the TanStack Start toolchain."""
    updated: Dict[str, Any] = copy.deepcopy(dict(manifest))

    for section in ("dependencies", "devDependencies"):
        current = updated.get(section)
        if not isinstance(current, dict):
            current = {}
        for name in output.remove_dependencies:
            current.pop(name, None)
        updated[section] = current

    updated["dependencies"].update(output.dependencies)
    updated["devDependencies"].update(output.dev_dependencies)
    # A package listed in both sections resolves to the one we just placed.
    for name in output.dependencies:
        if name not in output.dev_dependencies:
            updated["devDependencies"].pop(name, None)
    for name in output.dev_dependencies:
        if name not in output.dependencies:
            updated["dependencies"].pop(name, None)

    scripts = updated.get("scripts")
    if not isinstance(scripts, dict):
        scripts = {}
    port = extract_dev_port(scripts.get("dev"))
    scripts["dev"] = f"vite dev --port {port}"
    scripts.update(TANSTACK_SCRIPTS)
    for name, command in DEFAULT_SCRIPTS.items():
        scripts.setdefault(name, command)
    updated["scripts"] = scripts
    updated["type"] = "module"
    return updated


def transform_tsconfig(data: Mapping[str, Any], moved_to_src: bool = False) -> Dict[str, Any]:
    """Strip Next.js specifics from a parsed tsconfig and point it at Vite."""
    updated: Dict[str, Any] = copy.deepcopy(dict(data))
    options = updated.get("compilerOptions")
    if not isinstance(options, dict):
        options = {}
        updated["compilerOptions"] = options

    plugins = options.get("plugins")
    if isinstance(plugins, list):
        remaining = [plugin for plugin in plugins if not (isinstance(plugin, dict) and plugin.get("name") == "next")]
        if remaining:
            options["plugins"] = remaining
        else:
            options.pop("plugins")

    types = options.get("types")
    if not isinstance(types, list):
        types = []
    if "vite/client" not in types:
        types.append("vite/client")
    options["types"] = types

    resolution = options.get("moduleResolution")
    if isinstance(resolution, str) and resolution.lower() == "node":
        options["moduleResolution"] = "bundler"
    if options.get("jsx") == "preserve":
        options["jsx"] = "react-jsx"

    include = updated.get("include")
    if isinstance(include, list):
        updated["include"] = [
            entry
            for entry in include
            if not (isinstance(entry, str) and (entry == "next-env.d.ts" or entry.startswith(".next/")))
        ]

    if moved_to_src:
        paths = options.get("paths")
        if isinstance(paths, dict):
            for alias, targets in paths.items():
                if isinstance(targets, list):
                    paths[alias] = ["./src/*" if target == "./*" else target for target in targets]
    return updated


def transform_gitignore(text: str) -> str:
    """Drop ``.next`` entries and add the TanStack Start build outputs."""
    lines: List[str] = [line for line in text.splitlines() if not _NEXT_IGNORE_LINE.match(line.strip())]
    present = {line.strip().strip("/") for line in lines}
    missing = [entry for entry in GITIGNORE_ENTRIES if entry not in present]
    if missing:
        lines.append("")
        lines.append("# tanstack start")
        lines.extend(missing)
    content = re.sub(r"\n{3,}", "\n\n", "\n".join(lines))
    return content.strip() + "\n"


__all__ = [
    "DEFAULT_DEV_PORT",
    "DEFAULT_SCRIPTS",
    "GITIGNORE_ENTRIES",
    "TANSTACK_SCRIPTS",
    "extract_dev_port",
    "transform_gitignore",
    "transform_manifest",
    "transform_tsconfig",
]
