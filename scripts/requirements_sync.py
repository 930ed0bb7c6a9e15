#!/usr/bin/env python3
"""Keep requirements.txt and the test extra in line with pyproject.toml.

Usage
-----
    python scripts/requirements_sync.py generate   # rewrite requirements.txt
    python scripts/requirements_sync.py check      # fail on drift (CI)
"""

from __future__ import annotations

import argparse
import ast
import re
import sys
import tomllib
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
REQUIREMENTS = ROOT / "requirements.txt"
# Deployable profile: library + CLI + HTTP daemon, as scanned by CI.
RUNTIME_EXTRAS = ("cli", "server")
TEST_EXTRA = "test"
FIRST_PARTY = {"media_converter", "conftest"}
# Import name -> distribution name, where they differ or are only used in tests.
DISTRIBUTION_FOR_IMPORT = {
    "PIL": "Pillow",
    "fastapi": "fastapi",
    "httpx": "httpx",
    "hypothesis": "hypothesis",
    "multipart": "python-multipart",
    "pydantic": "pydantic",
    "pytest": "pytest",
    "typer": "typer",
    "uvicorn": "uvicorn",
}

_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")


def _project() -> dict:
    return tomllib.loads((ROOT / "pyproject.toml").read_text(encoding="utf-8"))["project"]


def distribution_name(requirement: str) -> str:
    """Return the normalized distribution name of a requirement string."""
    match = _NAME.match(requirement)
    if match is None:
        raise ValueError(f"Unparseable requirement: {requirement!r}")
    return re.sub(r"[-_.]+", "-", match.group(1)).lower()


def runtime_requirements() -> list[str]:
    """Base dependencies plus the runtime extras, sorted."""
    project = _project()
    deps = set(project.get("dependencies", []))
    optional = project.get("optional-dependencies", {})
    for extra in RUNTIME_EXTRAS:
        deps.update(optional.get(extra, []))
    return sorted(dep.strip() for dep in deps if dep.strip())


def render_requirements() -> str:
    header = [
        f"# Generated from pyproject.toml (base + extras: {','.join(RUNTIME_EXTRAS)})",
        "# Do not edit manually; run: python scripts/requirements_sync.py generate",
        "",
    ]
    return "\n".join(header) + "\n" + "\n".join(runtime_requirements()) + "\n"


def requirements_drift() -> tuple[list[str], list[str]]:
    """Return (missing, unexpected) entries of requirements.txt."""
    expected = set(runtime_requirements())
    actual = {
        line.split("#", 1)[0].strip()
        for line in REQUIREMENTS.read_text(encoding="utf-8").splitlines()
    } - {""}
    return sorted(expected - actual), sorted(actual - expected)


def imported_modules(paths: list[Path]) -> set[str]:
    """Top-level absolute imports used by ``paths``."""
    found: set[str] = set()
    for path in paths:
        tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                found.update(alias.name.split(".")[0] for alias in node.names)
            elif isinstance(node, ast.ImportFrom) and node.level == 0 and node.module:
                found.add(node.module.split(".")[0])
    return found


def undeclared_test_imports() -> list[str]:
    """Third-party modules the tests import but no installable extra provides."""
    project = _project()
    declared = {distribution_name(dep) for dep in project.get("dependencies", [])}
    declared.update(
        distribution_name(dep)
        for dep in project.get("optional-dependencies", {}).get(TEST_EXTRA, [])
    )
    problems: list[str] = []
    modules = imported_modules(sorted((ROOT / "tests").rglob("*.py")))
    for module in sorted(modules - FIRST_PARTY - set(sys.stdlib_module_names)):
        dist = DISTRIBUTION_FOR_IMPORT.get(module)
        if dist is None:
            problems.append(f"{module}: no known distribution")
        elif distribution_name(dist) not in declared:
            problems.append(f"{module}: add {dist} to the '{TEST_EXTRA}' extra")
    return problems


def check() -> None:
    missing, unexpected = requirements_drift()
    test_problems = undeclared_test_imports()
    if not (missing or unexpected or test_problems):
        print("Dependency sync check passed.")
        return
    parts: list[str] = []
    if missing or unexpected:
        parts.append("requirements.txt is out of sync with pyproject.toml.")
        parts.append("Run: python scripts/requirements_sync.py generate")
        parts.extend(f"- missing: {entry}" for entry in missing)
        parts.extend(f"- unexpected: {entry}" for entry in unexpected)
    if test_problems:
        parts.append("Test imports not covered by pyproject.toml:")
        parts.extend(f"- {entry}" for entry in test_problems)
    raise SystemExit("\n".join(parts))


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("command", choices=["generate", "check"])
    args = parser.parse_args(argv)
    if args.command == "generate":
        REQUIREMENTS.write_text(render_requirements(), encoding="utf-8")
        print(f"Wrote {len(runtime_requirements())} requirements to {REQUIREMENTS.name}")
    else:
        check()


if __name__ == "__main__":
    main()
