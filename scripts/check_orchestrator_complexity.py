#!/usr/bin/env python3
"""Simple complexity guard for the dispatch layer."""

from __future__ import annotations

import ast
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
TARGET = ROOT / "src/media_converter/router.py"
MAX_STATEMENTS = 25


def _functions(tree: ast.Module) -> list[ast.FunctionDef]:
    found: list[ast.FunctionDef] = []
    for node in tree.body:
        if isinstance(node, ast.FunctionDef):
            found.append(node)
        elif isinstance(node, ast.ClassDef):
            found.extend(n for n in node.body if isinstance(n, ast.FunctionDef))
    return found


def main() -> None:
    """Fail when router functions exceed the statement threshold."""
    tree = ast.parse(TARGET.read_text(encoding="utf-8"))
    violations: list[str] = []
    for node in _functions(tree):
        stmt_count = len(node.body)
        if stmt_count > MAX_STATEMENTS:
            violations.append(f"{node.name}: {stmt_count} statements")
    if violations:
        raise SystemExit(
            "Router complexity threshold exceeded:\n"
            + "\n".join(f"- {v}" for v in violations)
        )
    print("Router complexity check passed.")


if __name__ == "__main__":
    main()
