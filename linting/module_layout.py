#!/usr/bin/env python
"""Module layout rules for the package sources.

Rules (top-level statements only):
- `__all__` is assigned once, as a literal, and is the last statement.
- At most one non-dataclass class per file (dataclass errors/messages are free).
"""

from __future__ import annotations

import ast
import sys
import argparse
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
DEFAULT_DIRS = ("sideswap_client",)


def _is_all_target(node: ast.AST) -> bool:
    return isinstance(node, ast.Name) and node.id == "__all__"


def _all_assignment(node: ast.stmt) -> bool:
    if isinstance(node, ast.Assign):
        return len(node.targets) == 1 and _is_all_target(node.targets[0])
    if isinstance(node, ast.AnnAssign):
        return _is_all_target(node.target) and node.value is not None
    return False


def _mutates_all(node: ast.stmt) -> bool:
    if isinstance(node, ast.AugAssign):
        return _is_all_target(node.target)
    if isinstance(node, ast.Expr) and isinstance(node.value, ast.Call):
        func = node.value.func
        return isinstance(func, ast.Attribute) and _is_all_target(func.value)
    return False


def _is_dataclass(node: ast.ClassDef) -> bool:
    for decorator in node.decorator_list:
        target = decorator.func if isinstance(decorator, ast.Call) else decorator
        if isinstance(target, ast.Name) and target.id == "dataclass":
            return True
        if isinstance(target, ast.Attribute) and target.attr == "dataclass":
            return True
    return False


def check_source(source: str, label: str) -> list[str]:
    """Return human-readable violations for one module's source."""
    try:
        tree = ast.parse(source)
    except SyntaxError as exc:
        return [f"  {label}: syntax error: {exc.msg}"]

    violations: list[str] = []
    assigns = [(idx, node) for idx, node in enumerate(tree.body) if _all_assignment(node)]
    for node in tree.body:
        if _mutates_all(node):
            violations.append(f"  {label}:{node.lineno} `__all__` mutated; assign it once at the bottom")

    if len(assigns) > 1:
        for _, node in assigns:
            violations.append(f"  {label}:{node.lineno} multiple `__all__` assignments")
    elif assigns:
        idx, _ = assigns[0]
        for node in tree.body[idx + 1 :]:
            if isinstance(node, ast.If) and _is_main_guard(node):
                continue
            violations.append(f"  {label}:{node.lineno} statement after `__all__`")

    classes = [node.name for node in tree.body if isinstance(node, ast.ClassDef) and not _is_dataclass(node)]
    if len(classes) > 1:
        violations.append(f"  {label}: {len(classes)} classes ({', '.join(classes)})")
    return violations


def _is_main_guard(node: ast.If) -> bool:
    test = node.test
    return (
        isinstance(test, ast.Compare)
        and isinstance(test.left, ast.Name)
        and test.left.id == "__name__"
        and len(test.comparators) == 1
        and isinstance(test.comparators[0], ast.Constant)
        and test.comparators[0].value == "__main__"
    )


def collect_violations(root: Path, dirs: tuple[str, ...] | list[str]) -> list[str]:
    violations: list[str] = []
    for d in dirs:
        scan_dir = (root / d).resolve()
        if not scan_dir.is_dir():
            continue
        for py_file in sorted(scan_dir.rglob("*.py")):
            if "__pycache__" in py_file.parts:
                continue
            try:
                source = py_file.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError):
                continue
            violations.extend(check_source(source, str(py_file.relative_to(root))))
    return violations


def main() -> int:
    parser = argparse.ArgumentParser(description="Check `__all__` placement and one class per module.")
    parser.add_argument("--dirs", nargs="+", default=list(DEFAULT_DIRS), help="Directories to scan")
    args = parser.parse_args()

    violations = collect_violations(ROOT, args.dirs)
    if violations:
        print("Module layout violations:", file=sys.stderr)
        for violation in violations:
            print(violation, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
