"""
Kernel Boundary & Invariants Contract.

1. wholesale_kernel/domain/** is pure: no SQLAlchemy, no persistence,
   no services, no configuration.
2. wholesale_kernel/** never imports wholesale_config.  The config
   package depends on the kernel, never the reverse.
3. The kernel invariants declaration is complete and non-empty.

These tests read source code via AST; they cannot break anything.
"""

import ast
from pathlib import Path

from wholesale_kernel.invariants import (
    ALL_KERNEL_INVARIANTS,
    FORBIDDEN_DOMAIN_IMPORTS,
    KernelInvariant,
)

ROOT = Path(__file__).resolve().parents[2]


def _python_files(package: str) -> list[Path]:
    return sorted((ROOT / package).rglob("*.py"))


def _extract_imports(path: Path) -> list[tuple[int, str]]:
    """(line_number, module) for every import in a file."""
    tree = ast.parse(path.read_text(), filename=str(path))
    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom) and node.module:
            results.append((node.lineno, node.module))
    return results


def _violations(files: list[Path], forbidden: tuple[str, ...]) -> list[str]:
    found = []
    for path in files:
        for lineno, module in _extract_imports(path):
            if any(module == f or module.startswith(f + ".") for f in forbidden):
                found.append(f"{path.relative_to(ROOT)}:{lineno} imports {module}")
    return found


class TestDomainPurity:

    def test_domain_files_exist(self):
        assert _python_files("wholesale_kernel/domain")

    def test_domain_has_no_forbidden_imports(self):
        violations = _violations(_python_files("wholesale_kernel/domain"), FORBIDDEN_DOMAIN_IMPORTS)
        assert not violations, "\n".join(violations)


class TestKernelNoUpwardDependencies:

    def test_kernel_never_imports_config(self):
        violations = _violations(_python_files("wholesale_kernel"), ("wholesale_config",))
        assert not violations, "\n".join(violations)

    def test_selectors_do_not_import_services(self):
        violations = _violations(
            _python_files("wholesale_kernel/selectors"), ("wholesale_kernel.services",)
        )
        assert not violations, "\n".join(violations)


class TestInvariantDeclaration:

    def test_all_invariants_declared(self):
        assert ALL_KERNEL_INVARIANTS == frozenset(KernelInvariant)
        assert len(ALL_KERNEL_INVARIANTS) >= 8

    def test_every_invariant_documented(self):
        source = (ROOT / "wholesale_kernel" / "invariants.py").read_text()
        tree = ast.parse(source)
        enum_class = next(
            n for n in tree.body if isinstance(n, ast.ClassDef) and n.name == "KernelInvariant"
        )
        documented = set()
        body = enum_class.body
        for current, following in zip(body, body[1:]):
            if (
                isinstance(current, ast.Assign)
                and isinstance(following, ast.Expr)
                and isinstance(following.value, ast.Constant)
                and isinstance(following.value.value, str)
            ):
                documented.add(current.targets[0].id)
        assert documented == {inv.name for inv in KernelInvariant}
