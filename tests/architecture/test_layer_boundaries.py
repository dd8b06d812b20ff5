"""
Import-boundary enforcement between the layers.

1. Engine purity      -- plant_engines/** may not import the DB, ORM,
                         modules or config layers.
2. Engine no-impure   -- plant_engines/** may not read the wall clock or the
                         environment.
3. Kernel boundary    -- plant_kernel/** may not import modules, engines or
                         config at module level.
4. Module isolation   -- plant_modules/** may not import scripts.

All scanning is done via AST; these tests are read-only.
"""

import ast
import glob
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]


def _python_files(package: str) -> list[Path]:
    return sorted(Path(p) for p in glob.glob(str(ROOT / package / "**" / "*.py"), recursive=True))


def _imports(filepath: Path, top_level_only: bool = False) -> list[tuple[int, str]]:
    tree = ast.parse(filepath.read_text(), filename=str(filepath))
    nodes = tree.body if top_level_only else ast.walk(tree)
    results: list[tuple[int, str]] = []
    for node in nodes:
        if isinstance(node, ast.Import):
            results.extend((node.lineno, alias.name) for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module:
            results.append((node.lineno, node.module))
    return results


def _attribute_refs(filepath: Path) -> list[tuple[int, str]]:
    tree = ast.parse(filepath.read_text(), filename=str(filepath))
    return [
        (node.lineno, f"{node.value.id}.{node.attr}")
        for node in ast.walk(tree)
        if isinstance(node, ast.Attribute) and isinstance(node.value, ast.Name)
    ]


def _matches_any(module: str, prefixes: tuple[str, ...]) -> bool:
    return any(module == p or module.startswith(f"{p}.") for p in prefixes)


def _relative(filepath: Path) -> str:
    return filepath.relative_to(ROOT).as_posix()


class TestEnginePurity:

    FORBIDDEN_PREFIXES = (
        "sqlalchemy",
        "psycopg2",
        "sqlite3",
        "yaml",
        "plant_kernel.db",
        "plant_kernel.storage",
        "plant_modules",
        "plant_config",
    )

    def test_engine_files_have_no_forbidden_imports(self):
        violations = [
            f"  {_relative(path)}:{lineno} imports '{module}'"
            for path in _python_files("plant_engines")
            for lineno, module in _imports(path)
            if _matches_any(module, self.FORBIDDEN_PREFIXES)
        ]

        assert not violations, (
            "Engine purity violation -- plant_engines/** must not import "
            "DB, storage, modules or config:\n" + "\n".join(violations)
        )


class TestEngineNoImpureFunctions:

    FORBIDDEN_CALLS = frozenset({
        "datetime.now",
        "datetime.utcnow",
        "date.today",
        "time.time",
        "os.environ",
        "os.getenv",
    })

    def test_no_impure_calls_in_engines(self):
        violations = [
            f"  {_relative(path)}:{lineno} calls '{qualname}'"
            for path in _python_files("plant_engines")
            for lineno, qualname in _attribute_refs(path)
            if qualname in self.FORBIDDEN_CALLS
        ]

        assert not violations, (
            "Engine impurity violation -- take a date or clock argument "
            "instead:\n" + "\n".join(violations)
        )


class TestKernelBoundary:

    FORBIDDEN_PREFIXES = ("plant_modules", "plant_engines", "plant_config", "scripts")

    def test_kernel_has_no_upward_imports(self):
        violations = [
            f"  {_relative(path)}:{lineno} imports '{module}'"
            for path in _python_files("plant_kernel")
            for lineno, module in _imports(path, top_level_only=True)
            if _matches_any(module, self.FORBIDDEN_PREFIXES)
        ]

        assert not violations, (
            "Kernel boundary violation -- plant_kernel/** must not import "
            "higher layers at module level:\n" + "\n".join(violations)
        )


class TestModuleBoundary:

    def test_modules_do_not_import_scripts(self):
        violations = [
            f"  {_relative(path)}:{lineno} imports '{module}'"
            for path in _python_files("plant_modules")
            for lineno, module in _imports(path)
            if _matches_any(module, ("scripts",))
        ]

        assert not violations, "\n".join(violations)
