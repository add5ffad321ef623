import ast
from pathlib import Path


def _imports(package_dir: Path, repo_root: Path, forbidden: str):
    violations = []
    for py_file in package_dir.rglob("*.py"):
        source = py_file.read_text(encoding="utf-8")
        tree = ast.parse(source, filename=str(py_file))
        rel_path = py_file.relative_to(repo_root)

        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    name = alias.name
                    if name == forbidden or name.startswith(forbidden + "."):
                        violations.append(f"{rel_path}:{node.lineno} imports {name}")
            elif isinstance(node, ast.ImportFrom):
                module = node.module or ""
                if module == forbidden or module.startswith(forbidden + "."):
                    violations.append(f"{rel_path}:{node.lineno} imports from {module}")
    return violations


def test_pipeline_layer_does_not_import_ui_layer():
    """Pipeline layer must not import from UI layer directly."""
    repo_root = Path(__file__).resolve().parents[2]
    violations = _imports(repo_root / "yoga" / "pipeline", repo_root, "yoga.ui")
    assert not violations, "Pipeline layer must not import UI layer:\n" + "\n".join(violations)


def test_domain_layer_has_no_upward_imports():
    """Domain models must not depend on infrastructure, pipeline or UI."""
    repo_root = Path(__file__).resolve().parents[2]
    domain_dir = repo_root / "yoga" / "domain"
    violations = []
    for layer in ("yoga.infrastructure", "yoga.pipeline", "yoga.ui"):
        violations += _imports(domain_dir, repo_root, layer)
    assert not violations, "Domain layer must stay dependency free:\n" + "\n".join(violations)


def test_model_update_does_not_import_subprocess():
    """The library model returns commands instead of running processes."""
    repo_root = Path(__file__).resolve().parents[2]
    model = repo_root / "yoga" / "ui" / "model.py"
    tree = ast.parse(model.read_text(encoding="utf-8"))
    imported = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            imported.update(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom):
            imported.add(node.module or "")
    assert "subprocess" not in imported
    assert "concurrent.futures" not in imported
    assert "threading" not in imported
