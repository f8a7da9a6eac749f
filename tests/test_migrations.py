"""Verify Alembic migration chain integrity."""

import importlib.util
from pathlib import Path


VERSIONS_DIR = Path(__file__).resolve().parent.parent / "vitrine" / "alembic" / "versions"


def _load_migrations():
    """Load all migration modules and return list of (filename, module)."""
    migrations = []
    for path in sorted(VERSIONS_DIR.glob("*.py")):
        if path.name == "__init__.py":
            continue
        spec = importlib.util.spec_from_file_location(path.stem, path)
        mod = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(mod)
        migrations.append((path.name, mod))
    return migrations


def test_no_duplicate_revision_ids():
    revisions = [mod.revision for _, mod in _load_migrations()]
    duplicates = [r for r in revisions if revisions.count(r) > 1]
    assert not duplicates, f"Duplicate revision IDs: {set(duplicates)}"


def test_single_head_linear_chain():
    down_revs = {mod.revision: mod.down_revision for _, mod in _load_migrations()}

    referenced = {d for d in down_revs.values() if d is not None}
    heads = set(down_revs) - referenced
    assert len(heads) == 1, f"Expected 1 head, found {len(heads)}: {heads}"

    roots = [rev for rev, down in down_revs.items() if down is None]
    assert len(roots) == 1, f"Expected 1 root, found {len(roots)}: {roots}"


def test_migrations_create_every_model_table():
    import vitrine.db.models  # noqa: F401
    from vitrine.db.base import Base

    source = "\n".join(
        (VERSIONS_DIR / name).read_text() for name, _ in _load_migrations()
    )
    for table in Base.metadata.tables:
        assert f"'{table}'" in source, f"No migration creates {table}"
