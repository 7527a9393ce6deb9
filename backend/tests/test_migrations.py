import importlib.util
import os

import sqlalchemy as sa
from alembic.migration import MigrationContext
from alembic.operations import Operations

from drawquiz import db

VERSIONS_DIR = os.path.join(os.path.dirname(__file__), '..', 'migrations', 'versions')


def _load_revision(filename):
    spec = importlib.util.spec_from_file_location('quiz_revision', os.path.join(VERSIONS_DIR, filename))
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_initial_revision_matches_models(tmp_path, flask_app):
    revision = _load_revision('5c0a9e7d21b4_create_quiz_tables.py')
    engine = sa.create_engine(f"sqlite:///{tmp_path / 'migrated.db'}")

    with engine.begin() as conn:
        with Operations.context(MigrationContext.configure(conn)):
            revision.upgrade()

    inspector = sa.inspect(engine)
    migrated = set(inspector.get_table_names())
    assert set(db.metadata.tables) <= migrated
    for name, table in db.metadata.tables.items():
        columns = {c['name'] for c in inspector.get_columns(name)}
        assert columns == {c.name for c in table.columns}, name

    with engine.begin() as conn:
        with Operations.context(MigrationContext.configure(conn)):
            revision.downgrade()
    assert sa.inspect(engine).get_table_names() == []
    engine.dispose()
