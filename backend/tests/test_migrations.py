import importlib.util
from pathlib import Path

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect, text

MIGRATION = Path(__file__).resolve().parents[1] / "alembic" / "versions" / "001_review_request_dispatch.py"


def _load_migration():
    spec = importlib.util.spec_from_file_location("review_request_dispatch_migration", MIGRATION)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _upgrade(engine):
    migration = _load_migration()
    with engine.begin() as connection:
        context = MigrationContext.configure(connection)
        with Operations.context(context):
            migration.upgrade()


def test_upgrade_builds_a_fresh_database():
    engine = create_engine("sqlite://")

    _upgrade(engine)

    inspector = inspect(engine)
    assert {"users", "review_templates", "review_requests", "crm_integrations"} <= set(inspector.get_table_names())
    columns = {c["name"] for c in inspector.get_columns("review_requests")}
    assert {"dispatch_claimed_at", "error_message", "crm_integration_id"} <= columns
    indexes = {i["name"] for i in inspector.get_indexes("review_templates")}
    assert "uq_review_templates_default_per_type" in indexes


def test_upgrade_runs_twice_and_collapses_duplicate_defaults():
    engine = create_engine("sqlite://")
    with engine.begin() as connection:
        connection.execute(text("""
            CREATE TABLE review_templates (
                id INTEGER PRIMARY KEY, owner_id INTEGER NOT NULL, name VARCHAR NOT NULL,
                template_type VARCHAR NOT NULL, subject VARCHAR, content TEXT NOT NULL,
                is_default BOOLEAN NOT NULL, created_at DATETIME, updated_at DATETIME
            )
        """))
        connection.execute(text("""
            INSERT INTO review_templates (id, owner_id, name, template_type, content, is_default)
            VALUES (1, 1, 'old', 'email', 'x', 1), (2, 1, 'new', 'email', 'y', 1)
        """))

    _upgrade(engine)
    _upgrade(engine)

    with engine.connect() as connection:
        defaults = connection.execute(text("SELECT id FROM review_templates WHERE is_default = 1")).scalars().all()
    assert defaults == [2]
