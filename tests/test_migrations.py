"""
The Alembic migrations produce the schema the ORM models describe
"""

import pytest
from alembic import command
from sqlalchemy import create_engine, inspect
from sqlalchemy.schema import UniqueConstraint

from chatline.database.cli import get_alembic_config
from chatline.dbmodels import Base

pytestmark = pytest.mark.integration


@pytest.fixture
def migrated_db(tmp_path):
    """A SQLite file upgraded to head through chatline-migrate's Alembic config."""
    db_path = tmp_path / "chatline.db"
    config = get_alembic_config(database_url=f"sqlite:///{db_path}")
    command.upgrade(config, "head")

    engine = create_engine(f"sqlite:///{db_path}")
    yield config, engine
    engine.dispose()


def test_tables_match_models(migrated_db):
    _, engine = migrated_db

    tables = set(inspect(engine).get_table_names())

    assert tables - {"alembic_version"} == set(Base.metadata.tables)


@pytest.mark.parametrize("table_name", sorted(Base.metadata.tables))
def test_columns_match_models(migrated_db, table_name):
    _, engine = migrated_db
    table = Base.metadata.tables[table_name]

    reflected = {c["name"]: c for c in inspect(engine).get_columns(table_name)}

    assert set(reflected) == {c.name for c in table.columns}
    for column in table.columns:
        if column.primary_key:
            continue
        assert reflected[column.name]["nullable"] == column.nullable, column.name


@pytest.mark.parametrize("table_name", sorted(Base.metadata.tables))
def test_constraints_and_indexes_match_models(migrated_db, table_name):
    _, engine = migrated_db
    inspector = inspect(engine)
    table = Base.metadata.tables[table_name]

    reflected_fks = {
        (fk["name"], tuple(fk["constrained_columns"]), fk["referred_table"])
        for fk in inspector.get_foreign_keys(table_name)
    }
    model_fks = {
        (fk.name, tuple(fk.column_keys), fk.referred_table.name)
        for fk in table.foreign_key_constraints
    }
    assert reflected_fks == model_fks

    reflected_uniques = {uc["name"] for uc in inspector.get_unique_constraints(table_name)}
    model_uniques = {c.name for c in table.constraints if isinstance(c, UniqueConstraint)}
    assert reflected_uniques == model_uniques

    assert {ix["name"] for ix in inspector.get_indexes(table_name)} == {
        ix.name for ix in table.indexes
    }


def test_latest_message_fk_added_after_messages(migrated_db):
    _, engine = migrated_db

    (fk,) = inspect(engine).get_foreign_keys("conversations")

    assert fk["name"] == "conversations_latest_message_id_fkey"
    assert fk["referred_table"] == "messages"
    assert fk["options"].get("ondelete") == "SET NULL"


def test_downgrade_to_base(migrated_db):
    config, engine = migrated_db

    command.downgrade(config, "base")

    assert set(inspect(engine).get_table_names()) == {"alembic_version"}
