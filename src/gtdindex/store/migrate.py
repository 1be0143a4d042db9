"""Run the Alembic schema migrations from code.

``Database.connect()`` creates missing tables itself, which suits tests and
single-user setups. Managed deployments instead pin the schema to an Alembic
revision:

    url = sqlite_url(config.db_path)
    if not is_up_to_date(url):
        upgrade(url)
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from loguru import logger
from sqlalchemy import Connection, create_engine, text

SCRIPT_LOCATION = Path(__file__).parent / "alembic"


def sqlite_url(path: Path) -> str:
    return f"sqlite:///{path}"


def _alembic_config(db_url: str) -> Config:
    config = Config()
    config.set_main_option("script_location", str(SCRIPT_LOCATION))
    config.set_main_option("sqlalchemy.url", db_url)
    return config


@contextmanager
def _connection(db_url: str) -> Iterator[Connection]:
    engine = create_engine(db_url)
    try:
        with engine.connect() as connection:
            if engine.dialect.name == "sqlite":
                connection.execute(text("PRAGMA foreign_keys = ON"))
            yield connection
    finally:
        engine.dispose()


def _apply(db_url: str, step: Callable[[Config, str], None], revision: str) -> None:
    config = _alembic_config(db_url)
    with _connection(db_url) as connection:
        # env.py picks this up instead of opening its own engine
        config.attributes["connection"] = connection
        step(config, revision)
        connection.commit()


def upgrade(db_url: str, revision: str = "head") -> None:
    """Migrate the database forward to ``revision``.

    Raises:
        alembic.util.exc.CommandError: If the revision is unknown or a
            migration step fails.
    """
    logger.info(f"Upgrading schema to {revision}: {db_url}")
    _apply(db_url, command.upgrade, revision)


def downgrade(db_url: str, revision: str) -> None:
    """Migrate the database back to ``revision`` (``"-1"``, ``"base"``, ...)."""
    logger.info(f"Downgrading schema to {revision}: {db_url}")
    _apply(db_url, command.downgrade, revision)


def get_current_revision(db_url: str) -> str | None:
    with _connection(db_url) as connection:
        return MigrationContext.configure(connection).get_current_revision()


def get_head_revision(db_url: str) -> str | None:
    return ScriptDirectory.from_config(_alembic_config(db_url)).get_current_head()


def is_up_to_date(db_url: str) -> bool:
    """True when the applied revision is the newest one shipped."""
    return get_current_revision(db_url) == get_head_revision(db_url)
