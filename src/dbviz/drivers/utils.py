"""Helpers to open a MySQL connection from configuration.

Keeps connection bootstrapping out of the CLI for reuse and testability. The
core never opens or closes connections itself; these helpers are only used by
entry points that own the connection.
"""

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Iterator, Optional

from dbviz.config import Config
from dbviz.exceptions import ConfigError
from dbviz.schema.models import Schema

if TYPE_CHECKING:
    from dbviz.connection import ConnectionHandler


def build_config_and_validate(
    *,
    host: Optional[str] = None,
    port: Optional[int] = None,
    user: Optional[str] = None,
    password: Optional[str] = None,
    database: Optional[str] = None,
    profile: Optional[str] = None,
) -> Config:
    """Load config from ~/.my.cnf/env and validate it for DB operations.

    Raises:
        ConfigError: If required configuration is missing.
    """
    config = Config.from_env(
        host=host,
        port=port,
        user=user,
        password=password,
        database=database,
        profile=profile,
    )
    config.validate_for_db_ops()
    return config


def open_connection(config: Config) -> Any:
    """Open a PyMySQL connection described by config.

    Raises:
        ConfigError: If PyMySQL is not installed.
    """
    try:
        import pymysql
    except ImportError as e:
        raise ConfigError(
            "PyMySQL is required to connect. Install it with: pip install 'dbviz[mysql]'"
        ) from e

    return pymysql.connect(
        host=config.host,
        port=config.port,
        user=config.user,
        password=config.password or "",
        database=config.database,
        charset="utf8mb4",
    )


@contextmanager
def connected_handler(
    config: Config, database: Optional[str] = None
) -> Iterator["ConnectionHandler"]:
    """Open a connection, yield a ConnectionHandler for it, then close it.

    Args:
        config: Validated configuration with connection info.
        database: Database to bind instead of config.database.
    """
    from dbviz.connection import ConnectionHandler

    config.validate_for_db_ops()

    connection = open_connection(config)
    try:
        yield ConnectionHandler(connection, database or config.database)
    finally:
        connection.close()


def introspect_online(config: Config, database: Optional[str] = None) -> Schema:
    """Snapshot one database over a short-lived connection."""
    with connected_handler(config, database) as handler:
        return handler.get_introspector().schema()
