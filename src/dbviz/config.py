"""Configuration management for dbviz."""

import configparser
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dbviz.exceptions import ConfigError

DEFAULT_PORT = 3306
DEFAULT_FORMAT = "html"


def load_mycnf(group: str = "client", path: Optional[Path] = None) -> dict[str, str]:
    """Load connection options from a MySQL option file.

    Args:
        group: Option group to read (default: "client")
        path: Option file path (default: ~/.my.cnf)

    Returns:
        Dict with any of host, port, user, password, database

    Raises:
        ConfigError: If the file exists but the group does not
    """
    cfg_path = path or Path.home() / ".my.cnf"
    if not cfg_path.exists():
        return {}

    config = configparser.ConfigParser(allow_no_value=True, interpolation=None)
    try:
        config.read(cfg_path)
    except configparser.Error as e:
        raise ConfigError(f"Cannot parse {cfg_path}: {e}") from e

    if group not in config:
        available = config.sections() or ["(none)"]
        raise ConfigError(
            f"Option group '{group}' not found in {cfg_path}. "
            f"Available groups: {', '.join(available)}"
        )

    section = config[group]
    result = {}
    for key in ("host", "port", "user", "password", "database"):
        value = section.get(key)
        if value is not None:
            result[key] = value.strip().strip("\"'")
    return result


def _parse_port(value: object) -> int:
    try:
        port = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid port: {value!r}") from None
    if not 0 < port < 65536:
        raise ConfigError(f"Port out of range: {port}")
    return port


@dataclass
class Config:
    """Configuration for dbviz."""

    host: str = "localhost"
    port: int = DEFAULT_PORT
    user: Optional[str] = None
    password: Optional[str] = None
    database: Optional[str] = None
    output_format: str = DEFAULT_FORMAT

    @classmethod
    def from_env(
        cls,
        *,
        host: Optional[str] = None,
        port: Optional[int] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        database: Optional[str] = None,
        output_format: Optional[str] = None,
        profile: Optional[str] = None,
        option_file: Optional[Path] = None,
    ) -> "Config":
        """Load configuration from ~/.my.cnf, env vars, with CLI overrides.

        Priority (highest to lowest):
        1. Explicit parameters (CLI args)
        2. Environment variables (DBVIZ_*)
        3. ~/.my.cnf option group (DBVIZ_PROFILE or "client")
        """
        group = profile or os.environ.get("DBVIZ_PROFILE", "client")
        mycnf = load_mycnf(group, option_file) if profile else _load_mycnf_quietly(
            group, option_file
        )

        def resolve(explicit, env_key, cfg_key=None):
            if explicit is not None:
                return explicit
            env_val = os.environ.get(env_key)
            if env_val is not None:
                return env_val
            if cfg_key and cfg_key in mycnf:
                return mycnf[cfg_key]
            return None

        resolved_port = resolve(port, "DBVIZ_PORT", "port")

        return cls(
            host=resolve(host, "DBVIZ_HOST", "host") or "localhost",
            port=_parse_port(resolved_port) if resolved_port is not None else DEFAULT_PORT,
            user=resolve(user, "DBVIZ_USER", "user"),
            password=resolve(password, "DBVIZ_PASSWORD", "password"),
            database=resolve(database, "DBVIZ_DATABASE", "database"),
            output_format=resolve(output_format, "DBVIZ_FORMAT") or DEFAULT_FORMAT,
        )

    def validate_for_db_ops(self) -> None:
        """Validate that all required fields for connecting are present.

        Raises:
            ConfigError: If host or user is missing.
        """
        missing = []
        if not self.host:
            missing.append("host (use --host or DBVIZ_HOST)")
        if not self.user:
            missing.append("user (use --user, DBVIZ_USER or ~/.my.cnf)")

        if missing:
            raise ConfigError(
                "Missing required configuration:\n  - " + "\n  - ".join(missing)
            )


def _load_mycnf_quietly(group: str, path: Optional[Path]) -> dict[str, str]:
    """Like load_mycnf, but a missing default group is not an error."""
    try:
        return load_mycnf(group, path)
    except ConfigError:
        return {}
