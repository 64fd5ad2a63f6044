"""Runtime configuration — env-driven.

Reads from a .env file and LMTDIAG_* environment variables.  Command-line
options override these values for a single invocation.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class DiagConfig(BaseSettings):
    """lmtdiag configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export LMTDIAG_ERROR_DEST=syslog:local0:warning
        export LMTDIAG_DB_HOST=mgmt01
        export LMTDIAG_SNAPSHOT_PATH=/tmp/lmt-snapshot.json
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="LMTDIAG_",
        env_file_encoding="utf-8",
    )

    # Diagnostics
    error_dest: str = "stderr"
    log_level: str = "WARNING"
    max_message_length: int = 255

    # Catalog (relational store)
    db_host: str = "localhost"
    db_port: int = 0
    db_user: str = "lwatchclient"
    db_password: str | None = None

    # Collaborators
    snapshot_path: Path | None = None
    cerebro_stat: str = "cerebro-stat"
    mysql_client: str = "mysql"
    command_timeout: float = 30.0


# Module-level singleton — import as `from lmtdiag.config import config`
config = DiagConfig()
