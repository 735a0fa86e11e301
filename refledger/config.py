import logging
import os
import sys
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from refledger.domain.index.model.bucket import DEFAULT_SEPARATOR, BucketLayout

DEFAULT_DATA_DIR = Path("~/.local/share/refledger")


# =============================================================================
# Section Configuration
# =============================================================================


class LedgerConfig(BaseModel):
    """Ledger backend configuration (nested in Config, uses env_nested_delimiter).

    ``memory`` keeps state in-process only; ``sql`` stores it through SQLAlchemy
    at ``url`` (SQLite by default, any async driver URL works).
    """

    backend: Literal["memory", "sql"] = "sql"
    url: str = f"sqlite+aiosqlite:///{DEFAULT_DATA_DIR}/ledger.db"
    echo: bool = False
    auto_create: bool = True  # Create the ledger table on startup


class IndexConfig(BaseModel):
    """Index bucket layout (nested in Config, uses env_nested_delimiter).

    Empty prefixes keep buckets under the bare status/department name, which
    shares the keyspace with record ids. Set distinct prefixes to keep a status,
    a department and a record id with the same name from colliding.
    """

    separator: str = DEFAULT_SEPARATOR
    status_prefix: str = ""
    department_prefix: str = ""

    def layout(self) -> BucketLayout:
        return BucketLayout(
            separator=self.separator,
            status_prefix=self.status_prefix,
            department_prefix=self.department_prefix,
        )


class LoggingConfig(BaseModel):
    """Logging configuration (nested in Config, uses env_nested_delimiter)."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @property
    def file(self) -> str | None:
        """Get log file path from REFLEDGER_LOG_FILE env var."""
        return os.environ.get("REFLEDGER_LOG_FILE")


# =============================================================================
# Application Configuration
# =============================================================================


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from YAML file specified by REFLEDGER_CONFIG_FILE env var."""

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        yaml_data = self._load_yaml_config()
        field_value = yaml_data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        config_file = os.environ.get("REFLEDGER_CONFIG_FILE")
        if config_file:
            path = Path(config_file).expanduser()
            if path.exists():
                return yaml.safe_load(path.read_text()) or {}
        return {}


class Config(BaseSettings):
    ledger: LedgerConfig = LedgerConfig()
    index: IndexConfig = IndexConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = {
        "env_prefix": "REFLEDGER_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",  # Allows REFLEDGER_LEDGER__URL override
        "extra": "ignore",
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include YAML config.

        Priority (highest to lowest):
        1. init_settings - values passed to Config()
        2. env_settings - environment variables
        3. dotenv_settings - .env file
        4. yaml_settings - REFLEDGER_CONFIG_FILE yaml
        5. file_secret_settings - secrets from files
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def configure_logging(config: LoggingConfig) -> None:
    """Configure Python logging based on config.

    Should be called early in startup, before the container is built.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(config.level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(config.format, datefmt=config.date_format)

    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_path)
    else:
        # stdout carries invocation payloads, so logs go to stderr
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(config.level)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logging.debug("Logging configured: level=%s, file=%s", config.level, config.file)
