"""Config management commands."""

import sys
from pathlib import Path

import cyclopts
import yaml

from refledger.cli.console import get_console
from refledger.config import Config

app = cyclopts.App(name="config", help="Manage referral ledger configuration")

TEMPLATE = """\
# Referral ledger configuration
# Point REFLEDGER_CONFIG_FILE at this file. Environment variables
# (REFLEDGER_LEDGER__URL, REFLEDGER_INDEX__SEPARATOR, ...) take precedence.

ledger:
  backend: sql  # or "memory"
  url: "sqlite+aiosqlite:///~/.local/share/refledger/ledger.db"
  # auto_create: true

index:
  separator: ","
  # Prefixes keep bucket keys apart from record ids and from each other.
  # Changing them on an existing ledger orphans the old buckets.
  # status_prefix: "status:"
  # department_prefix: "department:"

# logging:
#   level: "INFO"
"""

DEFAULT_CONFIG_NAME = "refledger.yaml"


@app.command
def init(path: Path = Path(DEFAULT_CONFIG_NAME), force: bool = False) -> None:
    """Create a new config file from template.

    Args:
        path: Path for the config file.
        force: Overwrite an existing file.
    """
    console = get_console()
    if path.exists() and not force:
        console.error(f"{path} already exists", hint="Pass --force to overwrite it")
        sys.exit(1)
    path.write_text(TEMPLATE)
    console.success(f"Wrote {path}")
    console.info(f"export REFLEDGER_CONFIG_FILE={path.resolve()}")


@app.command
def show() -> None:
    """Print the effective configuration."""
    config = Config()
    sys.stdout.write(yaml.safe_dump(config.model_dump(mode="json"), sort_keys=False))
