"""SQLAlchemy table definitions - dialect-agnostic (works with SQLite and PostgreSQL)."""

from sqlalchemy import Column, DateTime, LargeBinary, MetaData, String, Table

metadata = MetaData()

# ============================================================================
# LEDGER STATE TABLE
# ============================================================================
# One row per ledger key. Record ids and index bucket keys share this table.
ledger_state_table = Table(
    "ledger_state",
    metadata,
    Column("key", String, primary_key=True),
    Column("value", LargeBinary, nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)
