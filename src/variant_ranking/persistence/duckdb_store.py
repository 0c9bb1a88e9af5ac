"""DuckDB database for evidence tables, ranked results and run provenance."""

import json
import re
from pathlib import Path
from typing import Optional

import duckdb
import polars as pl
import structlog

logger = structlog.get_logger(__name__)

REGISTRY_TABLE = "_table_registry"
PROVENANCE_TABLE = "_provenance"

_TABLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _check_table_name(table_name: str) -> str:
    if not _TABLE_NAME.match(table_name):
        raise ValueError(f"Invalid table name: {table_name!r}")
    return table_name


class AnalysisStore:
    """
    One DuckDB file per analysis workspace.

    Tables written with write_table() are listed in a registry with their
    row count and a short description. Evidence lookups read through
    cursor() so each worker thread gets its own handle.
    """

    def __init__(self, db_path: Path, read_only: bool = False):
        """
        Args:
            db_path: Database file. Parent directories are created when
                opening for writing.
            read_only: Open without write access (the file must exist)
        """
        self.db_path = Path(db_path)
        self.read_only = read_only
        if not read_only:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self.conn = duckdb.connect(str(self.db_path), read_only=read_only)
        if not read_only:
            self.conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {REGISTRY_TABLE} (
                    table_name VARCHAR PRIMARY KEY,
                    row_count BIGINT,
                    description VARCHAR,
                    written_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

    def table_exists(self, table_name: str) -> bool:
        """True if the table exists, registered or not."""
        row = self.conn.execute(
            "SELECT COUNT(*) FROM information_schema.tables WHERE table_name = ?",
            [table_name],
        ).fetchone()
        return row[0] > 0

    def write_table(
        self,
        df: pl.DataFrame,
        table_name: str,
        description: str = "",
        append: bool = False,
    ) -> int:
        """
        Write a polars frame to a table and register it.

        Args:
            df: Frame to write
            table_name: Target table (plain SQL identifier)
            description: Registry description
            append: Insert into an existing table instead of replacing it

        Returns:
            Row count of the table after the write
        """
        if not isinstance(df, pl.DataFrame):
            raise TypeError(f"Expected a polars DataFrame, got {type(df).__name__}")
        _check_table_name(table_name)

        if append and self.table_exists(table_name):
            self.conn.execute(f"INSERT INTO {table_name} SELECT * FROM df")
        else:
            self.conn.execute(f"CREATE OR REPLACE TABLE {table_name} AS SELECT * FROM df")

        row_count = self.conn.execute(f"SELECT COUNT(*) FROM {table_name}").fetchone()[0]
        self.conn.execute(f"""
            INSERT OR REPLACE INTO {REGISTRY_TABLE} (table_name, row_count, description, written_at)
            VALUES (?, ?, ?, CURRENT_TIMESTAMP)
        """, [table_name, row_count, description])

        logger.debug("table_written", table=table_name, rows=row_count, append=append)
        return row_count

    def read_table(self, table_name: str) -> Optional[pl.DataFrame]:
        """Whole table as a polars frame, or None if it does not exist."""
        if not self.table_exists(_check_table_name(table_name)):
            return None
        return self.conn.execute(f"SELECT * FROM {table_name}").pl()

    def has_table(self, table_name: str) -> bool:
        """True if the table was written through this store."""
        row = self.conn.execute(
            f"SELECT COUNT(*) FROM {REGISTRY_TABLE} WHERE table_name = ?",
            [table_name],
        ).fetchone()
        return row[0] > 0

    def registry(self) -> pl.DataFrame:
        """Registered tables ordered by name."""
        return self.conn.execute(f"""
            SELECT table_name, row_count, description, written_at
            FROM {REGISTRY_TABLE}
            ORDER BY table_name
        """).pl()

    def append_provenance(self, record: dict) -> None:
        """Add one run's provenance record to the provenance table."""
        self.conn.execute(f"""
            CREATE TABLE IF NOT EXISTS {PROVENANCE_TABLE} (
                version VARCHAR,
                config_hash VARCHAR,
                created_at TIMESTAMP,
                steps_json VARCHAR,
                filter_report_json VARCHAR
            )
        """)
        self.conn.execute(f"""
            INSERT INTO {PROVENANCE_TABLE}
            VALUES (?, ?, ?, ?, ?)
        """, [
            record["version"],
            record["config_hash"],
            record["created_at"],
            json.dumps(record["processing_steps"]),
            json.dumps(record["filter_report"]),
        ])

    def cursor(self) -> duckdb.DuckDBPyConnection:
        """New cursor on the same database, for use from one thread."""
        return self.conn.cursor()

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @classmethod
    def from_config(cls, config: "AnalysisConfig", read_only: bool = False) -> "AnalysisStore":
        return cls(config.duckdb_path, read_only=read_only)
