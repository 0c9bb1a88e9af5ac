"""Frequency and pathogenicity lookup backed by DuckDB tables.

Tables (one row per variant and source, chromosome without 'chr'):

    variant_frequency(chromosome, position, ref, alt, rs_id, source,
                      frequency, allele_count, allele_number, homozygotes)
    variant_pathogenicity(chromosome, position, ref, alt, source, score)

A frequency row with a NULL source only carries the rs_id.
"""

from typing import Optional

import duckdb
import polars as pl
import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from variant_ranking.evidence.sources import EvidenceLookupError
from variant_ranking.model.frequency import Frequency, FrequencyData, FrequencySource
from variant_ranking.model.pathogenicity import (
    PathogenicityData,
    PathogenicityScore,
    PathogenicitySource,
)
from variant_ranking.model.variant import Variant, normalise_chromosome
from variant_ranking.persistence.duckdb_store import AnalysisStore

logger = structlog.get_logger(__name__)

FREQUENCY_TABLE = "variant_frequency"
PATHOGENICITY_TABLE = "variant_pathogenicity"

# Errors worth retrying: the database file is busy or the connection dropped.
TRANSIENT_ERRORS = (duckdb.IOException, duckdb.ConnectionException)


def _int_or_none(value) -> Optional[int]:
    return None if value is None else int(value)


def _decode_frequency_rows(rows: list[tuple]) -> FrequencyData:
    rs_id = None
    frequencies = []
    for row_rs_id, source, frequency, allele_count, allele_number, homozygotes in rows:
        if row_rs_id:
            rs_id = row_rs_id
        if source is None or frequency is None:
            continue
        frequencies.append(Frequency(
            source=FrequencySource(source),
            frequency=float(frequency),
            allele_count=_int_or_none(allele_count),
            allele_number=_int_or_none(allele_number),
            homozygotes=_int_or_none(homozygotes),
        ))
    return FrequencyData(rs_id, frequencies)


class StoreEvidenceSource:
    """
    Read-only evidence lookup over an AnalysisStore.

    Lookups are idempotent reads. Transient DuckDB errors are retried with
    exponential backoff; any DuckDB error left after that surfaces as
    EvidenceLookupError. Each lookup uses its own cursor so it is safe to call from
    worker threads.
    """

    def __init__(
        self,
        store: AnalysisStore,
        max_retries: int = 3,
        retry_wait_seconds: float = 1.0,
    ):
        self.store = store
        self.max_retries = max_retries
        self.retry_wait_seconds = retry_wait_seconds
        self._has_frequency_table = store.table_exists(FREQUENCY_TABLE)
        self._has_pathogenicity_table = store.table_exists(PATHOGENICITY_TABLE)
        logger.info(
            "store_evidence_source_ready",
            db_path=str(store.db_path),
            frequency_table=self._has_frequency_table,
            pathogenicity_table=self._has_pathogenicity_table,
        )

    def _create_retry_decorator(self):
        return retry(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.retry_wait_seconds, max=30),
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            reraise=True,
        )

    def _fetch(self, query: str, variant: Variant) -> list[tuple]:
        params = [
            normalise_chromosome(variant.chromosome),
            variant.position,
            variant.ref,
            variant.alt,
        ]

        @self._create_retry_decorator()
        def _fetch_with_retry():
            cursor = self.store.cursor()
            try:
                return cursor.execute(query, params).fetchall()
            finally:
                cursor.close()

        try:
            return _fetch_with_retry()
        except duckdb.Error as e:
            raise EvidenceLookupError(f"Evidence lookup failed for {variant.key}: {e}") from e

    def frequencies_for(self, variant: Variant) -> FrequencyData:
        if not self._has_frequency_table:
            return FrequencyData.empty()

        rows = self._fetch(
            f"""
            SELECT rs_id, source, frequency, allele_count, allele_number, homozygotes
            FROM {FREQUENCY_TABLE}
            WHERE chromosome = ? AND position = ? AND ref = ? AND alt = ?
            """,
            variant,
        )

        try:
            return _decode_frequency_rows(rows)
        except (ValueError, TypeError) as e:
            raise EvidenceLookupError(f"Malformed frequency row for {variant.key}: {e}") from e

    def pathogenicity_for(self, variant: Variant) -> PathogenicityData:
        if not self._has_pathogenicity_table:
            return PathogenicityData.empty()

        rows = self._fetch(
            f"""
            SELECT source, score
            FROM {PATHOGENICITY_TABLE}
            WHERE chromosome = ? AND position = ? AND ref = ? AND alt = ?
            """,
            variant,
        )
        try:
            return PathogenicityData([
                PathogenicityScore(PathogenicitySource(source), float(score))
                for source, score in rows
                if source is not None and score is not None
            ])
        except (ValueError, TypeError) as e:
            raise EvidenceLookupError(f"Malformed pathogenicity row for {variant.key}: {e}") from e


def save_evidence_tables(
    store: AnalysisStore,
    frequency_df: Optional[pl.DataFrame] = None,
    pathogenicity_df: Optional[pl.DataFrame] = None,
) -> None:
    """
    Store evidence frames under the table names StoreEvidenceSource reads.

    Chromosome names are normalised (leading 'chr' removed) so lookups match
    regardless of the naming convention of the caller.
    """
    strip_chr = pl.col("chromosome").cast(pl.Utf8).str.replace(r"(?i)^chr", "")

    if frequency_df is not None:
        df = frequency_df.with_columns(strip_chr)
        store.write_table(df, FREQUENCY_TABLE, "Per-source population frequencies (percent)")
        logger.info("frequency_table_saved", row_count=df.height)

    if pathogenicity_df is not None:
        df = pathogenicity_df.with_columns(strip_chr)
        store.write_table(df, PATHOGENICITY_TABLE, "Per-source pathogenicity predictions")
        logger.info("pathogenicity_table_saved", row_count=df.height)
