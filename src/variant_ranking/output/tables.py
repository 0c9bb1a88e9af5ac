"""Tabular views of ranked genes and variant evaluations."""

from pathlib import Path
from typing import Sequence

import polars as pl
import structlog

from variant_ranking.model.gene import Gene
from variant_ranking.model.variant import FilterType, VariantEvaluation
from variant_ranking.persistence.duckdb_store import AnalysisStore

logger = structlog.get_logger(__name__)

RANKED_GENES_TABLE = "ranked_genes"
VARIANT_EVALUATIONS_TABLE = "variant_evaluations"

GENE_SCHEMA = {
    "rank": pl.Int64,
    "gene_symbol": pl.Utf8,
    "combined_score": pl.Float64,
    "filter_score": pl.Float64,
    "priority_score": pl.Float64,
    "variant_count": pl.Int64,
    "passed_variant_count": pl.Int64,
    "inheritance_modes": pl.Utf8,
    "priority_methods": pl.Utf8,
}

VARIANT_SCHEMA = {
    "variant_key": pl.Utf8,
    "chromosome": pl.Utf8,
    "position": pl.Int64,
    "ref": pl.Utf8,
    "alt": pl.Utf8,
    "quality": pl.Float64,
    "gene_symbol": pl.Utf8,
    "effect": pl.Utf8,
    "passed": pl.Boolean,
    "error": pl.Utf8,
    "filter_score": pl.Float64,
    "max_frequency": pl.Float64,
    "pathogenicity_score": pl.Float64,
    "failed_filters": pl.Utf8,
    **{f"{t.value}_status": pl.Utf8 for t in FilterType},
}


def genes_to_frame(genes: Sequence[Gene]) -> pl.DataFrame:
    """
    One row per gene in ranked order.

    Returns:
        DataFrame with columns rank (1-based), gene_symbol, combined_score,
        filter_score, priority_score, variant_count, passed_variant_count,
        inheritance_modes and priority_methods (comma separated, sorted)
    """
    rows = [
        {
            "rank": rank,
            "gene_symbol": gene.symbol,
            "combined_score": gene.combined_score,
            "filter_score": gene.filter_score,
            "priority_score": gene.priority_score,
            "variant_count": len(gene.variant_evaluations),
            "passed_variant_count": len(gene.passed_variant_evaluations()),
            "inheritance_modes": ",".join(sorted(m.value for m in gene.inheritance_modes)),
            "priority_methods": ",".join(sorted(t.value for t in gene.priority_results)),
        }
        for rank, gene in enumerate(genes, start=1)
    ]
    return pl.DataFrame(rows, schema=GENE_SCHEMA)


def variants_to_frame(evaluations: Sequence[VariantEvaluation]) -> pl.DataFrame:
    """
    One row per variant evaluation with its per-stage filter history.

    Stage columns ({filter_type}_status) hold PASS, FAIL or null when the
    stage did not run for that variant.
    """
    rows = []
    for evaluation in evaluations:
        variant = evaluation.variant
        row = {
            "variant_key": variant.key,
            "chromosome": variant.chromosome,
            "position": variant.position,
            "ref": variant.ref,
            "alt": variant.alt,
            "quality": variant.quality,
            "gene_symbol": evaluation.gene_symbol,
            "effect": evaluation.effect.value,
            "passed": evaluation.passed_filters(),
            "error": evaluation.error,
            "filter_score": evaluation.filter_score,
            "max_frequency": evaluation.frequency_data.max_frequency(),
            "pathogenicity_score": evaluation.pathogenicity_data.score(),
            "failed_filters": ",".join(t.value for t in evaluation.failed_filter_types()),
        }
        for filter_type in FilterType:
            result = evaluation.filter_result(filter_type)
            row[f"{filter_type.value}_status"] = None if result is None else result.status.value
        rows.append(row)
    return pl.DataFrame(rows, schema=VARIANT_SCHEMA)


def persist_results(store: AnalysisStore, results: "AnalysisResults") -> dict[str, int]:
    """
    Save ranked genes and variant evaluations as DuckDB tables.

    Returns:
        Row count per saved table
    """
    genes_df = genes_to_frame(results.genes)
    variants_df = variants_to_frame(results.variant_evaluations)

    counts = {
        RANKED_GENES_TABLE: store.write_table(
            genes_df, RANKED_GENES_TABLE, "Genes ranked by combined score"
        ),
        VARIANT_EVALUATIONS_TABLE: store.write_table(
            variants_df, VARIANT_EVALUATIONS_TABLE, "Per-variant filter history"
        ),
    }

    logger.info("results_persisted", **counts)
    return counts


def write_results(
    results: "AnalysisResults",
    output_dir: Path,
    filename_base: str = "ranked_genes",
) -> dict[str, Path]:
    """
    Write ranked genes to TSV and Parquet.

    Args:
        results: Analysis results
        output_dir: Directory to write into (created if missing)
        filename_base: Base filename without extension

    Returns:
        {"tsv": path, "parquet": path}
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    df = genes_to_frame(results.genes)
    tsv_path = output_dir / f"{filename_base}.tsv"
    parquet_path = output_dir / f"{filename_base}.parquet"

    df.write_csv(tsv_path, separator="\t", include_header=True)
    df.write_parquet(parquet_path, compression="snappy", use_pyarrow=True)

    logger.info("results_written", tsv=str(tsv_path), parquet=str(parquet_path), rows=df.height)
    return {"tsv": tsv_path, "parquet": parquet_path}
