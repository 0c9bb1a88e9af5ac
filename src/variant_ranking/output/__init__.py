"""Result tables and writers."""

from variant_ranking.output.tables import (
    RANKED_GENES_TABLE,
    VARIANT_EVALUATIONS_TABLE,
    genes_to_frame,
    persist_results,
    variants_to_frame,
    write_results,
)

__all__ = [
    "RANKED_GENES_TABLE",
    "VARIANT_EVALUATIONS_TABLE",
    "genes_to_frame",
    "persist_results",
    "variants_to_frame",
    "write_results",
]
