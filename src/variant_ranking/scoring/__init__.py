"""Gene Scorer: variant and priority evidence folded into one ranked gene list."""

from variant_ranking.scoring.gene_scorer import (
    COMBINED_SCORE_COEFFICIENTS,
    GeneScorer,
    calculate_combined_score,
    calculate_filter_score,
    calculate_priority_score,
    logistic,
    rescore_by_rank,
)

__all__ = [
    "COMBINED_SCORE_COEFFICIENTS",
    "GeneScorer",
    "calculate_combined_score",
    "calculate_filter_score",
    "calculate_priority_score",
    "logistic",
    "rescore_by_rank",
]
