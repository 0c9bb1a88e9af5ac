"""Variant filter stages and the filter engine."""

from variant_ranking.filters.effect_scores import (
    DEFAULT_PATHOGENICITY_SCORES,
    default_pathogenicity_score,
)
from variant_ranking.filters.genes import (
    GeneFilter,
    InheritanceGeneFilter,
    PriorityScoreGeneFilter,
    apply_gene_filters,
    run_gene_filter,
)
from variant_ranking.filters.report import FilterReport, StageCount, build_filter_report
from variant_ranking.filters.runner import FilterRunner, variant_filter_score
from variant_ranking.filters.stages import (
    DEFAULT_OFF_TARGET_EFFECTS,
    FilterConfigError,
    FilterStage,
    FrequencyFilter,
    GeneticInterval,
    IntervalFilter,
    PathogenicityFilter,
    QualityFilter,
    TargetFilter,
    pathogenicity_filter_score,
    run_filter,
)

__all__ = [
    "DEFAULT_PATHOGENICITY_SCORES",
    "default_pathogenicity_score",
    "GeneFilter",
    "InheritanceGeneFilter",
    "PriorityScoreGeneFilter",
    "apply_gene_filters",
    "run_gene_filter",
    "FilterReport",
    "StageCount",
    "build_filter_report",
    "FilterRunner",
    "variant_filter_score",
    "DEFAULT_OFF_TARGET_EFFECTS",
    "FilterConfigError",
    "FilterStage",
    "FrequencyFilter",
    "GeneticInterval",
    "IntervalFilter",
    "PathogenicityFilter",
    "QualityFilter",
    "TargetFilter",
    "pathogenicity_filter_score",
    "run_filter",
]
