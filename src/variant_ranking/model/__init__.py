"""Domain model: scores, variants, genes and pedigrees."""

from variant_ranking.model.frequency import Frequency, FrequencyData, FrequencySource
from variant_ranking.model.gene import Gene, PriorityResult, PriorityType, gene_rank_key
from variant_ranking.model.modes import ModeOfInheritance, RunMode, ScoringMode
from variant_ranking.model.pathogenicity import (
    PathogenicityData,
    PathogenicityScore,
    PathogenicitySource,
    compare_pathogenicity,
    pathogenicity_rank,
)
from variant_ranking.model.pedigree import AffectedStatus, Individual, Pedigree, Sex
from variant_ranking.model.variant import (
    FilterResult,
    FilterStatus,
    FilterType,
    Genotype,
    Variant,
    VariantEffect,
    VariantEvaluation,
)

__all__ = [
    "Frequency",
    "FrequencyData",
    "FrequencySource",
    "Gene",
    "PriorityResult",
    "PriorityType",
    "gene_rank_key",
    "ModeOfInheritance",
    "RunMode",
    "ScoringMode",
    "PathogenicityData",
    "PathogenicityScore",
    "PathogenicitySource",
    "compare_pathogenicity",
    "pathogenicity_rank",
    "AffectedStatus",
    "Individual",
    "Pedigree",
    "Sex",
    "FilterResult",
    "FilterStatus",
    "FilterType",
    "Genotype",
    "Variant",
    "VariantEffect",
    "VariantEvaluation",
]
