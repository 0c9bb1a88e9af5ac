"""Gene-level filters: inheritance compatibility and minimum priority score.

A gene filter decides once per gene. The result is recorded on each of the
gene's variant evaluations, so a failed gene takes its variants out of the
survivors and the filter report counts it like any variant stage.
"""

from dataclasses import dataclass
from typing import ClassVar, Sequence, Union

import structlog

from variant_ranking.filters.stages import FAIL_SCORE, PASS_SCORE, FilterConfigError
from variant_ranking.model.gene import Gene, PriorityType
from variant_ranking.model.modes import ModeOfInheritance, RunMode
from variant_ranking.model.variant import FilterResult, FilterType

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class InheritanceGeneFilter:
    """Keeps genes compatible with at least one of the requested modes."""

    filter_type: ClassVar[FilterType] = FilterType.INHERITANCE
    modes: frozenset[ModeOfInheritance]

    def __post_init__(self):
        if not self.modes:
            raise FilterConfigError("Inheritance filter requires at least one mode")
        if ModeOfInheritance.ANY in self.modes:
            raise FilterConfigError("Inheritance filter cannot filter on 'any'")


@dataclass(frozen=True)
class PriorityScoreGeneFilter:
    """Keeps genes whose score from one prioritisation method is at least min_score.

    A gene without a result from that method fails.
    """

    filter_type: ClassVar[FilterType] = FilterType.PRIORITY_SCORE
    priority_type: PriorityType
    min_score: float

    def __post_init__(self):
        if not 0.0 <= self.min_score <= 1.0:
            raise FilterConfigError(f"Minimum priority score must be in [0, 1], got {self.min_score}")


GeneFilter = Union[InheritanceGeneFilter, PriorityScoreGeneFilter]


def run_gene_filter(gene_filter: GeneFilter, gene: Gene) -> FilterResult:
    if isinstance(gene_filter, InheritanceGeneFilter):
        if any(gene.is_compatible_with(mode) for mode in gene_filter.modes):
            return FilterResult.pass_(gene_filter.filter_type, PASS_SCORE)
        return FilterResult.fail(gene_filter.filter_type, FAIL_SCORE)

    if isinstance(gene_filter, PriorityScoreGeneFilter):
        result = gene.priority_results.get(gene_filter.priority_type)
        score = result.score if result is not None else FAIL_SCORE
        if result is not None and score >= gene_filter.min_score:
            return FilterResult.pass_(gene_filter.filter_type, score)
        return FilterResult.fail(gene_filter.filter_type, score)

    raise TypeError(f"Unknown gene filter: {gene_filter!r}")


def apply_gene_filters(
    gene_filters: Sequence[GeneFilter],
    genes: Sequence[Gene],
    run_mode: RunMode = RunMode.FULL,
) -> None:
    """
    Run each gene filter on each gene and record the result on its variants.

    Errored variants are skipped. In PASS_ONLY mode a variant that already
    failed a stage is skipped too, and a gene stops at its first failed
    gene filter.
    """
    failed_genes = 0
    for gene in genes:
        gene_failed = False
        for gene_filter in gene_filters:
            result = run_gene_filter(gene_filter, gene)
            for evaluation in gene.variant_evaluations:
                if evaluation.errored:
                    continue
                if run_mode is RunMode.PASS_ONLY and not evaluation.passed_filters():
                    continue
                evaluation.add_filter_result(result)
            if not result.passed:
                gene_failed = True
                if run_mode is RunMode.PASS_ONLY:
                    break
        failed_genes += gene_failed

    logger.info(
        "gene_filters_complete",
        filters=[f.filter_type.value for f in gene_filters],
        gene_count=len(genes),
        failed=failed_genes,
    )
