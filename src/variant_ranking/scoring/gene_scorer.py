"""Gene-level score fusion: filter, priority and combined scores."""

import math
from concurrent.futures import ThreadPoolExecutor
from itertools import groupby
from typing import Callable, Iterable, Optional, Sequence

import structlog

from variant_ranking.inheritance.adapter import InheritanceModeAdapter
from variant_ranking.model.gene import Gene, PriorityResult, PriorityType, gene_rank_key
from variant_ranking.model.modes import ModeOfInheritance, ScoringMode
from variant_ranking.model.variant import VariantEvaluation

logger = structlog.get_logger(__name__)

# Logistic fits of (intercept, priority coefficient, filter coefficient) per
# prioritisation method, in the order they are checked.
COMBINED_SCORE_COEFFICIENTS: tuple[tuple[PriorityType, tuple[float, float, float]], ...] = (
    (PriorityType.CROSS_SPECIES_PHENOTYPE, (-13.28813, 10.39451, 9.18381)),
    (PriorityType.NETWORK_WALKER, (-8.67972, 219.40082, 8.54374)),
    (PriorityType.HUMAN_PHENOTYPE, (-11.15659, 13.21835, 4.08667)),
)


def calculate_filter_score(
    evaluations: Sequence[VariantEvaluation],
    mode: ModeOfInheritance,
    is_homozygous: Callable[[VariantEvaluation], bool] = lambda ve: False,
) -> float:
    """
    Aggregate the filter scores of a gene's surviving variants.

    Args:
        evaluations: Surviving variant evaluations of one gene
        mode: Mode of inheritance whose aggregation rule applies
        is_homozygous: Whether a variant is homozygous-compatible with
            recessive inheritance (only consulted in recessive mode)

    Returns:
        0.0 with no variants. In autosomal recessive mode, the mean of the
        two best scores, where homozygous-compatible variants count twice.
        Otherwise the best single score.
    """
    if not evaluations:
        return 0.0

    if mode is ModeOfInheritance.AUTOSOMAL_RECESSIVE:
        scores = []
        for evaluation in evaluations:
            score = evaluation.filter_score or 0.0
            scores.append(score)
            if is_homozygous(evaluation):
                scores.append(score)
        scores.sort(reverse=True)
        if len(scores) < 2:
            return scores[0]
        return (scores[0] + scores[1]) / 2

    return max(evaluation.filter_score or 0.0 for evaluation in evaluations)


def calculate_priority_score(results: Iterable[PriorityResult]) -> float:
    """Product of all priority scores; 1.0 when there are none."""
    score = 1.0
    for result in results:
        score *= result.score
    return score


def logistic(x: float) -> float:
    return 1.0 / (1.0 + math.exp(-x))


def calculate_combined_score(
    filter_score: float,
    priority_score: float,
    priority_types: Iterable[PriorityType],
) -> float:
    """
    Fuse filter and priority scores.

    The first method in COMBINED_SCORE_COEFFICIENTS that was run selects its
    logistic formula; with none of them, the plain mean is used.
    """
    run_types = set(priority_types)
    for priority_type, (intercept, priority_coef, filter_coef) in COMBINED_SCORE_COEFFICIENTS:
        if priority_type in run_types:
            return logistic(intercept + priority_coef * priority_score + filter_coef * filter_score)
    return (priority_score + filter_score) / 2


def rescore_by_rank(genes: Sequence[Gene]) -> None:
    """
    Replace priority scores with a rank-based score in [0, 1).

    Genes tied on priority score share one score computed at the middle of
    their block: 1 - (rank + tied // 2) / total.
    """
    total = len(genes)
    if total == 0:
        return

    ordered = sorted(genes, key=lambda g: -g.priority_score)
    rank = 1
    for _, group in groupby(ordered, key=lambda g: g.priority_score):
        tied = list(group)
        adjusted_rank = rank + len(tied) // 2
        score = 1.0 - adjusted_rank / total
        for gene in tied:
            gene.priority_score = score
        rank += len(tied)


class GeneScorer:
    """
    Scores and ranks genes.

    Per-gene filter and priority aggregation is independent across genes and
    may run on a thread pool. Rank rescoring, combined scoring and sorting
    run afterwards over the whole list.
    """

    def __init__(
        self,
        adapter: InheritanceModeAdapter,
        mode_of_inheritance: ModeOfInheritance = ModeOfInheritance.ANY,
        scoring_mode: ScoringMode = ScoringMode.RAW_SCORE,
        max_workers: int = 1,
    ):
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self.adapter = adapter
        self.mode_of_inheritance = mode_of_inheritance
        self.scoring_mode = scoring_mode
        self.max_workers = max_workers

    def _score_gene(self, gene: Gene) -> Gene:
        mode = self.adapter.scoring_mode(self.mode_of_inheritance, gene)
        gene.filter_score = calculate_filter_score(
            gene.passed_variant_evaluations(),
            mode,
            self.adapter.is_homozygous_compatible,
        )
        gene.priority_score = calculate_priority_score(gene.priority_results.values())
        return gene

    def score(
        self,
        genes: Sequence[Gene],
        priority_types: Optional[Iterable[PriorityType]] = None,
    ) -> list[Gene]:
        """
        Set filter, priority and combined scores on every gene.

        Args:
            genes: Genes to score (mutated in place)
            priority_types: Prioritisation methods run in this analysis.
                Defaults to every method seen on any gene.

        Returns:
            Genes sorted by combined score descending, ties by symbol
        """
        if priority_types is None:
            run_types = {t for gene in genes for t in gene.priority_results}
        else:
            run_types = set(priority_types)

        if self.max_workers == 1:
            for gene in genes:
                self._score_gene(gene)
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                list(executor.map(self._score_gene, genes))

        if self.scoring_mode is ScoringMode.RANK_BASED:
            rescore_by_rank(genes)

        for gene in genes:
            gene.combined_score = calculate_combined_score(
                gene.filter_score, gene.priority_score, run_types
            )

        ranked = sorted(genes, key=gene_rank_key)

        logger.info(
            "gene_scoring_complete",
            gene_count=len(ranked),
            scoring_mode=self.scoring_mode.value,
            priority_types=sorted(t.value for t in run_types),
            top_gene=ranked[0].symbol if ranked else None,
        )
        return ranked
