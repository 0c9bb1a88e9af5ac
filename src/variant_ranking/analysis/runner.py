"""End-to-end analysis: annotate, filter, group by gene, score and rank."""

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

import structlog

from variant_ranking.config.schema import AnalysisConfig, FilterSettings
from variant_ranking.evidence.sources import (
    AnnotationService,
    AnnotationUnavailable,
    FrequencyLookup,
    PathogenicityLookup,
    PriorityScoreSource,
)
from variant_ranking.filters.genes import (
    GeneFilter,
    InheritanceGeneFilter,
    PriorityScoreGeneFilter,
    apply_gene_filters,
)
from variant_ranking.filters.report import FilterReport, build_filter_report
from variant_ranking.filters.runner import FilterRunner
from variant_ranking.filters.stages import (
    FilterStage,
    FrequencyFilter,
    IntervalFilter,
    PathogenicityFilter,
    QualityFilter,
    TargetFilter,
)
from variant_ranking.inheritance.adapter import InheritanceModeAdapter
from variant_ranking.inheritance.checker import InheritanceCompatibilityChecker
from variant_ranking.model.gene import Gene, PriorityType
from variant_ranking.model.modes import ModeOfInheritance, RunMode
from variant_ranking.model.pedigree import Pedigree
from variant_ranking.model.variant import FilterType, Variant, VariantEvaluation
from variant_ranking.scoring.gene_scorer import GeneScorer

logger = structlog.get_logger(__name__)


def build_filter_stages(settings: FilterSettings) -> list[FilterStage]:
    """
    Build the stage sequence described by the filter settings.

    Raises:
        FilterConfigError: If any stage parameter is invalid
    """
    stages = []
    for filter_type in settings.stages:
        if filter_type is FilterType.TARGET:
            stages.append(TargetFilter(frozenset(settings.off_target_effects)))
        elif filter_type is FilterType.QUALITY:
            stages.append(QualityFilter(settings.min_quality))
        elif filter_type is FilterType.FREQUENCY:
            stages.append(FrequencyFilter(settings.max_frequency, settings.strict_frequency))
        elif filter_type is FilterType.PATHOGENICITY:
            stages.append(PathogenicityFilter(settings.include_pathogenic, settings.min_pathogenicity_score))
        elif filter_type is FilterType.INTERVAL:
            stages.append(IntervalFilter.from_strings(settings.intervals))
    return stages


def build_gene_filters(config: AnalysisConfig) -> list[GeneFilter]:
    """
    Gene filters implied by the configuration, in the order they run.

    The priority score filter runs when a method and minimum are set. The
    inheritance filter runs when a specific mode of inheritance is
    configured; with 'any' every gene is kept.
    """
    gene_filters: list[GeneFilter] = []
    settings = config.filters
    if settings.priority_score_method is not None:
        gene_filters.append(
            PriorityScoreGeneFilter(settings.priority_score_method, settings.min_priority_score)
        )
    mode = config.scoring.mode_of_inheritance
    if mode is not ModeOfInheritance.ANY:
        gene_filters.append(InheritanceGeneFilter(frozenset({mode})))
    return gene_filters


@dataclass
class AnalysisResults:
    """
    Output of one analysis run.

    Attributes:
        genes: Genes ranked by combined score (ties by symbol)
        variant_evaluations: Every evaluation in input order, including
            failed, errored and unannotated variants
        filter_report: Per-stage pass/fail counts
    """
    genes: list[Gene] = field(default_factory=list)
    variant_evaluations: list[VariantEvaluation] = field(default_factory=list)
    filter_report: FilterReport = field(default_factory=FilterReport)

    def top(self, n: int) -> list[Gene]:
        return self.genes[:n]


class AnalysisRunner:
    """
    Runs one analysis from called variants to a ranked gene list.

    The filter pipeline is built from configuration when the runner is
    created, so stage configuration errors surface before any variant is
    processed. The runner keeps no state between runs.
    """

    def __init__(
        self,
        config: AnalysisConfig,
        annotator: AnnotationService,
        frequency_lookup: FrequencyLookup,
        pathogenicity_lookup: PathogenicityLookup,
        checker: Optional[InheritanceCompatibilityChecker] = None,
    ):
        self.config = config
        self.annotator = annotator
        self.checker = checker
        self.stages = build_filter_stages(config.filters)
        self.gene_filters = build_gene_filters(config)
        self.filter_runner = FilterRunner(
            self.stages,
            frequency_lookup,
            pathogenicity_lookup,
            run_mode=config.execution.run_mode,
            max_workers=config.execution.max_workers,
        )

    def annotate(self, variants: Sequence[Variant]) -> list[VariantEvaluation]:
        """
        Create one evaluation per variant.

        A variant outside any transcript gets no gene. If the annotation
        service fails for a variant, that evaluation is marked errored and the
        remaining variants are still annotated.
        """
        evaluations = []
        unannotated = 0
        errored = 0
        for variant in variants:
            try:
                annotation = self.annotator.annotate(variant)
            except AnnotationUnavailable as e:
                logger.debug("annotation_unavailable", variant=variant.key, reason=str(e))
                unannotated += 1
                evaluations.append(VariantEvaluation(variant))
                continue
            except Exception as e:
                logger.warning("annotation_failed", variant=variant.key, error=str(e))
                errored += 1
                evaluation = VariantEvaluation(variant)
                evaluation.mark_errored(f"Annotation failed for {variant.key}: {e}")
                evaluations.append(evaluation)
                continue
            evaluations.append(VariantEvaluation(
                variant,
                gene_symbol=annotation.gene_symbol,
                effect=annotation.effect,
            ))
        logger.info(
            "annotation_complete",
            variant_count=len(variants),
            unannotated=unannotated,
            errored=errored,
        )
        return evaluations

    def group_by_gene(self, evaluations: Sequence[VariantEvaluation]) -> list[Gene]:
        """Group annotated evaluations into genes, in first-seen order."""
        genes: dict[str, Gene] = {}
        for evaluation in evaluations:
            if evaluation.gene_symbol is None:
                continue
            gene = genes.get(evaluation.gene_symbol)
            if gene is None:
                gene = genes[evaluation.gene_symbol] = Gene(evaluation.gene_symbol)
            gene.add_variant_evaluation(evaluation)
        return list(genes.values())

    def run(
        self,
        variants: Sequence[Variant],
        pedigree: Optional[Pedigree],
        priority_source: Optional[PriorityScoreSource] = None,
        priority_types: Optional[Iterable[PriorityType]] = None,
    ) -> AnalysisResults:
        """
        Run the analysis.

        Args:
            variants: Called variants
            pedigree: Family structure; required
            priority_source: Per-gene phenotype priority scores, if any
            priority_types: Prioritisation methods run. Defaults to the
                methods present in the supplied priority results.

        Raises:
            PedigreeError: If the pedigree is missing or invalid. Raised
                before any filtering happens.
        """
        sample_ids = {sample for variant in variants for sample in variant.genotypes}
        adapter = InheritanceModeAdapter(pedigree, self.checker, sample_ids)

        evaluations = self.annotate(variants)
        self.filter_runner.run(evaluations)

        genes = self.group_by_gene(evaluations)
        if priority_source is not None:
            for gene in genes:
                for result in priority_source.scores_for(gene.symbol):
                    gene.add_priority_result(result)
        for gene in genes:
            adapter.annotate(gene)

        apply_gene_filters(self.gene_filters, genes, self.config.execution.run_mode)
        filter_report = build_filter_report([*self.stages, *self.gene_filters], evaluations)
        logger.info("filter_report", **filter_report.to_dict())

        if self.config.execution.run_mode is RunMode.PASS_ONLY:
            genes = [gene for gene in genes if gene.passed_filters()]

        scorer = GeneScorer(
            adapter,
            mode_of_inheritance=self.config.scoring.mode_of_inheritance,
            scoring_mode=self.config.scoring.scoring_mode,
            max_workers=self.config.execution.max_workers,
        )
        ranked = scorer.score(genes, priority_types)

        return AnalysisResults(
            genes=ranked,
            variant_evaluations=evaluations,
            filter_report=filter_report,
        )
