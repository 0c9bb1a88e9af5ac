"""Filter engine: runs the configured stage sequence over every variant."""

from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

import structlog

from variant_ranking.evidence.sources import (
    EvidenceLookupError,
    FrequencyLookup,
    PathogenicityLookup,
)
from variant_ranking.filters.stages import (
    EVIDENCE_STAGES,
    FilterConfigError,
    FilterStage,
    run_filter,
)
from variant_ranking.model.modes import RunMode
from variant_ranking.model.variant import FilterType, VariantEvaluation

logger = structlog.get_logger(__name__)

# Variant score when neither the frequency nor the pathogenicity stage ran.
NEUTRAL_VARIANT_SCORE = 1.0


def variant_filter_score(evaluation: VariantEvaluation) -> float:
    """
    Final per-variant score from the recorded stage results.

    The pathogenicity stage score wins when present; otherwise the frequency
    stage score is used. The two are never averaged at this level.
    """
    pathogenicity = evaluation.filter_result(FilterType.PATHOGENICITY)
    if pathogenicity is not None:
        return pathogenicity.score
    frequency = evaluation.filter_result(FilterType.FREQUENCY)
    if frequency is not None:
        return frequency.score
    return NEUTRAL_VARIANT_SCORE


class FilterRunner:
    """
    Runs filter stages in order over variant evaluations.

    FULL mode evaluates and records every stage for every variant.
    PASS_ONLY mode stops at a variant's first failed stage; the partial
    history stays on the evaluation but the variant is not returned.
    Either way the set of passing variants is the same.

    Evidence (frequency and pathogenicity) is looked up at most once per
    variant, just before the first stage that reads it. A failed lookup marks
    the variant as errored and removes it from the survivors without
    stopping the run.
    """

    def __init__(
        self,
        stages: Sequence[FilterStage],
        frequency_lookup: FrequencyLookup,
        pathogenicity_lookup: PathogenicityLookup,
        run_mode: RunMode = RunMode.FULL,
        max_workers: int = 1,
    ):
        filter_types = [stage.filter_type for stage in stages]
        if len(set(filter_types)) != len(filter_types):
            raise FilterConfigError(f"Duplicate filter stages: {[t.value for t in filter_types]}")
        if max_workers < 1:
            raise FilterConfigError(f"max_workers must be >= 1, got {max_workers}")

        self.stages = tuple(stages)
        self.frequency_lookup = frequency_lookup
        self.pathogenicity_lookup = pathogenicity_lookup
        self.run_mode = run_mode
        self.max_workers = max_workers

    def _load_evidence(self, evaluation: VariantEvaluation) -> None:
        variant = evaluation.variant
        evaluation.frequency_data = self.frequency_lookup.frequencies_for(variant)
        evaluation.pathogenicity_data = self.pathogenicity_lookup.pathogenicity_for(variant)

    def filter_variant(self, evaluation: VariantEvaluation) -> bool:
        """Run all stages on one variant. Returns True if it survives.

        A variant already errored upstream (annotation) is not filtered.
        """
        if evaluation.errored:
            return False

        evidence_loaded = False
        for stage in self.stages:
            if stage.filter_type in EVIDENCE_STAGES and not evidence_loaded:
                try:
                    self._load_evidence(evaluation)
                except EvidenceLookupError as e:
                    evaluation.mark_errored(str(e))
                    logger.warning("evidence_lookup_failed", variant=evaluation.variant.key, error=str(e))
                    break
                evidence_loaded = True

            result = run_filter(stage, evaluation)
            evaluation.add_filter_result(result)
            if not result.passed and self.run_mode is RunMode.PASS_ONLY:
                break

        if not evaluation.errored:
            evaluation.set_filter_score(variant_filter_score(evaluation))
        return evaluation.passed_filters()

    def run(self, evaluations: Sequence[VariantEvaluation]) -> list[VariantEvaluation]:
        """
        Filter all variants and return the survivors in input order.

        Variants are independent, so with max_workers > 1 they are filtered
        on a thread pool; results are collected in input order.
        """
        logger.info(
            "filter_run_start",
            variant_count=len(evaluations),
            stages=[stage.filter_type.value for stage in self.stages],
            run_mode=self.run_mode.value,
            max_workers=self.max_workers,
        )

        if self.max_workers == 1:
            outcomes = [self.filter_variant(ve) for ve in evaluations]
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                outcomes = list(executor.map(self.filter_variant, evaluations))

        passed = [ve for ve, survived in zip(evaluations, outcomes) if survived]
        errored = sum(1 for ve in evaluations if ve.errored)

        logger.info(
            "filter_run_complete",
            variant_count=len(evaluations),
            passed=len(passed),
            failed=len(evaluations) - len(passed) - errored,
            errored=errored,
        )
        return passed
