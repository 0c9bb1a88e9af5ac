"""Filter stages and their single dispatch function.

The stage set is closed: each stage is a small frozen dataclass holding its
validated parameters, and run_filter() is the only place that knows how to
evaluate each kind. Parameters are checked in the constructors so an invalid
pipeline is rejected before any variant is seen.
"""

import re
from dataclasses import dataclass
from typing import ClassVar, Union

from variant_ranking.filters.effect_scores import default_pathogenicity_score
from variant_ranking.model.variant import (
    FilterResult,
    FilterType,
    Variant,
    VariantEffect,
    VariantEvaluation,
    normalise_chromosome,
)

PASS_SCORE = 1.0
FAIL_SCORE = 0.0

DEFAULT_OFF_TARGET_EFFECTS = frozenset({
    VariantEffect.INTERGENIC,
    VariantEffect.UPSTREAM,
    VariantEffect.DOWNSTREAM,
    VariantEffect.SYNONYMOUS,
    VariantEffect.INTRONIC,
    VariantEffect.UTR5,
    VariantEffect.UTR3,
    VariantEffect.NCRNA,
    VariantEffect.UNKNOWN,
})

_INTERVAL_PATTERN = re.compile(r"^(?P<chrom>[^:\s]+):(?P<start>[\d,]+)-(?P<end>[\d,]+)$")


class FilterConfigError(ValueError):
    """Raised when a filter stage is constructed with invalid parameters."""


@dataclass(frozen=True)
class GeneticInterval:
    """Closed 1-based interval on one chromosome."""

    chromosome: str
    start: int
    end: int

    def __post_init__(self):
        if self.start < 1 or self.end < self.start:
            raise FilterConfigError(
                f"Invalid interval {self.chromosome}:{self.start}-{self.end}"
            )
        object.__setattr__(self, "chromosome", normalise_chromosome(self.chromosome))

    @classmethod
    def parse(cls, text: str) -> "GeneticInterval":
        """Parse 'chr1:1000-2000' (commas in positions allowed)."""
        match = _INTERVAL_PATTERN.match(text.strip())
        if match is None:
            raise FilterConfigError(f"Cannot parse interval '{text}', expected chrom:start-end")
        return cls(
            chromosome=match.group("chrom"),
            start=int(match.group("start").replace(",", "")),
            end=int(match.group("end").replace(",", "")),
        )

    def contains(self, variant: Variant) -> bool:
        return (
            normalise_chromosome(variant.chromosome) == self.chromosome
            and self.start <= variant.position <= self.end
        )


@dataclass(frozen=True)
class TargetFilter:
    """Keeps variants whose effect class is potentially functional."""

    filter_type: ClassVar[FilterType] = FilterType.TARGET
    off_target_effects: frozenset[VariantEffect] = DEFAULT_OFF_TARGET_EFFECTS


@dataclass(frozen=True)
class QualityFilter:
    """Keeps variants with call quality at or above min_quality."""

    filter_type: ClassVar[FilterType] = FilterType.QUALITY
    min_quality: float = 20.0

    def __post_init__(self):
        if self.min_quality < 0:
            raise FilterConfigError(f"Quality threshold must be >= 0, got {self.min_quality}")


@dataclass(frozen=True)
class FrequencyFilter:
    """Keeps rare variants.

    In strict mode any variant present in a reference database (rsID or any
    frequency) fails. Otherwise the variant passes while its maximum observed
    frequency is below max_frequency (a percentage).
    """

    filter_type: ClassVar[FilterType] = FilterType.FREQUENCY
    max_frequency: float = 2.0
    strict: bool = False

    def __post_init__(self):
        if not 0.0 <= self.max_frequency <= 100.0:
            raise FilterConfigError(
                f"Maximum frequency must be between 0 and 100, got {self.max_frequency}"
            )


@dataclass(frozen=True)
class PathogenicityFilter:
    """Keeps variants predicted pathogenic, or all variants when include_pathogenic is set."""

    filter_type: ClassVar[FilterType] = FilterType.PATHOGENICITY
    include_pathogenic: bool = False
    min_score: float = 0.5

    def __post_init__(self):
        if not 0.0 <= self.min_score <= 1.0:
            raise FilterConfigError(f"Minimum pathogenicity score must be in [0, 1], got {self.min_score}")


@dataclass(frozen=True)
class IntervalFilter:
    """Keeps variants inside any of the configured intervals."""

    filter_type: ClassVar[FilterType] = FilterType.INTERVAL
    intervals: tuple[GeneticInterval, ...] = ()

    def __post_init__(self):
        if not self.intervals:
            raise FilterConfigError("Interval filter requires at least one interval")

    @classmethod
    def from_strings(cls, intervals: list[str]) -> "IntervalFilter":
        return cls(tuple(GeneticInterval.parse(text) for text in intervals))


FilterStage = Union[TargetFilter, QualityFilter, FrequencyFilter, PathogenicityFilter, IntervalFilter]

# Stages that read looked-up evidence from the evaluation.
EVIDENCE_STAGES = frozenset({FilterType.FREQUENCY, FilterType.PATHOGENICITY})


def pathogenicity_filter_score(evaluation: VariantEvaluation) -> float:
    """Predicted score when any prediction exists, otherwise the effect-class default."""
    if evaluation.pathogenicity_data.has_predicted_score():
        return evaluation.pathogenicity_data.score()
    return default_pathogenicity_score(evaluation.effect)


def _run_target(stage: TargetFilter, evaluation: VariantEvaluation) -> FilterResult:
    if evaluation.effect in stage.off_target_effects:
        return FilterResult.fail(stage.filter_type, FAIL_SCORE)
    return FilterResult.pass_(stage.filter_type, PASS_SCORE)


def _run_quality(stage: QualityFilter, evaluation: VariantEvaluation) -> FilterResult:
    if evaluation.variant.quality >= stage.min_quality:
        return FilterResult.pass_(stage.filter_type, PASS_SCORE)
    return FilterResult.fail(stage.filter_type, FAIL_SCORE)


def _run_frequency(stage: FrequencyFilter, evaluation: VariantEvaluation) -> FilterResult:
    frequency_data = evaluation.frequency_data
    score = frequency_data.score()
    if stage.strict:
        passed = not frequency_data.is_represented_in_database()
    else:
        passed = frequency_data.max_frequency() < stage.max_frequency
    if passed:
        return FilterResult.pass_(stage.filter_type, score)
    return FilterResult.fail(stage.filter_type, score)


def _run_pathogenicity(stage: PathogenicityFilter, evaluation: VariantEvaluation) -> FilterResult:
    score = pathogenicity_filter_score(evaluation)
    if stage.include_pathogenic or score > stage.min_score:
        return FilterResult.pass_(stage.filter_type, score)
    return FilterResult.fail(stage.filter_type, score)


def _run_interval(stage: IntervalFilter, evaluation: VariantEvaluation) -> FilterResult:
    if any(interval.contains(evaluation.variant) for interval in stage.intervals):
        return FilterResult.pass_(stage.filter_type, PASS_SCORE)
    return FilterResult.fail(stage.filter_type, FAIL_SCORE)


def run_filter(stage: FilterStage, evaluation: VariantEvaluation) -> FilterResult:
    """Evaluate one stage against one variant. Never raises for missing evidence."""
    if isinstance(stage, TargetFilter):
        return _run_target(stage, evaluation)
    if isinstance(stage, QualityFilter):
        return _run_quality(stage, evaluation)
    if isinstance(stage, FrequencyFilter):
        return _run_frequency(stage, evaluation)
    if isinstance(stage, PathogenicityFilter):
        return _run_pathogenicity(stage, evaluation)
    if isinstance(stage, IntervalFilter):
        return _run_interval(stage, evaluation)
    raise TypeError(f"Unknown filter stage: {stage!r}")
