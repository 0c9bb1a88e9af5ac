"""Tests for the filter engine: run modes, evidence loading and errors."""

from unittest.mock import MagicMock

import pytest

from variant_ranking.evidence import EvidenceLookupError, InlineEvidenceSource
from variant_ranking.filters import (
    FilterConfigError,
    FilterRunner,
    FrequencyFilter,
    PathogenicityFilter,
    QualityFilter,
    TargetFilter,
    build_filter_report,
    variant_filter_score,
)
from variant_ranking.model import (
    FilterResult,
    FilterType,
    Frequency,
    FrequencyData,
    FrequencySource,
    PathogenicityData,
    PathogenicityScore,
    PathogenicitySource,
    RunMode,
    Variant,
    VariantEffect,
    VariantEvaluation,
)


STAGES = [
    TargetFilter(),
    QualityFilter(min_quality=20.0),
    FrequencyFilter(max_frequency=1.0),
    PathogenicityFilter(min_score=0.5),
]


def _variant(position, quality=50.0):
    return Variant(chromosome="1", position=position, ref="A", alt="T", quality=quality)


@pytest.fixture
def variants():
    """Four variants: one good, one low quality, one common, one intergenic."""
    return {
        "good": _variant(100),
        "low_quality": _variant(200, quality=5.0),
        "common": _variant(300),
        "intergenic": _variant(400),
    }


@pytest.fixture
def evidence(variants):
    return InlineEvidenceSource(
        frequencies={
            variants["good"].key: FrequencyData.of(Frequency(FrequencySource.GNOMAD_E_NFE, 0.1)),
            variants["common"].key: FrequencyData.of(Frequency(FrequencySource.GNOMAD_E_NFE, 15.0)),
        },
        pathogenicity={
            variants["good"].key: PathogenicityData.of(PathogenicityScore(PathogenicitySource.REVEL, 0.9)),
        },
    )


def _evaluations(variants):
    effects = {"intergenic": VariantEffect.INTERGENIC}
    return [
        VariantEvaluation(v, "GENE1", effects.get(name, VariantEffect.MISSENSE))
        for name, v in variants.items()
    ]


def test_full_mode_records_every_stage(variants, evidence):
    evaluations = _evaluations(variants)
    runner = FilterRunner(STAGES, evidence, evidence, run_mode=RunMode.FULL)

    passed = runner.run(evaluations)

    assert [ve.variant for ve in passed] == [variants["good"]]
    for evaluation in evaluations:
        assert len(evaluation.filter_results) == len(STAGES)
    low_quality = evaluations[1]
    assert low_quality.failed_filter_types() == [FilterType.QUALITY]


def test_pass_only_stops_at_first_failure(variants, evidence):
    evaluations = _evaluations(variants)
    runner = FilterRunner(STAGES, evidence, evidence, run_mode=RunMode.PASS_ONLY)

    passed = runner.run(evaluations)

    assert [ve.variant for ve in passed] == [variants["good"]]
    good, low_quality, common, intergenic = evaluations
    assert len(good.filter_results) == 4
    assert [r.filter_type for r in low_quality.filter_results] == [FilterType.TARGET, FilterType.QUALITY]
    assert [r.filter_type for r in common.filter_results] == [
        FilterType.TARGET, FilterType.QUALITY, FilterType.FREQUENCY,
    ]
    assert [r.filter_type for r in intergenic.filter_results] == [FilterType.TARGET]


def test_run_modes_agree_on_passing_set(variants, evidence):
    full = FilterRunner(STAGES, evidence, evidence, run_mode=RunMode.FULL).run(_evaluations(variants))
    pass_only = FilterRunner(STAGES, evidence, evidence, run_mode=RunMode.PASS_ONLY).run(_evaluations(variants))

    assert [ve.variant.key for ve in full] == [ve.variant.key for ve in pass_only]


def test_threaded_run_matches_sequential(variants, evidence):
    sequential = FilterRunner(STAGES, evidence, evidence).run(_evaluations(variants))
    threaded = FilterRunner(STAGES, evidence, evidence, max_workers=4).run(_evaluations(variants))

    assert [ve.variant.key for ve in threaded] == [ve.variant.key for ve in sequential]
    assert [ve.filter_score for ve in threaded] == [ve.filter_score for ve in sequential]


def test_filter_score_prefers_pathogenicity(variants, evidence):
    evaluations = _evaluations(variants)
    FilterRunner(STAGES, evidence, evidence).run(evaluations)

    assert evaluations[0].filter_score == pytest.approx(0.9)


def test_filter_score_frequency_without_pathogenicity_stage(variants, evidence):
    evaluations = _evaluations(variants)
    FilterRunner(STAGES[:3], evidence, evidence).run(evaluations)

    assert evaluations[0].filter_score == pytest.approx(0.8504372, abs=1e-6)


def test_variant_filter_score_neutral_without_evidence_stages():
    evaluation = VariantEvaluation(_variant(1))
    evaluation.add_filter_result(FilterResult.pass_(FilterType.TARGET, 1.0))

    assert variant_filter_score(evaluation) == 1.0


def test_evidence_not_looked_up_without_evidence_stage(variants):
    lookup = MagicMock()
    runner = FilterRunner([TargetFilter(), QualityFilter()], lookup, lookup)

    runner.run(_evaluations(variants))

    lookup.frequencies_for.assert_not_called()
    lookup.pathogenicity_for.assert_not_called()


def test_evidence_looked_up_once_per_variant(variants, evidence):
    lookup = MagicMock(wraps=evidence)
    runner = FilterRunner(STAGES, lookup, lookup)

    runner.run(_evaluations(variants))

    assert lookup.frequencies_for.call_count == len(variants)
    assert lookup.pathogenicity_for.call_count == len(variants)


def test_lookup_failure_marks_variant_errored(variants, evidence):
    lookup = MagicMock(wraps=evidence)
    failing_key = variants["good"].key

    def frequencies_for(variant):
        if variant.key == failing_key:
            raise EvidenceLookupError("database unavailable")
        return evidence.frequencies_for(variant)

    lookup.frequencies_for.side_effect = frequencies_for
    evaluations = _evaluations(variants)
    runner = FilterRunner(STAGES, lookup, lookup)

    passed = runner.run(evaluations)

    good = evaluations[0]
    assert passed == []
    assert good.errored
    assert "database unavailable" in good.error
    assert good.filter_score is None
    assert [r.filter_type for r in good.filter_results] == [FilterType.TARGET, FilterType.QUALITY]
    # the rest of the run is unaffected
    assert len(evaluations[2].filter_results) == len(STAGES)


def test_duplicate_stages_rejected(evidence):
    with pytest.raises(FilterConfigError):
        FilterRunner([QualityFilter(), QualityFilter(min_quality=5.0)], evidence, evidence)


def test_invalid_worker_count_rejected(evidence):
    with pytest.raises(FilterConfigError):
        FilterRunner(STAGES, evidence, evidence, max_workers=0)


def test_filter_report_counts(variants, evidence):
    evaluations = _evaluations(variants)
    FilterRunner(STAGES, evidence, evidence, run_mode=RunMode.PASS_ONLY).run(evaluations)

    report = build_filter_report(STAGES, evaluations)

    assert report.total == 4
    assert report.passed_all == 1
    assert report.errored == 0
    counts = {s.filter_type: (s.passed, s.failed, s.not_run) for s in report.stages}
    assert counts["target"] == (3, 1, 0)
    assert counts["quality"] == (2, 1, 1)
    assert counts["frequency"] == (1, 1, 2)
    assert counts["pathogenicity"] == (1, 0, 3)
    assert report.to_dict()["stages"][0]["filter_type"] == "target"


def test_errored_variant_not_filtered(variants):
    evaluations = _evaluations(variants)
    evaluations[0].mark_errored("Annotation failed")
    lookup = MagicMock()
    lookup.frequencies_for.return_value = FrequencyData.empty()
    lookup.pathogenicity_for.return_value = PathogenicityData.empty()

    survivors = FilterRunner(STAGES, lookup, lookup).run(evaluations)

    assert evaluations[0] not in survivors
    assert evaluations[0].filter_results == []
    assert lookup.frequencies_for.call_count == 3
