"""Tests for gene-level filter, priority and combined scoring."""

import math

import pytest

from variant_ranking.inheritance import InheritanceModeAdapter
from variant_ranking.model import (
    AffectedStatus,
    FilterResult,
    FilterType,
    Gene,
    Genotype,
    Individual,
    ModeOfInheritance,
    Pedigree,
    PriorityResult,
    PriorityType,
    ScoringMode,
    Sex,
    Variant,
    VariantEffect,
    VariantEvaluation,
)
from variant_ranking.scoring import (
    GeneScorer,
    calculate_combined_score,
    calculate_filter_score,
    calculate_priority_score,
    logistic,
    rescore_by_rank,
)

AR = ModeOfInheritance.AUTOSOMAL_RECESSIVE
AD = ModeOfInheritance.AUTOSOMAL_DOMINANT


def scored_evaluation(score, position=100, gene="GENE1", genotypes=None):
    variant = Variant(chromosome="1", position=position, ref="A", alt="G", quality=50.0,
                      genotypes=genotypes or {"proband": Genotype.HET})
    evaluation = VariantEvaluation(variant, gene, VariantEffect.MISSENSE)
    evaluation.add_filter_result(FilterResult.pass_(FilterType.PATHOGENICITY, score))
    evaluation.set_filter_score(score)
    return evaluation


def gene_with_priority(symbol, priority, priority_type=PriorityType.OMIM):
    gene = Gene(symbol)
    gene.add_priority_result(PriorityResult(symbol, priority_type, priority))
    return gene


@pytest.fixture
def singleton_adapter():
    return InheritanceModeAdapter(Pedigree.single_affected("proband"))


# ============================================================================
# Filter score
# ============================================================================

def test_filter_score_no_variants():
    assert calculate_filter_score([], AR) == 0.0
    assert calculate_filter_score([], AD) == 0.0


def test_recessive_mean_of_top_two():
    evaluations = [scored_evaluation(s, position=i) for i, s in enumerate([0.9, 0.7, 0.5], start=1)]

    assert calculate_filter_score(evaluations, AR) == pytest.approx(0.8)


def test_recessive_homozygous_counts_twice():
    hom = scored_evaluation(0.9, position=1)
    het = scored_evaluation(0.95, position=2)

    score = calculate_filter_score([het, hom], AR, is_homozygous=lambda ve: ve is hom)

    assert score == pytest.approx((0.95 + 0.9) / 2)
    assert calculate_filter_score([hom], AR, is_homozygous=lambda ve: ve is hom) == pytest.approx(0.9)


def test_recessive_homozygous_beats_weaker_het_pair():
    hom = scored_evaluation(0.8, position=1)
    het = scored_evaluation(0.3, position=2)

    score = calculate_filter_score([hom, het], AR, is_homozygous=lambda ve: ve is hom)

    assert score == pytest.approx(0.8)


@pytest.mark.parametrize("mode", list(ModeOfInheritance))
def test_single_variant_score_any_mode(mode):
    assert calculate_filter_score([scored_evaluation(0.42)], mode) == pytest.approx(0.42)


def test_dominant_takes_max():
    evaluations = [scored_evaluation(s, position=i) for i, s in enumerate([0.3, 0.9, 0.7], start=1)]

    assert calculate_filter_score(evaluations, AD) == pytest.approx(0.9)
    assert calculate_filter_score(evaluations, ModeOfInheritance.X_RECESSIVE) == pytest.approx(0.9)


# ============================================================================
# Priority and combined score
# ============================================================================

def test_priority_score_is_product():
    results = [
        PriorityResult("G", PriorityType.HUMAN_PHENOTYPE, 0.5),
        PriorityResult("G", PriorityType.OMIM, 0.8),
    ]

    assert calculate_priority_score(results) == pytest.approx(0.4)


def test_priority_score_neutral_without_results():
    assert calculate_priority_score([]) == 1.0


def test_default_combined_score_zero_priority():
    assert calculate_combined_score(0.7, 0.0, []) == pytest.approx(0.35)
    assert calculate_combined_score(0.7, 0.0, [PriorityType.OMIM]) == pytest.approx(0.35)


def test_logistic():
    assert logistic(0.0) == 0.5
    assert logistic(2.0) == pytest.approx(1 / (1 + math.exp(-2.0)))


@pytest.mark.parametrize("priority_type,coefficients", [
    (PriorityType.CROSS_SPECIES_PHENOTYPE, (-13.28813, 10.39451, 9.18381)),
    (PriorityType.NETWORK_WALKER, (-8.67972, 219.40082, 8.54374)),
    (PriorityType.HUMAN_PHENOTYPE, (-11.15659, 13.21835, 4.08667)),
])
def test_combined_score_logistic_coefficients(priority_type, coefficients):
    intercept, priority_coef, filter_coef = coefficients
    priority, filter_score = 0.6, 0.8
    expected = 1 / (1 + math.exp(-(intercept + priority_coef * priority + filter_coef * filter_score)))

    assert calculate_combined_score(filter_score, priority, [priority_type]) == pytest.approx(expected)


def test_combined_score_precedence():
    """Cross-species formula wins over the human-only one when both ran."""
    both = calculate_combined_score(0.8, 0.6, [PriorityType.HUMAN_PHENOTYPE, PriorityType.CROSS_SPECIES_PHENOTYPE])
    cross_species = calculate_combined_score(0.8, 0.6, [PriorityType.CROSS_SPECIES_PHENOTYPE])

    assert both == cross_species


# ============================================================================
# Rank rescoring
# ============================================================================

def test_rank_rescoring_with_ties():
    genes = [gene_with_priority(f"G{i}", p) for i, p in enumerate([0.9, 0.9, 0.5, 0.1])]
    for gene in genes:
        gene.priority_score = calculate_priority_score(gene.priority_results.values())

    rescore_by_rank(genes)

    assert [g.priority_score for g in genes] == pytest.approx([0.5, 0.5, 0.25, 0.0])


def test_rank_rescoring_input_order_irrelevant():
    genes = [Gene("A", priority_score=0.1), Gene("B", priority_score=0.9), Gene("C", priority_score=0.5)]

    rescore_by_rank(genes)

    scores = {g.symbol: g.priority_score for g in genes}
    assert scores == pytest.approx({"B": 1 - 1 / 3, "C": 1 - 2 / 3, "A": 0.0})


def test_rank_rescoring_odd_tie_block():
    genes = [Gene(s, priority_score=0.7) for s in "ABC"] + [Gene("D", priority_score=0.2)]

    rescore_by_rank(genes)

    # block of three at rank 1 is centred on 1 + 3 // 2
    assert [g.priority_score for g in genes] == pytest.approx([0.5, 0.5, 0.5, 0.0])


def test_rank_rescoring_empty():
    rescore_by_rank([])


# ============================================================================
# GeneScorer
# ============================================================================

def _gene(symbol, variant_scores, priority=None, priority_type=PriorityType.OMIM):
    gene = Gene(symbol)
    for position, score in enumerate(variant_scores, start=1):
        gene.add_variant_evaluation(scored_evaluation(score, position=position, gene=symbol))
    if priority is not None:
        gene.add_priority_result(PriorityResult(symbol, priority_type, priority))
    return gene


def test_scorer_ranks_by_combined_score(singleton_adapter):
    genes = [_gene("LOW", [0.2], 0.5), _gene("HIGH", [0.9], 0.9), _gene("MID", [0.6], 0.6)]

    ranked = GeneScorer(singleton_adapter).score(genes)

    assert [g.symbol for g in ranked] == ["HIGH", "MID", "LOW"]
    high = ranked[0]
    assert high.filter_score == pytest.approx(0.9)
    assert high.priority_score == pytest.approx(0.9)
    assert high.combined_score == pytest.approx(0.9)


def test_scorer_ties_broken_by_symbol(singleton_adapter):
    genes = [_gene("ZNF1", [0.5]), _gene("ABCA4", [0.5]), _gene("MYO7A", [0.5])]

    ranked = GeneScorer(singleton_adapter).score(genes)

    assert [g.symbol for g in ranked] == ["ABCA4", "MYO7A", "ZNF1"]


def test_scorer_gene_without_surviving_variants(singleton_adapter):
    gene = Gene("EMPTY")
    failed = scored_evaluation(0.9, gene="EMPTY")
    failed.add_filter_result(FilterResult.fail(FilterType.QUALITY, 0.0))
    gene.add_variant_evaluation(failed)

    GeneScorer(singleton_adapter).score([gene])

    assert gene.filter_score == 0.0
    assert gene.combined_score == pytest.approx(0.5)


def test_scorer_rank_based_rescoring_before_combining(singleton_adapter):
    genes = [_gene(f"G{i}", [1.0], p) for i, p in enumerate([0.9, 0.9, 0.5, 0.1])]

    ranked = GeneScorer(singleton_adapter, scoring_mode=ScoringMode.RANK_BASED).score(genes)

    combined = {g.symbol: g.combined_score for g in ranked}
    assert combined == pytest.approx({"G0": 0.75, "G1": 0.75, "G2": 0.625, "G3": 0.5})


def test_scorer_uses_logistic_for_priority_method(singleton_adapter):
    gene = _gene("FGFR2", [0.8], 0.6, PriorityType.HUMAN_PHENOTYPE)

    GeneScorer(singleton_adapter).score([gene])

    assert gene.combined_score == pytest.approx(logistic(-11.15659 + 13.21835 * 0.6 + 4.08667 * 0.8))


def test_scorer_method_applies_to_genes_without_result(singleton_adapter):
    """The formula follows the methods run in the analysis, not per gene."""
    scored = _gene("A", [0.8], 0.6, PriorityType.CROSS_SPECIES_PHENOTYPE)
    unscored = _gene("B", [0.8])

    GeneScorer(singleton_adapter).score([scored, unscored])

    assert unscored.priority_score == 1.0
    assert unscored.combined_score == pytest.approx(logistic(-13.28813 + 10.39451 + 9.18381 * 0.8))


def test_scorer_any_mode_uses_recessive_rule_for_recessive_only_gene():
    trio = Pedigree(individuals=[
        Individual(id="proband", father_id="dad", mother_id="mum",
                   sex=Sex.FEMALE, status=AffectedStatus.AFFECTED),
        Individual(id="dad", sex=Sex.MALE, status=AffectedStatus.UNAFFECTED),
        Individual(id="mum", sex=Sex.FEMALE, status=AffectedStatus.UNAFFECTED),
    ])
    adapter = InheritanceModeAdapter(trio)
    gene = Gene("USH2A")
    hom = {"proband": Genotype.HOM_ALT, "dad": Genotype.HET, "mum": Genotype.HET}
    inherited_het = {"proband": Genotype.HET, "dad": Genotype.HET, "mum": Genotype.HOM_REF}
    gene.add_variant_evaluation(scored_evaluation(0.6, position=1, gene="USH2A", genotypes=hom))
    gene.add_variant_evaluation(scored_evaluation(0.9, position=2, gene="USH2A", genotypes=inherited_het))
    adapter.annotate(gene)

    GeneScorer(adapter, mode_of_inheritance=ModeOfInheritance.ANY).score([gene])

    assert gene.inheritance_modes == frozenset({AR})
    assert gene.filter_score == pytest.approx(0.75)


def test_scorer_threaded_matches_sequential(singleton_adapter):
    def build():
        return [_gene(f"G{i}", [0.1 * i, 0.05 * i], 0.3 + 0.05 * i) for i in range(1, 10)]

    sequential = GeneScorer(singleton_adapter).score(build())
    threaded = GeneScorer(singleton_adapter, max_workers=4).score(build())

    assert [(g.symbol, g.combined_score) for g in sequential] == [(g.symbol, g.combined_score) for g in threaded]


def test_scorer_rejects_invalid_workers(singleton_adapter):
    with pytest.raises(ValueError):
        GeneScorer(singleton_adapter, max_workers=0)
