"""Genes, their external priority results and the final ranking order."""

from dataclasses import dataclass, field
from enum import Enum

from variant_ranking.model.modes import ModeOfInheritance
from variant_ranking.model.variant import VariantEvaluation


class PriorityType(str, Enum):
    """Phenotype-similarity prioritisation methods."""

    CROSS_SPECIES_PHENOTYPE = "cross_species_phenotype"
    NETWORK_WALKER = "network_walker"
    HUMAN_PHENOTYPE = "human_phenotype"
    MOUSE_PHENOTYPE = "mouse_phenotype"
    OMIM = "omim"


@dataclass(frozen=True)
class PriorityResult:
    """Score assigned to one gene by one prioritisation method."""

    gene_symbol: str
    priority_type: PriorityType
    score: float


@dataclass(eq=False)
class Gene:
    """A candidate gene with its variants and scores.

    Scores are set once by the gene scorer. Until then filter_score and
    combined_score are 0.0 and priority_score is the neutral 1.0.
    """

    symbol: str
    variant_evaluations: list[VariantEvaluation] = field(default_factory=list)
    priority_results: dict[PriorityType, PriorityResult] = field(default_factory=dict)
    inheritance_modes: frozenset[ModeOfInheritance] = frozenset()
    filter_score: float = 0.0
    priority_score: float = 1.0
    combined_score: float = 0.0

    def add_variant_evaluation(self, evaluation: VariantEvaluation) -> None:
        if evaluation.gene_symbol != self.symbol:
            raise ValueError(
                f"Variant {evaluation.variant.key} belongs to {evaluation.gene_symbol}, not {self.symbol}"
            )
        self.variant_evaluations.append(evaluation)

    def add_priority_result(self, result: PriorityResult) -> None:
        if result.gene_symbol != self.symbol:
            raise ValueError(f"Priority result for {result.gene_symbol} added to {self.symbol}")
        self.priority_results[result.priority_type] = result

    def passed_variant_evaluations(self) -> list[VariantEvaluation]:
        return [ve for ve in self.variant_evaluations if ve.passed_filters()]

    def passed_filters(self) -> bool:
        return any(ve.passed_filters() for ve in self.variant_evaluations)

    def is_compatible_with(self, mode: ModeOfInheritance) -> bool:
        if mode is ModeOfInheritance.ANY:
            return True
        return mode in self.inheritance_modes


def gene_rank_key(gene: Gene) -> tuple[float, str]:
    """Sort key: combined score descending, then gene symbol."""
    return (-gene.combined_score, gene.symbol)
