"""Contracts for the external collaborators the engine consumes.

Annotation, frequency, pathogenicity and priority scoring are provided
elsewhere; the engine only depends on these small protocols.
"""

from dataclasses import dataclass
from typing import Iterable, Protocol

from variant_ranking.model.frequency import FrequencyData
from variant_ranking.model.gene import PriorityResult
from variant_ranking.model.pathogenicity import PathogenicityData
from variant_ranking.model.variant import Variant, VariantEffect


class AnnotationUnavailable(Exception):
    """No transcript overlaps the variant position."""


class EvidenceLookupError(Exception):
    """A frequency or pathogenicity lookup failed (after any retries)."""


@dataclass(frozen=True)
class Annotation:
    gene_symbol: str
    effect: VariantEffect


class AnnotationService(Protocol):
    def annotate(self, variant: Variant) -> Annotation:
        """Return gene symbol and effect, or raise AnnotationUnavailable."""
        ...


class FrequencyLookup(Protocol):
    def frequencies_for(self, variant: Variant) -> FrequencyData:
        ...


class PathogenicityLookup(Protocol):
    def pathogenicity_for(self, variant: Variant) -> PathogenicityData:
        ...


class PriorityScoreSource(Protocol):
    def scores_for(self, gene_symbol: str) -> Iterable[PriorityResult]:
        ...


class EmptyEvidenceSource:
    """Lookup returning no evidence for any variant."""

    def frequencies_for(self, variant: Variant) -> FrequencyData:
        return FrequencyData.empty()

    def pathogenicity_for(self, variant: Variant) -> PathogenicityData:
        return PathogenicityData.empty()
