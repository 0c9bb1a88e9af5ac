"""In-memory collaborators backed by precomputed annotation and evidence."""

from typing import Iterable, Optional

from variant_ranking.evidence.sources import Annotation, AnnotationUnavailable
from variant_ranking.model.frequency import FrequencyData
from variant_ranking.model.gene import PriorityResult
from variant_ranking.model.pathogenicity import PathogenicityData
from variant_ranking.model.variant import Variant


class PrecomputedAnnotator:
    """Annotation service answering from a variant-key -> Annotation mapping."""

    def __init__(self, annotations: dict[str, Annotation]):
        self._annotations = dict(annotations)

    def annotate(self, variant: Variant) -> Annotation:
        annotation = self._annotations.get(variant.key)
        if annotation is None:
            raise AnnotationUnavailable(f"No transcript overlaps {variant.key}")
        return annotation


class InlineEvidenceSource:
    """Frequency and pathogenicity lookup over evidence keyed by variant key."""

    def __init__(
        self,
        frequencies: Optional[dict[str, FrequencyData]] = None,
        pathogenicity: Optional[dict[str, PathogenicityData]] = None,
    ):
        self._frequencies = dict(frequencies or {})
        self._pathogenicity = dict(pathogenicity or {})

    def frequencies_for(self, variant: Variant) -> FrequencyData:
        data = self._frequencies.get(variant.key)
        return data if data is not None else FrequencyData.empty()

    def pathogenicity_for(self, variant: Variant) -> PathogenicityData:
        data = self._pathogenicity.get(variant.key)
        return data if data is not None else PathogenicityData.empty()


class InlinePriorityScores:
    """Priority scores supplied up front, grouped by gene symbol."""

    def __init__(self, results: Iterable[PriorityResult]):
        self._by_gene: dict[str, list[PriorityResult]] = {}
        for result in results:
            self._by_gene.setdefault(result.gene_symbol, []).append(result)

    def scores_for(self, gene_symbol: str) -> list[PriorityResult]:
        return list(self._by_gene.get(gene_symbol, []))
