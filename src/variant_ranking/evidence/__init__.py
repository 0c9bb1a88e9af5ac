"""External evidence contracts and lookups."""

from variant_ranking.evidence.inline import (
    InlineEvidenceSource,
    InlinePriorityScores,
    PrecomputedAnnotator,
)
from variant_ranking.evidence.sources import (
    Annotation,
    AnnotationService,
    AnnotationUnavailable,
    EmptyEvidenceSource,
    EvidenceLookupError,
    FrequencyLookup,
    PathogenicityLookup,
    PriorityScoreSource,
)
from variant_ranking.evidence.store import (
    FREQUENCY_TABLE,
    PATHOGENICITY_TABLE,
    StoreEvidenceSource,
    save_evidence_tables,
)

__all__ = [
    "InlineEvidenceSource",
    "InlinePriorityScores",
    "PrecomputedAnnotator",
    "Annotation",
    "AnnotationService",
    "AnnotationUnavailable",
    "EmptyEvidenceSource",
    "EvidenceLookupError",
    "FrequencyLookup",
    "PathogenicityLookup",
    "PriorityScoreSource",
    "FREQUENCY_TABLE",
    "PATHOGENICITY_TABLE",
    "StoreEvidenceSource",
    "save_evidence_tables",
]
