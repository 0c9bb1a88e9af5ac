"""Source-tagged pathogenicity predictions and their per-variant container.

Every score is a value in [0, 1] where larger means more likely pathogenic,
except SIFT which reports tolerance: a SIFT score of 0.0 is the most damaging
prediction. Ordering therefore never compares raw values directly; it goes
through pathogenicity_rank(), which inverts the tolerance source.
"""

from dataclasses import dataclass
from enum import Enum
from functools import cmp_to_key
from typing import Iterable, Optional


class PathogenicitySource(str, Enum):
    """Prediction methods a variant can carry at most one score from."""

    POLYPHEN = "polyphen"
    MUTATION_TASTER = "mutation_taster"
    SIFT = "sift"
    CADD = "cadd"
    REMM = "remm"
    REVEL = "revel"
    MVP = "mvp"


# Sources whose raw value is a tolerance score (low = damaging).
TOLERANCE_SOURCES = frozenset({PathogenicitySource.SIFT})


@dataclass(frozen=True)
class PathogenicityScore:
    """A single prediction from one source.

    Equality is structural (source and raw score). Ranking uses
    compare_pathogenicity(), which is deliberately not consistent with
    equality: SIFT 0.2 and PolyPhen 0.8 rank the same but are not equal.
    """

    source: PathogenicitySource
    score: float


def pathogenicity_rank(score: PathogenicityScore) -> float:
    """Return the pathogenicity-oriented value of a score (higher = more damaging)."""
    if score.source in TOLERANCE_SOURCES:
        return 1.0 - score.score
    return score.score


def compare_pathogenicity(a: PathogenicityScore, b: PathogenicityScore) -> int:
    """Comparator placing the more pathogenic score first.

    Returns a negative number if ``a`` sorts before ``b``, zero if both have
    the same pathogenicity-oriented value and a positive number otherwise.
    """
    rank_a = pathogenicity_rank(a)
    rank_b = pathogenicity_rank(b)
    if rank_a > rank_b:
        return -1
    if rank_a < rank_b:
        return 1
    return 0


class PathogenicityData:
    """At most one PathogenicityScore per PathogenicitySource.

    Scores are keyed by the source enumeration, so adding a second score for a
    source replaces the first. None entries are dropped silently; an empty
    container is a normal state meaning "no predictions available".
    """

    def __init__(self, scores: Optional[Iterable[Optional[PathogenicityScore]]] = None):
        self._scores: dict[PathogenicitySource, PathogenicityScore] = {}
        for score in scores or ():
            if score is not None:
                self.put(score)

    @classmethod
    def of(cls, *scores: Optional[PathogenicityScore]) -> "PathogenicityData":
        return cls(scores)

    @classmethod
    def empty(cls) -> "PathogenicityData":
        return cls()

    def put(self, score: PathogenicityScore) -> None:
        """Add a score, overwriting any existing score from the same source."""
        self._scores[score.source] = score

    def scores(self) -> list[PathogenicityScore]:
        """All scores in source enumeration order."""
        return [self._scores[source] for source in PathogenicitySource if source in self._scores]

    def predicted_score(self, source: PathogenicitySource) -> Optional[PathogenicityScore]:
        return self._scores.get(source)

    def has_predicted_score(self, source: Optional[PathogenicitySource] = None) -> bool:
        if source is None:
            return bool(self._scores)
        return source in self._scores

    def is_empty(self) -> bool:
        return not self._scores

    def most_pathogenic_score(self) -> Optional[PathogenicityScore]:
        """The score sorting first under compare_pathogenicity, or None if empty.

        Ties keep source enumeration order, so the result is deterministic.
        """
        if not self._scores:
            return None
        return sorted(self.scores(), key=cmp_to_key(compare_pathogenicity))[0]

    def score(self) -> float:
        """Pathogenicity-oriented value of the most pathogenic score, 0.0 if empty."""
        most_pathogenic = self.most_pathogenic_score()
        if most_pathogenic is None:
            return 0.0
        return pathogenicity_rank(most_pathogenic)

    def __len__(self) -> int:
        return len(self._scores)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PathogenicityData):
            return NotImplemented
        return self._scores == other._scores

    def __repr__(self) -> str:
        inner = ", ".join(f"{s.source.value}={s.score}" for s in self.scores())
        return f"PathogenicityData({inner})"
