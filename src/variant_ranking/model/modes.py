"""Analysis-wide mode enumerations."""

from enum import Enum


class ModeOfInheritance(str, Enum):
    """Segregation pattern a set of genotypes can be compatible with."""

    ANY = "any"
    AUTOSOMAL_DOMINANT = "autosomal_dominant"
    AUTOSOMAL_RECESSIVE = "autosomal_recessive"
    X_RECESSIVE = "x_recessive"


# Modes the inheritance adapter can report; ANY is only a configuration value.
TESTABLE_MODES = frozenset({
    ModeOfInheritance.AUTOSOMAL_DOMINANT,
    ModeOfInheritance.AUTOSOMAL_RECESSIVE,
    ModeOfInheritance.X_RECESSIVE,
})


class RunMode(str, Enum):
    """How the filter engine treats a variant after its first failed stage."""

    FULL = "full"
    PASS_ONLY = "pass_only"


class ScoringMode(str, Enum):
    """Whether priority scores are used raw or rescaled by rank."""

    RAW_SCORE = "raw_score"
    RANK_BASED = "rank_based"
