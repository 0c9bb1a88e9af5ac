"""Inheritance compatibility: pedigree validation and genotype segregation."""

from variant_ranking.inheritance.adapter import (
    InheritanceModeAdapter,
    PedigreeError,
    validate_pedigree,
)
from variant_ranking.inheritance.checker import (
    InheritanceCompatibilityChecker,
    SegregationChecker,
)

__all__ = [
    "InheritanceModeAdapter",
    "PedigreeError",
    "validate_pedigree",
    "InheritanceCompatibilityChecker",
    "SegregationChecker",
]
