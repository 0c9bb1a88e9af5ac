"""Genotype segregation checks against a pedigree.

InheritanceCompatibilityChecker is the contract the adapter consumes. The
SegregationChecker below is a straightforward genotype-pattern implementation
used by default; a more thorough service can be injected instead.
"""

from itertools import combinations
from typing import Protocol, Sequence

from variant_ranking.model.modes import ModeOfInheritance
from variant_ranking.model.pedigree import Individual, Pedigree, Sex
from variant_ranking.model.variant import Genotype, VariantEvaluation


class InheritanceCompatibilityChecker(Protocol):
    def compatible_modes(
        self,
        evaluations: Sequence[VariantEvaluation],
        pedigree: Pedigree,
    ) -> set[ModeOfInheritance]:
        """Modes of inheritance the genotypes of one gene's variants fit."""
        ...

    def is_compatible_homozygous(self, evaluation: VariantEvaluation, pedigree: Pedigree) -> bool:
        """True if this single variant fits homozygous recessive segregation."""
        ...


class SegregationChecker:
    """
    Genotype-pattern compatibility checks.

    Missing calls (NO_CALL) never make a pattern incompatible.

    - Dominant: every affected member heterozygous, no unaffected carrier.
    - Recessive: a compatible homozygous variant, or two heterozygous variants
      in all affected members that no unaffected member carries together.
    - X-linked recessive: variant on chrX, affected members hemizygous or
      homozygous, no unaffected male carrier, no unaffected homozygous female.
    """

    def _genotype(self, evaluation: VariantEvaluation, individual: Individual) -> Genotype:
        return evaluation.genotype_for(individual.id)

    def is_compatible_dominant(self, evaluation: VariantEvaluation, pedigree: Pedigree) -> bool:
        affected = pedigree.affected()
        if not affected:
            return False
        for individual in affected:
            if self._genotype(evaluation, individual) not in (Genotype.HET, Genotype.NO_CALL):
                return False
        if all(self._genotype(evaluation, i) is Genotype.NO_CALL for i in affected):
            return False
        return not any(self._genotype(evaluation, i).carries_alt for i in pedigree.unaffected())

    def is_compatible_homozygous(self, evaluation: VariantEvaluation, pedigree: Pedigree) -> bool:
        affected = pedigree.affected()
        if not affected:
            return False
        for individual in affected:
            if self._genotype(evaluation, individual) is not Genotype.HOM_ALT:
                return False
            # a homozygous child cannot have a homozygous-reference parent
            for parent in pedigree.parents_of(individual):
                if self._genotype(evaluation, parent) is Genotype.HOM_REF:
                    return False
        return not any(
            self._genotype(evaluation, i) is Genotype.HOM_ALT for i in pedigree.unaffected()
        )

    def _is_compound_het_candidate(self, evaluation: VariantEvaluation, pedigree: Pedigree) -> bool:
        affected = pedigree.affected()
        if not affected:
            return False
        if any(self._genotype(evaluation, i) is not Genotype.HET for i in affected):
            return False
        return not any(
            self._genotype(evaluation, i) is Genotype.HOM_ALT for i in pedigree.unaffected()
        )

    def _is_compatible_pair(
        self,
        first: VariantEvaluation,
        second: VariantEvaluation,
        pedigree: Pedigree,
    ) -> bool:
        for individual in pedigree.unaffected():
            if self._genotype(first, individual).carries_alt and self._genotype(second, individual).carries_alt:
                return False
        return True

    def is_compatible_recessive(
        self,
        evaluations: Sequence[VariantEvaluation],
        pedigree: Pedigree,
    ) -> bool:
        if any(self.is_compatible_homozygous(ve, pedigree) for ve in evaluations):
            return True
        candidates = [ve for ve in evaluations if self._is_compound_het_candidate(ve, pedigree)]
        return any(
            self._is_compatible_pair(first, second, pedigree)
            for first, second in combinations(candidates, 2)
        )

    def is_compatible_x_recessive(self, evaluation: VariantEvaluation, pedigree: Pedigree) -> bool:
        if not evaluation.variant.is_x_chromosomal:
            return False
        affected = pedigree.affected()
        if not affected:
            return False
        for individual in affected:
            genotype = self._genotype(evaluation, individual)
            if individual.sex is Sex.FEMALE:
                if genotype is not Genotype.HOM_ALT:
                    return False
            elif genotype not in (Genotype.HOM_ALT, Genotype.HEMIZYGOUS):
                return False
        for individual in pedigree.unaffected():
            genotype = self._genotype(evaluation, individual)
            if individual.sex is Sex.MALE and genotype.carries_alt:
                return False
            if genotype in (Genotype.HOM_ALT, Genotype.HEMIZYGOUS) and individual.sex is not Sex.MALE:
                return False
        return True

    def compatible_modes(
        self,
        evaluations: Sequence[VariantEvaluation],
        pedigree: Pedigree,
    ) -> set[ModeOfInheritance]:
        modes = set()
        if any(self.is_compatible_dominant(ve, pedigree) for ve in evaluations):
            modes.add(ModeOfInheritance.AUTOSOMAL_DOMINANT)
        if self.is_compatible_recessive(evaluations, pedigree):
            modes.add(ModeOfInheritance.AUTOSOMAL_RECESSIVE)
        if any(self.is_compatible_x_recessive(ve, pedigree) for ve in evaluations):
            modes.add(ModeOfInheritance.X_RECESSIVE)
        return modes
