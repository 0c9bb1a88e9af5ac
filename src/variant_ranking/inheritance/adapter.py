"""Pedigree validation and the inheritance compatibility adapter."""

from typing import Iterable, Optional, Sequence

import structlog

from variant_ranking.inheritance.checker import InheritanceCompatibilityChecker, SegregationChecker
from variant_ranking.model.gene import Gene
from variant_ranking.model.modes import TESTABLE_MODES, ModeOfInheritance
from variant_ranking.model.pedigree import Pedigree
from variant_ranking.model.variant import VariantEvaluation

logger = structlog.get_logger(__name__)


class PedigreeError(ValueError):
    """The pedigree is missing or structurally invalid."""


def validate_pedigree(pedigree: Optional[Pedigree], sample_ids: Iterable[str] = ()) -> None:
    """
    Check that a pedigree can support inheritance analysis.

    Args:
        pedigree: Pedigree to validate
        sample_ids: Sample ids present in the genotype calls

    Raises:
        PedigreeError: If the pedigree is missing, empty, has duplicate or
            dangling parent ids, has no affected member, or does not cover
            every genotyped sample
    """
    if pedigree is None:
        raise PedigreeError("No pedigree supplied")
    if not pedigree.individuals:
        raise PedigreeError("Pedigree has no members")

    member_ids = pedigree.member_ids
    duplicates = sorted({i for i in member_ids if member_ids.count(i) > 1})
    if duplicates:
        raise PedigreeError(f"Duplicate pedigree member ids: {duplicates}")

    known = set(member_ids)
    for individual in pedigree.individuals:
        for parent_id in (individual.father_id, individual.mother_id):
            if parent_id and parent_id not in known:
                raise PedigreeError(
                    f"Parent '{parent_id}' of '{individual.id}' is not a pedigree member"
                )
        if individual.id in (individual.father_id, individual.mother_id):
            raise PedigreeError(f"'{individual.id}' is listed as their own parent")

    if not pedigree.affected():
        raise PedigreeError("Pedigree has no affected member")

    missing = sorted(set(sample_ids) - known)
    if missing:
        raise PedigreeError(f"Genotyped samples missing from pedigree: {missing}")


class InheritanceModeAdapter:
    """
    Narrows the modes of inheritance under consideration for each gene.

    The pedigree is validated on construction so an invalid family structure
    stops the analysis before any scoring happens.
    """

    def __init__(
        self,
        pedigree: Optional[Pedigree],
        checker: Optional[InheritanceCompatibilityChecker] = None,
        sample_ids: Iterable[str] = (),
    ):
        validate_pedigree(pedigree, sample_ids)
        self.pedigree = pedigree
        self.checker = checker if checker is not None else SegregationChecker()
        logger.info(
            "inheritance_adapter_ready",
            members=len(pedigree.individuals),
            affected=len(pedigree.affected()),
        )

    def compatible_modes(self, evaluations: Sequence[VariantEvaluation]) -> frozenset[ModeOfInheritance]:
        if not evaluations:
            return frozenset()
        modes = self.checker.compatible_modes(evaluations, self.pedigree)
        return frozenset(modes) & TESTABLE_MODES

    def is_homozygous_compatible(self, evaluation: VariantEvaluation) -> bool:
        return self.checker.is_compatible_homozygous(evaluation, self.pedigree)

    def annotate(self, gene: Gene) -> frozenset[ModeOfInheritance]:
        """Record on the gene the modes its surviving variants are compatible with."""
        gene.inheritance_modes = self.compatible_modes(gene.passed_variant_evaluations())
        return gene.inheritance_modes

    @staticmethod
    def scoring_mode(configured: ModeOfInheritance, gene: Gene) -> ModeOfInheritance:
        """
        Mode whose aggregation rule the gene scorer applies.

        A configured mode is used as-is. With ANY, the recessive rule is used
        only when recessive is the sole mode the gene is compatible with. This
        departs from always taking the best single variant under ANY: a gene
        that only segregates recessively is scored on its best two alleles.
        """
        if configured is not ModeOfInheritance.ANY:
            return configured
        if gene.inheritance_modes == frozenset({ModeOfInheritance.AUTOSOMAL_RECESSIVE}):
            return ModeOfInheritance.AUTOSOMAL_RECESSIVE
        return ModeOfInheritance.ANY
