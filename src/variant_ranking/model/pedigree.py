"""Pedigree models for family-based analyses."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Sex(str, Enum):
    MALE = "male"
    FEMALE = "female"
    UNKNOWN = "unknown"


class AffectedStatus(str, Enum):
    AFFECTED = "affected"
    UNAFFECTED = "unaffected"
    UNKNOWN = "unknown"


class Individual(BaseModel):
    """One pedigree member, keyed by the sample id used in genotype calls."""

    id: str = Field(..., min_length=1)
    family_id: str = "FAM"
    father_id: Optional[str] = None
    mother_id: Optional[str] = None
    sex: Sex = Sex.UNKNOWN
    status: AffectedStatus = AffectedStatus.UNKNOWN

    @property
    def is_affected(self) -> bool:
        return self.status is AffectedStatus.AFFECTED

    @property
    def is_unaffected(self) -> bool:
        return self.status is AffectedStatus.UNAFFECTED


class Pedigree(BaseModel):
    """Members of one family. Structural validation happens in the inheritance adapter."""

    individuals: list[Individual] = Field(default_factory=list)

    @classmethod
    def single_affected(cls, sample_id: str, sex: Sex = Sex.UNKNOWN) -> "Pedigree":
        return cls(individuals=[Individual(id=sample_id, sex=sex, status=AffectedStatus.AFFECTED)])

    @property
    def member_ids(self) -> list[str]:
        return [individual.id for individual in self.individuals]

    def get(self, individual_id: str) -> Optional[Individual]:
        for individual in self.individuals:
            if individual.id == individual_id:
                return individual
        return None

    def affected(self) -> list[Individual]:
        return [i for i in self.individuals if i.is_affected]

    def unaffected(self) -> list[Individual]:
        return [i for i in self.individuals if i.is_unaffected]

    def parents_of(self, individual: Individual) -> list[Individual]:
        parents = []
        for parent_id in (individual.father_id, individual.mother_id):
            if parent_id:
                parent = self.get(parent_id)
                if parent is not None:
                    parents.append(parent)
        return parents
