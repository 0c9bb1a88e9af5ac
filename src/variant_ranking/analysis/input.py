"""Analysis input file: pedigree, called variants and priority scores.

Example::

    pedigree:
      individuals:
        - {id: proband, sex: female, status: affected, father_id: dad}
        - {id: dad, sex: male, status: unaffected}
    variants:
      - chromosome: "10"
        position: 123256215
        ref: T
        alt: G
        quality: 80
        genotypes: {proband: "0/1", dad: "0/0"}
        gene: FGFR2
        effect: missense
        rs_id: rs121918506
        frequencies: {gnomad_e_nfe: 0.01}
        pathogenicity: {revel: 0.92, sift: 0.01}
    priority_scores:
      - {gene: FGFR2, method: cross_species_phenotype, score: 0.87}

Variants without gene and effect have no overlapping transcript; they are
still filtered on position and quality.
"""

from pathlib import Path
from typing import Optional

import pydantic_yaml
from pydantic import BaseModel, Field, field_validator

from variant_ranking.evidence.inline import (
    InlineEvidenceSource,
    InlinePriorityScores,
    PrecomputedAnnotator,
)
from variant_ranking.evidence.sources import Annotation
from variant_ranking.model.frequency import Frequency, FrequencyData, FrequencySource
from variant_ranking.model.gene import PriorityResult, PriorityType
from variant_ranking.model.pathogenicity import (
    PathogenicityData,
    PathogenicityScore,
    PathogenicitySource,
)
from variant_ranking.model.pedigree import Pedigree
from variant_ranking.model.variant import Genotype, Variant, VariantEffect

# Phased and reversed spellings accepted in input files.
_GENOTYPE_ALIASES = {
    "0|0": "0/0",
    "0|1": "0/1",
    "1|0": "0/1",
    "1/0": "0/1",
    "1|1": "1/1",
    ".": "./.",
    ".|.": "./.",
}


class VariantRecord(BaseModel):
    """One called variant with optional precomputed annotation and evidence."""

    chromosome: str
    position: int = Field(..., ge=1)
    ref: str
    alt: str
    quality: float = Field(default=0.0, ge=0.0)
    genotypes: dict[str, Genotype] = Field(default_factory=dict)
    gene: Optional[str] = None
    effect: Optional[VariantEffect] = None
    rs_id: Optional[str] = None
    frequencies: dict[FrequencySource, float] = Field(default_factory=dict)
    pathogenicity: dict[PathogenicitySource, float] = Field(default_factory=dict)

    @field_validator("genotypes", mode="before")
    @classmethod
    def normalise_genotypes(cls, v):
        if not isinstance(v, dict):
            return v
        return {sample: _GENOTYPE_ALIASES.get(str(gt), str(gt)) for sample, gt in v.items()}

    @field_validator("frequencies")
    @classmethod
    def frequencies_are_percentages(cls, v: dict[FrequencySource, float]) -> dict[FrequencySource, float]:
        for source, value in v.items():
            if not 0.0 <= value <= 100.0:
                raise ValueError(f"Frequency for {source.value} must be a percentage, got {value}")
        return v

    @field_validator("pathogenicity")
    @classmethod
    def scores_in_unit_range(cls, v: dict[PathogenicitySource, float]) -> dict[PathogenicitySource, float]:
        for source, value in v.items():
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"Pathogenicity score for {source.value} must be in [0, 1], got {value}")
        return v

    def to_variant(self) -> Variant:
        return Variant(
            chromosome=self.chromosome,
            position=self.position,
            ref=self.ref,
            alt=self.alt,
            quality=self.quality,
            genotypes=self.genotypes,
        )

    def annotation(self) -> Optional[Annotation]:
        if self.gene is None:
            return None
        return Annotation(self.gene, self.effect or VariantEffect.UNKNOWN)

    def frequency_data(self) -> FrequencyData:
        return FrequencyData(
            self.rs_id,
            [Frequency(source, value) for source, value in self.frequencies.items()],
        )

    def pathogenicity_data(self) -> PathogenicityData:
        return PathogenicityData(
            PathogenicityScore(source, value) for source, value in self.pathogenicity.items()
        )


class PriorityScoreRecord(BaseModel):
    gene: str = Field(..., min_length=1)
    method: PriorityType
    score: float = Field(..., ge=0.0, le=1.0)


class AnalysisInput(BaseModel):
    """Everything one analysis run consumes besides configuration."""

    pedigree: Optional[Pedigree] = None
    variants: list[VariantRecord] = Field(default_factory=list)
    priority_scores: list[PriorityScoreRecord] = Field(default_factory=list)

    def to_variants(self) -> list[Variant]:
        return [record.to_variant() for record in self.variants]

    def sample_ids(self) -> list[str]:
        seen = {}
        for record in self.variants:
            for sample_id in record.genotypes:
                seen.setdefault(sample_id, None)
        return list(seen)

    def annotator(self) -> PrecomputedAnnotator:
        annotations = {}
        for record in self.variants:
            annotation = record.annotation()
            if annotation is not None:
                annotations[record.to_variant().key] = annotation
        return PrecomputedAnnotator(annotations)

    def evidence_source(self) -> InlineEvidenceSource:
        frequencies = {}
        pathogenicity = {}
        for record in self.variants:
            key = record.to_variant().key
            frequencies[key] = record.frequency_data()
            pathogenicity[key] = record.pathogenicity_data()
        return InlineEvidenceSource(frequencies, pathogenicity)

    def priority_source(self) -> InlinePriorityScores:
        return InlinePriorityScores(
            PriorityResult(record.gene, record.method, record.score)
            for record in self.priority_scores
        )

    def priority_types(self) -> set[PriorityType]:
        return {record.method for record in self.priority_scores}


def load_analysis_input(input_path: Path | str) -> AnalysisInput:
    """
    Load and validate an analysis input YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        pydantic.ValidationError: If the content is invalid
    """
    input_path = Path(input_path)
    if not input_path.exists():
        raise FileNotFoundError(f"Input file not found: {input_path}")

    with open(input_path, "r") as f:
        yaml_content = f.read()

    return pydantic_yaml.parse_yaml_raw_as(AnalysisInput, yaml_content)
