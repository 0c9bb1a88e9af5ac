"""Variants, filter outcomes and the per-variant evaluation record."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from variant_ranking.model.frequency import FrequencyData
from variant_ranking.model.pathogenicity import PathogenicityData


class VariantEffect(str, Enum):
    """Most severe consequence class assigned by the annotation service."""

    MISSENSE = "missense"
    FS_INSERTION = "frameshift_insertion"
    FS_DELETION = "frameshift_deletion"
    FS_SUBSTITUTION = "frameshift_substitution"
    FS_DUPLICATION = "frameshift_duplication"
    NON_FS_INSERTION = "inframe_insertion"
    NON_FS_DELETION = "inframe_deletion"
    NON_FS_SUBSTITUTION = "inframe_substitution"
    NON_FS_DUPLICATION = "inframe_duplication"
    STOPGAIN = "stop_gained"
    STOPLOSS = "stop_lost"
    START_LOSS = "start_lost"
    SPLICING = "splicing"
    SYNONYMOUS = "synonymous"
    UTR5 = "5_prime_utr"
    UTR3 = "3_prime_utr"
    INTRONIC = "intronic"
    NCRNA = "non_coding_rna"
    UPSTREAM = "upstream"
    DOWNSTREAM = "downstream"
    INTERGENIC = "intergenic"
    UNKNOWN = "unknown"


class Genotype(str, Enum):
    """Per-sample genotype call."""

    HOM_REF = "0/0"
    HET = "0/1"
    HOM_ALT = "1/1"
    HEMIZYGOUS = "1"
    NO_CALL = "./."

    @property
    def carries_alt(self) -> bool:
        return self in (Genotype.HET, Genotype.HOM_ALT, Genotype.HEMIZYGOUS)


X_CHROMOSOMES = frozenset({"X", "23"})


def normalise_chromosome(chromosome: str) -> str:
    """Strip a leading 'chr' so 'chr1' and '1' compare equal."""
    if chromosome.lower().startswith("chr"):
        return chromosome[3:]
    return chromosome


class Variant(BaseModel):
    """A called variant before annotation.

    Attributes:
        chromosome: Contig name, with or without 'chr' prefix
        position: 1-based position
        ref: Reference allele
        alt: Alternate allele
        quality: Call quality (Phred scaled)
        genotypes: Genotype call per sample id
    """

    model_config = ConfigDict(frozen=True)

    chromosome: str
    position: int = Field(..., ge=1)
    ref: str
    alt: str
    quality: float = Field(default=0.0, ge=0.0)
    genotypes: dict[str, Genotype] = Field(default_factory=dict)

    @property
    def key(self) -> str:
        return f"{normalise_chromosome(self.chromosome)}-{self.position}-{self.ref}-{self.alt}"

    @property
    def is_x_chromosomal(self) -> bool:
        return normalise_chromosome(self.chromosome).upper() in X_CHROMOSOMES

    def genotype_for(self, sample_id: str) -> Genotype:
        return self.genotypes.get(sample_id, Genotype.NO_CALL)


class FilterType(str, Enum):
    TARGET = "target"
    QUALITY = "quality"
    FREQUENCY = "frequency"
    PATHOGENICITY = "pathogenicity"
    INTERVAL = "interval"
    PRIORITY_SCORE = "priority_score"
    INHERITANCE = "inheritance"


# Filters applied to whole genes; their result is recorded on every variant of the gene.
GENE_FILTER_TYPES = frozenset({FilterType.PRIORITY_SCORE, FilterType.INHERITANCE})


class FilterStatus(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"


@dataclass(frozen=True)
class FilterResult:
    """Outcome of one filter stage for one variant."""

    filter_type: FilterType
    status: FilterStatus
    score: float

    @classmethod
    def pass_(cls, filter_type: FilterType, score: float) -> "FilterResult":
        return cls(filter_type, FilterStatus.PASS, score)

    @classmethod
    def fail(cls, filter_type: FilterType, score: float) -> "FilterResult":
        return cls(filter_type, FilterStatus.FAIL, score)

    @property
    def passed(self) -> bool:
        return self.status is FilterStatus.PASS


@dataclass(eq=False)
class VariantEvaluation:
    """A variant plus everything the filter pipeline learns about it.

    Created once at annotation time and mutated only by the filter engine:
    filter results are appended in stage order, evidence containers are set
    when looked up, and filter_score is set once after the last stage.
    """

    variant: Variant
    gene_symbol: Optional[str] = None
    effect: VariantEffect = VariantEffect.UNKNOWN
    filter_results: list[FilterResult] = field(default_factory=list)
    pathogenicity_data: PathogenicityData = field(default_factory=PathogenicityData)
    frequency_data: FrequencyData = field(default_factory=FrequencyData)
    filter_score: Optional[float] = None
    error: Optional[str] = None

    def add_filter_result(self, result: FilterResult) -> None:
        self.filter_results.append(result)

    def filter_result(self, filter_type: FilterType) -> Optional[FilterResult]:
        for result in self.filter_results:
            if result.filter_type is filter_type:
                return result
        return None

    def has_run(self, filter_type: FilterType) -> bool:
        return self.filter_result(filter_type) is not None

    def passed_filter(self, filter_type: FilterType) -> bool:
        result = self.filter_result(filter_type)
        return result is not None and result.passed

    def failed_filter_types(self) -> list[FilterType]:
        return [r.filter_type for r in self.filter_results if not r.passed]

    def passed_filter_types(self) -> list[FilterType]:
        return [r.filter_type for r in self.filter_results if r.passed]

    @property
    def errored(self) -> bool:
        return self.error is not None

    def mark_errored(self, message: str) -> None:
        self.error = message

    def passed_filters(self) -> bool:
        """True if the variant was not errored and no recorded stage failed."""
        if self.errored:
            return False
        return all(result.passed for result in self.filter_results)

    def set_filter_score(self, score: float) -> None:
        if self.filter_score is not None:
            raise RuntimeError(f"filter score already set for {self.variant.key}")
        self.filter_score = score

    def genotype_for(self, sample_id: str) -> Genotype:
        return self.variant.genotype_for(sample_id)
