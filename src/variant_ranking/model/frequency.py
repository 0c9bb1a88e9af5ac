"""Population frequency observations and the per-variant frequency container."""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional


class FrequencySource(str, Enum):
    """Reference cohorts a variant can have at most one frequency from."""

    THOUSAND_GENOMES = "thousand_genomes"
    TOPMED = "topmed"
    UK10K = "uk10k"
    ESP_AFRICAN_AMERICAN = "esp_aa"
    ESP_EUROPEAN_AMERICAN = "esp_ea"
    ESP_ALL = "esp_all"
    EXAC_AFRICAN_INC_AFRICAN_AMERICAN = "exac_afr"
    EXAC_AMERICAN = "exac_amr"
    EXAC_EAST_ASIAN = "exac_eas"
    EXAC_FINNISH = "exac_fin"
    EXAC_NON_FINNISH_EUROPEAN = "exac_nfe"
    EXAC_OTHER = "exac_oth"
    EXAC_SOUTH_ASIAN = "exac_sas"
    GNOMAD_E_AFR = "gnomad_e_afr"
    GNOMAD_E_AMR = "gnomad_e_amr"
    GNOMAD_E_ASJ = "gnomad_e_asj"
    GNOMAD_E_EAS = "gnomad_e_eas"
    GNOMAD_E_FIN = "gnomad_e_fin"
    GNOMAD_E_NFE = "gnomad_e_nfe"
    GNOMAD_E_OTH = "gnomad_e_oth"
    GNOMAD_E_SAS = "gnomad_e_sas"
    GNOMAD_G_AFR = "gnomad_g_afr"
    GNOMAD_G_AMR = "gnomad_g_amr"
    GNOMAD_G_ASJ = "gnomad_g_asj"
    GNOMAD_G_EAS = "gnomad_g_eas"
    GNOMAD_G_FIN = "gnomad_g_fin"
    GNOMAD_G_NFE = "gnomad_g_nfe"
    GNOMAD_G_OTH = "gnomad_g_oth"
    LOCAL = "local"


# Rarity score boundaries
VERY_RARE_SCORE = 1.0
NOT_RARE_SCORE = 0.0
COMMON_FREQUENCY_PCT = 2.0
RARITY_CURVE_COEFFICIENT = 0.13533


@dataclass(frozen=True)
class Frequency:
    """Allele frequency of a variant in one cohort, as a percentage (0-100).

    Attributes:
        source: Reference cohort
        frequency: Percentage frequency
        allele_count: Alternate allele count, when known
        allele_number: Total alleles called, when known
        homozygotes: Homozygous alternate individuals, when known
    """

    source: FrequencySource
    frequency: float
    allele_count: Optional[int] = None
    allele_number: Optional[int] = None
    homozygotes: Optional[int] = None

    @classmethod
    def from_counts(
        cls,
        source: FrequencySource,
        allele_count: int,
        allele_number: int,
        homozygotes: int = 0,
    ) -> "Frequency":
        """Build a frequency from raw counts: 100 * allele_count / allele_number."""
        percentage = 0.0
        if allele_number > 0:
            percentage = 100.0 * allele_count / allele_number
        return cls(
            source=source,
            frequency=percentage,
            allele_count=allele_count,
            allele_number=allele_number,
            homozygotes=homozygotes,
        )

    def is_over_threshold(self, threshold: float) -> bool:
        return self.frequency > threshold


class FrequencyData:
    """Optional dbSNP identifier plus at most one Frequency per FrequencySource."""

    def __init__(
        self,
        rs_id: Optional[str] = None,
        frequencies: Optional[Iterable[Optional[Frequency]]] = None,
    ):
        self.rs_id = rs_id or None
        self._frequencies: dict[FrequencySource, Frequency] = {}
        for frequency in frequencies or ():
            if frequency is not None:
                self.put(frequency)

    @classmethod
    def of(cls, *frequencies: Optional[Frequency], rs_id: Optional[str] = None) -> "FrequencyData":
        return cls(rs_id, frequencies)

    @classmethod
    def empty(cls) -> "FrequencyData":
        return cls()

    def put(self, frequency: Frequency) -> None:
        """Add a frequency, overwriting any existing value from the same source."""
        self._frequencies[frequency.source] = frequency

    def known_frequencies(self) -> list[Frequency]:
        """All frequencies in source enumeration order."""
        return [self._frequencies[s] for s in FrequencySource if s in self._frequencies]

    def frequency_for(self, source: FrequencySource) -> Optional[Frequency]:
        return self._frequencies.get(source)

    def has_dbsnp_rsid(self) -> bool:
        return self.rs_id is not None

    def has_known_frequency(self) -> bool:
        return bool(self._frequencies)

    def is_represented_in_database(self) -> bool:
        return self.has_dbsnp_rsid() or self.has_known_frequency()

    def has_frequency_over(self, threshold: float) -> bool:
        return any(f.is_over_threshold(threshold) for f in self._frequencies.values())

    def max_frequency(self) -> float:
        """Largest percentage across all sources, 0.0 if none are known."""
        return max((f.frequency for f in self._frequencies.values()), default=0.0)

    def score(self) -> float:
        """Rarity score: 1.0 for unseen variants falling to 0.0 above 2%."""
        max_freq = self.max_frequency()
        if max_freq <= 0:
            return VERY_RARE_SCORE
        if max_freq > COMMON_FREQUENCY_PCT:
            return NOT_RARE_SCORE
        return 1.0 - RARITY_CURVE_COEFFICIENT * math.exp(max_freq)

    def __len__(self) -> int:
        return len(self._frequencies)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FrequencyData):
            return NotImplemented
        return self.rs_id == other.rs_id and self._frequencies == other._frequencies

    def __repr__(self) -> str:
        inner = ", ".join(f"{f.source.value}={f.frequency}" for f in self.known_frequencies())
        return f"FrequencyData(rs_id={self.rs_id!r}, {inner})"
