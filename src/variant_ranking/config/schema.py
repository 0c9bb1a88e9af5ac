"""Pydantic models for analysis configuration."""

import hashlib
import json
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from variant_ranking.model.gene import PriorityType
from variant_ranking.model.modes import ModeOfInheritance, RunMode, ScoringMode
from variant_ranking.model.variant import GENE_FILTER_TYPES, FilterType, VariantEffect


class FilterSettings(BaseModel):
    """Filter pipeline: stage order and per-stage parameters."""

    stages: list[FilterType] = Field(
        default=[
            FilterType.TARGET,
            FilterType.QUALITY,
            FilterType.FREQUENCY,
            FilterType.PATHOGENICITY,
        ],
        description="Filter stages in the order they run",
    )
    min_quality: float = Field(
        default=20.0,
        ge=0.0,
        description="Minimum call quality (Phred) for the quality stage",
    )
    max_frequency: float = Field(
        default=2.0,
        ge=0.0,
        le=100.0,
        description="Maximum population frequency in percent",
    )
    strict_frequency: bool = Field(
        default=False,
        description="Fail any variant present in a reference database",
    )
    include_pathogenic: bool = Field(
        default=False,
        description="Pass every variant at the pathogenicity stage (scores still recorded)",
    )
    min_pathogenicity_score: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Score a variant must exceed at the pathogenicity stage",
    )
    off_target_effects: list[VariantEffect] = Field(
        default=[
            VariantEffect.INTERGENIC,
            VariantEffect.UPSTREAM,
            VariantEffect.DOWNSTREAM,
            VariantEffect.SYNONYMOUS,
            VariantEffect.INTRONIC,
            VariantEffect.UTR5,
            VariantEffect.UTR3,
            VariantEffect.NCRNA,
            VariantEffect.UNKNOWN,
        ],
        description="Effect classes removed by the target stage",
    )
    intervals: list[str] = Field(
        default_factory=list,
        description="Regions for the interval stage, as chrom:start-end",
    )
    priority_score_method: Optional[PriorityType] = Field(
        default=None,
        description="Prioritisation method the priority score gene filter reads",
    )
    min_priority_score: Optional[float] = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Genes scoring below this for priority_score_method are filtered out",
    )

    @field_validator("stages")
    @classmethod
    def no_duplicate_stages(cls, v: list[FilterType]) -> list[FilterType]:
        """Each stage may appear once; gene filters are configured by their own fields."""
        if len(set(v)) != len(v):
            raise ValueError(f"Duplicate filter stages: {[s.value for s in v]}")
        gene_level = [s.value for s in v if s in GENE_FILTER_TYPES]
        if gene_level:
            raise ValueError(f"Gene-level filters cannot be listed as variant stages: {gene_level}")
        return v

    @model_validator(mode="after")
    def stage_settings_consistent(self) -> "FilterSettings":
        if FilterType.INTERVAL in self.stages and not self.intervals:
            raise ValueError("The interval stage requires at least one interval")
        if (self.priority_score_method is None) != (self.min_priority_score is None):
            raise ValueError("priority_score_method and min_priority_score must be set together")
        return self


class ScoringSettings(BaseModel):
    """Gene scoring options."""

    mode_of_inheritance: ModeOfInheritance = Field(
        default=ModeOfInheritance.ANY,
        description="Mode whose aggregation rule scores genes (any = per-gene choice)",
    )
    scoring_mode: ScoringMode = Field(
        default=ScoringMode.RAW_SCORE,
        description="Use priority scores as-is or rescale them by rank",
    )


class ExecutionSettings(BaseModel):
    """Run mode and resource limits."""

    run_mode: RunMode = Field(
        default=RunMode.FULL,
        description="Evaluate every stage (full) or stop at the first failure (pass_only)",
    )
    max_workers: int = Field(
        default=1,
        ge=1,
        description="Worker threads for per-variant and per-gene work (1 = sequential)",
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Maximum attempts for blocking evidence lookups",
    )


class AnalysisConfig(BaseModel):
    """Main analysis configuration."""

    data_dir: Path = Field(
        ...,
        description="Directory for results and provenance files",
    )
    duckdb_path: Path = Field(
        ...,
        description="Path to DuckDB database file",
    )
    filters: FilterSettings = Field(default_factory=FilterSettings)
    scoring: ScoringSettings = Field(default_factory=ScoringSettings)
    execution: ExecutionSettings = Field(default_factory=ExecutionSettings)

    @field_validator("data_dir")
    @classmethod
    def create_directory(cls, v: Path) -> Path:
        """Create directory if it doesn't exist."""
        v.mkdir(parents=True, exist_ok=True)
        return v

    def config_hash(self) -> str:
        """
        Compute SHA-256 hash of the configuration.

        Two runs with the same hash used the same filter, scoring and
        execution settings.
        """
        config_dict = self.model_dump(mode="json")
        config_json = json.dumps(
            config_dict,
            sort_keys=True,
            default=str,
        )
        return hashlib.sha256(config_json.encode()).hexdigest()
