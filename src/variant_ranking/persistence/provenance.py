"""Run provenance: which settings and steps produced a ranking."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)

SIDECAR_SUFFIX = ".provenance.json"


def sidecar_path_for(output_path: Path) -> Path:
    """ranked_genes.tsv -> ranked_genes.provenance.json"""
    return Path(output_path).with_suffix(SIDECAR_SUFFIX)


class ProvenanceTracker:
    """
    Collects provenance for one analysis run.

    The record holds the package version, the config hash and the filter,
    scoring and execution settings, the processing steps in order and the
    filter report. It is written as a JSON sidecar next to the ranking and
    appended to the store's provenance table.
    """

    def __init__(self, version: str, config: "AnalysisConfig"):
        self.version = version
        self.config_hash = config.config_hash()
        self.settings = {
            section: getattr(config, section).model_dump(mode="json")
            for section in ("filters", "scoring", "execution")
        }
        self.steps: list[dict] = []
        self.filter_report: Optional[dict] = None
        self.created_at = datetime.now(timezone.utc)

    def record_step(self, step_name: str, details: Optional[dict] = None) -> None:
        step = {
            "step_name": step_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if details:
            step["details"] = details
        self.steps.append(step)

    def record_filter_report(self, report: "FilterReport") -> None:
        self.filter_report = report.to_dict()

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "config_hash": self.config_hash,
            "settings": self.settings,
            "created_at": self.created_at.isoformat(),
            "processing_steps": self.steps,
            "filter_report": self.filter_report,
        }

    def save_sidecar(self, output_path: Path) -> Path:
        """
        Write the record beside an output file.

        Args:
            output_path: The ranking file the record describes

        Returns:
            Path of the sidecar (output suffix replaced by .provenance.json)
        """
        path = sidecar_path_for(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2, default=str))
        logger.info("provenance_sidecar_written", path=str(path), steps=len(self.steps))
        return path

    def save_to_store(self, store: "AnalysisStore") -> None:
        store.append_provenance(self.to_dict())

    @staticmethod
    def load_sidecar(sidecar_path: Path) -> dict:
        return json.loads(Path(sidecar_path).read_text())

    @classmethod
    def from_config(cls, config: "AnalysisConfig", version: Optional[str] = None) -> "ProvenanceTracker":
        """Tracker for a config; version defaults to the installed package version."""
        if version is None:
            from variant_ranking import __version__
            version = __version__
        return cls(version, config)
