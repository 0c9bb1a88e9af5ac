"""Persistence layer for evidence tables, results and provenance tracking."""

from variant_ranking.persistence.duckdb_store import AnalysisStore
from variant_ranking.persistence.provenance import ProvenanceTracker

__all__ = ["AnalysisStore", "ProvenanceTracker"]
