"""Analysis orchestration and input files."""

from variant_ranking.analysis.input import (
    AnalysisInput,
    PriorityScoreRecord,
    VariantRecord,
    load_analysis_input,
)
from variant_ranking.analysis.runner import (
    AnalysisResults,
    AnalysisRunner,
    build_filter_stages,
)

__all__ = [
    "AnalysisInput",
    "PriorityScoreRecord",
    "VariantRecord",
    "load_analysis_input",
    "AnalysisResults",
    "AnalysisRunner",
    "build_filter_stages",
]
