from .loader import load_config, load_config_with_overrides
from .schema import AnalysisConfig, ExecutionSettings, FilterSettings, ScoringSettings

__all__ = [
    "load_config",
    "load_config_with_overrides",
    "AnalysisConfig",
    "ExecutionSettings",
    "FilterSettings",
    "ScoringSettings",
]
