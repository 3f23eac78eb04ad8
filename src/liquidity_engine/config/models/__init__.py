# Configuration models
from .analyzer import AnalyzerConfig
from .app import EngineConfig, MonitorConfig
from .base import BaseConfig

__all__ = [
    "BaseConfig",
    "AnalyzerConfig",
    "MonitorConfig",
    "EngineConfig",
]
