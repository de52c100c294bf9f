"""Configuration management for pressline."""

from .loader import Config, load_config, load_sections, save_config, save_sections
from .models import (
    ConfigModel,
    FallbackConfig,
    FetchConfig,
    LLMConfig,
    SchedulerConfig,
    SectionConfig,
    SectionsFile,
    SinkConfig,
    ValidationConfig,
)

__all__ = [
    "Config",
    "ConfigModel",
    "FallbackConfig",
    "FetchConfig",
    "LLMConfig",
    "SchedulerConfig",
    "SectionConfig",
    "SectionsFile",
    "SinkConfig",
    "ValidationConfig",
    "load_config",
    "load_sections",
    "save_config",
    "save_sections",
]
