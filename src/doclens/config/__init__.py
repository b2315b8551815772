"""Configuration models and loaders."""

from __future__ import annotations

from .config import (
    ChunkingConfig,
    Config,
    LazyConfig,
    MonitoringConfig,
    ScoringConfig,
    SegmentationConfig,
    find_config_file,
    settings,
)

__all__ = [
    "ChunkingConfig",
    "Config",
    "LazyConfig",
    "MonitoringConfig",
    "ScoringConfig",
    "SegmentationConfig",
    "find_config_file",
    "settings",
]
