"""
Configuration management for DocLens using Pydantic.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, ClassVar, Dict, List, cast

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Setup Logging ---
log = logging.getLogger(__name__)

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

DEFAULT_DETECTORS: List[str] = [
    "Privacy & Terms",
    "Policy & Legal",
    "Technical Documentation",
    "Financial Document",
    "Information Security",
    "Board Documents",
    "Forms & Templates",
    "Report",
]

# --- Nested Configuration Models ---


class ScoringConfig(BaseModel):
    """Configuration for the classification engine."""

    confidence_threshold: float = Field(
        default=85.0, ge=0, le=100, description="Confidence at or above which a result is deterministic."
    )
    confidence_floor: float = Field(
        default=30.0, ge=0, le=100, description="Minimum confidence for a classification to succeed."
    )
    evidence_limit: int = Field(default=10, gt=0, description="Number of evidence items reported per result.")
    enabled_detectors: List[str] = Field(
        default_factory=lambda: list(DEFAULT_DETECTORS),
        description="Document types whose detectors are registered, in registration order.",
    )
    custom_thresholds: Dict[str, float] = Field(
        default_factory=dict, description="Per document type overrides of the deterministic threshold."
    )
    isolate_detector_failures: bool = Field(
        default=True, description="Log and skip a failing detector instead of aborting classification."
    )

    @field_validator("custom_thresholds")
    @classmethod
    def check_custom_thresholds(cls, v: Dict[str, float]) -> Dict[str, float]:
        for document_type, threshold in v.items():
            if not 0 <= threshold <= 100:
                raise ValueError(f"Threshold for '{document_type}' must be between 0 and 100, got {threshold}")
        return v

    @model_validator(mode="after")
    def check_floor_below_threshold(self) -> "ScoringConfig":
        if self.confidence_floor > self.confidence_threshold:
            raise ValueError("confidence_floor must not exceed confidence_threshold")
        return self

    def threshold_for(self, document_type: str) -> float:
        return self.custom_thresholds.get(document_type, self.confidence_threshold)


class SegmentationConfig(BaseModel):
    """Configuration for HTML section discovery and merging."""

    min_section_tokens: int = Field(default=200, ge=0, description="Flush a merged run once it reaches this size.")
    max_section_tokens: int = Field(default=1200, gt=0, description="Never grow a merged run beyond this size.")

    @model_validator(mode="after")
    def check_bounds(self) -> "SegmentationConfig":
        if self.min_section_tokens > self.max_section_tokens:
            raise ValueError("min_section_tokens must not exceed max_section_tokens")
        return self


class ChunkingConfig(BaseModel):
    """Configuration for token-aware chunking."""

    tokenizer_name: str = Field(
        default="gpt2",
        description="HuggingFace tokenizer to use for token counting.",
    )
    simple_threshold_tokens: int = Field(
        default=600, gt=0, description="Sections at or below this size use rule-based chunking."
    )
    target_tokens: int = Field(default=500, gt=0, description="Target size of each rule-based chunk in tokens.")
    overlap_tokens: int = Field(default=80, ge=0, description="Largest trailing paragraph carried into the next chunk.")
    use_semantic_for_large_sections: bool = Field(
        default=True, description="Delegate sections above the threshold to the semantic chunking service."
    )
    fallback_to_rules: bool = Field(
        default=True, description="Re-chunk with rules when the semantic chunking service fails."
    )

    @model_validator(mode="after")
    def check_overlap(self) -> "ChunkingConfig":
        if self.overlap_tokens >= self.target_tokens:
            raise ValueError("overlap_tokens must be smaller than target_tokens")
        return self


class MonitoringConfig(BaseModel):
    """Configuration for logging."""

    log_level: str = Field(default="INFO", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: str | None = Field(
        default=None,
        description="Path to log file. If None, logs to console.",
    )
    json_logs: bool = Field(default=False, description="Render console logs as JSON.")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        level = str(v).upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("log_file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: str | Path | None) -> str | None:
        if v is None:
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)


# --- Main Configuration Class ---


class Config(BaseSettings):
    project_name: str = "DocLens"
    version: str = "0.1.0"
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    segmentation: SegmentationConfig = Field(default_factory=SegmentationConfig)
    chunking: ChunkingConfig = Field(default_factory=ChunkingConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(env_prefix="DOCLENS_", env_nested_delimiter="__", case_sensitive=False)

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        log.debug("Loading configuration from YAML file: %s", path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found or is not a file: {path}")
        with open(path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
            return cls.model_validate({})
        return cls.model_validate(yaml_data)


def find_config_file() -> Path | None:
    current_dir = Path.cwd()
    for path in (current_dir / "doclens.yaml", current_dir / "doclens.yml"):
        if path.exists():
            return path
    return None


# --- Lazy Configuration Loader ---


class LazyConfig:
    """
    A proxy for the Config object that delays its loading and validation
    until an attribute is first accessed.
    """

    _config: ClassVar[Config | None] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __getattr__(self, name: str) -> Any:
        if self.__class__._config is None:
            with self.__class__._lock:
                if self.__class__._config is None:
                    self.__class__._config = self._load_config_with_fallback()
        return getattr(self.__class__._config, name)

    @classmethod
    def reset(cls) -> None:
        """Forget the loaded configuration so the next access reloads it."""
        with cls._lock:
            cls._config = None

    def _load_config_with_fallback(self) -> Config:
        """Load configuration from file or fall back to defaults."""
        config_path = find_config_file()
        if config_path:
            try:
                log.info("Lazy loading configuration from: %s", config_path)
                return Config.from_yaml(config_path)
            except (ValidationError, yaml.YAMLError, OSError) as e:
                log.error(
                    "Failed to load or validate configuration from '%s': %s. Falling back to default settings.",
                    config_path,
                    e,
                    exc_info=log.getEffectiveLevel() <= logging.DEBUG,
                )
        else:
            log.info("No config file found. Using default settings for lazy load.")

        return Config()


# --- Global Settings Instance ---
settings: "Config" = cast("Config", LazyConfig())
