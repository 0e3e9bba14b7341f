"""Configuration management for the ID card OCR service.

Loads and validates YAML configuration with sensible defaults
for preprocessing, OCR, field extraction, and review settings.
"""

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_CHAR_WHITELIST = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-/:.,"
)


class PreprocessingConfig(BaseModel):
    """Configuration for ID card image preprocessing."""

    min_width: int = 1200
    binarize_enabled: bool = True
    window_size: int = 15
    threshold_ratio: float = 0.85
    contrast_factor: float = 1.2


class OCRConfig(BaseModel):
    """Configuration for Tesseract OCR engine."""

    tesseract_cmd: str | None = None
    default_lang: str = "eng"
    psm: int = 6
    fallback_psm: int = 11
    oem: int = 1
    char_whitelist: str = DEFAULT_CHAR_WHITELIST
    min_confidence: float = 70.0


class ExtractionConfig(BaseModel):
    """Configuration for structured field extraction."""

    use_llm: bool = True
    llm_base_url: str = "https://api.openai.com/v1"
    llm_model: str = "gpt-4o-mini"
    api_key_env: str = "OPENAI_API_KEY"
    temperature: float = 0.1
    timeout_s: float = 30.0

    def api_key(self) -> str | None:
        """Read the LLM API key from the configured environment variable."""
        value = os.environ.get(self.api_key_env, "").strip()
        return value or None


class ValidationConfig(BaseModel):
    """Configuration for the review rules engine."""

    rules_path: str = "configs/validation_rules.yaml"


class AppConfig(BaseModel):
    """Top-level application configuration."""

    preprocessing: PreprocessingConfig = Field(default_factory=PreprocessingConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
