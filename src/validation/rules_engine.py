"""Review rules for extracted ID card results.

Flags results that need human attention: missing or malformed CNIC,
missing holder name, and low OCR confidence. Failures become warnings;
nothing here rejects a result.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from src.extraction.cnic import is_valid_cnic
from src.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ValidationResult:
    """Result of a single field validation check."""

    field_name: str
    is_valid: bool
    message: str
    rule_name: str


@dataclass
class ValidationReport:
    """Aggregated review report for one card."""

    all_valid: bool
    results: list[ValidationResult]
    warnings: list[str] = field(default_factory=list)
    low_confidence: bool = False


class RulesEngine:
    """Configurable review rules engine.

    Applies field-level rules loaded from a YAML file, plus a minimum
    OCR confidence check.

    Args:
        rules_path: Path to the validation rules YAML file.
        min_confidence: OCR confidence (0-100) below which a result is flagged.
    """

    def __init__(
        self,
        rules_path: Path = Path("configs/validation_rules.yaml"),
        min_confidence: float = 70.0,
    ) -> None:
        self.rules = self._load_rules(rules_path)
        self.min_confidence = min_confidence
        self._validators: dict[str, Any] = {
            "required": self._validate_required,
            "cnic_format": self._validate_cnic_format,
            "name_words": self._validate_name_words,
            "regex": self._validate_regex,
        }

    def _load_rules(self, path: Path) -> dict:
        """Load review rules from YAML file.

        Args:
            path: Path to the rules file.

        Returns:
            Dictionary of field rules.
        """
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f)
                if data:
                    logger.info("Loaded validation rules from %s", path)
                    return data
        logger.debug("Using default validation rules")
        return self._default_rules()

    def _default_rules(self) -> dict:
        return {
            "cnic_number": [{"type": "required"}, {"type": "cnic_format"}],
            "full_name": [{"type": "required"}, {"type": "name_words"}],
        }

    def validate(
        self, fields: dict[str, Any], confidence: float | None = None
    ) -> ValidationReport:
        """Review extracted fields and OCR confidence.

        Args:
            fields: Extracted field name-value pairs.
            confidence: OCR confidence (0-100), if known.

        Returns:
            Report listing every check and a warning for each failure.
        """
        results: list[ValidationResult] = []
        warnings: list[str] = []

        for field_name, rules in self.rules.items():
            value = fields.get(field_name)
            for rule in rules:
                rule_type = rule.get("type", "")
                validator = self._validators.get(rule_type)
                if validator is None:
                    logger.warning("Unknown rule type: %s", rule_type)
                    continue
                if value is None and rule_type != "required":
                    continue
                result = validator(field_name, value, rule)
                results.append(result)
                if not result.is_valid:
                    warnings.append(result.message)

        low_confidence = confidence is not None and confidence < self.min_confidence
        if low_confidence:
            warnings.append(
                f"Low OCR confidence ({confidence:.0f}%), "
                "please verify the extracted text"
            )

        if warnings:
            logger.warning("Review flagged %d issue(s)", len(warnings))

        return ValidationReport(
            all_valid=all(r.is_valid for r in results) and not low_confidence,
            results=results,
            warnings=warnings,
            low_confidence=low_confidence,
        )

    def _validate_required(
        self, field_name: str, value: Any, rule: dict
    ) -> ValidationResult:
        present = value is not None and str(value).strip() != ""
        return ValidationResult(
            field_name=field_name,
            is_valid=present,
            message=(
                f"{field_name} present"
                if present
                else f"{field_name} could not be extracted, please enter it manually"
            ),
            rule_name="required",
        )

    def _validate_cnic_format(
        self, field_name: str, value: Any, rule: dict
    ) -> ValidationResult:
        valid = is_valid_cnic(str(value))
        return ValidationResult(
            field_name=field_name,
            is_valid=valid,
            message=(
                "CNIC format valid"
                if valid
                else f"{field_name} '{value}' is not in NNNNN-NNNNNNN-N format"
            ),
            rule_name="cnic_format",
        )

    def _validate_name_words(
        self, field_name: str, value: Any, rule: dict
    ) -> ValidationResult:
        words = str(value).split()
        min_words = rule.get("min", 2)
        max_words = rule.get("max", 5)
        valid = min_words <= len(words) <= max_words
        return ValidationResult(
            field_name=field_name,
            is_valid=valid,
            message=(
                "Name length plausible"
                if valid
                else f"{field_name} should have {min_words}-{max_words} words"
            ),
            rule_name="name_words",
        )

    def _validate_regex(
        self, field_name: str, value: Any, rule: dict
    ) -> ValidationResult:
        pattern = rule.get("pattern", "")
        valid = re.fullmatch(pattern, str(value)) is not None
        return ValidationResult(
            field_name=field_name,
            is_valid=valid,
            message=(
                "Pattern matched" if valid else f"{field_name} does not match {pattern}"
            ),
            rule_name="regex",
        )
