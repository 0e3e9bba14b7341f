"""Field extraction with a language model and a regex fallback.

The language model handles noisy OCR text better; the local rule
extractor takes over whenever the remote call fails.
"""

from src.utils.config import ExtractionConfig
from src.utils.logger import get_logger

from .llm_extractor import LLMExtractor
from .rule_extractor import CardFields, RuleExtractor

logger = get_logger(__name__)


class FieldExtractor:
    """Combines LLM extraction with rule-based fallback.

    Args:
        config: Extraction configuration.
        llm_extractor: Optional LLM extractor; built from ``config`` if omitted.
    """

    def __init__(
        self, config: ExtractionConfig, llm_extractor: LLMExtractor | None = None
    ) -> None:
        self.config = config
        self.rule_extractor = RuleExtractor()
        self.llm_extractor = llm_extractor or LLMExtractor(config)

    def extract(self, ocr_text: str, use_llm: bool = True) -> CardFields:
        """Extract card fields from OCR text.

        Args:
            ocr_text: Raw OCR text.
            use_llm: Whether to attempt the LLM path first.

        Returns:
            Fields from the LLM, or from the rule extractor if the LLM is
            disabled or its call raised.
        """
        if use_llm and self.config.use_llm:
            try:
                return self.llm_extractor.extract(ocr_text)
            except Exception as exc:
                logger.warning(
                    "LLM extraction failed, falling back to local parsing: %s", exc
                )

        return self.rule_extractor.extract(ocr_text)
