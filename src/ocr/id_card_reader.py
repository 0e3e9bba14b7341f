"""End-to-end ID card reading pipeline.

decode -> preprocess -> recognize (one conditional retry) ->
extract (LLM, regex fallback) -> review.
"""

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from src.extraction.hybrid import FieldExtractor
from src.preprocessing.codec import decode_image
from src.preprocessing.pipeline import IDCardPreprocessor
from src.utils.config import AppConfig
from src.utils.logger import get_logger
from src.validation.rules_engine import RulesEngine, ValidationReport

from .tesseract_engine import TesseractEngine

logger = get_logger(__name__)


@dataclass
class OCRResult:
    """Structured result of reading one ID card.

    ``raw_text`` is always the text of the recognition pass that was kept;
    every other field is best-effort and needs human verification.
    """

    raw_text: str
    full_name: str | None = None
    father_name: str | None = None
    cnic_number: str | None = None
    dob: str | None = None
    confidence: float | None = None
    extraction_method: str = "rule"
    review: ValidationReport | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class IDCardReader:
    """Reads structured fields from photographed ID cards.

    Args:
        config: Application configuration object.
        field_extractor: Optional extractor override.
    """

    def __init__(
        self, config: AppConfig, field_extractor: FieldExtractor | None = None
    ) -> None:
        self.config = config
        self.preprocessor = IDCardPreprocessor(config.preprocessing)
        self.ocr_engine = TesseractEngine(
            tesseract_cmd=config.ocr.tesseract_cmd,
            default_lang=config.ocr.default_lang,
            psm=config.ocr.psm,
            fallback_psm=config.ocr.fallback_psm,
            oem=config.ocr.oem,
            char_whitelist=config.ocr.char_whitelist,
            min_confidence=config.ocr.min_confidence,
        )
        self.field_extractor = field_extractor or FieldExtractor(config.extraction)
        self.rules_engine = RulesEngine(
            Path(config.validation.rules_path),
            min_confidence=config.ocr.min_confidence,
        )

    def read(self, image_data: str | bytes, use_llm: bool = True) -> OCRResult:
        """Read an ID card image.

        Args:
            image_data: Data URL, base64 text, or raw image bytes.
            use_llm: Whether to try the language-model extractor first.

        Returns:
            Extracted fields with raw text, confidence, and review warnings.

        Raises:
            ImageDecodeError: If the image cannot be decoded.
        """
        image = decode_image(image_data)
        processed, _ = self.preprocessor.process(image)
        recognition = self.ocr_engine.recognize(processed)

        fields = self.field_extractor.extract(recognition.text, use_llm=use_llm)
        result = OCRResult(
            raw_text=recognition.text,
            full_name=fields.full_name,
            father_name=fields.father_name,
            cnic_number=fields.cnic_number,
            dob=fields.dob,
            confidence=round(recognition.confidence, 1),
            extraction_method=fields.method,
        )
        result.review = self.rules_engine.validate(
            {
                "full_name": result.full_name,
                "father_name": result.father_name,
                "cnic_number": result.cnic_number,
                "dob": result.dob,
            },
            confidence=result.confidence,
        )

        logger.info(
            "Read ID card via %s extraction (confidence %.1f, %d warning(s))",
            result.extraction_method,
            recognition.confidence,
            len(result.review.warnings),
        )
        return result

    def read_file(self, path: Path, use_llm: bool = True) -> OCRResult:
        """Read an ID card image from disk."""
        return self.read(Path(path).read_bytes(), use_llm=use_llm)
