"""Tesseract OCR engine wrapper tuned for ID cards.

Runs LSTM recognition restricted to a character whitelist, and retries
with sparse-text segmentation when the first pass is not confident.
"""

from dataclasses import dataclass

import numpy as np
import pytesseract
from PIL import Image

from src.utils.config import DEFAULT_CHAR_WHITELIST
from src.utils.logger import get_logger

logger = get_logger(__name__)

PSM_SINGLE_BLOCK = 6
PSM_SPARSE_TEXT = 11
OEM_LSTM_ONLY = 1


@dataclass
class OCRWord:
    """A recognized word and its Tesseract confidence (0-100)."""

    text: str
    confidence: float


@dataclass
class RecognitionResult:
    """Text and confidence from a single recognition pass."""

    text: str
    words: list[OCRWord]
    confidence: float
    psm: int


class TesseractEngine:
    """Wrapper around Tesseract OCR for ID card text recognition.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        default_lang: OCR language code.
        psm: Page segmentation mode of the first pass.
        fallback_psm: Page segmentation mode of the low-confidence retry.
        oem: OCR engine mode.
        char_whitelist: Characters Tesseract is allowed to emit.
        min_confidence: Confidence (0-100) below which the retry runs.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        default_lang: str = "eng",
        psm: int = PSM_SINGLE_BLOCK,
        fallback_psm: int = PSM_SPARSE_TEXT,
        oem: int = OEM_LSTM_ONLY,
        char_whitelist: str = DEFAULT_CHAR_WHITELIST,
        min_confidence: float = 70.0,
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.default_lang = default_lang
        self.psm = psm
        self.fallback_psm = fallback_psm
        self.oem = oem
        self.char_whitelist = char_whitelist
        self.min_confidence = min_confidence

    def build_config(self, psm: int) -> str:
        """Build the Tesseract command-line configuration string."""
        config = f"--oem {self.oem} --psm {psm}"
        if self.char_whitelist:
            config += f" -c tessedit_char_whitelist={self.char_whitelist}"
        return config

    def extract_text(self, image: np.ndarray, psm: int | None = None) -> RecognitionResult:
        """Run one recognition pass.

        Args:
            image: Input image as a numpy array.
            psm: Page segmentation mode. Defaults to the engine's first-pass PSM.

        Returns:
            RecognitionResult with the text and mean word confidence (0-100).
        """
        psm = self.psm if psm is None else psm
        config = self.build_config(psm)

        pil_image = Image.fromarray(image)
        text = pytesseract.image_to_string(
            pil_image, lang=self.default_lang, config=config
        )
        data = pytesseract.image_to_data(
            pil_image,
            lang=self.default_lang,
            config=config,
            output_type=pytesseract.Output.DICT,
        )

        words: list[OCRWord] = []
        for i in range(len(data["text"])):
            conf = float(data["conf"][i])
            word_text = str(data["text"][i]).strip()

            if conf > 0 and word_text:
                words.append(OCRWord(text=word_text, confidence=conf))

        avg_conf = sum(w.confidence for w in words) / len(words) if words else 0.0

        logger.info(
            "OCR pass (psm=%d) extracted %d words with confidence %.1f",
            psm,
            len(words),
            avg_conf,
        )
        return RecognitionResult(
            text=text.strip(), words=words, confidence=avg_conf, psm=psm
        )

    def recognize(self, image: np.ndarray) -> RecognitionResult:
        """Recognize text, retrying once with sparse segmentation if needed.

        The retry runs only when the first pass is below ``min_confidence``;
        whichever pass is more confident is returned.

        Args:
            image: Preprocessed card image.

        Returns:
            The kept recognition result.
        """
        first = self.extract_text(image, psm=self.psm)
        if first.confidence >= self.min_confidence:
            return first

        logger.info(
            "Confidence %.1f below %.1f, retrying with psm=%d",
            first.confidence,
            self.min_confidence,
            self.fallback_psm,
        )
        second = self.extract_text(image, psm=self.fallback_psm)
        if second.confidence > first.confidence:
            return second
        return first
