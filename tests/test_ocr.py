"""Tests for the Tesseract engine adapter and its low-confidence retry."""

from unittest.mock import MagicMock, patch

import numpy as np

from src.ocr.tesseract_engine import (
    PSM_SINGLE_BLOCK,
    PSM_SPARSE_TEXT,
    OCRWord,
    RecognitionResult,
    TesseractEngine,
)


def _mock_tesseract_data(
    words: list[str] | None = None, confs: list[float] | None = None
) -> dict:
    """Create mock pytesseract output data, with a leading empty block row."""
    words = words if words is not None else ["HAIDER", "ABBAS"]
    confs = confs if confs is not None else [95, 85]
    return {
        "text": [""] + words,
        "conf": [-1] + confs,
    }


def _image() -> np.ndarray:
    return np.zeros((100, 200), dtype=np.uint8)


class TestOCRWord:
    """Tests for the OCRWord data class."""

    def test_creation(self) -> None:
        word = OCRWord(text="CNIC", confidence=88.0)
        assert word.text == "CNIC"
        assert word.confidence == 88.0


class TestTesseractEngine:
    """Tests for the TesseractEngine class (mocked)."""

    def test_build_config(self) -> None:
        engine = TesseractEngine(char_whitelist="ABC123-/")
        assert engine.build_config(6) == (
            "--oem 1 --psm 6 -c tessedit_char_whitelist=ABC123-/"
        )

    def test_build_config_without_whitelist(self) -> None:
        engine = TesseractEngine(char_whitelist="")
        assert engine.build_config(11) == "--oem 1 --psm 11"

    @patch("src.ocr.tesseract_engine.pytesseract")
    def test_extract_text(self, mock_pytesseract: MagicMock) -> None:
        mock_pytesseract.image_to_string.return_value = "HAIDER ABBAS\n\x0c"
        mock_pytesseract.image_to_data.return_value = _mock_tesseract_data()
        mock_pytesseract.Output.DICT = "dict"

        engine = TesseractEngine()
        result = engine.extract_text(_image())

        assert isinstance(result, RecognitionResult)
        assert result.text == "HAIDER ABBAS"
        assert [w.text for w in result.words] == ["HAIDER", "ABBAS"]
        assert result.confidence == 90.0
        assert result.psm == PSM_SINGLE_BLOCK

        _, kwargs = mock_pytesseract.image_to_string.call_args
        assert "--psm 6" in kwargs["config"]
        assert "--oem 1" in kwargs["config"]
        assert "tessedit_char_whitelist=" in kwargs["config"]
        assert kwargs["lang"] == "eng"

    @patch("src.ocr.tesseract_engine.pytesseract")
    def test_extract_text_string_confidences(self, mock_pytesseract: MagicMock) -> None:
        data = _mock_tesseract_data(["34104-7441992-1"], ["91.5"])
        data["conf"][0] = "-1"
        mock_pytesseract.image_to_string.return_value = "34104-7441992-1"
        mock_pytesseract.image_to_data.return_value = data
        mock_pytesseract.Output.DICT = "dict"

        result = TesseractEngine().extract_text(_image())
        assert result.confidence == 91.5

    @patch("src.ocr.tesseract_engine.pytesseract")
    def test_extract_text_empty_image(self, mock_pytesseract: MagicMock) -> None:
        mock_pytesseract.image_to_string.return_value = ""
        mock_pytesseract.image_to_data.return_value = _mock_tesseract_data([], [])
        mock_pytesseract.Output.DICT = "dict"

        result = TesseractEngine().extract_text(_image())
        assert result.text == ""
        assert result.words == []
        assert result.confidence == 0.0

    def test_custom_tesseract_cmd(self) -> None:
        with patch("src.ocr.tesseract_engine.pytesseract") as mock_pt:
            TesseractEngine(tesseract_cmd="/usr/bin/tesseract")
            assert mock_pt.pytesseract.tesseract_cmd == "/usr/bin/tesseract"


class TestRecognizeRetry:
    """Tests for the single sparse-text retry on low confidence."""

    @patch("src.ocr.tesseract_engine.pytesseract")
    def test_confident_first_pass_no_retry(self, mock_pytesseract: MagicMock) -> None:
        mock_pytesseract.image_to_string.return_value = "first"
        mock_pytesseract.image_to_data.return_value = _mock_tesseract_data(
            ["first"], [85]
        )
        mock_pytesseract.Output.DICT = "dict"

        result = TesseractEngine().recognize(_image())

        assert result.text == "first"
        assert mock_pytesseract.image_to_string.call_count == 1

    @patch("src.ocr.tesseract_engine.pytesseract")
    def test_threshold_is_inclusive(self, mock_pytesseract: MagicMock) -> None:
        mock_pytesseract.image_to_string.return_value = "edge"
        mock_pytesseract.image_to_data.return_value = _mock_tesseract_data(
            ["edge"], [70]
        )
        mock_pytesseract.Output.DICT = "dict"

        TesseractEngine(min_confidence=70.0).recognize(_image())
        assert mock_pytesseract.image_to_string.call_count == 1

    @patch("src.ocr.tesseract_engine.pytesseract")
    def test_retry_keeps_better_second_pass(
        self, mock_pytesseract: MagicMock
    ) -> None:
        mock_pytesseract.image_to_string.side_effect = ["noisy", "clean"]
        mock_pytesseract.image_to_data.side_effect = [
            _mock_tesseract_data(["noisy"], [40]),
            _mock_tesseract_data(["clean"], [82]),
        ]
        mock_pytesseract.Output.DICT = "dict"

        result = TesseractEngine().recognize(_image())

        assert result.text == "clean"
        assert result.psm == PSM_SPARSE_TEXT
        assert result.confidence == 82.0
        _, kwargs = mock_pytesseract.image_to_string.call_args
        assert "--psm 11" in kwargs["config"]

    @patch("src.ocr.tesseract_engine.pytesseract")
    def test_retry_keeps_first_pass_when_better(
        self, mock_pytesseract: MagicMock
    ) -> None:
        mock_pytesseract.image_to_string.side_effect = ["first", "second"]
        mock_pytesseract.image_to_data.side_effect = [
            _mock_tesseract_data(["first"], [55]),
            _mock_tesseract_data(["second"], [30]),
        ]
        mock_pytesseract.Output.DICT = "dict"

        result = TesseractEngine().recognize(_image())

        assert result.text == "first"
        assert result.psm == PSM_SINGLE_BLOCK

    @patch("src.ocr.tesseract_engine.pytesseract")
    def test_retry_tie_keeps_first_pass(self, mock_pytesseract: MagicMock) -> None:
        mock_pytesseract.image_to_string.side_effect = ["first", "second"]
        mock_pytesseract.image_to_data.side_effect = [
            _mock_tesseract_data(["first"], [50]),
            _mock_tesseract_data(["second"], [50]),
        ]
        mock_pytesseract.Output.DICT = "dict"

        assert TesseractEngine().recognize(_image()).text == "first"
