"""Preprocessing pipeline for photographed ID cards.

Upscales small captures, converts to luminance, binarizes against the
local mean, and stretches contrast, with quality metrics tracking.
"""

from dataclasses import dataclass

import cv2
import numpy as np

from src.utils.config import PreprocessingConfig
from src.utils.logger import get_logger

from .binarize import binarize_local_mean, stretch_contrast, to_luminance
from .codec import decode_image, encode_png

logger = get_logger(__name__)


@dataclass
class QualityMetrics:
    """Before/after image quality measurements."""

    sharpness_before: float
    sharpness_after: float
    contrast_before: float
    contrast_after: float


def calculate_sharpness(image: np.ndarray) -> float:
    """Calculate image sharpness using Laplacian variance.

    Args:
        image: Input image (RGB or grayscale).

    Returns:
        Sharpness score (higher means sharper).
    """
    gray = to_luminance(image)
    return float(cv2.Laplacian(gray, cv2.CV_64F).var())


def calculate_contrast(image: np.ndarray) -> float:
    """Calculate image contrast as the standard deviation of pixel intensities.

    Args:
        image: Input image (RGB or grayscale).

    Returns:
        Contrast score (higher means more contrast).
    """
    return float(to_luminance(image).std())


def upscale_to_width(image: np.ndarray, min_width: int = 1200) -> np.ndarray:
    """Upscale an image so its width is at least ``min_width``.

    Images that are already wide enough are returned unchanged; this
    never downscales.

    Args:
        image: Input image.
        min_width: Minimum target width in pixels.

    Returns:
        The original or an upscaled copy with the same aspect ratio.
    """
    h, w = image.shape[:2]
    if w >= min_width or w == 0:
        return image

    scale = min_width / w
    new_size = (min_width, max(1, round(h * scale)))
    logger.debug("Upscaling image from %dx%d to %dx%d", w, h, *new_size)
    return cv2.resize(image, new_size, interpolation=cv2.INTER_CUBIC)


class IDCardPreprocessor:
    """Configurable ID card image preprocessing pipeline.

    Args:
        config: Preprocessing configuration controlling the steps.
    """

    def __init__(self, config: PreprocessingConfig) -> None:
        self.config = config

    def process(self, image: np.ndarray) -> tuple[np.ndarray, QualityMetrics]:
        """Run the preprocessing steps on an image.

        Args:
            image: Input card image (RGB or grayscale).

        Returns:
            Tuple of (processed grayscale image, quality_metrics).
        """
        metrics = QualityMetrics(
            sharpness_before=calculate_sharpness(image),
            contrast_before=calculate_contrast(image),
            sharpness_after=0.0,
            contrast_after=0.0,
        )

        result = upscale_to_width(image, self.config.min_width)
        result = to_luminance(result)

        if self.config.binarize_enabled:
            result = binarize_local_mean(
                result,
                window_size=self.config.window_size,
                ratio=self.config.threshold_ratio,
            )

        result = stretch_contrast(result, self.config.contrast_factor)

        metrics.sharpness_after = calculate_sharpness(result)
        metrics.contrast_after = calculate_contrast(result)

        logger.info(
            "Preprocessing complete: sharpness %.1f->%.1f, contrast %.1f->%.1f",
            metrics.sharpness_before,
            metrics.sharpness_after,
            metrics.contrast_before,
            metrics.contrast_after,
        )
        return result, metrics

    def preprocess_image_data(self, data: str | bytes) -> str:
        """Preprocess an encoded image and return it as base64 PNG.

        Raises:
            ImageDecodeError: If ``data`` cannot be decoded.
        """
        processed, _ = self.process(decode_image(data))
        return encode_png(processed)
