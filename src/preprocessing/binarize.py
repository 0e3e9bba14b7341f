"""Grayscale conversion, local-mean binarization, and contrast stretch.

Photographed ID cards are unevenly lit, so each pixel is thresholded
against the mean of its own neighborhood rather than a global value.
"""

import cv2
import numpy as np

from src.utils.logger import get_logger

logger = get_logger(__name__)

_LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float32)


def to_luminance(image: np.ndarray) -> np.ndarray:
    """Convert an RGB(A) image to grayscale luminance.

    Args:
        image: Input image in RGB or RGBA order, or already grayscale.

    Returns:
        Grayscale uint8 image computed as ``0.299R + 0.587G + 0.114B``.
    """
    if image.ndim == 2:
        return image
    rgb = image[..., :3].astype(np.float32)
    gray = rgb @ _LUMA_WEIGHTS
    return np.clip(np.rint(gray), 0, 255).astype(np.uint8)


def binarize_local_mean(
    gray: np.ndarray, window_size: int = 15, ratio: float = 0.85
) -> np.ndarray:
    """Binarize against the local neighborhood mean.

    A pixel becomes black when its value is below ``ratio`` times the mean
    of the ``window_size`` x ``window_size`` window centred on it.

    Args:
        gray: Grayscale input image.
        window_size: Side length of the averaging window (odd).
        ratio: Fraction of the local mean used as the threshold.

    Returns:
        Binary image with pixel values 0 or 255.
    """
    values = gray.astype(np.float32)
    local_mean = cv2.blur(
        values, (window_size, window_size), borderType=cv2.BORDER_REPLICATE
    )
    result = np.where(values < local_mean * ratio, 0, 255).astype(np.uint8)
    logger.debug(
        "Applied local-mean binarization (window=%d, ratio=%.2f)", window_size, ratio
    )
    return result


def stretch_contrast(image: np.ndarray, factor: float = 1.2) -> np.ndarray:
    """Stretch contrast around the midpoint (128).

    Args:
        image: Grayscale or binary image.
        factor: Multiplier applied to the distance from the midpoint.

    Returns:
        Contrast-adjusted uint8 image, clipped to 0-255.
    """
    stretched = (image.astype(np.float32) - 128.0) * factor + 128.0
    return np.clip(stretched, 0, 255).astype(np.uint8)
