"""Pillow/numpy helpers: decoding, pixel statistics, ROI binarization, resizing."""
from __future__ import annotations

import io
import logging
from typing import Tuple

import numpy as np
from PIL import Image, UnidentifiedImageError

from ticket_intake.errors import ImageDecodeError
from ticket_intake.models import IntakeRules, QualityMetrics, RegionFractions, RegionOfInterest
from ticket_intake.models.rules import round_half_up

logger = logging.getLogger(__name__)

_RESIZABLE_MODES = {"L", "LA", "RGB", "RGBA"}
_WIDE_GRAY_MODES = {"I", "I;16", "I;16B", "I;16L", "I;16N"}


def open_image(data: bytes) -> Image.Image:
    """Decode *data* fully and return the Pillow image.

    Raises ``ImageDecodeError`` for anything Pillow cannot read; a broken
    image is a processing fault, never a rejection.
    """

    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise ImageDecodeError(f"cannot decode image: {exc}") from exc
    return img


def _grayscale(img: Image.Image) -> Image.Image:
    """8-bit luminance; 16-bit samples are scaled into 0..255, not clipped."""

    if img.mode in _WIDE_GRAY_MODES:
        pixels = np.asarray(img, dtype=np.float64) / 257
        return Image.fromarray(np.clip(np.rint(pixels), 0, 255).astype(np.uint8))
    return img.convert("L")


def image_dimensions(data: bytes) -> Tuple[int, int]:
    with open_image(data) as img:
        return img.size


def grayscale_metrics(data: bytes) -> QualityMetrics:
    """Population mean and variance of 8-bit grayscale intensity.

    Variance is the plain average of squared deviations from the mean
    (no Bessel correction).
    """

    with open_image(data) as img:
        pixels = np.asarray(_grayscale(img), dtype=np.float64)
    if pixels.size == 0:
        raise ImageDecodeError("image has no pixels")
    mean = float(pixels.mean())
    variance = float(np.mean((pixels - mean) ** 2))
    return QualityMetrics(mean=mean, variance=variance)


def region_of_interest(width: int, height: int, fractions: RegionFractions) -> RegionOfInterest:
    left = min(round_half_up(width * fractions.left), width - 1)
    top = min(round_half_up(height * fractions.top), height - 1)
    roi_width = max(1, min(round_half_up(width * fractions.width), width - left))
    roi_height = max(1, min(round_half_up(height * fractions.height), height - top))
    return RegionOfInterest(left=left, top=top, width=roi_width, height=roi_height)


def binarized_region(data: bytes, roi: RegionOfInterest, threshold: int) -> Image.Image:
    """Crop *roi*, convert to grayscale and threshold to pure black/white."""

    with open_image(data) as img:
        region = _grayscale(img.crop(roi.box))
    return region.point(lambda p: 255 if p >= threshold else 0)


def normalize(data: bytes, rules: IntakeRules) -> bytes:
    """Resize the original upload to the canonical size and re-encode as PNG."""

    size = (rules.target_width, rules.target_height)
    with open_image(data) as img:
        if img.mode in _WIDE_GRAY_MODES:
            img = _grayscale(img)
        elif img.mode not in _RESIZABLE_MODES:
            img = img.convert("RGBA")
        resized = img.resize(size, Image.Resampling.LANCZOS)
    buffer = io.BytesIO()
    resized.save(buffer, format="PNG", optimize=True)
    png_bytes = buffer.getvalue()
    logger.info("Validated image size (KB): %.2f", len(png_bytes) / 1024)
    logger.info("Validated image size (MB): %.2f", len(png_bytes) / 1024 / 1024)
    return png_bytes
