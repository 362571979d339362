"""Quality gates applied to every upload, cheapest first.

Each gate takes the asset and the rule set, raises ``ValidationFailure``
with its own reason when the asset does not pass, and otherwise returns
the asset (possibly enriched with decoded facts). ``GATES`` fixes the
evaluation order.
"""
from __future__ import annotations

import logging
from typing import Callable, Tuple

from ticket_intake.errors import ValidationFailure
from ticket_intake.models import ImageAsset, IntakeRules
from ticket_intake.utils import imaging

logger = logging.getLogger(__name__)

REASON_FORMAT = "not a .png"
REASON_SIZE = "file too small/large"
REASON_ASPECT = "aspect ratio invalid"
REASON_BLUR = "image too blurry"
REASON_UNREADABLE = "ticket number unreadable"

Gate = Callable[[ImageAsset, IntakeRules], ImageAsset]


def check_format(asset: ImageAsset, rules: IntakeRules) -> ImageAsset:
    logger.info("file format: %s", asset.content_type)
    if asset.content_type != rules.accepted_content_type:
        raise ValidationFailure(REASON_FORMAT)
    return asset


def check_size(asset: ImageAsset, rules: IntakeRules) -> ImageAsset:
    logger.info("file size: %d", asset.size)
    if not rules.min_bytes <= asset.size <= rules.max_bytes:
        raise ValidationFailure(REASON_SIZE)
    return asset


def check_geometry(asset: ImageAsset, rules: IntakeRules) -> ImageAsset:
    width, height = imaging.image_dimensions(asset.data)
    aspect = width / height
    logger.info("aspect ratio: %.4f (%dx%d)", aspect, width, height)
    if abs(aspect - rules.canonical_aspect) > rules.aspect_tolerance:
        raise ValidationFailure(REASON_ASPECT)
    return asset.model_copy(update={"width": width, "height": height})


def check_quality(asset: ImageAsset, rules: IntakeRules) -> ImageAsset:
    metrics = imaging.grayscale_metrics(asset.data)
    logger.info("variance: %.2f (mean %.2f)", metrics.variance, metrics.mean)
    if metrics.variance < rules.min_variance:
        raise ValidationFailure(REASON_BLUR)
    return asset


GATES: Tuple[Gate, ...] = (check_format, check_size, check_geometry, check_quality)


def run_gates(asset: ImageAsset, rules: IntakeRules) -> ImageAsset:
    """Apply every gate in order; the first failure propagates immediately."""

    for gate in GATES:
        asset = gate(asset, rules)
    return asset
