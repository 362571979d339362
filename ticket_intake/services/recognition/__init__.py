from __future__ import annotations

import logging
from typing import Optional

from ticket_intake.models import ImageAsset, IntakeRules
from ticket_intake.utils import imaging
from ticket_intake.utils.identifier import extract_identifier
from ticket_intake.utils.lazy import LazyResource

from .base import TextRecognizer
from .registry import build_recognizer

logger = logging.getLogger(__name__)

__all__ = [
    "RecognitionOrchestrator",
    "TextRecognizer",
    "build_recognizer",
]


class RecognitionOrchestrator:
    """Reads the ticket number printed in the configured region of an image.

    Owns the engine's one-time initialization: the first ``read_identifier``
    call in the process initializes the engine, concurrent first callers
    wait for it, and later calls reuse it.
    """

    def __init__(self, recognizer: TextRecognizer, rules: IntakeRules) -> None:
        self._rules = rules
        self._engine: LazyResource[TextRecognizer] = LazyResource(
            lambda: _initialized(recognizer), name=f"{recognizer.name} OCR engine"
        )

    @property
    def engine_ready(self) -> bool:
        return self._engine.initialized

    def read_identifier(self, asset: ImageAsset) -> Optional[str]:
        if asset.width is None or asset.height is None:
            width, height = imaging.image_dimensions(asset.data)
        else:
            width, height = asset.width, asset.height
        roi = imaging.region_of_interest(width, height, self._rules.roi)
        region = imaging.binarized_region(asset.data, roi, self._rules.binarize_threshold)
        text = self._engine.get().recognize(region)
        logger.debug("recognised text in %s: %r", roi.box, text)
        identifier = extract_identifier(text, self._rules.identifier_strategy)
        logger.info("extracted ticket number: %s", identifier)
        return identifier


def _initialized(recognizer: TextRecognizer) -> TextRecognizer:
    recognizer.initialize()
    return recognizer
