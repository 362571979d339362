from __future__ import annotations

import logging
from typing import Optional

import pytesseract
from PIL import Image

from ticket_intake.errors import RecognitionError

from .base import CHARSETS, TextRecognizer

logger = logging.getLogger(__name__)

# Treat the image as a single text line.
_PAGE_SEG_MODE = 7


class TesseractRecognizer(TextRecognizer):
    name = "tesseract"

    def __init__(self, *, charset: str = "digits", lang: str = "eng", tesseract_cmd: Optional[str] = None) -> None:
        if charset not in CHARSETS:
            raise ValueError(f"Unsupported charset: {charset}")
        self._lang = lang
        self._tesseract_cmd = tesseract_cmd
        self._whitelist = CHARSETS[charset]
        self._config: Optional[str] = None

    def initialize(self) -> None:
        if self._tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self._tesseract_cmd
        try:
            version = pytesseract.get_tesseract_version()
        except (pytesseract.TesseractNotFoundError, OSError) as exc:
            raise RecognitionError(f"Tesseract not properly installed or configured: {exc}") from exc
        self._config = f"--psm {_PAGE_SEG_MODE} -c tessedit_char_whitelist={self._whitelist}"
        logger.info("Initialised Tesseract %s (%s)", version, self._config)

    def recognize(self, image: Image.Image) -> str:
        if self._config is None:
            raise RecognitionError("Tesseract recognizer used before initialize()")
        try:
            return pytesseract.image_to_string(image, lang=self._lang, config=self._config)
        except (pytesseract.TesseractError, OSError, RuntimeError) as exc:
            raise RecognitionError(f"Tesseract failed: {exc}") from exc
