from __future__ import annotations

from ticket_intake.config import Settings
from ticket_intake.models import IntakeRules

from .base import TextRecognizer
from .tesseract_provider import TesseractRecognizer

_RECOGNIZERS: dict[str, type[TextRecognizer]] = {
    "tesseract": TesseractRecognizer,
}


def build_recognizer(settings: Settings, rules: IntakeRules) -> TextRecognizer:
    key = settings.recognizer.lower()
    if key not in _RECOGNIZERS:
        raise ValueError(f"Unsupported recognizer: {key}")
    return _RECOGNIZERS[key](
        charset=rules.charset,
        lang=settings.tesseract_lang,
        tesseract_cmd=settings.tesseract_cmd,
    )
