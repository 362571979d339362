from __future__ import annotations

from abc import ABC, abstractmethod

from PIL import Image

CHARSETS = {
    "digits": "0123456789",
    "alphanumeric": "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789",
}


class TextRecognizer(ABC):
    """Abstract interface for an OCR engine reading one line of text."""

    name: str = "abstract"

    def initialize(self) -> None:
        """Prepare the engine. Called once per process before the first ``recognize``."""

    @abstractmethod
    def recognize(self, image: Image.Image) -> str:
        """Return the raw text recognised in *image*.

        Raises
        ------
        RecognitionError
            If the engine fails; an empty result is not an error.
        """
