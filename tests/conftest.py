"""Test configuration and fixtures."""
from __future__ import annotations

import io
from typing import Optional

import numpy as np
import pytest
from PIL import Image
from PIL.PngImagePlugin import PngInfo

from ticket_intake.errors import ObjectNotFound
from ticket_intake.models import IntakeRules, ObjectRef, StorageRecord
from ticket_intake.services.ledger import StaticLedger
from ticket_intake.services.pipeline import TicketPipeline
from ticket_intake.services.recognition import RecognitionOrchestrator
from ticket_intake.services.recognition.base import TextRecognizer
from ticket_intake.services.storage import Storage

BUCKET = "tickets"
SOURCE_KEY = "uploads/ticket-001.png"


def make_png(width: int, height: int, *, noise: bool = True, padding: int = 0, seed: int = 7) -> bytes:
    """Build a grayscale PNG; random noise or a flat mid-gray fill.

    *padding* adds an uncompressed text chunk so that flat images can still
    clear the minimum size gate.
    """
    if noise:
        rng = np.random.default_rng(seed)
        pixels = rng.integers(0, 256, size=(height, width), dtype=np.uint8)
    else:
        pixels = np.full((height, width), 128, dtype=np.uint8)
    info = PngInfo()
    if padding:
        info.add_text("padding", "x" * padding)
    buffer = io.BytesIO()
    Image.fromarray(pixels).save(buffer, format="PNG", pnginfo=info)
    return buffer.getvalue()


class FakeStorage(Storage):
    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], tuple[bytes, str]] = {}
        self.puts: list[StorageRecord] = []

    def add(self, bucket: str, key: str, data: bytes, content_type: str = "image/png") -> ObjectRef:
        self.objects[(bucket, key)] = (data, content_type)
        return ObjectRef(bucket=bucket, key=key)

    def get(self, ref: ObjectRef):
        try:
            return self.objects[(ref.bucket, ref.key)]
        except KeyError:
            raise ObjectNotFound(ref.bucket, ref.key) from None

    def put(self, record: StorageRecord) -> None:
        self.puts.append(record)
        self.objects[(record.bucket, record.key)] = (record.data, record.content_type)


class FakeRecognizer(TextRecognizer):
    name = "fake"

    def __init__(self, text: str = "4815162342", error: Optional[Exception] = None) -> None:
        self.text = text
        self.error = error
        self.init_calls = 0
        self.images: list[Image.Image] = []

    def initialize(self) -> None:
        self.init_calls += 1

    def recognize(self, image: Image.Image) -> str:
        self.images.append(image)
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def rules() -> IntakeRules:
    return IntakeRules()


@pytest.fixture
def ticket_png() -> bytes:
    """A 94x200 noisy grayscale PNG: right aspect, right size, sharp."""
    return make_png(94, 200)


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def recognizer() -> FakeRecognizer:
    return FakeRecognizer()


@pytest.fixture
def ledger() -> StaticLedger:
    return StaticLedger(["Ticket Number", "1111"])


@pytest.fixture
def pipeline(storage, ledger, recognizer, rules) -> TicketPipeline:
    return TicketPipeline(
        storage=storage,
        ledger=ledger,
        recognition=RecognitionOrchestrator(recognizer, rules),
        rules=rules,
        ledger_id="sheet-1",
        ledger_column="D:D",
    )
