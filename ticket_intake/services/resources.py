"""Process-scoped collaborators shared by concurrent invocations.

The storage client, ledger session and OCR engine each guard their own
expensive setup; this module builds the thin wrappers around them once
per process and hands a fresh ``TicketPipeline`` to every invocation.
"""
from __future__ import annotations

from ticket_intake.config import Settings, get_settings
from ticket_intake.services.ledger import build_ledger
from ticket_intake.services.pipeline import TicketPipeline
from ticket_intake.services.recognition import RecognitionOrchestrator, build_recognizer
from ticket_intake.services.secrets import SettingsSecretProvider
from ticket_intake.services.storage import build_storage
from ticket_intake.utils.lazy import LazyResource


class ProcessResources:  # pylint: disable=too-few-public-methods
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.rules = settings.rules()
        self.secrets = SettingsSecretProvider(settings)
        self.storage = build_storage(settings)
        self.ledger = build_ledger(settings, self.secrets)
        self.recognition = RecognitionOrchestrator(build_recognizer(settings, self.rules), self.rules)

    def pipeline(self) -> TicketPipeline:
        return TicketPipeline(
            storage=self.storage,
            ledger=self.ledger,
            recognition=self.recognition,
            rules=self.rules,
            ledger_id=self.settings.sheet_id,
            ledger_column=self.settings.ledger_column,
        )


_resources: LazyResource[ProcessResources] = LazyResource(
    lambda: ProcessResources(get_settings()), name="process resources"
)


def get_resources() -> ProcessResources:
    return _resources.get()
