"""Ticket intake pipeline: gates, OCR, duplicate check, normalization, routing.

One ``run`` produces exactly one terminal outcome:

* ``Rejected`` - a gate failed or no ticket number could be read; the
  original bytes are stored unmodified under ``rejected/``.
* ``Duplicate`` - the ticket number is already in the ledger; nothing is
  written.
* ``Validated`` - the resized PNG is stored under ``validated/``.
* ``Failed`` - any fault from a collaborator; logged, nothing guaranteed
  to be written.
"""
from __future__ import annotations

import logging

from ticket_intake.errors import DuplicateSubmission, ValidationFailure
from ticket_intake.models import (
    Duplicate,
    Failed,
    ImageAsset,
    IntakeRules,
    ObjectRef,
    Rejected,
    StorageRecord,
    Validated,
    ValidationOutcome,
)
from ticket_intake.services.ledger import DuplicateLedger, is_duplicate
from ticket_intake.services.recognition import RecognitionOrchestrator
from ticket_intake.services.storage import Storage
from ticket_intake.utils import imaging
from ticket_intake.utils.gates import REASON_UNREADABLE, run_gates

logger = logging.getLogger(__name__)

REJECTED_PREFIX = "rejected/"
VALIDATED_PREFIX = "validated/"
OUTPUT_CONTENT_TYPE = "image/png"


class TicketPipeline:
    def __init__(
        self,
        *,
        storage: Storage,
        ledger: DuplicateLedger,
        recognition: RecognitionOrchestrator,
        rules: IntakeRules,
        ledger_id: str,
        ledger_column: str,
    ) -> None:
        self._storage = storage
        self._ledger = ledger
        self._recognition = recognition
        self._rules = rules
        self._ledger_id = ledger_id
        self._ledger_column = ledger_column

    def run(self, ref: ObjectRef) -> ValidationOutcome:
        try:
            return self._process(ref)
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception("Processing %s/%s failed", ref.bucket, ref.key)
            return Failed(message=str(exc) or exc.__class__.__name__)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _process(self, ref: ObjectRef) -> ValidationOutcome:
        data, content_type = self._storage.get(ref)
        asset = ImageAsset(ref=ref, data=data, content_type=content_type)

        try:
            asset = run_gates(asset, self._rules)
            identifier = self._recognition.read_identifier(asset)
            if not identifier:
                raise ValidationFailure(REASON_UNREADABLE)
            if is_duplicate(self._ledger, self._ledger_id, self._ledger_column, identifier):
                raise DuplicateSubmission(identifier)
        except ValidationFailure as failure:
            return self._reject(asset, failure.reason)
        except DuplicateSubmission as dup:
            logger.warning("Duplicate ticket %s in %s", dup.identifier, ref.key)
            return Duplicate(identifier=dup.identifier)

        return self._accept(asset, identifier)

    def _reject(self, asset: ImageAsset, reason: str) -> Rejected:
        key = f"{REJECTED_PREFIX}{asset.ref.file_name}"
        logger.info("Rejecting %s: %s", asset.ref.key, reason)
        self._storage.put(
            StorageRecord(
                bucket=asset.ref.bucket,
                key=key,
                data=asset.data,
                content_type=asset.content_type,
                metadata={"reason": reason, "originalKey": asset.ref.key},
            )
        )
        return Rejected(reason=reason, image_key=key)

    def _accept(self, asset: ImageAsset, identifier: str) -> Validated:
        normalized = imaging.normalize(asset.data, self._rules)
        key = f"{VALIDATED_PREFIX}{asset.ref.file_name}.png"
        self._storage.put(
            StorageRecord(
                bucket=asset.ref.bucket,
                key=key,
                data=normalized,
                content_type=OUTPUT_CONTENT_TYPE,
                metadata={"identifier": identifier, "originalKey": asset.ref.key},
            )
        )
        logger.info("Validated ticket %s as %s", identifier, key)
        return Validated(
            identifier=identifier,
            image_key=key,
            width=self._rules.target_width,
            height=self._rules.target_height,
        )
