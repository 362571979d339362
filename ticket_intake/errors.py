"""Error taxonomy for the intake pipeline.

Two kinds of failure exist:

* expected, user-facing outcomes (``ValidationFailure``,
  ``DuplicateSubmission``) that end an invocation with a 4xx response;
* ``ProcessingFault`` and its subclasses, raised when a collaborator
  (storage, codec, OCR engine, credentials, ledger) misbehaves. These
  end the invocation with a 500 and are never stored as a rejection.
"""
from __future__ import annotations


class IntakeError(Exception):
    """Base class for every error raised by the intake pipeline."""


class ValidationFailure(IntakeError):
    """An image failed one of the quality gates."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class DuplicateSubmission(IntakeError):
    """The ticket identifier is already present in the ledger."""

    def __init__(self, identifier: str):
        super().__init__(f"ticket {identifier} already submitted")
        self.identifier = identifier


class ProcessingFault(IntakeError):
    """Unexpected failure of the pipeline or one of its collaborators."""


class TriggerError(ProcessingFault):
    """The invocation payload does not reference a storage object."""


class ObjectNotFound(ProcessingFault):
    """The referenced storage object does not exist."""

    def __init__(self, bucket: str, key: str):
        super().__init__(f"object not found: {bucket}/{key}")
        self.bucket = bucket
        self.key = key


class StorageError(ProcessingFault):
    """Storage get/put failed."""


class ImageDecodeError(ProcessingFault):
    """The image bytes could not be decoded."""


class RecognitionError(ProcessingFault):
    """The OCR engine failed to initialise or to recognise text."""


class CredentialError(ProcessingFault):
    """Third-party credentials could not be retrieved or parsed."""


class LedgerError(ProcessingFault):
    """The duplicate ledger could not be read."""
