#!/usr/bin/env python
"""Run the intake pipeline on an image file without any cloud services.

The image is staged into a local-directory bucket, the ledger is read from
a plain text file (one ticket number per line) and results are written
below the output directory.
"""
from __future__ import annotations

import argparse
import json
import logging
import mimetypes
from pathlib import Path

from ticket_intake.config import get_settings
from ticket_intake.models import ObjectRef, StorageRecord
from ticket_intake.services.ledger import FileLedger
from ticket_intake.services.pipeline import TicketPipeline
from ticket_intake.services.recognition import RecognitionOrchestrator, build_recognizer
from ticket_intake.services.storage import LocalDirectoryStorage

BUCKET = "local-test-bucket"


def main() -> None:
    parser = argparse.ArgumentParser(description="Validate a ticket image locally")
    parser.add_argument("image", type=Path)
    parser.add_argument("--ledger", type=Path, default=Path("ledger.txt"))
    parser.add_argument("--output", type=Path, default=Path("output"))
    parser.add_argument("--content_type", default=None, help="Override the guessed content type")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    settings = get_settings()
    rules = settings.rules()

    storage = LocalDirectoryStorage(args.output)
    ref = ObjectRef(bucket=BUCKET, key=f"raw/{args.image.name}")
    content_type = args.content_type or mimetypes.guess_type(args.image.name)[0] or "application/octet-stream"
    storage.put(StorageRecord(bucket=ref.bucket, key=ref.key, data=args.image.read_bytes(), content_type=content_type))

    pipeline = TicketPipeline(
        storage=storage,
        ledger=FileLedger(args.ledger),
        recognition=RecognitionOrchestrator(build_recognizer(settings, rules), rules),
        rules=rules,
        ledger_id="local",
        ledger_column=settings.ledger_column,
    )
    outcome = pipeline.run(ref)
    print(json.dumps({"statusCode": outcome.status_code, "body": outcome.body()}, indent=2))


if __name__ == "__main__":
    main()
