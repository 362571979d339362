"""HTTP trigger for the ticket intake pipeline.

The request body names the uploaded object. Accepted shapes:

* Cloud Storage object payload (Eventarc): ``{"bucket": ..., "name": ...}``
* Pub/Sub push envelope: ``{"message": {"attributes": {"bucketId", "objectId"}}}``
* S3-style notification: ``{"Records": [{"s3": {"bucket": {"name"}, "object": {"key"}}}]}``
* direct call: ``{"bucket": ..., "key": ...}``, optionally JSON-encoded under ``"body"``
"""
from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import unquote_plus

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from ticket_intake.errors import TriggerError
from ticket_intake.models import Failed, ObjectRef, ValidationOutcome
from ticket_intake.services.pipeline import TicketPipeline
from ticket_intake.services.resources import get_resources

router = APIRouter()
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_trigger(event: Any) -> ObjectRef:
    """Extract the (bucket, key) pair from any supported trigger payload."""

    if not isinstance(event, dict):
        raise TriggerError("trigger payload must be a JSON object")

    if isinstance(event.get("body"), str):
        try:
            return parse_trigger(json.loads(event["body"]))
        except ValueError as exc:
            raise TriggerError("trigger body is not valid JSON") from exc

    try:
        if "Records" in event:
            record = event["Records"][0]["s3"]
            return ObjectRef(bucket=record["bucket"]["name"], key=unquote_plus(record["object"]["key"]))
        if "message" in event:
            attributes = event["message"].get("attributes") or {}
            return ObjectRef(bucket=attributes["bucketId"], key=attributes["objectId"])
        if "name" in event and "key" not in event:
            return ObjectRef(bucket=event["bucket"], key=event["name"])
        return ObjectRef(bucket=event["bucket"], key=event["key"])
    except (AttributeError, KeyError, IndexError, TypeError, ValueError) as exc:
        raise TriggerError(f"no storage object found in trigger: {exc!r}") from exc


def process_event(event: Any, pipeline: TicketPipeline) -> ValidationOutcome:
    """Run one invocation; never raises."""

    try:
        ref = parse_trigger(event)
    except TriggerError as exc:
        logger.exception("Invalid trigger payload")
        return Failed(message=str(exc))
    logger.info("Processing %s/%s", ref.bucket, ref.key)
    return pipeline.run(ref)


def render(outcome: ValidationOutcome) -> JSONResponse:
    return JSONResponse(status_code=outcome.status_code, content=outcome.body())


# ---------------------------------------------------------------------------
# POST trigger
# ---------------------------------------------------------------------------


@router.post("/")
async def receive_event(request: Request) -> JSONResponse:
    try:
        payload = await request.json()
    except ValueError:
        logger.error("Trigger body is not JSON")
        return render(Failed(message="request body is not valid JSON"))

    try:
        pipeline = get_resources().pipeline()
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Failed to build pipeline: %s", exc)
        return render(Failed(message=str(exc)))

    # Gates and external calls block; keep them off the event loop.
    outcome = await run_in_threadpool(process_event, payload, pipeline)
    return render(outcome)
