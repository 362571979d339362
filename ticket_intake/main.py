from __future__ import annotations

import logging

from fastapi import FastAPI

from ticket_intake.config import get_settings
from ticket_intake.handlers import intake_handler

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

app = FastAPI(title="Ticket Intake")

app.include_router(intake_handler.router)


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}
