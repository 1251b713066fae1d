"""FastAPI transport that feeds chat messages into the attendance pipeline."""

from __future__ import annotations

import hashlib
import hmac
import logging
import time as time_module
from datetime import date as date_type, datetime, timezone
from typing import Optional

from fastapi import BackgroundTasks, FastAPI, HTTPException, Request
from pydantic import BaseModel, ConfigDict, ValidationError

from attendance_engine.config import Settings, get_settings
from attendance_engine.errors import AttendanceError
from attendance_engine.schema import Keyword
from attendance_engine.service import AttendanceService
from attendance_engine.stores import CsvEventStore, CsvSummarySink

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Signature"
TIMESTAMP_HEADER = "X-Request-Timestamp"


class MessageEvent(BaseModel):
    """A chat message already normalized to local date and time."""

    model_config = ConfigDict(extra="ignore")

    type: str = "message"
    event_id: str
    date: date_type
    time: str
    user: Optional[str] = None
    user_name: Optional[str] = None
    channel: Optional[str] = None
    text: Optional[str] = None
    bot_id: Optional[str] = None
    subtype: Optional[str] = None


class EventEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str
    challenge: Optional[str] = None
    event: Optional[MessageEvent] = None


def sign(secret: str, timestamp: str, body: bytes) -> str:
    """Compute the ``v0=`` HMAC-SHA256 signature for a request body."""

    base = b"v0:" + timestamp.encode() + b":" + body
    return "v0=" + hmac.new(secret.encode(), base, hashlib.sha256).hexdigest()


def verify_signature(
    secret: str,
    signature: Optional[str],
    timestamp: Optional[str],
    body: bytes,
    max_age: int = 300,
    now: Optional[float] = None,
) -> None:
    """Raise ``HTTPException(401)`` unless the request is signed and fresh."""

    if not signature or not timestamp:
        logger.warning("Missing signature headers")
        raise HTTPException(status_code=401, detail="Missing signature headers")

    try:
        sent_at = int(timestamp)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid timestamp") from None

    current = time_module.time() if now is None else now
    if abs(current - sent_at) > max_age:
        logger.warning("Request timestamp too old")
        raise HTTPException(status_code=401, detail="Request too old")

    expected = sign(secret, timestamp, body).encode()
    if not hmac.compare_digest(expected, signature.encode("latin-1", errors="replace")):
        logger.warning("Invalid signature")
        raise HTTPException(status_code=401, detail="Invalid signature")


async def process_message(service: AttendanceService, event: MessageEvent) -> None:
    """Run one message through the pipeline, logging instead of raising."""

    if event.type != "message":
        logger.info("Not a message event, skipping")
        return
    if event.bot_id or event.subtype:
        logger.info("Bot message or subtype, skipping: bot_id=%s subtype=%s", event.bot_id, event.subtype)
        return
    if not event.text or not event.user:
        logger.info("Missing text or user in %s", event.event_id)
        return

    try:
        outcome = await service.handle_message(
            event.text,
            event_id=event.event_id,
            date=event.date,
            time=event.time,
            employee_key=event.user,
            employee_name=event.user_name,
            channel=event.channel,
        )
    except AttendanceError:
        logger.exception("Error processing attendance for event %s", event.event_id)
        return
    logger.info("Event %s: %s", event.event_id, outcome.value)


def build_service(settings: Settings) -> AttendanceService:
    return AttendanceService(
        store=CsvEventStore(settings.raw_log_path),
        sink=CsvSummarySink(settings.summary_path),
        settings=settings,
    )


def create_app(service: Optional[AttendanceService] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    service = service or build_service(settings)

    app = FastAPI(
        title="Attendance Engine",
        version="1.0.0",
        description="Daily attendance summaries from keyword chat messages",
    )
    app.state.service = service
    app.state.settings = settings

    @app.get("/")
    async def root():
        return {
            "status": "ok",
            "message": "Attendance engine is running",
            "version": "1.0.0",
            "keywords": [keyword.token for keyword in Keyword],
        }

    @app.get("/health")
    async def health():
        return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.post("/events")
    async def receive_event(request: Request, background_tasks: BackgroundTasks):
        body = await request.body()
        if settings.signing_secret:
            verify_signature(
                settings.signing_secret,
                request.headers.get(SIGNATURE_HEADER),
                request.headers.get(TIMESTAMP_HEADER),
                body,
                max_age=settings.signature_max_age_seconds,
            )

        try:
            envelope = EventEnvelope.model_validate_json(body)
        except ValidationError as exc:
            raise HTTPException(status_code=400, detail="Malformed event payload") from exc

        logger.info("Received event: type=%s", envelope.type)
        if envelope.type == "url_verification":
            return {"challenge": envelope.challenge}

        if envelope.type == "event_callback" and envelope.event is not None:
            background_tasks.add_task(process_message, service, envelope.event)
        else:
            logger.info("Not an event_callback, ignoring")
        return {"ok": True}

    @app.get("/summaries/{day}/{employee_key}")
    async def read_summary(day: date_type, employee_key: str):
        try:
            summary = await service.get_summary(day, employee_key)
        except AttendanceError as exc:
            logger.error("Summary lookup failed: %s", exc)
            raise HTTPException(status_code=503, detail="Summary store unavailable") from exc
        if summary is None:
            raise HTTPException(status_code=404, detail="No summary for this employee and date")
        return summary.to_row()

    return app

