"""FastAPI entry point for the voice invoice dictation service."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from voice_invoice.core.config import Settings, get_settings
from voice_invoice.core.logging import configure_logging
from voice_invoice.schemas.commands import Locale, TranscriptSegment
from voice_invoice.services.matcher import CommandMatcher
from voice_invoice.services.pipeline import DictationPipeline
from voice_invoice.services.sessions import SessionNotFoundError, SessionRegistry

logger = logging.getLogger(__name__)

app: FastAPI | None = None


class SegmentBatch(BaseModel):
    segments: List[TranscriptSegment] = Field(default_factory=list)


class ParseRequest(BaseModel):
    text: str
    locale: Optional[Locale] = None


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build a fresh application with its own session registry."""

    settings = settings or get_settings()
    configure_logging(settings)
    sessions = SessionRegistry(settings=settings)
    matcher = CommandMatcher(settings=settings)

    api = FastAPI(title="Voice Invoice Dictation", version="0.1.0")

    api.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def _session(session_id: str) -> DictationPipeline:
        try:
            return sessions.get(session_id)
        except SessionNotFoundError as exc:
            raise HTTPException(status_code=404, detail="Unknown session") from exc

    @api.get("/health")
    async def health() -> dict:
        return {"status": "ok", "sessions": len(sessions)}

    @api.post("/sessions", status_code=201)
    async def create_session() -> dict:
        session_id, pipeline = sessions.create()
        logger.info("Created dictation session %s", session_id)
        return {
            "session_id": session_id,
            "invoice": pipeline.invoice.model_dump(mode="json"),
        }

    @api.get("/sessions/{session_id}")
    async def get_invoice(session_id: str) -> dict:
        return _session(session_id).invoice.model_dump(mode="json")

    @api.post("/sessions/{session_id}/segments")
    async def post_segments(session_id: str, batch: SegmentBatch) -> dict:
        pipeline = _session(session_id)
        outcomes = pipeline.feed(batch.segments)
        return {
            "outcomes": [
                outcome.model_dump(mode="json", exclude={"invoice"}) for outcome in outcomes
            ],
            "invoice": pipeline.invoice.model_dump(mode="json"),
        }

    @api.post("/sessions/{session_id}/reset")
    async def reset_session(session_id: str) -> dict:
        outcome = _session(session_id).reset()
        return outcome.model_dump(mode="json")

    @api.delete("/sessions/{session_id}")
    async def drop_session(session_id: str) -> dict:
        try:
            sessions.drop(session_id)
        except SessionNotFoundError as exc:
            raise HTTPException(status_code=404, detail="Unknown session") from exc
        return {"status": "deleted"}

    @api.post("/commands/parse")
    async def parse_command(request: ParseRequest) -> dict:
        command = matcher.match(request.text, locale=request.locale)
        return command.model_dump(mode="json")

    return api


def get_app() -> FastAPI:
    global app
    if app is not None:
        return app

    app = create_app()
    return app


app = get_app()
