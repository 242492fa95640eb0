"""In-memory registry of dictation sessions, one invoice per session."""

from __future__ import annotations

import threading
import uuid
from typing import Dict, Tuple

from voice_invoice.core.config import Settings, get_settings
from voice_invoice.services.pipeline import DictationPipeline


class SessionNotFoundError(KeyError):
    """Raised when a session id is not registered."""


class SessionRegistry:
    """Hands out independent pipelines; sessions never share an invoice."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._sessions: Dict[str, DictationPipeline] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self) -> Tuple[str, DictationPipeline]:
        session_id = uuid.uuid4().hex
        pipeline = DictationPipeline(settings=self.settings)
        with self._lock:
            self._sessions[session_id] = pipeline
        return session_id, pipeline

    def get(self, session_id: str) -> DictationPipeline:
        with self._lock:
            try:
                return self._sessions[session_id]
            except KeyError:
                raise SessionNotFoundError(session_id) from None

    def drop(self, session_id: str) -> None:
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise SessionNotFoundError(session_id)
