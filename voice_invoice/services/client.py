"""Client wrapper for a transcription front end talking to the dictation API."""

from __future__ import annotations

import logging
from typing import Iterable, List

import httpx

from voice_invoice.core.config import Settings, get_settings
from voice_invoice.schemas.commands import TranscriptSegment
from voice_invoice.schemas.invoice import Invoice

logger = logging.getLogger(__name__)


class DictationClientError(RuntimeError):
    """Raised when the dictation API answers with an error."""


class DictationClient:
    """Thin synchronous client forwarding transcript segments to a session."""

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(
            base_url=self.settings.api_base_url,
            timeout=self.settings.request_timeout_seconds,
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "DictationClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def create_session(self) -> str:
        return self._request("POST", "/sessions")["session_id"]

    def get_invoice(self, session_id: str) -> Invoice:
        payload = self._request("GET", f"/sessions/{session_id}")
        return Invoice.model_validate(payload)

    def send_segments(
        self, session_id: str, segments: Iterable[TranscriptSegment]
    ) -> List[dict]:
        """Post ``segments`` and return the per-utterance outcomes."""

        body = {"segments": [segment.model_dump() for segment in segments]}
        return self._request("POST", f"/sessions/{session_id}/segments", json=body)["outcomes"]

    def send_text(self, session_id: str, text: str, confidence: float = 1.0) -> dict:
        segment = TranscriptSegment(text=text, is_final=True, confidence=confidence)
        outcomes = self.send_segments(session_id, [segment])
        return outcomes[0]

    def reset(self, session_id: str) -> dict:
        return self._request("POST", f"/sessions/{session_id}/reset")

    def _request(self, method: str, url: str, **kwargs) -> dict:
        try:
            response = self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning("Dictation API %s %s failed: %s", method, url, exc)
            raise DictationClientError(
                f"{method} {url} returned {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise DictationClientError(f"{method} {url} failed: {exc}") from exc
        return response.json()
