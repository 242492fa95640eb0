"""Transcript normalization applied before rule matching."""

from __future__ import annotations

import re

_WHITESPACE = re.compile(r"\s+")
_SENTENCE_END = ".!?"


def normalize_transcript(text: str) -> str:
    """Trim, lower-case and collapse whitespace. Empty input stays empty.

    Sentence-ending punctuation added by the transcriber is dropped so that
    end-anchored rules see the same text with or without it.
    """

    if not text:
        return ""
    collapsed = _WHITESPACE.sub(" ", text).strip()
    return collapsed.rstrip(_SENTENCE_END).rstrip().lower()
