"""Applies the ordered rule table to one utterance."""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from voice_invoice.core.config import Settings, get_settings
from voice_invoice.schemas.commands import Locale, StructuredCommand
from voice_invoice.services.normalizer import normalize_transcript
from voice_invoice.services.rules import RULES, PatternRule

logger = logging.getLogger(__name__)

MatchObserver = Callable[[PatternRule, bool], None]


class CommandMatcher:
    """First-match-wins evaluation of :data:`~voice_invoice.services.rules.RULES`.

    ``observer`` is called once per attempted rule with whether it matched;
    it exists for tracing and has no influence on the result.
    """

    def __init__(
        self,
        rules: Sequence[PatternRule] | None = None,
        settings: Settings | None = None,
        observer: MatchObserver | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.rules = tuple(rules if rules is not None else RULES)
        self.observer = observer
        self.default_locale = self.settings.default_locale

    def match(
        self, utterance: str, locale: Locale | str | None = None
    ) -> StructuredCommand:
        """Return the command of the first matching rule, or an ``unknown`` one.

        When ``locale`` (or the configured default) is given only that
        locale's rules are considered.
        """

        text = normalize_transcript(utterance)
        if not text:
            return StructuredCommand.unrecognized(utterance)

        wanted = Locale(locale) if locale else self.default_locale
        for rule in self.rules:
            if wanted is not None and rule.locale is not wanted:
                continue
            payload = rule.apply(text)
            if self.observer is not None:
                self.observer(rule, payload is not None)
            if payload is None:
                continue

            logger.debug("Utterance %r matched rule %s", text, rule.name)
            return StructuredCommand(
                kind=rule.kind,
                payload=payload,
                raw_text=utterance,
                confidence=self.settings.match_confidence,
                locale=rule.locale,
                rule=rule.name,
            )

        logger.debug("No rule matched utterance %r", text)
        return StructuredCommand.unrecognized(utterance)
