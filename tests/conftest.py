from __future__ import annotations

import itertools
from datetime import date

import pytest

from voice_invoice.core.config import Settings
from voice_invoice.services.engine import InvoiceStateEngine
from voice_invoice.services.matcher import CommandMatcher
from voice_invoice.services.pipeline import DictationPipeline

TODAY = date(2024, 3, 1)


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def engine(settings: Settings) -> InvoiceStateEngine:
    counter = itertools.count(1)
    return InvoiceStateEngine(
        settings=settings,
        id_factory=lambda: f"item-{next(counter)}",
        today=lambda: TODAY,
    )


@pytest.fixture
def matcher(settings: Settings) -> CommandMatcher:
    return CommandMatcher(settings=settings)


@pytest.fixture
def pipeline(settings, matcher, engine) -> DictationPipeline:
    return DictationPipeline(matcher=matcher, engine=engine, settings=settings)
