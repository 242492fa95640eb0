"""Ordered pattern rules mapping normalized utterances to commands.

Rules are tried top to bottom and the first match wins, so the order in
:data:`RULES` is part of the contract:

* free-text captures (notes, customer fields, invoice number) come first so
  their text is never mistaken for an item or a tax rate;
* "N units of X at P" precedes "N X at P", which precedes "X at P", which
  precedes the bare "X P" form;
* the Spanish address rule precedes the Spanish customer-name rule because
  "dirección del cliente es" contains "cliente es".

Every rule runs on text already passed through
:func:`voice_invoice.services.normalizer.normalize_transcript`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal
from re import Match, Pattern
from typing import Callable, Dict, Optional, Tuple

from voice_invoice.schemas.commands import (
    LAST_ITEM_TOKEN,
    CommandKind,
    Locale,
    PayloadValue,
)
from voice_invoice.utils.numbers import parse_decimal

Payload = Dict[str, PayloadValue]
Extractor = Callable[[Match[str]], Payload]

LAST_SYNONYMS = frozenset({"last", "último", "ultimo", "última", "ultima"})

_NUM = r"(?:-\s*|minus\s+|menos\s+)?\d+(?:[.,]\d+)?"
_MONEY_WORDS = r"(?:dollars?|bucks|euros?|d[oó]lares)"
_PRICE = rf"[$€]?\s*(?P<price>{_NUM})\s*(?:[$€]|{_MONEY_WORDS})?"
_DATE = r"(?P<date>\d{4}[-/]\d{1,2}[-/]\d{1,2}|\d{1,2}[-/.]\d{1,2}[-/.]\d{4})"
_TRAILING = " \t.,;:!?"

# English fragments
_EN_ITEM_REF = r"(?:the\s+)?(?:item\s+(?:number\s+)?)?(?P<item>\d+|last)(?:\s+item)?"
# Spanish fragments
_ES_ADD = r"(?:a[ñn]adir|a[ñn]ade|agregar|agrega)"
_ES_AT = r"(?:a|por)"
_ES_ITEM_REF = (
    r"(?:el\s+|la\s+)?(?:art[ií]culo\s+(?:n[uú]mero\s+)?)?"
    r"(?P<item>\d+|[uú]ltim[oa])(?:\s+art[ií]culo)?"
)


@dataclass(frozen=True)
class PatternRule:
    """A structural pattern, the command kind it yields and its extractor."""

    name: str
    locale: Locale
    kind: CommandKind
    pattern: Pattern[str]
    extract: Extractor

    def apply(self, text: str) -> Optional[Payload]:
        """Return the extracted payload, or ``None`` when the pattern misses."""

        match = self.pattern.search(text)
        if match is None:
            return None
        return self.extract(match)


def _clean(text: str) -> str:
    return text.strip(_TRAILING).lstrip("¡¿").strip()


def _item_token(text: str) -> str:
    token = _clean(text)
    return LAST_ITEM_TOKEN if token in LAST_SYNONYMS else token


def _no_payload(match: Match[str]) -> Payload:
    return {}


def _add_item(match: Match[str]) -> Payload:
    quantity = match.groupdict().get("quantity")
    return {
        "description": _clean(match.group("description")),
        "quantity": parse_decimal(quantity) if quantity else Decimal("1"),
        "unitPrice": parse_decimal(match.group("price")),
    }


def _text_field(key: str, group: str) -> Extractor:
    def extract(match: Match[str]) -> Payload:
        return {key: _clean(match.group(group))}

    return extract


def _number_field(key: str, group: str) -> Extractor:
    def extract(match: Match[str]) -> Payload:
        return {key: parse_decimal(match.group(group))}

    return extract


def _remove_item(match: Match[str]) -> Payload:
    return {"itemId": _item_token(match.group("item"))}


def _update_item(key: str, group: str, numeric: bool) -> Extractor:
    def extract(match: Match[str]) -> Payload:
        raw = match.group(group)
        value = parse_decimal(raw) if numeric else _clean(raw)
        return {"itemId": _item_token(match.group("item")), key: value}

    return extract


def _rule(
    name: str,
    locale: Locale,
    kind: CommandKind,
    pattern: str,
    extract: Extractor = _no_payload,
) -> PatternRule:
    return PatternRule(name, locale, kind, re.compile(pattern), extract)


EN = Locale.EN
ES = Locale.ES

ENGLISH_RULES: Tuple[PatternRule, ...] = (
    _rule(
        "en.notes",
        EN,
        CommandKind.SET_NOTES,
        r"\b(?:add|set)\s+(?:a\s+)?notes?\s+(?:to\s+)?(?P<notes>.+)",
        _text_field("notes", "notes"),
    ),
    _rule(
        "en.customer_name",
        EN,
        CommandKind.UPDATE_CUSTOMER,
        r"\b(?:the\s+)?customer(?:'s)?(?:\s+name)?\s+is\s+(?P<name>.+)",
        _text_field("customerName", "name"),
    ),
    _rule(
        "en.customer_address",
        EN,
        CommandKind.UPDATE_CUSTOMER,
        r"\b(?:customer(?:'s)?\s+)?address\s+is\s+(?P<address>.+)",
        _text_field("customerAddress", "address"),
    ),
    _rule(
        "en.invoice_number",
        EN,
        CommandKind.SET_INVOICE_NUMBER,
        r"\binvoice\s+(?:number|no\.?|#)\s+(?:is\s+)?(?P<number>.+)",
        _text_field("invoiceNumber", "number"),
    ),
    _rule(
        "en.add_item.units_of",
        EN,
        CommandKind.ADD_ITEM,
        rf"\badd\s+(?P<quantity>{_NUM})\s+units?\s+of\s+(?P<description>.+?)\s+at\s+{_PRICE}",
        _add_item,
    ),
    _rule(
        "en.add_item.quantity_at",
        EN,
        CommandKind.ADD_ITEM,
        rf"\badd\s+(?P<quantity>{_NUM})\s+(?P<description>.+?)\s+at\s+{_PRICE}",
        _add_item,
    ),
    _rule(
        "en.add_item.at",
        EN,
        CommandKind.ADD_ITEM,
        rf"\badd\s+(?P<description>.+?)\s+at\s+{_PRICE}",
        _add_item,
    ),
    _rule(
        "en.add_item.bare",
        EN,
        CommandKind.ADD_ITEM,
        rf"\badd\s+(?:(?P<quantity>{_NUM})\s+)?(?P<description>.+?)\s+{_PRICE}(?:\s+each)?$",
        _add_item,
    ),
    _rule(
        "en.update_item.quantity",
        EN,
        CommandKind.UPDATE_ITEM,
        rf"\b(?:change|update|set)\s+(?:the\s+)?quantity\s+(?:of|for|on)\s+{_EN_ITEM_REF}"
        rf"\s+to\s+(?P<quantity>{_NUM})",
        _update_item("quantity", "quantity", numeric=True),
    ),
    _rule(
        "en.update_item.price",
        EN,
        CommandKind.UPDATE_ITEM,
        rf"\b(?:change|update|set)\s+(?:the\s+)?(?:unit\s+)?price\s+(?:of|for|on)\s+{_EN_ITEM_REF}"
        rf"\s+to\s+{_PRICE}",
        _update_item("unitPrice", "price", numeric=True),
    ),
    _rule(
        "en.update_item.description",
        EN,
        CommandKind.UPDATE_ITEM,
        rf"\b(?:rename|change\s+(?:the\s+)?description\s+of)\s+{_EN_ITEM_REF}"
        r"\s+to\s+(?P<description>.+)",
        _update_item("description", "description", numeric=False),
    ),
    _rule(
        "en.remove_item",
        EN,
        CommandKind.REMOVE_ITEM,
        rf"\b(?:delete|remove)\s+{_EN_ITEM_REF}\b",
        _remove_item,
    ),
    _rule(
        "en.set_tax",
        EN,
        CommandKind.SET_TAX,
        rf"\b(?:set\s+(?:the\s+)?)?(?:tax|vat)(?:\s+rate)?\s+(?:(?:to|is|at|of)\s+)?"
        rf"(?P<rate>{_NUM})\s*(?:%|percent|per\s*cent)?",
        _number_field("taxRate", "rate"),
    ),
    _rule(
        "en.due_in_days",
        EN,
        CommandKind.SET_DUE_DATE,
        r"\b(?:due|payable)\s+in\s+(?P<days>\d+)\s+days?\b",
        _number_field("dueInDays", "days"),
    ),
    _rule(
        "en.due_date",
        EN,
        CommandKind.SET_DUE_DATE,
        rf"\bdue\s+(?:date\s+)?(?:is\s+|on\s+|to\s+)?{_DATE}",
        _text_field("dueDate", "date"),
    ),
    _rule(
        "en.issue_date",
        EN,
        CommandKind.SET_DATE,
        rf"\b(?:(?:invoice|issue)\s+)?date\s+(?:is\s+|to\s+)?{_DATE}",
        _text_field("date", "date"),
    ),
    _rule(
        "en.show_preview",
        EN,
        CommandKind.SHOW_PREVIEW,
        r"\bshow\s+(?:the\s+)?preview\b",
    ),
    _rule(
        "en.generate_pdf",
        EN,
        CommandKind.GENERATE_PDF,
        r"\b(?:generate|create|export)\s+(?:the\s+|a\s+)?pdf\b",
    ),
)

SPANISH_RULES: Tuple[PatternRule, ...] = (
    _rule(
        "es.notes",
        ES,
        CommandKind.SET_NOTES,
        r"\b(?:a[ñn]adir|a[ñn]ade|agregar|agrega|poner|pon)\s+(?:una\s+)?notas?\s+(?P<notes>.+)",
        _text_field("notes", "notes"),
    ),
    _rule(
        "es.notes.bare",
        ES,
        CommandKind.SET_NOTES,
        r"^notas?\s+(?:(?:es|son)\s+)?(?P<notes>.+)",
        _text_field("notes", "notes"),
    ),
    _rule(
        "es.customer_address",
        ES,
        CommandKind.UPDATE_CUSTOMER,
        r"\bdirecci[oó]n(?:\s+del\s+cliente)?\s+es\s+(?P<address>.+)",
        _text_field("customerAddress", "address"),
    ),
    _rule(
        "es.customer_name",
        ES,
        CommandKind.UPDATE_CUSTOMER,
        r"\b(?:(?:el\s+)?nombre\s+del\s+)?cliente\s+es\s+(?P<name>.+)",
        _text_field("customerName", "name"),
    ),
    _rule(
        "es.invoice_number",
        ES,
        CommandKind.SET_INVOICE_NUMBER,
        r"\bn[uú]mero\s+de\s+(?:la\s+)?factura\s+(?:es\s+)?(?P<number>.+)",
        _text_field("invoiceNumber", "number"),
    ),
    _rule(
        "es.add_item.units_of",
        ES,
        CommandKind.ADD_ITEM,
        rf"\b{_ES_ADD}\s+(?P<quantity>{_NUM})\s+unidad(?:es)?\s+de\s+(?P<description>.+?)"
        rf"\s+{_ES_AT}\s+{_PRICE}",
        _add_item,
    ),
    _rule(
        "es.add_item.quantity_at",
        ES,
        CommandKind.ADD_ITEM,
        rf"\b{_ES_ADD}\s+(?P<quantity>{_NUM})\s+(?P<description>.+?)\s+{_ES_AT}\s+{_PRICE}",
        _add_item,
    ),
    _rule(
        "es.add_item.at",
        ES,
        CommandKind.ADD_ITEM,
        rf"\b{_ES_ADD}\s+(?P<description>.+?)\s+{_ES_AT}\s+{_PRICE}",
        _add_item,
    ),
    _rule(
        "es.add_item.bare",
        ES,
        CommandKind.ADD_ITEM,
        rf"\b{_ES_ADD}\s+(?:(?P<quantity>{_NUM})\s+)?(?P<description>.+?)\s+{_PRICE}"
        r"(?:\s+cada\s+un[oa])?$",
        _add_item,
    ),
    _rule(
        "es.update_item.quantity",
        ES,
        CommandKind.UPDATE_ITEM,
        rf"\b(?:cambiar|cambia|actualizar|actualiza|poner|pon)\s+(?:la\s+)?cantidad\s+(?:del?|en)\s+"
        rf"{_ES_ITEM_REF}\s+a\s+(?P<quantity>{_NUM})",
        _update_item("quantity", "quantity", numeric=True),
    ),
    _rule(
        "es.update_item.price",
        ES,
        CommandKind.UPDATE_ITEM,
        rf"\b(?:cambiar|cambia|actualizar|actualiza|poner|pon)\s+(?:el\s+)?precio(?:\s+unitario)?"
        rf"\s+(?:del?|en)\s+{_ES_ITEM_REF}\s+a\s+{_PRICE}",
        _update_item("unitPrice", "price", numeric=True),
    ),
    _rule(
        "es.update_item.description",
        ES,
        CommandKind.UPDATE_ITEM,
        rf"\brenombrar\s+{_ES_ITEM_REF}\s+(?:a|como)\s+(?P<description>.+)",
        _update_item("description", "description", numeric=False),
    ),
    _rule(
        "es.remove_item",
        ES,
        CommandKind.REMOVE_ITEM,
        rf"\b(?:eliminar|elimina|borrar|borra|quitar|quita)\s+{_ES_ITEM_REF}\b",
        _remove_item,
    ),
    _rule(
        "es.set_tax",
        ES,
        CommandKind.SET_TAX,
        rf"\b(?:(?:poner|pon|fijar|fija|establecer)\s+(?:el\s+|la\s+)?)?"
        rf"(?:(?:tasa|tipo)\s+de\s+)?(?:impuesto|iva)\s+(?:(?:a|en|es|del?)\s+)?"
        rf"(?P<rate>{_NUM})\s*(?:%|por\s*ciento)?",
        _number_field("taxRate", "rate"),
    ),
    _rule(
        "es.due_in_days",
        ES,
        CommandKind.SET_DUE_DATE,
        r"\bvence\s+en\s+(?P<days>\d+)\s+d[ií]as?\b",
        _number_field("dueInDays", "days"),
    ),
    _rule(
        "es.due_date",
        ES,
        CommandKind.SET_DUE_DATE,
        rf"\bfecha\s+de\s+vencimiento\s+(?:es\s+|el\s+)?{_DATE}",
        _text_field("dueDate", "date"),
    ),
    _rule(
        "es.issue_date",
        ES,
        CommandKind.SET_DATE,
        rf"\bfecha(?:\s+de\s+(?:la\s+)?factura)?\s+(?:es\s+|el\s+)?{_DATE}",
        _text_field("date", "date"),
    ),
    _rule(
        "es.show_preview",
        ES,
        CommandKind.SHOW_PREVIEW,
        r"\bmostrar\s+(?:la\s+)?vista\s+previa\b",
    ),
    _rule(
        "es.generate_pdf",
        ES,
        CommandKind.GENERATE_PDF,
        r"\b(?:generar|crear|exportar)\s+(?:el\s+|un\s+)?pdf\b",
    ),
)

RULES: Tuple[PatternRule, ...] = ENGLISH_RULES + SPANISH_RULES


def rules_for(locale: Locale) -> Tuple[PatternRule, ...]:
    """Rules of ``locale`` in evaluation order."""

    return tuple(rule for rule in RULES if rule.locale is locale)


__all__ = [
    "ENGLISH_RULES",
    "LAST_SYNONYMS",
    "PatternRule",
    "RULES",
    "SPANISH_RULES",
    "rules_for",
]
