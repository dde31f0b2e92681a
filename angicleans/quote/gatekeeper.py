from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping
from datetime import date, datetime, timedelta, timezone
from typing import Any

from fastapi import Request

from angicleans.base.errors import (
    InvalidEmailError,
    MissingFieldsError,
    RateLimitedError,
)
from angicleans.catalog.models import AddOnSelection
from angicleans.quote.ratelimit import RateLimiter
from angicleans.quote.schemas import QuoteRequestPayload, SanitizedQuoteRequest

logger = logging.getLogger(__name__)

UNKNOWN_ADDRESS = "unknown-ip"

NAME_MAX = 100
PHONE_MAX = 50
EMAIL_MAX = 100
ADDRESS_MAX = 255
LABEL_MAX = 100
NOTES_MAX = 1000

# Form dates arrive as UTC instants of local midnight.
BUSINESS_TZ = timezone(timedelta(hours=2), "SAST")

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# An entity cut short by truncation, e.g. "&am" or "&#03".
_PARTIAL_ENTITY = re.compile(r"&[#a-z0-9]{0,4}\Z")

# `&` first so the entities produced below are not escaped twice.
_MARKUP_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#039;"),
)


def escape_markup(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    for char, entity in _MARKUP_ESCAPES:
        value = value.replace(char, entity)
    return value


def sanitize_text(value: Any, max_length: int) -> str:
    return _PARTIAL_ENTITY.sub("", escape_markup(value)[:max_length])


def client_address(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.headers.get("x-real-ip") or UNKNOWN_ADDRESS


def _parse_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = re.match(r"\s*([+-]?\d+)", value)
        if match:
            return int(match.group(1))
    return None


def _parse_date(value: Any) -> date | None:
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(BUSINESS_TZ)
        return parsed.date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        logger.warning("Ignoring unparseable selected date %r", text)
        return None


def _parse_add_ons(names: Any, quantities: Any) -> tuple[AddOnSelection, ...]:
    if not isinstance(names, list):
        return ()
    if not isinstance(quantities, Mapping):
        quantities = {}

    selections: list[AddOnSelection] = []
    for raw_name in names:
        name = sanitize_text(raw_name, LABEL_MAX)
        if not name:
            continue
        selections.append(
            AddOnSelection(name=name, quantity=_parse_int(quantities.get(raw_name)))
        )
    return tuple(selections)


def sanitize(payload: QuoteRequestPayload) -> SanitizedQuoteRequest:
    square_meters = _parse_int(payload.square_meters) or 0
    return SanitizedQuoteRequest(
        name=sanitize_text(payload.name, NAME_MAX),
        business_name=sanitize_text(payload.business_name, NAME_MAX),
        phone=sanitize_text(payload.phone, PHONE_MAX),
        email=sanitize_text(payload.email, EMAIL_MAX),
        address=sanitize_text(payload.address, ADDRESS_MAX),
        selected_date=_parse_date(payload.selected_date),
        service_type=sanitize_text(payload.service_type, LABEL_MAX),
        property_size=sanitize_text(payload.property_size, LABEL_MAX),
        square_meters=max(square_meters, 0),
        add_ons=_parse_add_ons(payload.add_ons, payload.add_on_quantities),
        notes=sanitize_text(payload.additional_notes, NOTES_MAX),
    )


def validate(request: SanitizedQuoteRequest) -> None:
    if not (
        request.name
        and request.email
        and request.service_type
        and request.property_size
    ):
        raise MissingFieldsError()
    if not _EMAIL_PATTERN.fullmatch(request.email):
        raise InvalidEmailError()


def admit(
    payload: QuoteRequestPayload | None,
    address: str,
    limiter: RateLimiter,
) -> SanitizedQuoteRequest:
    """
    Run every admission check in order and return the cleaned request.

    The rate limit is consulted before the payload is looked at, so a
    throttled client is rejected whatever it sent. A payload of `None`
    (body was not a JSON object) counts as missing fields.
    """
    if not limiter.admit(address):
        logger.warning("Rate limit exceeded for %s", address)
        raise RateLimitedError()

    if payload is None:
        raise MissingFieldsError()

    request = sanitize(payload)
    validate(request)
    return request
