import html
import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse

from angicleans.base.dependencies import get_mailer, get_rate_limiter, get_settings
from angicleans.base.errors import (
    GENERIC_ERROR_MESSAGE,
    QuoteError,
    UnknownCatalogKeyError,
    error_response,
    quote_error_response,
)
from angicleans.catalog.pricing import calculate_quote
from angicleans.quote.delivery import QuoteMailer
from angicleans.quote.document import (
    build_quote_document,
    load_branding,
    sample_quote_document,
)
from angicleans.quote.gatekeeper import admit, client_address
from angicleans.quote.ratelimit import RateLimiter
from angicleans.quote.schemas import (
    QuoteRequestPayload,
    QuoteSentResponse,
    SanitizedQuoteRequest,
)
from angicleans.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter()


async def _read_payload(request: Request) -> QuoteRequestPayload | None:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    if not isinstance(body, dict):
        return None
    return QuoteRequestPayload.model_validate(body)


async def _deliver_quote(
    quote: SanitizedQuoteRequest, mailer: QuoteMailer, settings: Settings
) -> str:
    priced = calculate_quote(quote.service_type, quote.property_size, quote.add_ons)
    if priced.unknown_keys:
        if settings.reject_unknown_catalog_keys:
            raise UnknownCatalogKeyError()
        logger.warning("Quote priced with unknown keys: %s", priced.unknown_keys)

    await mailer.verify()

    document = build_quote_document(quote, priced, load_branding(settings.logo_path))
    return await mailer.send(document, html.unescape(quote.email))


@router.post("/api/send-quote", response_model=QuoteSentResponse)
async def send_quote(
    request: Request,
    limiter: RateLimiter = Depends(get_rate_limiter),
    mailer: QuoteMailer = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
) -> QuoteSentResponse | JSONResponse:
    try:
        payload = await _read_payload(request)
        quote = admit(payload, client_address(request), limiter)
        message_id = await _deliver_quote(quote, mailer, settings)
    except QuoteError as exc:
        return quote_error_response(exc, debug=settings.is_development)
    except Exception as exc:
        logger.exception("Error in send-quote")
        return error_response(
            500,
            GENERIC_ERROR_MESSAGE,
            details=str(exc) if settings.is_development else None,
        )

    return QuoteSentResponse(message="Email sent successfully", message_id=message_id)


@router.get("/email-preview", response_class=HTMLResponse)
async def email_preview(settings: Settings = Depends(get_settings)) -> str:
    if not settings.is_development:
        raise HTTPException(status_code=404, detail="Not Found")
    return sample_quote_document(load_branding(settings.logo_path)).html
