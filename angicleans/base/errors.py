from __future__ import annotations

from fastapi.responses import JSONResponse

GENERIC_ERROR_MESSAGE = "Failed to process your request. Please try again later."


class QuoteError(Exception):
    """Base for failures that map onto a known HTTP status and public message."""

    status_code: int = 500
    message: str = GENERIC_ERROR_MESSAGE

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class MissingFieldsError(QuoteError):
    status_code = 400
    message = "Missing required fields"


class InvalidEmailError(QuoteError):
    status_code = 400
    message = "Invalid email address"


class UnknownCatalogKeyError(QuoteError):
    status_code = 400
    message = "Unknown service selection"


class RateLimitedError(QuoteError):
    status_code = 429
    message = "Too many requests. Please try again in 15 minutes."


class ServiceUnavailableError(QuoteError):
    status_code = 503
    message = "Email service currently unavailable"


class DeliveryFailedError(QuoteError):
    """Relay accepted the login but the message was not sent."""


def error_response(
    status_code: int, message: str, details: str | None = None
) -> JSONResponse:
    content: dict[str, object] = {"error": message, "success": False}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def quote_error_response(exc: QuoteError, debug: bool = False) -> JSONResponse:
    details = None
    if debug and exc.status_code >= 500:
        details = str(exc.__cause__ or exc)
    return error_response(exc.status_code, exc.message, details)
