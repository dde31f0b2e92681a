from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any

import httpx

from angicleans.catalog.models import AddOn, AddOnSelection, PricedQuote
from angicleans.catalog.pricing import (
    SERVICE_DESCRIPTIONS,
    calculate_quote,
    parse_service_type,
)
from angicleans.settings import DEFAULT_BUSINESS_EMAIL

logger = logging.getLogger(__name__)

SEND_QUOTE_PATH = "/api/send-quote"

QUANTITY_MIN = 1
QUANTITY_MAX = 20

# Add-ons priced per basket, window or hour; the rest are one-off.
QUANTITY_ADD_ONS = frozenset({AddOn.IRONING, AddOn.WINDOWS, AddOn.CUPBOARD_SORTING})

SUCCESS_MESSAGE = (
    "Your quote request has been sent successfully! Our team has received your "
    "request and will get back to you within 24 hours."
)
FAILURE_MESSAGE = (
    "Sorry, there was an error sending your quote. Please try again or contact us "
    f"directly at {DEFAULT_BUSINESS_EMAIL}."
)


class SubmissionStatus(enum.Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class SubmissionOutcome:
    status: SubmissionStatus
    message: str
    message_id: str | None = None
    error: str | None = None

    @property
    def can_retry(self) -> bool:
        return self.status is SubmissionStatus.FAILURE


@dataclass
class QuoteForm:
    name: str = ""
    business_name: str = ""
    phone: str = ""
    email: str = ""
    address: str = ""
    selected_date: date | None = None
    service_type: str = ""
    property_size: str = ""
    square_meters: str = ""
    add_ons: list[str] = field(default_factory=list)
    add_on_quantities: dict[str, int] = field(default_factory=dict)
    notes: str = ""


def _json_field(response: httpx.Response, key: str) -> Any:
    try:
        body = response.json()
    except ValueError:
        return None
    return body.get(key) if isinstance(body, dict) else None


def is_quantity_add_on(name: str) -> bool:
    try:
        return AddOn(name) in QUANTITY_ADD_ONS
    except ValueError:
        return False


class QuoteFormController:
    """
    Drives the multi-step quote form against the send-quote endpoint.

    `preview()` prices locally from the shared catalog for display only. The
    submission carries the raw field values and never a price, the server
    recomputes it.
    """

    def __init__(self, client: httpx.AsyncClient, email: str | None = None) -> None:
        self._client = client
        self.form = QuoteForm(email=email or "")
        self.status = SubmissionStatus.IDLE

    def toggle_add_on(self, name: str, checked: bool) -> None:
        if checked:
            if name not in self.form.add_ons:
                self.form.add_ons.append(name)
            self.form.add_on_quantities.setdefault(name, QUANTITY_MIN)
        else:
            if name in self.form.add_ons:
                self.form.add_ons.remove(name)
            self.form.add_on_quantities.pop(name, None)

    def set_quantity(self, name: str, quantity: int) -> int:
        if not is_quantity_add_on(name):
            raise ValueError(f"{name!r} is not sold by quantity")
        clamped = min(max(quantity, QUANTITY_MIN), QUANTITY_MAX)
        self.form.add_on_quantities[name] = clamped
        return clamped

    def set_date(self, day: date, today: date | None = None) -> None:
        if day < (today or date.today()):
            raise ValueError("Cannot book a date in the past")
        self.form.selected_date = day

    def service_description(self) -> str | None:
        service = parse_service_type(self.form.service_type)
        return SERVICE_DESCRIPTIONS[service] if service is not None else None

    def preview(self) -> PricedQuote:
        return calculate_quote(
            self.form.service_type,
            self.form.property_size,
            [
                AddOnSelection(name, self.form.add_on_quantities.get(name))
                for name in self.form.add_ons
            ],
        )

    def payload(self) -> dict[str, Any]:
        form = self.form
        return {
            "name": form.name,
            "businessName": form.business_name,
            "phone": form.phone,
            "email": form.email,
            "address": form.address,
            "selectedDate": (
                form.selected_date.isoformat() if form.selected_date else None
            ),
            "serviceType": form.service_type,
            "propertySize": form.property_size,
            "squareMeters": form.square_meters,
            "addOns": list(form.add_ons),
            "addOnQuantities": dict(form.add_on_quantities),
            "additionalNotes": form.notes,
        }

    async def submit(self) -> SubmissionOutcome:
        self.status = SubmissionStatus.SUBMITTING
        try:
            response = await self._client.post(SEND_QUOTE_PATH, json=self.payload())
        except httpx.HTTPError as exc:
            logger.error("Error sending quote: %s", exc)
            return self._fail(str(exc))

        if response.is_success:
            message_id = _json_field(response, "messageId")
            self.status = SubmissionStatus.SUCCESS
            self.form = QuoteForm()
            return SubmissionOutcome(
                status=SubmissionStatus.SUCCESS,
                message=SUCCESS_MESSAGE,
                message_id=message_id,
            )

        error = _json_field(response, "error") or response.text
        logger.error("Quote rejected with %d: %s", response.status_code, error)
        return self._fail(error)

    def _fail(self, error: str | None) -> SubmissionOutcome:
        self.status = SubmissionStatus.FAILURE
        return SubmissionOutcome(
            status=SubmissionStatus.FAILURE, message=FAILURE_MESSAGE, error=error
        )
