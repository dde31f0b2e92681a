from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from angicleans.catalog.models import AddOnSelection


class QuoteRequestPayload(BaseModel):
    """Raw form submission. Fields stay loosely typed until sanitized."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: Any = None
    business_name: Any = Field(None, alias="businessName")
    phone: Any = None
    email: Any = None
    address: Any = None
    selected_date: Any = Field(None, alias="selectedDate")
    service_type: Any = Field(None, alias="serviceType")
    property_size: Any = Field(None, alias="propertySize")
    square_meters: Any = Field(None, alias="squareMeters")
    add_ons: Any = Field(None, alias="addOns")
    add_on_quantities: Any = Field(None, alias="addOnQuantities")
    additional_notes: Any = Field(None, alias="additionalNotes")


@dataclass(frozen=True)
class SanitizedQuoteRequest:
    name: str
    business_name: str
    phone: str
    email: str
    address: str
    selected_date: date | None
    service_type: str
    property_size: str
    square_meters: int
    add_ons: tuple[AddOnSelection, ...]
    notes: str


class QuoteSentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    message_id: str = Field(serialization_alias="messageId")
    success: bool = True
