from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from angicleans.catalog.models import AddOnSelection, PricedQuote
from angicleans.catalog.pricing import calculate_quote
from angicleans.quote.schemas import SanitizedQuoteRequest

logger = logging.getLogger(__name__)

BUSINESS_NAME = "Angie's Cleaning Service"
LOGO_CID = "logo@angiescare"
NOT_SELECTED = "Not selected"
NOT_SPECIFIED = "Not specified"

BUSINESS_CONTACT = (
    "East Town",
    "Randburg, 2195",
    "079 535 8607",
    "info@angicleans.co.za",
)

EXCLUDED_CLEANING = (
    "Extreme, hardened soap scum in bathrooms, due to a lack of regular cleaning "
    "maintenance.",
    "Extreme, hardened grease in kitchens, due to a lack of regular cleaning "
    "maintenance.",
)

TERMS = (
    "Unreasonably dirty and cluttered homes will be subject to an additional fee.",
    "We are able to assist with a vacuum cleaner. As an extra precaution, we request "
    "Clients to have their personal vacuum cleaner on hand for our use, to prevent "
    "cross-contamination between properties and spreading allergens. Please kindly "
    "advise.",
    "We provide all necessary equipment and Eco-friendly and Biodegradable products.",
    "No travel charged within a 5km radius.",
    "50% deposit required on acceptance of booking. Balance paid on completion of "
    "work.",
    "Cleaning service can continue during load shedding. Appointments cannot be "
    "cancelled due to load shedding.",
    "Further T&Cs apply, available upon request.",
)

_TEMPLATES_DIR = Path(__file__).parent / "templates"

_env = Environment(
    loader=FileSystemLoader(str(_TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


@dataclass(frozen=True)
class BrandingAssets:
    logo: bytes | None = None

    @property
    def has_logo(self) -> bool:
        return self.logo is not None


@dataclass(frozen=True)
class QuoteDocument:
    html: str
    logo: bytes | None = None

    @property
    def has_logo(self) -> bool:
        return self.logo is not None


def load_branding(logo_path: Path) -> BrandingAssets:
    """Read the logo if it is there. A missing or unreadable file is not an error."""
    try:
        return BrandingAssets(logo=logo_path.read_bytes())
    except FileNotFoundError:
        logger.info("No logo at %s, using text wordmark", logo_path)
    except OSError:
        logger.warning("Could not read logo at %s", logo_path, exc_info=True)
    return BrandingAssets()


def format_date(value: date | None) -> str:
    if value is None:
        return NOT_SELECTED
    return f"{value:%A}, {value.day} {value:%B %Y}"


def format_rand(amount: int) -> str:
    return f"R {amount:.2f}"


def build_quote_document(
    request: SanitizedQuoteRequest,
    priced: PricedQuote,
    branding: BrandingAssets,
) -> QuoteDocument:
    # Text fields were escaped during admission; mark them so Jinja keeps them as is.
    html = _env.get_template("quote_email.html").render(
        business_name=BUSINESS_NAME,
        business_contact=BUSINESS_CONTACT,
        logo_cid=LOGO_CID if branding.has_logo else None,
        customer={
            "name": Markup(request.name),
            "business_name": Markup(request.business_name),
            "phone": Markup(request.phone),
            "email": Markup(request.email),
            "address": Markup(request.address),
        },
        service_type=Markup(request.service_type),
        property_size=Markup(request.property_size),
        square_meters=(
            f"{request.square_meters} m²" if request.square_meters else NOT_SPECIFIED
        ),
        selected_date=format_date(request.selected_date),
        base_price=format_rand(priced.base_price),
        line_items=[
            {
                "name": Markup(item.name),
                "quantity": item.quantity,
                "total": format_rand(item.total),
            }
            for item in priced.line_items
        ],
        total=format_rand(priced.total),
        notes=Markup(request.notes) if request.notes else None,
        excluded_cleaning=EXCLUDED_CLEANING,
        terms=TERMS,
        copyright_year=date.today().year,
    )
    return QuoteDocument(html=html, logo=branding.logo)


def sample_quote_request() -> SanitizedQuoteRequest:
    return SanitizedQuoteRequest(
        name="John Doe",
        business_name="Acme Properties",
        phone="079 123 4567",
        email="john.doe@example.com",
        address="12 Example Street, Randburg, 2195",
        selected_date=date(2025, 3, 3),
        service_type="Deep Clean (FURNISHED)",
        property_size="3-bed/2-bath",
        square_meters=120,
        add_ons=(
            AddOnSelection(name="Ironing Standard Basket", quantity=2),
            AddOnSelection(name="Int/Ext Window Cleaning", quantity=5),
        ),
        notes="Please bring extra microfiber cloths.",
    )


def sample_quote_document(branding: BrandingAssets | None = None) -> QuoteDocument:
    """Render the demo request, for previewing the email layout."""
    request = sample_quote_request()
    priced = calculate_quote(
        request.service_type, request.property_size, request.add_ons
    )
    return build_quote_document(request, priced, branding or BrandingAssets())
