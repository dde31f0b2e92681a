from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi import FastAPI

from angicleans.base.dependencies import get_mailer, get_rate_limiter, get_settings
from angicleans.quote.delivery import QuoteMailer
from angicleans.quote.ratelimit import RateLimiter
from angicleans.quote.router import router
from angicleans.settings import Settings
from tests.fakes import PNG_BYTES, FakeClock


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def limiter(clock: FakeClock) -> RateLimiter:
    return RateLimiter(clock=clock)


@pytest.fixture
def logo_path(tmp_path: Path) -> Path:
    path = tmp_path / "logo.png"
    path.write_bytes(PNG_BYTES)
    return path


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        smtp_user="quotes@angicleans.co.za",
        smtp_password="app-password",
        logo_path=tmp_path / "missing.png",
    )


@pytest.fixture
def mailer() -> AsyncMock:
    m = AsyncMock(spec=QuoteMailer)
    m.send.return_value = "<quote-1@angicleans.co.za>"
    return m


@pytest.fixture
def app(settings: Settings, limiter: RateLimiter, mailer: AsyncMock) -> FastAPI:
    test_app = FastAPI()
    test_app.include_router(router)
    test_app.dependency_overrides[get_settings] = lambda: settings
    test_app.dependency_overrides[get_rate_limiter] = lambda: limiter
    test_app.dependency_overrides[get_mailer] = lambda: mailer
    return test_app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)  # type: ignore[arg-type]
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def quote_payload() -> dict[str, object]:
    return {
        "name": "Jane Smith",
        "businessName": "",
        "phone": "082 555 0101",
        "email": "jane@example.com",
        "address": "4 Oak Avenue, Randburg",
        "selectedDate": "2025-03-03T00:00:00.000Z",
        "serviceType": "Deep Clean (FURNISHED)",
        "propertySize": "3-bed/2-bath",
        "squareMeters": "120",
        "addOns": ["Ironing Standard Basket", "Int/Ext Window Cleaning"],
        "addOnQuantities": {"Ironing Standard Basket": 2, "Int/Ext Window Cleaning": 5},
        "additionalNotes": "",
    }
