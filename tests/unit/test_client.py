import json
from collections.abc import AsyncGenerator, Callable
from datetime import date

import httpx
import pytest

from angicleans.catalog.models import AddOn
from angicleans.client import (
    FAILURE_MESSAGE,
    QUANTITY_MAX,
    SUCCESS_MESSAGE,
    QuoteFormController,
    SubmissionStatus,
    is_quantity_add_on,
)

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def requests_seen() -> list[httpx.Request]:
    return []


@pytest.fixture
def respond_ok(requests_seen: list[httpx.Request]) -> Handler:
    def handler(request: httpx.Request) -> httpx.Response:
        requests_seen.append(request)
        return httpx.Response(
            200,
            json={
                "message": "Email sent successfully",
                "messageId": "<quote-1@angicleans.co.za>",
                "success": True,
            },
        )

    return handler


async def _controller(handler: Handler) -> AsyncGenerator[QuoteFormController]:
    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield QuoteFormController(c)


@pytest.fixture
async def controller(respond_ok: Handler) -> AsyncGenerator[QuoteFormController]:
    async for c in _controller(respond_ok):
        yield c


def _fill(controller: QuoteFormController) -> None:
    form = controller.form
    form.name = "Jane Smith"
    form.email = "jane@example.com"
    form.phone = "082 555 0101"
    form.service_type = "Deep Clean (FURNISHED)"
    form.property_size = "3-bed/2-bath"
    controller.toggle_add_on(AddOn.IRONING.value, True)
    controller.toggle_add_on(AddOn.WINDOWS.value, True)
    controller.set_quantity(AddOn.IRONING.value, 2)
    controller.set_quantity(AddOn.WINDOWS.value, 5)


class TestFormEditing:
    def test_prefills_email(self) -> None:
        controller = QuoteFormController(httpx.AsyncClient(), email="jane@example.com")

        assert controller.form.email == "jane@example.com"

    def test_toggle_add_on(self, controller: QuoteFormController) -> None:
        controller.toggle_add_on(AddOn.IRONING.value, True)
        controller.toggle_add_on(AddOn.IRONING.value, True)

        assert controller.form.add_ons == [AddOn.IRONING.value]
        assert controller.form.add_on_quantities == {AddOn.IRONING.value: 1}

        controller.toggle_add_on(AddOn.IRONING.value, False)

        assert controller.form.add_ons == []
        assert controller.form.add_on_quantities == {}

    @pytest.mark.parametrize(
        ("requested", "stored"), [(0, 1), (-4, 1), (7, 7), (21, QUANTITY_MAX)]
    )
    def test_quantity_is_clamped(
        self, controller: QuoteFormController, requested: int, stored: int
    ) -> None:
        assert controller.set_quantity(AddOn.WINDOWS.value, requested) == stored
        assert controller.form.add_on_quantities[AddOn.WINDOWS.value] == stored

    def test_flat_add_ons_have_no_quantity(
        self, controller: QuoteFormController
    ) -> None:
        assert not is_quantity_add_on(AddOn.SMALL_PATIO.value)
        assert not is_quantity_add_on("Oven Clean")

        with pytest.raises(ValueError):
            controller.set_quantity(AddOn.LARGE_PATIO.value, 2)

    def test_rejects_past_dates(self, controller: QuoteFormController) -> None:
        today = date(2025, 3, 3)

        with pytest.raises(ValueError):
            controller.set_date(date(2025, 3, 2), today=today)

        controller.set_date(today, today=today)
        assert controller.form.selected_date == today


class TestPreview:
    def test_service_description(self, controller: QuoteFormController) -> None:
        assert controller.service_description() is None

        controller.form.service_type = "Pre and Post Tenancy Clean (UNFURNISHED)"

        assert "end-of-lease" in (controller.service_description() or "")

    def test_matches_catalog_pricing(self, controller: QuoteFormController) -> None:
        _fill(controller)

        priced = controller.preview()

        assert priced.base_price == 1600
        assert priced.total == 2150

    def test_flat_add_on_counts_once(self, controller: QuoteFormController) -> None:
        controller.form.service_type = "Standard Clean (FURNISHED)"
        controller.form.property_size = "1-bed/1-bath"
        controller.toggle_add_on(AddOn.MEDIUM_PATIO.value, True)

        assert controller.preview().total == 450 + 500


class TestSubmit:
    async def test_success_resets_form(
        self, controller: QuoteFormController, requests_seen: list[httpx.Request]
    ) -> None:
        _fill(controller)
        controller.set_date(date(2099, 1, 5))

        outcome = await controller.submit()

        assert outcome.status is SubmissionStatus.SUCCESS
        assert outcome.message == SUCCESS_MESSAGE
        assert outcome.message_id == "<quote-1@angicleans.co.za>"
        assert not outcome.can_retry
        assert controller.status is SubmissionStatus.SUCCESS
        assert controller.form.name == ""
        assert controller.form.add_ons == []

        (request,) = requests_seen
        assert request.url.path == "/api/send-quote"
        body = json.loads(request.content)
        assert body["serviceType"] == "Deep Clean (FURNISHED)"
        assert body["selectedDate"] == "2099-01-05"
        assert body["addOnQuantities"] == {
            AddOn.IRONING.value: 2,
            AddOn.WINDOWS.value: 5,
        }

    async def test_payload_never_carries_a_price(
        self, controller: QuoteFormController, requests_seen: list[httpx.Request]
    ) -> None:
        _fill(controller)

        await controller.submit()

        body = json.loads(requests_seen[0].content)
        assert not {"total", "basePrice", "price", "lineItems"} & set(body)

    async def test_server_error_keeps_form(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                503, json={"error": "Email service currently unavailable"}
            )

        async for controller in _controller(handler):
            _fill(controller)

            outcome = await controller.submit()

            assert outcome.status is SubmissionStatus.FAILURE
            assert outcome.message == FAILURE_MESSAGE
            assert outcome.error == "Email service currently unavailable"
            assert outcome.can_retry
            assert controller.form.name == "Jane Smith"
            assert controller.preview().total == 2150

    async def test_network_error_keeps_form(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async for controller in _controller(handler):
            _fill(controller)

            outcome = await controller.submit()

            assert outcome.status is SubmissionStatus.FAILURE
            assert "connection refused" in (outcome.error or "")
            assert controller.form.email == "jane@example.com"

    async def test_non_json_error_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="Bad Gateway")

        async for controller in _controller(handler):
            _fill(controller)

            outcome = await controller.submit()

            assert outcome.error == "Bad Gateway"

    @pytest.mark.parametrize(
        ("status", "body", "expected"),
        [
            (200, b"OK", SubmissionStatus.SUCCESS),
            (200, b"[]", SubmissionStatus.SUCCESS),
            (400, b'["Missing required fields"]', SubmissionStatus.FAILURE),
        ],
    )
    async def test_unexpected_response_bodies(
        self, status: int, body: bytes, expected: SubmissionStatus
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, content=body)

        async for controller in _controller(handler):
            _fill(controller)

            outcome = await controller.submit()

            assert outcome.status is expected
            assert controller.status is expected
            assert outcome.message_id is None
