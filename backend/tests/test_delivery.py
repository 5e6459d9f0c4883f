"""Tests for the n8n webhook payload and DeliveryClient."""

import json
from datetime import datetime, timezone

import httpx
from jsonschema import validate
from tenacity import wait_none

from conftest import make_item
from gameprice.scrapers.base import BatchReport, ScrapeOutcome
from gameprice.services.delivery import (
    CLIENT_USER_AGENT,
    TEST_BATCH_ID,
    DeliveryClient,
    build_payload,
    build_price_records,
)


WEBHOOK = "http://n8n.test/webhook/game-prices"
TURKPIN = "https://www.turkpin.com/pubg-mobile-uc"
FOXEPIN = "https://www.foxepin.com/valorant"

PAYLOAD_SCHEMA = {
    "type": "object",
    "required": ["batchId", "timestamp", "items", "metadata"],
    "properties": {
        "batchId": {"type": "string"},
        "timestamp": {"type": "string"},
        "items": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["price", "currency", "region", "product_name", "url", "batch_timestamp"],
                "properties": {
                    "price": {"type": "number", "exclusiveMinimum": 0},
                    "currency": {"enum": ["TRY", "USD", "EUR"]},
                    "region": {"enum": ["TR", "GLOBAL", "EU", "US"]},
                    "product_name": {"type": "string", "minLength": 1},
                    "url": {"type": "string"},
                    "batch_timestamp": {"type": "string"},
                },
                "additionalProperties": False,
            },
        },
        "metadata": {
            "type": "object",
            "required": ["totalUrls", "successCount", "failedCount", "totalItems"],
            "properties": {
                "totalUrls": {"type": "integer"},
                "successCount": {"type": "integer"},
                "failedCount": {"type": "integer"},
                "totalItems": {"type": "integer"},
            },
        },
    },
}


def _report() -> BatchReport:
    outcomes = [
        ScrapeOutcome(
            url=TURKPIN,
            succeeded=True,
            site_domain="turkpin.com",
            items=(
                make_item(TURKPIN, "PUBG Mobile 60 UC", "₺29,90"),
                make_item(TURKPIN, "PUBG Mobile Hediye", "0 TL"),
            ),
        ),
        ScrapeOutcome(
            url=FOXEPIN,
            succeeded=True,
            site_domain="foxepin.com",
            items=(make_item(FOXEPIN, "Valorant 475 VP", "$5.49"),),
        ),
        ScrapeOutcome.failure("https://www.oyuneks.com/x", "No items found with bypass proxy"),
    ]
    return BatchReport.from_outcomes(
        "batch_1700000000000_abc123",
        datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc),
        3,
        outcomes,
    )


# ============================================================================
# TESTS: PAYLOAD
# ============================================================================

class TestPayload:
    """Tests for build_payload and build_price_records."""

    def test_payload_matches_contract(self):
        payload = build_payload(_report())

        validate(instance=payload, schema=PAYLOAD_SCHEMA)
        assert payload["batchId"] == "batch_1700000000000_abc123"
        assert payload["metadata"] == {
            "totalUrls": 3,
            "successCount": 2,
            "failedCount": 1,
            "totalItems": 3,
        }

    def test_non_positive_prices_are_dropped(self):
        records = build_price_records(_report())

        assert [r["product_name"] for r in records] == ["PUBG Mobile 60 UC", "Valorant 475 VP"]
        assert records[0]["price"] == 29.9
        assert records[0]["currency"] == "TRY"
        assert records[1]["currency"] == "USD"

    def test_records_share_batch_timestamp(self):
        records = build_price_records(_report())

        assert {r["batch_timestamp"] for r in records} == {"2026-01-15T12:00:00+00:00"}

    def test_payload_is_json_serializable(self):
        json.dumps(build_payload(_report()), ensure_ascii=False)


# ============================================================================
# TESTS: CLIENT
# ============================================================================

class TestDeliveryClient:
    """Tests for DeliveryClient against a mocked webhook."""

    async def test_successful_delivery(self):
        received = []

        def handler(request: httpx.Request) -> httpx.Response:
            received.append(request)
            return httpx.Response(200, json={"ok": True})

        client = DeliveryClient(webhook_url=WEBHOOK, transport=httpx.MockTransport(handler))

        assert await client.send_batch_data(_report()) is True
        assert len(received) == 1
        assert str(received[0].url) == WEBHOOK
        assert received[0].headers["User-Agent"] == CLIENT_USER_AGENT
        validate(instance=json.loads(received[0].content), schema=PAYLOAD_SCHEMA)

    async def test_retries_once_then_gives_up(self):
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            return httpx.Response(500, text="workflow error")

        client = DeliveryClient(
            webhook_url=WEBHOOK,
            transport=httpx.MockTransport(handler),
            retry_wait=wait_none(),
        )

        assert await client.send_batch_data(_report()) is False
        assert len(attempts) == 2

    async def test_second_attempt_can_succeed(self):
        statuses = [502, 200]

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(statuses.pop(0))

        client = DeliveryClient(
            webhook_url=WEBHOOK,
            transport=httpx.MockTransport(handler),
            retry_wait=wait_none(),
        )

        assert await client.send_batch_data(_report()) is True
        assert statuses == []

    async def test_connection_error_returns_false(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = DeliveryClient(
            webhook_url=WEBHOOK,
            transport=httpx.MockTransport(handler),
            retry_wait=wait_none(),
        )

        assert await client.send_batch_data(_report()) is False

    async def test_connection_test_posts_sentinel_batch(self):
        received = []

        def handler(request: httpx.Request) -> httpx.Response:
            received.append(json.loads(request.content))
            return httpx.Response(204)

        client = DeliveryClient(webhook_url=WEBHOOK, transport=httpx.MockTransport(handler))

        assert await client.test_connection() is True
        body = received[0]
        assert body["batchId"] == TEST_BATCH_ID
        assert body["items"] == []
        validate(instance=body, schema=PAYLOAD_SCHEMA)

    async def test_connection_test_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404)

        client = DeliveryClient(webhook_url=WEBHOOK, transport=httpx.MockTransport(handler))

        assert await client.test_connection() is False

    def test_set_webhook_url(self):
        client = DeliveryClient(webhook_url=WEBHOOK)

        client.set_webhook_url("http://n8n.test/webhook-waiting/42")

        assert client.webhook_url == "http://n8n.test/webhook-waiting/42"
