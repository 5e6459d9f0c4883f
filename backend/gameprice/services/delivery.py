"""Delivery of batch results to the n8n automation webhook.

This module converts a BatchReport into the webhook's payload shape and
posts it with a bounded timeout and a single retry.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx
import structlog
from tenacity.wait import wait_base

from gameprice.config import settings
from gameprice.core.exceptions import DeliveryError
from gameprice.scrapers.base import BatchReport
from gameprice.scrapers.utils.normalizer import parse_price
from gameprice.scrapers.utils.retry import delivery_retrying

logger = structlog.get_logger(__name__)

CLIENT_USER_AGENT = "GamePriceScraper/1.0"
TEST_BATCH_ID = "test_connection"
TEST_TIMEOUT = 5.0
MAX_ATTEMPTS = 2


def build_price_records(report: BatchReport) -> List[Dict[str, Any]]:
    """Flatten items of succeeded outcomes into webhook price records.

    Each raw price text is parsed again; records without a positive price
    are dropped.
    """
    batch_timestamp = report.started_at.isoformat()
    records = []
    for item in report.items:
        parsed = parse_price(item.raw_price_text)
        if parsed.value <= 0:
            continue
        records.append({
            "price": parsed.value,
            "currency": parsed.currency.value,
            "region": item.region.value,
            "product_name": item.title,
            "url": item.source_url,
            "batch_timestamp": batch_timestamp,
        })
    return records


def build_payload(report: BatchReport) -> Dict[str, Any]:
    return {
        "batchId": report.batch_id,
        "timestamp": report.started_at.isoformat(),
        "items": build_price_records(report),
        "metadata": {
            "totalUrls": report.requested_url_count,
            "successCount": report.succeeded_count,
            "failedCount": report.failed_count,
            "totalItems": report.total_item_count,
        },
    }


class DeliveryClient:
    """Posts batch payloads to the downstream webhook.

    Delivery failures are logged and reported as False, never raised.
    """

    def __init__(
        self,
        webhook_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        retry_wait: Optional[wait_base] = None,
    ):
        """Initialize delivery client.

        Args:
            webhook_url: Target URL, defaults to N8N_WEBHOOK_URL
            timeout: Per-attempt timeout in seconds
            transport: httpx transport override, used by tests
            retry_wait: tenacity wait strategy between attempts
        """
        self._webhook_url = webhook_url or settings.N8N_WEBHOOK_URL
        self.timeout = timeout or settings.DELIVERY_TIMEOUT_SECONDS
        self._transport = transport
        self._retry_wait = retry_wait
        self.logger = logger.bind(service="delivery")

    @property
    def webhook_url(self) -> str:
        return self._webhook_url

    def set_webhook_url(self, url: str) -> None:
        self._webhook_url = url
        self.logger.info("webhook_url_updated", url=url)

    async def _post(self, client: httpx.AsyncClient, payload: Dict[str, Any], timeout: float) -> int:
        response = await client.post(
            self._webhook_url,
            json=payload,
            timeout=timeout,
            headers={"User-Agent": CLIENT_USER_AGENT},
        )
        if not response.is_success:
            raise DeliveryError(response.status_code, self._webhook_url)
        return response.status_code

    async def send_batch_data(self, report: BatchReport) -> bool:
        """Send a batch report to the webhook.

        Args:
            report: Completed batch report

        Returns:
            True when the webhook answered 2xx within two attempts
        """
        payload = build_payload(report)
        log = self.logger.bind(batch_id=report.batch_id, url=self._webhook_url)
        log.info("delivery_started", items=len(payload["items"]))

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                async for attempt in delivery_retrying(MAX_ATTEMPTS, wait=self._retry_wait):
                    with attempt:
                        status = await self._post(client, payload, self.timeout)
        except (httpx.HTTPError, DeliveryError) as e:
            log.error("delivery_failed", error=str(e), attempts=MAX_ATTEMPTS)
            return False

        log.info("delivery_succeeded", status=status)
        return True

    async def test_connection(self) -> bool:
        """Post an empty sentinel batch to check that the webhook is reachable."""
        payload = {
            "batchId": TEST_BATCH_ID,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "items": [],
            "metadata": {
                "totalUrls": 0,
                "successCount": 0,
                "failedCount": 0,
                "totalItems": 0,
            },
        }
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                status = await self._post(client, payload, TEST_TIMEOUT)
        except (httpx.HTTPError, DeliveryError) as e:
            self.logger.warning("webhook_connection_test_failed", url=self._webhook_url, error=str(e))
            return False

        self.logger.info("webhook_connection_test_succeeded", url=self._webhook_url, status=status)
        return True
