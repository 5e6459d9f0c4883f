"""Tests for the FlareSolverr-backed extractor using httpx.MockTransport."""

import json

import httpx
import pytest
from tenacity import wait_none

from gameprice.core.exceptions import ProxyServiceError
from gameprice.scrapers.proxy_extractor import NO_ITEMS_MESSAGE, ProxyExtractor
from gameprice.scrapers.registry import SiteProfileRegistry


URL = "https://www.oyuneks.com/pubg-mobile-uc"

OYUNEKS_HTML = """
<html><body>
  <button class="productListHorizontal detailProductButton">
    <div class="productListHorizontalDetailTitle">PUBG Mobile 60 UC</div>
    <div class="productListHorizontalDetailPrice">29,90 TL</div>
  </button>
  <button class="productListHorizontal detailProductButton">
    <div class="productListHorizontalDetailTitle">PUBG Mobile 325 UC</div>
    <div class="productListHorizontalDetailPrice">149,90 TL</div>
  </button>
</body></html>
"""


class FlareSolverrStub:
    """Records FlareSolverr commands and answers request.get with fixed data."""

    def __init__(self, solution_html=OYUNEKS_HTML, status="ok", message=None, fail_connects=0):
        self.commands = []
        self.solution_html = solution_html
        self.status = status
        self.message = message
        self.fail_connects = fail_connects

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.commands.append(body)
        if body["cmd"] == "sessions.create":
            return httpx.Response(500, json={"status": "error", "message": "session exists"})
        if self.fail_connects:
            self.fail_connects -= 1
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(
            200,
            json={
                "status": self.status,
                "message": self.message,
                "solution": {"response": self.solution_html},
            },
        )


def _extractor(stub: FlareSolverrStub) -> ProxyExtractor:
    return ProxyExtractor(
        base_url="http://flaresolverr:8191/",
        user_agent="TestAgent/1.0",
        transport=httpx.MockTransport(stub),
        retry_wait=wait_none(),
    )


class TestProxyExtractor:
    """Tests for ProxyExtractor.scrape."""

    async def test_scrapes_through_flaresolverr(self):
        stub = FlareSolverrStub()
        extractor = _extractor(stub)

        outcome = await extractor.scrape(URL)
        await extractor.close()

        assert outcome.succeeded is True
        assert [i.title for i in outcome.items] == ["PUBG Mobile 60 UC", "PUBG Mobile 325 UC"]
        assert outcome.site_domain == "oyuneks.com"

        create, get = stub.commands
        assert create == {"cmd": "sessions.create", "session": "session_oyuneks.com"}
        assert get["cmd"] == "request.get"
        assert get["url"] == URL
        assert get["session"] == "session_oyuneks.com"
        assert get["maxTimeout"] == 180000
        assert get["userAgent"] == "TestAgent/1.0"

    async def test_non_ok_status_is_failure(self):
        stub = FlareSolverrStub(status="error", message="Challenge not solved")
        extractor = _extractor(stub)

        outcome = await extractor.scrape(URL)

        assert outcome.succeeded is False
        assert "Challenge not solved" in outcome.error_message

    async def test_fetch_html_raises_proxy_error(self):
        stub = FlareSolverrStub(status="error", message="Challenge not solved")
        extractor = _extractor(stub)
        profile = SiteProfileRegistry().resolve("oyuneks.com")

        with pytest.raises(ProxyServiceError):
            await extractor.fetch_html(URL, profile)

    async def test_empty_page_is_failure(self):
        stub = FlareSolverrStub(solution_html="<html><body></body></html>")
        extractor = _extractor(stub)

        outcome = await extractor.scrape(URL)

        assert outcome.succeeded is False
        assert outcome.error_message == NO_ITEMS_MESSAGE

    async def test_connection_errors_are_retried(self):
        stub = FlareSolverrStub(fail_connects=2)
        extractor = _extractor(stub)

        outcome = await extractor.scrape(URL)

        assert outcome.succeeded is True
        gets = [c for c in stub.commands if c["cmd"] == "request.get"]
        assert len(gets) == 3

    async def test_retries_stop_at_profile_max_retries(self):
        stub = FlareSolverrStub(fail_connects=10)
        extractor = _extractor(stub)
        profile = SiteProfileRegistry().resolve("oyuneks.com")

        outcome = await extractor.scrape(URL, profile)

        assert outcome.succeeded is False
        gets = [c for c in stub.commands if c["cmd"] == "request.get"]
        assert len(gets) == profile.max_retries

    async def test_http_error_status_is_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text="unavailable")

        extractor = ProxyExtractor(transport=httpx.MockTransport(handler), retry_wait=wait_none())

        outcome = await extractor.scrape(URL)

        assert outcome.succeeded is False
        assert "503" in outcome.error_message
