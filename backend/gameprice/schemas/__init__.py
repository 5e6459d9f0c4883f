"""Pydantic schemas for the Game Price Scraper API.

All request/response models are defined here for easy import.
"""

from gameprice.schemas.health import HealthCheckResponse
from gameprice.schemas.scrape import (
    DomainsResponse,
    FailedUrl,
    FailedUrlsResponse,
    JobStatusResponse,
    ScrapeStartRequest,
    ScrapeStartResponse,
    ScrapeSummary,
    ScrapeSyncData,
    ScrapeSyncRequest,
    ScrapeSyncResponse,
    WebhookTestResponse,
    valid_urls,
)

__all__ = [
    # Health
    "HealthCheckResponse",
    # Scrape
    "ScrapeSyncRequest",
    "ScrapeSyncResponse",
    "ScrapeSummary",
    "ScrapeSyncData",
    "ScrapeStartRequest",
    "ScrapeStartResponse",
    "JobStatusResponse",
    "FailedUrl",
    "FailedUrlsResponse",
    "WebhookTestResponse",
    "DomainsResponse",
    "valid_urls",
]
