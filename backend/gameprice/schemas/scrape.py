"""Pydantic schemas for the scrape job endpoints.

Field names use the camelCase keys the n8n workflows already send and read.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ScrapeSyncRequest(BaseModel):
    """Body of POST /scrape/sync."""

    urls: List[str] = Field(
        default_factory=list,
        description="Product listing URLs; entries not starting with http are ignored",
        examples=[["https://www.turkpin.com/pubg-mobile-uc"]],
    )


class ScrapeStartRequest(BaseModel):
    """Body of POST /scrape/start. Both fields are optional."""

    model_config = ConfigDict(populate_by_name=True)

    urls: Optional[List[str]] = Field(
        None,
        description="URLs to scrape; defaults to the configured URL file",
    )
    resume_url: Optional[str] = Field(
        None,
        alias="resumeUrl",
        description="n8n resume webhook that receives this job's batch",
    )


def valid_urls(urls: Optional[List[str]]) -> List[str]:
    """Keep only entries that look like http(s) URLs."""
    return [u.strip() for u in urls or [] if isinstance(u, str) and u.strip().startswith("http")]


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ScrapeSummary(BaseModel):
    totalUrls: int
    successCount: int
    failedCount: int
    totalItems: int


class ScrapeSyncData(BaseModel):
    batchId: str
    timestamp: datetime
    summary: ScrapeSummary
    items: List[Dict[str, Any]]
    errors: List[str]


class ScrapeSyncResponse(BaseModel):
    success: bool = True
    message: str = "Scraping completed successfully"
    data: ScrapeSyncData


class JobStatusResponse(BaseModel):
    isRunning: bool
    batchId: Optional[str] = None
    startedAt: Optional[str] = None
    finishedAt: Optional[str] = None
    processed: int = 0
    total: int = 0
    progress: int = 0
    lastError: Optional[str] = None
    hasResult: bool = False
    hasFailedUrls: bool = False
    failedUrlCount: int = 0


class ScrapeStartResponse(BaseModel):
    success: bool = True
    message: str
    isRunning: bool
    totalUrls: Optional[int] = None
    currentStatus: Optional[JobStatusResponse] = None


class FailedUrl(BaseModel):
    url: str
    siteName: str
    error: Optional[str] = None


class FailedUrlsResponse(BaseModel):
    success: bool = True
    failedUrls: List[FailedUrl]
    count: int
    timestamp: datetime


class WebhookTestResponse(BaseModel):
    success: bool
    webhookUrl: str
    timestamp: datetime


class DomainsResponse(BaseModel):
    domains: List[str]
    bypassDomains: List[str]
    count: int
    timestamp: datetime
