"""Health, connectivity and configuration endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from gameprice.dependencies import get_delivery_client, get_registry
from gameprice.schemas import DomainsResponse, HealthCheckResponse, WebhookTestResponse
from gameprice.scrapers.registry import SiteProfileRegistry
from gameprice.services.delivery import DeliveryClient

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
async def health_check():
    """Liveness probe; does not touch the browser or external services."""
    return HealthCheckResponse(
        status="OK",
        service="Game Price Scraper",
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/test/webhook", response_model=WebhookTestResponse)
async def test_webhook(client: DeliveryClient = Depends(get_delivery_client)):
    """Post the sentinel batch to the n8n webhook and report reachability."""
    connected = await client.test_connection()
    return WebhookTestResponse(
        success=connected,
        webhookUrl=client.webhook_url,
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/domains", response_model=DomainsResponse)
async def list_domains(registry: SiteProfileRegistry = Depends(get_registry)):
    domains = registry.domains()
    return DomainsResponse(
        domains=domains,
        bypassDomains=sorted(registry.bypass_domains),
        count=len(domains),
        timestamp=datetime.now(timezone.utc),
    )
