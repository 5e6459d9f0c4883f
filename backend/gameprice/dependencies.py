"""FastAPI dependency injection providers."""

from typing import Callable

from gameprice.scrapers.orchestrator import BatchOrchestrator
from gameprice.scrapers.registry import SiteProfileRegistry, get_site_registry
from gameprice.services.delivery import DeliveryClient
from gameprice.services.job_state import ScrapeJobState, get_job_state

OrchestratorFactory = Callable[[], BatchOrchestrator]


def get_orchestrator_factory() -> OrchestratorFactory:
    """Return a callable building a fresh orchestrator per scrape.

    Each scrape owns its orchestrator (and so its browser), which is closed
    when the scrape ends. Tests override this provider with fakes.
    """
    return BatchOrchestrator


def get_delivery_client() -> DeliveryClient:
    return DeliveryClient()


def get_state() -> ScrapeJobState:
    return get_job_state()


def get_registry() -> SiteProfileRegistry:
    return get_site_registry()
