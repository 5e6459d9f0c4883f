"""Services module for delivery and job bookkeeping.

This module contains the webhook delivery client and the in-memory job
state shared by the HTTP API.
"""

from gameprice.services.delivery import DeliveryClient, build_payload
from gameprice.services.job_state import ScrapeJobState, get_job_state

__all__ = [
    "DeliveryClient",
    "build_payload",
    "ScrapeJobState",
    "get_job_state",
]
