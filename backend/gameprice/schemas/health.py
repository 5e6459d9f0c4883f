"""Health check schemas."""

from datetime import datetime

from pydantic import BaseModel


class HealthCheckResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str
    timestamp: datetime
