"""Core schemas for the application."""

from pydantic import BaseModel, ConfigDict


class LedgerModel(BaseModel):
    """Base for read models that carry Money values."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)


class HealthCheck(BaseModel):
    """Schema for health check response."""
    service_name: str
    status: str
