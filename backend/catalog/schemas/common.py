"""
Coffee Catalog Backend: Shared Response Schemas
=================================================

What:  Error, health and chain-lookup response models shared across routers.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """
    Standardized error body for every non-2xx response.

    Example:
        {
            "error": "not_found",
            "message": "Coffee 7 not found",
            "request_id": "1f3a9c2e",
            "timestamp": "2024-01-15T12:00:00+00:00"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")
    timestamp: Optional[datetime] = Field(default=None, description="When the error occurred (UTC)")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")


class ChainResponse(BaseModel):
    name: str = Field(description="Chain name, e.g. ETHEREUM")
    chain_id: int = Field(alias="chainId", description="Numeric chain id")

    model_config = ConfigDict(populate_by_name=True)
