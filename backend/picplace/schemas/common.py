"""
PicPlace Backend — Shared Response Schemas
============================================

What:  Error body and health check models used across routes.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.
    Why:   Clients need a consistent structure to parse errors programmatically.

    Example:
        {
            "error": "validation_error",
            "message": "Invalid inputs passed, please check your data.",
            "details": {"errors": [{"field": "password", "message": "..."}]},
            "request_id": "1f0c2a9e"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and database status."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    geocoder: Optional[str] = Field(
        default=None, description="Geocoder reachability, only reported for ?deep=true"
    )
    uptime_seconds: float = Field(description="Seconds since service started")
