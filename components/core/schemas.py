"""Core schemas for the application."""

from typing import Any, Dict, Optional

from pydantic import BaseModel


class HealthCheck(BaseModel):
    """Schema for health check response."""
    service_name: str
    status: str


class ErrorResponse(BaseModel):
    """Envelope returned for every failed request."""
    success: bool = False
    message: str
    code: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str
