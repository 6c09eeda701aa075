"""
Survey Backend — Shared Pydantic Schemas
=========================================

What:  Response models used by more than one route, plus the helper that
       flattens pydantic errors into the {field, message} list returned on 400.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import BaseModel, Field


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; every stored timestamp is UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def field_errors(errors: Sequence[Dict[str, Any]]) -> List[Dict[str, str]]:
    """
    Convert pydantic error dicts into [{"field": ..., "message": ...}].

    The leading "body" segment FastAPI adds to request errors is dropped, so
    a missing answer is reported as "seguridadGeneral" rather than
    "body.seguridadGeneral".
    """
    details = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if len(loc) > 1 and loc[0] == "body":
            loc = loc[1:]
        details.append({
            "field": ".".join(loc) or "body",
            "message": error.get("msg", "Valor inválido"),
        })
    return details


class MessageResponse(BaseModel):
    """Plain acknowledgement returned by register and delete-one."""
    message: str = Field(description="Human-readable result")


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Fields:
        error: Machine-readable error code (e.g., "validation_error", "not_found")
        message: Human-readable description
        details: Field-level errors (400), colliding field (409), or the
                 underlying error outside production (500)
        request_id: Correlation ID for tracing this error in server logs
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[Union[List[Dict[str, str]], Dict[str, Any], str]] = Field(
        default=None, description="Additional error context"
    )
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and store status.
    Who:   Returned by GET /api/health for monitoring and platform probes.
    """
    status: str = Field(description="Overall service status: healthy or unhealthy")
    timestamp: datetime = Field(description="Server time (UTC)")
    environment: str = Field(description="Deployment mode")
    database: str = Field(description="Store connectivity: connected, disconnected")
    version: str = Field(description="Application version")
    uptime_seconds: float = Field(description="Seconds since service started")
