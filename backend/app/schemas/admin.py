"""
Survey Backend — Admin Request/Response Schemas
================================================

What:  Pydantic contracts for login and registration.
Why:   Fields are optional at this layer so AdminService can enforce the
       documented precedence (secret first, then presence, then lengths)
       with its own messages instead of FastAPI's generic 422.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from app.schemas.common import as_utc


class LoginRequest(BaseModel):
    """Body of POST /api/login."""

    model_config = ConfigDict(extra="forbid")

    usuario: Optional[str] = None
    password: Optional[str] = None


class RegisterRequest(BaseModel):
    """Body of POST /api/register. `token` is the shared registration secret."""

    model_config = ConfigDict(extra="forbid")

    token: Optional[str] = None
    usuario: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class AdminUserOut(BaseModel):
    """Public view of an admin. The password hash is never part of it."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    usuario: str
    email: str
    fecha_registro: datetime

    @field_validator("fecha_registro")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        return as_utc(v)


class LoginResponse(BaseModel):
    """Returned by POST /api/login on success."""
    message: str = "Login exitoso"
    user: AdminUserOut
