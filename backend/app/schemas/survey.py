"""
Survey Backend — Survey Request/Response Schemas
=================================================

What:  Pydantic contracts for the survey endpoints.
Why:   The frontend speaks camelCase (`seguridadGeneral`), Python speaks
       snake_case; `to_camel` aliases bridge the two in both directions.

Two input models on purpose:
    SurveySubmission  — what the route accepts. Every field optional so the
                        service can answer a missing name/role with its own
                        flat message. Unknown keys are rejected.
    SurveyRecord      — the persisted-record schema. Required answers must be
                        non-empty strings; failures become a per-field 400.
"""

import uuid
from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel

from app.schemas.common import as_utc

RequiredAnswer = Annotated[str, StringConstraints(min_length=1)]


class SurveySubmission(BaseModel):
    """Body of POST /api/respuestas."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    nombre: Optional[str] = None
    puesto: Optional[str] = None
    telefono: Optional[str] = None
    fecha: Optional[str] = None
    hora: Optional[str] = None
    seguridad_general: Optional[str] = None
    presencia_serenazgo: Optional[str] = None
    frecuencia_serenazgo: Optional[str] = None
    iluminacion_general: Optional[str] = None
    zonas_oscuras: Optional[List[str]] = None
    camaras_funcionando: Optional[str] = None
    ubicacion_camaras: Optional[str] = None
    problemas_especificos: Optional[List[str]] = None
    incidentes_reportados: Optional[str] = None
    tiempo_respuesta: Optional[str] = None
    capacitacion_seguridad: Optional[str] = None
    sugerencia_mejora: Optional[str] = None
    calificacion_general: Optional[str] = None
    confianza_administracion: Optional[str] = None
    participacion_comerciantes: Optional[str] = None
    comentarios_adicionales: Optional[str] = None


class SurveyRecord(BaseModel):
    """Schema every stored SurveyResponse satisfies."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    nombre: RequiredAnswer
    puesto: RequiredAnswer
    telefono: Optional[str] = None
    fecha: Optional[str] = None
    hora: Optional[str] = None
    seguridad_general: RequiredAnswer
    presencia_serenazgo: RequiredAnswer
    frecuencia_serenazgo: Optional[str] = None
    iluminacion_general: RequiredAnswer
    zonas_oscuras: List[str] = Field(default_factory=list)
    camaras_funcionando: RequiredAnswer
    ubicacion_camaras: Optional[str] = None
    problemas_especificos: List[str] = Field(default_factory=list)
    incidentes_reportados: Optional[str] = None
    tiempo_respuesta: RequiredAnswer
    capacitacion_seguridad: RequiredAnswer
    sugerencia_mejora: Optional[str] = None
    calificacion_general: RequiredAnswer
    confianza_administracion: RequiredAnswer
    participacion_comerciantes: RequiredAnswer
    comentarios_adicionales: Optional[str] = None


class SurveyOut(SurveyRecord):
    """A stored survey as returned by GET /api/respuestas."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        return as_utc(v)


class SubmitResponse(BaseModel):
    """Returned by POST /api/respuestas with HTTP 201."""
    message: str = Field(default="Respuesta guardada correctamente")
    id: uuid.UUID = Field(description="Generated survey identifier")


class StatisticsResponse(BaseModel):
    """Returned by GET /api/estadisticas."""
    total: int = Field(description="Number of stored surveys")
    last7days: int = Field(description="Surveys created in the trailing 7×24h window")
    timestamp: datetime = Field(description="When the counts were taken (UTC)")


class DeleteAllResponse(BaseModel):
    """Returned by DELETE /api/respuestas."""
    message: str
    count: int = Field(description="Number of deleted surveys")
