"""
Survey Backend — SurveyResponse SQLAlchemy Model
=================================================

What:  ORM model for the `respuestas` table: one submitted questionnaire.
Why:   Maps survey submissions to rows; NOT NULL columns are the store-side
       guard for the required answers.
Who:   Written by SurveyService.submit, read by list and statistics.

Table Design Rationale:
    - UUID primary key: opaque identifier assigned on insert
    - Answers are free text; the frontend sends the selected option label
    - zonas_oscuras / problemas_especificos are JSON lists of strings
    - created_at / updated_at are UTC and set by the model, never by clients
    - Records are never updated in place; updated_at equals created_at

Index on created_at:
    Listing is always newest first and statistics filter on a trailing
    window, both on created_at.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SurveyResponse(Base):
    """
    One security survey answered by a market vendor.

    Lifecycle:
        1. Created by POST /api/respuestas after validation
        2. Read by GET /api/respuestas and GET /api/estadisticas
        3. Deleted individually or in bulk; never updated
    """

    __tablename__ = "respuestas"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # ── Respondent ────────────────────────────────────────────────────────
    nombre: Mapped[str] = mapped_column(String(255), nullable=False)
    puesto: Mapped[str] = mapped_column(String(255), nullable=False)
    telefono: Mapped[Optional[str]] = mapped_column(String(50))
    fecha: Mapped[Optional[str]] = mapped_column(String(50))
    hora: Mapped[Optional[str]] = mapped_column(String(50))

    # ── Security Perception ───────────────────────────────────────────────
    seguridad_general: Mapped[str] = mapped_column(String(100), nullable=False)
    presencia_serenazgo: Mapped[str] = mapped_column(String(100), nullable=False)
    frecuencia_serenazgo: Mapped[Optional[str]] = mapped_column(String(100))
    iluminacion_general: Mapped[str] = mapped_column(String(100), nullable=False)
    zonas_oscuras: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    camaras_funcionando: Mapped[str] = mapped_column(String(100), nullable=False)
    ubicacion_camaras: Mapped[Optional[str]] = mapped_column(Text)
    problemas_especificos: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    incidentes_reportados: Mapped[Optional[str]] = mapped_column(Text)
    tiempo_respuesta: Mapped[str] = mapped_column(String(100), nullable=False)
    capacitacion_seguridad: Mapped[str] = mapped_column(String(100), nullable=False)
    sugerencia_mejora: Mapped[Optional[str]] = mapped_column(Text)

    # ── Overall Assessment ────────────────────────────────────────────────
    calificacion_general: Mapped[str] = mapped_column(String(100), nullable=False)
    confianza_administracion: Mapped[str] = mapped_column(String(100), nullable=False)
    participacion_comerciantes: Mapped[str] = mapped_column(String(100), nullable=False)
    comentarios_adicionales: Mapped[Optional[str]] = mapped_column(Text)

    # ── Timestamps ────────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    __table_args__ = (
        Index("idx_respuestas_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<SurveyResponse(id={self.id}, nombre='{self.nombre}', created_at='{self.created_at}')>"
