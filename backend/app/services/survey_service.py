"""
Survey Backend — Survey Service (Business Logic)
=================================================

What:  Submit, list, count and delete survey responses.
Why:   Keeps the rules (required name/role, record schema, 7-day window)
       independent of HTTP so they can be tested with a mocked gateway.
How:   Each method receives the PersistenceGateway explicitly and raises
       application exceptions; the global handlers in main.py turn them
       into responses.

Submit Flow (POST /api/respuestas):
    ┌──────────┐    ┌──────────────┐    ┌──────────────┐    ┌──────────┐
    │ Request  │───▶│ name / role  │───▶│ SurveyRecord │───▶│ gateway  │
    │ (Route)  │    │ present?     │    │ schema       │    │ .create  │
    └──────────┘    └──────────────┘    └──────────────┘    └──────────┘
                     400 flat msg        400 per-field       500 on failure

Error Handling Strategy:
    PersistenceError from the gateway is re-raised with a message naming
    the operation; the original driver error stays chained as __cause__ so
    the error policy can show it outside production.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError

from app.database import PersistenceGateway
from app.exceptions import (
    ClientValidationError,
    NotFoundError,
    PersistenceError,
    SchemaValidationError,
)
from app.models.survey import SurveyResponse
from app.schemas.common import MessageResponse, field_errors
from app.schemas.survey import (
    DeleteAllResponse,
    StatisticsResponse,
    SubmitResponse,
    SurveyOut,
    SurveyRecord,
    SurveySubmission,
)

logger = logging.getLogger(__name__)

# Trailing window used by the "last7days" statistic
RECENT_WINDOW = timedelta(days=7)


class SurveyService:
    """
    Business logic for survey responses.

    Stateless: the gateway is passed to every call, so a single module-level
    instance serves all requests.
    """

    async def submit(
        self, gateway: PersistenceGateway, submission: SurveySubmission
    ) -> SubmitResponse:
        """
        Validate and store one survey.

        Raises:
            ClientValidationError: nombre or puesto missing/empty (nothing stored)
            SchemaValidationError: another required answer missing or empty
            PersistenceError: the store rejected or failed the write
        """
        if not submission.nombre or not submission.puesto:
            logger.info("Survey rejected: missing nombre or puesto")
            raise ClientValidationError("Nombre y puesto son campos obligatorios")

        try:
            record = SurveyRecord.model_validate(
                submission.model_dump(by_alias=True, exclude_none=True)
            )
        except PydanticValidationError as e:
            details = field_errors(e.errors())
            logger.info("Survey rejected: %d invalid field(s)", len(details))
            raise SchemaValidationError(details=details)

        try:
            survey_id = await gateway.create(SurveyResponse, record.model_dump())
        except PersistenceError as e:
            raise PersistenceError("Error al guardar la respuesta", context=e.context) from e

        logger.info("Survey stored: %s", survey_id)
        return SubmitResponse(id=survey_id)

    async def list_surveys(self, gateway: PersistenceGateway) -> List[SurveyOut]:
        """All surveys, newest first. An empty store yields an empty list."""
        try:
            surveys = await gateway.find_all(SurveyResponse, SurveyResponse.created_at.desc())
        except PersistenceError as e:
            raise PersistenceError("Error al obtener respuestas", context=e.context) from e

        logger.info("Returning %d surveys", len(surveys))
        return [SurveyOut.model_validate(survey) for survey in surveys]

    async def statistics(
        self, gateway: PersistenceGateway, now: Optional[datetime] = None
    ) -> StatisticsResponse:
        """
        Total count and count within the trailing 7×24h window.

        The window is inclusive: a survey created exactly seven days before
        `now` still counts.
        """
        now = now or datetime.now(timezone.utc)
        cutoff = now - RECENT_WINDOW
        try:
            total = await gateway.count(SurveyResponse)
            recent = await gateway.count(SurveyResponse, SurveyResponse.created_at >= cutoff)
        except PersistenceError as e:
            raise PersistenceError("Error al obtener estadísticas", context=e.context) from e

        return StatisticsResponse(total=total, last7days=recent, timestamp=now)

    async def delete_survey(self, gateway: PersistenceGateway, survey_id: str) -> MessageResponse:
        """
        Delete one survey.

        Raises:
            NotFoundError: no survey has this id (malformed ids included)
        """
        try:
            deleted = await gateway.delete_by_id(SurveyResponse, survey_id)
        except PersistenceError as e:
            raise PersistenceError("Error al eliminar respuesta", context=e.context) from e

        if not deleted:
            raise NotFoundError("Respuesta no encontrada", resource_id=survey_id)

        logger.info("Survey deleted: %s", survey_id)
        return MessageResponse(message="Respuesta eliminada correctamente")

    async def delete_all(self, gateway: PersistenceGateway) -> DeleteAllResponse:
        """Delete every survey. Irreversible; there is no confirmation step."""
        try:
            count = await gateway.delete_all(SurveyResponse)
        except PersistenceError as e:
            raise PersistenceError("Error al eliminar respuestas", context=e.context) from e

        logger.warning("All surveys deleted: %d", count)
        return DeleteAllResponse(
            message=f"{count} respuestas eliminadas correctamente",
            count=count,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
survey_service = SurveyService()
