"""
Survey Backend — Survey Route Handlers
=======================================

What:  Submit, list, count and delete survey responses.
How:   Each handler pulls the gateway from the app via Depends and delegates
       to SurveyService; failures are raised as application exceptions and
       formatted by the global handlers in main.py.

Endpoints:
    POST   /api/respuestas        submit one survey (201)
    GET    /api/respuestas        all surveys, newest first
    GET    /api/estadisticas      total + last 7 days
    DELETE /api/respuestas/{id}   delete one survey
    DELETE /api/respuestas        delete every survey (no confirmation step)
"""

import logging
from typing import List

from fastapi import APIRouter, Depends

from app.database import PersistenceGateway, get_gateway
from app.schemas.common import ErrorResponse, MessageResponse
from app.schemas.survey import (
    DeleteAllResponse,
    StatisticsResponse,
    SubmitResponse,
    SurveyOut,
    SurveySubmission,
)
from app.services.survey_service import survey_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Surveys"])


@router.post(
    "/respuestas",
    status_code=201,
    response_model=SubmitResponse,
    responses={
        400: {"description": "Missing name/role or invalid answers", "model": ErrorResponse},
        500: {"description": "Store failure", "model": ErrorResponse},
    },
    summary="Submit a survey",
)
async def submit_survey(
    submission: SurveySubmission,
    gateway: PersistenceGateway = Depends(get_gateway),
) -> SubmitResponse:
    logger.info("New survey received")
    return await survey_service.submit(gateway, submission)


@router.get(
    "/respuestas",
    response_model=List[SurveyOut],
    responses={500: {"description": "Store failure", "model": ErrorResponse}},
    summary="List all surveys, newest first",
)
async def list_surveys(
    gateway: PersistenceGateway = Depends(get_gateway),
) -> List[SurveyOut]:
    return await survey_service.list_surveys(gateway)


@router.get(
    "/estadisticas",
    response_model=StatisticsResponse,
    responses={500: {"description": "Store failure", "model": ErrorResponse}},
    summary="Survey counts",
)
async def statistics(
    gateway: PersistenceGateway = Depends(get_gateway),
) -> StatisticsResponse:
    return await survey_service.statistics(gateway)


@router.delete(
    "/respuestas/{survey_id}",
    response_model=MessageResponse,
    responses={
        404: {"description": "Survey not found", "model": ErrorResponse},
        500: {"description": "Store failure", "model": ErrorResponse},
    },
    summary="Delete one survey",
)
async def delete_survey(
    survey_id: str,
    gateway: PersistenceGateway = Depends(get_gateway),
) -> MessageResponse:
    return await survey_service.delete_survey(gateway, survey_id)


@router.delete(
    "/respuestas",
    response_model=DeleteAllResponse,
    responses={500: {"description": "Store failure", "model": ErrorResponse}},
    summary="Delete every survey",
    description="Irreversible. No confirmation or authorization is required.",
)
async def delete_all_surveys(
    gateway: PersistenceGateway = Depends(get_gateway),
) -> DeleteAllResponse:
    return await survey_service.delete_all(gateway)
