"""
Survey Backend — Admin Route Handlers
======================================

What:  POST /api/login and POST /api/register.
Why:   The admin panel of the frontend logs in here; new admins are created
       only by someone who knows ADMIN_REGISTER_TOKEN.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request

from app.config import Settings, get_settings
from app.database import PersistenceGateway, get_gateway
from app.schemas.admin import LoginRequest, LoginResponse
from app.schemas.common import ErrorResponse, MessageResponse
from app.services.admin_service import admin_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Admin"])


async def read_json_body(request: Request) -> Any:
    """Parsed JSON body, or None when the body is empty or not JSON."""
    try:
        return await request.json()
    except ValueError:
        return None


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Missing usuario or password", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
        500: {"description": "Store failure", "model": ErrorResponse},
    },
    summary="Admin login",
)
async def login(
    payload: LoginRequest,
    gateway: PersistenceGateway = Depends(get_gateway),
) -> LoginResponse:
    return await admin_service.login(gateway, payload)


@router.post(
    "/register",
    status_code=201,
    response_model=MessageResponse,
    responses={
        400: {"description": "Missing field or length rule violated", "model": ErrorResponse},
        403: {"description": "Invalid registration token", "model": ErrorResponse},
        409: {"description": "Usuario or email already exists", "model": ErrorResponse},
        500: {"description": "Store failure", "model": ErrorResponse},
    },
    summary="Register a new admin (requires the shared token)",
)
async def register(
    request: Request,
    gateway: PersistenceGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
) -> MessageResponse:
    """
    Body: {token, usuario, email, password} (see RegisterRequest).

    The body is read without validation; the service checks the token
    before looking at anything else in it.
    """
    body = await read_json_body(request)
    logger.info("Admin registration attempt")
    return await admin_service.register(gateway, body, settings.admin_register_token)
