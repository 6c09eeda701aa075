"""
Survey Backend — Admin Service
===============================

What:  Admin registration (behind a shared secret) and login.
Why:   The order of checks is part of the contract and lives in one place:

       register: secret (403) → body schema (400) → all fields present (400)
                 → password ≥ 8 (400) → usuario ≥ 4 (400) → insert (409 on duplicate)
       login:    both fields present (400) → lookup + bcrypt check (401)

       The registration body arrives unparsed so that a caller without the
       secret learns nothing from it: unknown keys, wrong types or no body
       at all are still a 403.

Security:
    - Passwords are stored as bcrypt hashes, verified with bcrypt.checkpw
    - The shared secret is compared in constant time
    - Unknown user and wrong password produce the same AuthenticationError
      and cost the same bcrypt check
    - bcrypt runs in the threadpool, never on the event loop
    - Neither passwords nor the secret are ever logged
"""

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from starlette.concurrency import run_in_threadpool

from app.database import PersistenceGateway
from app.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ClientValidationError,
    DuplicateKeyError,
    ConflictError,
    PersistenceError,
    SchemaValidationError,
)
from app.models.admin_user import AdminUser
from app.passwords import hash_password, secrets_match, verify_password
from app.schemas.admin import AdminUserOut, LoginRequest, LoginResponse, RegisterRequest
from app.schemas.common import MessageResponse, field_errors

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
MIN_USERNAME_LENGTH = 4

# Checked against when the user does not exist, so both failures take as long
_UNKNOWN_USER_HASH = hash_password("unknown-user-placeholder")


class AdminService:
    """Business logic for administrator accounts."""

    async def register(
        self,
        gateway: PersistenceGateway,
        body: Any,
        expected_token: str,
    ) -> MessageResponse:
        """
        Create an admin account from the raw JSON body.

        Raises:
            AuthorizationError: wrong, missing or non-string secret, or no secret configured
            SchemaValidationError: body is not a RegisterRequest (unknown keys, wrong types)
            ClientValidationError: missing field or length rule violated
            ConflictError: usuario or email already registered
        """
        token = body.get("token") if isinstance(body, dict) else None
        if not isinstance(token, str) or not secrets_match(token, expected_token):
            logger.warning("Admin registration rejected: invalid token")
            raise AuthorizationError()

        try:
            payload = RegisterRequest.model_validate(body)
        except PydanticValidationError as e:
            raise SchemaValidationError(details=field_errors(e.errors()))

        if not payload.usuario or not payload.email or not payload.password:
            raise ClientValidationError("Todos los campos son obligatorios")

        if len(payload.password) < MIN_PASSWORD_LENGTH:
            raise ClientValidationError(
                f"La contraseña debe tener al menos {MIN_PASSWORD_LENGTH} caracteres",
                context={"field": "password"},
            )

        if len(payload.usuario) < MIN_USERNAME_LENGTH:
            raise ClientValidationError(
                f"El usuario debe tener al menos {MIN_USERNAME_LENGTH} caracteres",
                context={"field": "usuario"},
            )

        password_hash = await run_in_threadpool(hash_password, payload.password)
        try:
            await gateway.create(
                AdminUser,
                {
                    "usuario": payload.usuario,
                    "email": payload.email,
                    "password_hash": password_hash,
                },
            )
        except DuplicateKeyError as e:
            field = e.field or "usuario"
            label = "Usuario" if field == "usuario" else "Email"
            raise ConflictError(f"{label} ya existe", field=field) from e
        except PersistenceError as e:
            raise PersistenceError("Error al registrar administrador", context=e.context) from e

        logger.info("Admin registered: %s", payload.usuario)
        return MessageResponse(message="Administrador registrado exitosamente")

    async def login(self, gateway: PersistenceGateway, payload: LoginRequest) -> LoginResponse:
        """
        Check credentials and return the admin's public profile.

        Raises:
            ClientValidationError: usuario or password missing
            AuthenticationError: unknown user or wrong password
        """
        if not payload.usuario or not payload.password:
            raise ClientValidationError("Usuario y contraseña son obligatorios")

        try:
            user = await gateway.find_one(AdminUser, AdminUser.usuario == payload.usuario)
        except PersistenceError as e:
            raise PersistenceError("Error en el servidor", context=e.context) from e

        stored_hash = user.password_hash if user is not None else _UNKNOWN_USER_HASH
        password_ok = await run_in_threadpool(verify_password, payload.password, stored_hash)
        if user is None or not password_ok:
            logger.info("Login failed for %s", payload.usuario)
            raise AuthenticationError()

        logger.info("Login succeeded for %s", payload.usuario)
        return LoginResponse(user=AdminUserOut.model_validate(user))


# ── Singleton Instance ────────────────────────────────────────────────────
admin_service = AdminService()
