"""
Survey Backend — Admin Service Unit Tests
==========================================

What:  Tests for registration precedence and login.
How:   Uses a mock gateway; passwords are really hashed with bcrypt.

What we test:
    ✅ Wrong secret wins over every other validation and never writes
    ✅ Presence, then password length, then username length
    ✅ Duplicate keys become ConflictError naming the field
    ✅ Stored value is a bcrypt hash, not the password
    ✅ Unknown user and wrong password raise the same error
"""

from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from starlette.concurrency import run_in_threadpool

from app.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ClientValidationError,
    ConflictError,
    DuplicateKeyError,
    SchemaValidationError,
)
from app.models.admin_user import AdminUser
from app.passwords import hash_password, verify_password
from app.schemas.admin import LoginRequest
from app.services.admin_service import AdminService

TOKEN = "s3cret-token"


def register_payload(**overrides) -> dict:
    """A JSON registration body as the route hands it to the service."""
    values = {"token": TOKEN, "usuario": "admin1", "email": "admin1@example.com", "password": "password123"}
    values.update(overrides)
    return values


class TestAdminServiceRegister:
    """Tests for register precedence and persistence."""

    def setup_method(self):
        self.service = AdminService()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", ["wrong", "", None])
    async def test_wrong_token_rejected_before_field_checks(self, mock_gateway, token):
        """A bad secret is a 403 even when the other fields are invalid too."""
        payload = register_payload(token=token, usuario="ab", password="short")

        with pytest.raises(AuthorizationError):
            await self.service.register(mock_gateway, payload, TOKEN)

        mock_gateway.create.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            None,
            [],
            {"token": 12345, "usuario": "admin1", "email": "a@b.c", "password": "password123"},
            {"token": "wrong", "usuario": "admin1", "email": "a@b.c", "password": "password123", "rol": "x"},
        ],
    )
    async def test_malformed_body_without_secret_is_forbidden(self, mock_gateway, body):
        """Missing body, non-object body, non-string token and unknown keys all lose to the secret check."""
        with pytest.raises(AuthorizationError):
            await self.service.register(mock_gateway, body, TOKEN)

        mock_gateway.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_key_with_valid_secret_is_schema_error(self, mock_gateway):
        with pytest.raises(SchemaValidationError) as exc_info:
            await self.service.register(mock_gateway, register_payload(rol="x"), TOKEN)

        assert exc_info.value.details[0]["field"] == "rol"
        mock_gateway.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unconfigured_token_rejects_everyone(self, mock_gateway):
        with pytest.raises(AuthorizationError):
            await self.service.register(mock_gateway, register_payload(token=""), "")

        mock_gateway.create.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["usuario", "email", "password"])
    async def test_missing_field(self, mock_gateway, missing):
        with pytest.raises(ClientValidationError, match="Todos los campos son obligatorios"):
            await self.service.register(mock_gateway, register_payload(**{missing: None}), TOKEN)

    @pytest.mark.asyncio
    async def test_password_length_checked_before_username_length(self, mock_gateway):
        payload = register_payload(usuario="ab", password="1234567")

        with pytest.raises(ClientValidationError, match="contraseña"):
            await self.service.register(mock_gateway, payload, TOKEN)

    @pytest.mark.asyncio
    async def test_short_username(self, mock_gateway):
        with pytest.raises(ClientValidationError, match="usuario"):
            await self.service.register(mock_gateway, register_payload(usuario="abc"), TOKEN)

        mock_gateway.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_success_stores_hash(self, mock_gateway):
        result = await self.service.register(mock_gateway, register_payload(), TOKEN)

        assert result.message == "Administrador registrado exitosamente"
        model, values = mock_gateway.create.await_args.args
        assert model is AdminUser
        assert values["password_hash"] != "password123"
        assert verify_password("password123", values["password_hash"])
        assert "password" not in values

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "field, message",
        [("usuario", "Usuario ya existe"), ("email", "Email ya existe")],
    )
    async def test_duplicate_becomes_conflict(self, mock_gateway, field, message):
        mock_gateway.create.side_effect = DuplicateKeyError(field=field, table="users")

        with pytest.raises(ConflictError) as exc_info:
            await self.service.register(mock_gateway, register_payload(), TOKEN)

        assert exc_info.value.field == field
        assert exc_info.value.message == message


    @pytest.mark.asyncio
    async def test_hashing_runs_off_the_event_loop(self, mock_gateway):
        with patch(
            "app.services.admin_service.run_in_threadpool", wraps=run_in_threadpool
        ) as offloaded:
            await self.service.register(mock_gateway, register_payload(), TOKEN)

        assert offloaded.call_args.args[:2] == (hash_password, "password123")


class TestAdminServiceLogin:
    """Tests for login."""

    def setup_method(self):
        self.service = AdminService()
        self.user = AdminUser(
            usuario="admin1",
            email="admin1@example.com",
            password_hash=hash_password("password123"),
            fecha_registro=datetime(2024, 1, 15, tzinfo=timezone.utc),
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("usuario, password", [(None, "x"), ("admin1", None), ("", "")])
    async def test_missing_credentials(self, mock_gateway, usuario, password):
        with pytest.raises(ClientValidationError, match="obligatorios"):
            await self.service.login(mock_gateway, LoginRequest(usuario=usuario, password=password))

        mock_gateway.find_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_success_returns_profile_without_password(self, mock_gateway):
        mock_gateway.find_one.return_value = self.user

        result = await self.service.login(
            mock_gateway, LoginRequest(usuario="admin1", password="password123")
        )

        assert result.message == "Login exitoso"
        dumped = result.model_dump(by_alias=True)
        assert dumped["user"]["usuario"] == "admin1"
        assert dumped["user"]["email"] == "admin1@example.com"
        assert "fechaRegistro" in dumped["user"]
        assert "password_hash" not in dumped["user"]

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_user_look_the_same(self, mock_gateway):
        mock_gateway.find_one.return_value = self.user
        with pytest.raises(AuthenticationError) as wrong_password:
            await self.service.login(mock_gateway, LoginRequest(usuario="admin1", password="nope-nope"))

        mock_gateway.find_one.return_value = None
        with pytest.raises(AuthenticationError) as unknown_user:
            await self.service.login(mock_gateway, LoginRequest(usuario="ghost", password="nope-nope"))

        assert wrong_password.value.message == unknown_user.value.message == "Credenciales incorrectas"

    @pytest.mark.asyncio
    async def test_unknown_user_still_runs_password_check(self, mock_gateway):
        """Unknown users pay the same bcrypt cost as a wrong password."""
        mock_gateway.find_one.return_value = None

        with patch(
            "app.services.admin_service.verify_password", wraps=verify_password
        ) as checked:
            with pytest.raises(AuthenticationError):
                await self.service.login(mock_gateway, LoginRequest(usuario="ghost", password="nope-nope"))

        checked.assert_called_once()
        assert checked.call_args.args[0] == "nope-nope"
