"""
Survey Backend — Test Configuration (conftest.py)
==================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (temporary database, API
       client, mocked gateway, sample survey payloads).

Fixture Hierarchy (all function-scoped):
    ├── make_settings:  Builds Settings pointing at a fresh SQLite file under tmp_path
    ├── client_for:     Opens an HTTPX AsyncClient on an app with its lifespan running
    ├── test_app:       App built by create_app() with default test settings
    ├── test_client:    Client for test_app
    ├── gateway:        The real gateway of the running test_app
    ├── mock_gateway:   AsyncMock standing in for PersistenceGateway
    └── sample_survey:  A complete, valid survey body
"""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Override settings for testing BEFORE any app imports
# Why: app.main builds a module-level app from the environment on import
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ["ENVIRONMENT"] = "development"
os.environ["ADMIN_REGISTER_TOKEN"] = "test-register-token"
os.environ["LOG_LEVEL"] = "WARNING"

from app.config import Settings  # noqa: E402
from app.main import create_app  # noqa: E402

REGISTER_TOKEN = "test-register-token"


@asynccontextmanager
async def _running_client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    ASGITransport does not send lifespan events, so the lifespan is entered
    by hand; raise_app_exceptions=False lets the catch-all 500 handler's
    response reach the test instead of the re-raised exception.
    """
    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


@pytest.fixture
def make_settings(tmp_path):
    """
    Factory for isolated Settings.

    Usage:
        settings = make_settings(environment="production")
    """
    def factory(**overrides) -> Settings:
        values = {
            "database_url": f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
            "environment": "development",
            "admin_register_token": REGISTER_TOKEN,
            "frontend_root": str(tmp_path),
            "log_level": "WARNING",
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return factory


@pytest.fixture
def client_for():
    """
    Opens a client on any app, for tests that need non-default settings.

    Usage:
        async with client_for(create_app(make_settings(environment="production"))) as client:
            ...
    """
    return _running_client


@pytest.fixture
def test_app(make_settings):
    return create_app(make_settings())


@pytest_asyncio.fixture
async def test_client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """
    Provides an async HTTP test client backed by a fresh SQLite database.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/api/health")
            assert response.status_code == 200
    """
    async with _running_client(test_app) as client:
        yield client


@pytest_asyncio.fixture
async def gateway(test_client, test_app):
    """The real gateway of the running test app, for seeding and inspection."""
    return test_app.state.gateway


@pytest.fixture
def mock_gateway():
    """
    Provides a mock PersistenceGateway.

    Usage:
        mock_gateway.find_one.return_value = None
        with pytest.raises(AuthenticationError):
            await admin_service.login(mock_gateway, payload)
    """
    gateway = AsyncMock()
    gateway.create = AsyncMock()
    gateway.find_all = AsyncMock(return_value=[])
    gateway.find_by_id = AsyncMock(return_value=None)
    gateway.delete_by_id = AsyncMock(return_value=False)
    gateway.delete_all = AsyncMock(return_value=0)
    gateway.count = AsyncMock(return_value=0)
    gateway.find_one = AsyncMock(return_value=None)
    gateway.ping = AsyncMock(return_value=True)
    return gateway


@pytest.fixture
def sample_survey():
    """A complete survey body as the frontend sends it (camelCase keys)."""
    return {
        "nombre": "Ana",
        "puesto": "Vendedora",
        "telefono": "987654321",
        "fecha": "2024-05-10",
        "hora": "10:30",
        "seguridadGeneral": "Buena",
        "presenciaSerenazgo": "Regular",
        "frecuenciaSerenazgo": "Semanal",
        "iluminacionGeneral": "Mala",
        "zonasOscuras": ["Pasaje 3", "Puerta norte"],
        "camarasFuncionando": "Algunas",
        "ubicacionCamaras": "Entrada principal",
        "problemasEspecificos": ["Robos"],
        "incidentesReportados": "Robo de mercadería",
        "tiempoRespuesta": "Lento",
        "capacitacionSeguridad": "No",
        "sugerenciaMejora": "Más iluminación",
        "calificacionGeneral": "3",
        "confianzaAdministracion": "Media",
        "participacionComerciantes": "Sí",
        "comentariosAdicionales": "",
    }
