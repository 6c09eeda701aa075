"""
Survey Backend — Survey Endpoint Tests
=======================================

What:  End-to-end tests of the survey routes through the ASGI app.
How:   HTTPX AsyncClient against create_app() with a temporary SQLite file.
"""

from datetime import datetime, timedelta, timezone

import pytest

from app.models.survey import SurveyResponse


def survey_row(**overrides) -> dict:
    values = {
        "nombre": "Luis",
        "puesto": "Carnicero",
        "seguridad_general": "Mala",
        "presencia_serenazgo": "Nula",
        "iluminacion_general": "Regular",
        "camaras_funcionando": "No",
        "tiempo_respuesta": "Lento",
        "capacitacion_seguridad": "No",
        "calificacion_general": "2",
        "confianza_administracion": "Baja",
        "participacion_comerciantes": "Sí",
    }
    values.update(overrides)
    return values


class TestSubmitSurvey:
    """POST /api/respuestas"""

    @pytest.mark.asyncio
    async def test_submit_then_listed_first(self, test_client, gateway, sample_survey):
        """A new survey is returned with an id and shows up first in the list."""
        await gateway.create(
            SurveyResponse, survey_row(created_at=datetime.now(timezone.utc) - timedelta(days=1))
        )

        response = await test_client.post("/api/respuestas", json=sample_survey)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Respuesta guardada correctamente"
        listing = (await test_client.get("/api/respuestas")).json()
        assert len(listing) == 2
        assert listing[0]["id"] == body["id"]
        assert listing[0]["nombre"] == "Ana"
        assert listing[0]["seguridadGeneral"] == "Buena"
        assert listing[0]["zonasOscuras"] == ["Pasaje 3", "Puerta norte"]
        created = datetime.fromisoformat(listing[0]["createdAt"].replace("Z", "+00:00"))
        assert created <= datetime.now(timezone.utc)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["nombre", "puesto"])
    async def test_missing_name_or_role(self, test_client, sample_survey, missing):
        del sample_survey[missing]

        response = await test_client.post("/api/respuestas", json=sample_survey)

        assert response.status_code == 400
        assert response.json()["message"] == "Nombre y puesto son campos obligatorios"
        assert "details" not in response.json()
        assert (await test_client.get("/api/respuestas")).json() == []

    @pytest.mark.asyncio
    async def test_missing_required_answer_lists_fields(self, test_client, sample_survey):
        del sample_survey["calificacionGeneral"]

        response = await test_client.post("/api/respuestas", json=sample_survey)

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Error de validación"
        assert [d["field"] for d in body["details"]] == ["calificacionGeneral"]
        assert (await test_client.get("/api/estadisticas")).json()["total"] == 0

    @pytest.mark.asyncio
    async def test_unknown_field_rejected(self, test_client, sample_survey):
        sample_survey["createdAt"] = "2020-01-01T00:00:00Z"

        response = await test_client.post("/api/respuestas", json=sample_survey)

        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "createdAt"

    @pytest.mark.asyncio
    async def test_wrong_type_rejected(self, test_client, sample_survey):
        sample_survey["zonasOscuras"] = "Pasaje 3"

        response = await test_client.post("/api/respuestas", json=sample_survey)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"


class TestStatistics:
    """GET /api/estadisticas"""

    @pytest.mark.asyncio
    async def test_counts(self, test_client, gateway):
        now = datetime.now(timezone.utc)
        await gateway.create(SurveyResponse, survey_row(created_at=now - timedelta(days=1)))
        await gateway.create(SurveyResponse, survey_row(created_at=now - timedelta(days=30)))

        response = await test_client.get("/api/estadisticas")

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 2
        assert body["last7days"] == 1
        assert "timestamp" in body


class TestDeleteSurveys:
    """DELETE /api/respuestas[/{id}]"""

    @pytest.mark.asyncio
    async def test_delete_one_twice(self, test_client, sample_survey):
        created = await test_client.post("/api/respuestas", json=sample_survey)
        survey_id = created.json()["id"]

        first = await test_client.delete(f"/api/respuestas/{survey_id}")
        second = await test_client.delete(f"/api/respuestas/{survey_id}")

        assert created.status_code == 201
        assert first.status_code == 200
        assert first.json()["message"] == "Respuesta eliminada correctamente"
        assert second.status_code == 404
        assert second.json()["message"] == "Respuesta no encontrada"

    @pytest.mark.asyncio
    async def test_delete_malformed_id(self, test_client):
        response = await test_client.delete("/api/respuestas/not-an-id")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_all_then_empty(self, test_client, sample_survey):
        for _ in range(2):
            await test_client.post("/api/respuestas", json=sample_survey)

        response = await test_client.delete("/api/respuestas")

        assert response.status_code == 200
        assert response.json()["count"] == 2
        assert (await test_client.get("/api/respuestas")).json() == []
        assert (await test_client.get("/api/estadisticas")).json()["total"] == 0
