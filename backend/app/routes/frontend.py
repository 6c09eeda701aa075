"""
Survey Backend — Fallback Routes
=================================

What:  Everything no other router matched.
       - ANY /api/*      → 404 JSON echoing the path
       - GET  /<other>   → built frontend (production) or endpoint listing

Static serving (production only):
    FRONTEND_ROOT/build is preferred over FRONTEND_ROOT/public. A request for
    an existing file inside that directory gets the file; anything else gets
    index.html so client-side routes work on reload. Paths that resolve
    outside the directory are never served.

This router must be included last.
"""

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse, JSONResponse, Response

from app.config import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(include_in_schema=False)

AVAILABLE_ENDPOINTS = [
    "GET /api/health",
    "GET /api/respuestas",
    "POST /api/respuestas",
    "DELETE /api/respuestas/:id",
    "DELETE /api/respuestas",
    "GET /api/estadisticas",
    "POST /api/login",
    "POST /api/register",
]


def api_not_found(request: Request) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={
            "error": "not_found",
            "message": "Ruta no encontrada",
            "path": request.url.path,
        },
    )


@router.api_route(
    "/api/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"],
)
async def unmatched_api_route(request: Request, path: str) -> JSONResponse:
    return api_not_found(request)


def endpoint_listing(production: bool) -> JSONResponse:
    if production:
        return JSONResponse({
            "message": "API funcionando correctamente",
            "note": "Esta es una API backend. Frontend no configurado.",
            "availableEndpoints": AVAILABLE_ENDPOINTS,
        })
    return JSONResponse({
        "message": "API en modo desarrollo",
        "availableEndpoints": AVAILABLE_ENDPOINTS,
    })


def _serve_static(static_dir: Path, requested: str) -> Response:
    root = static_dir.resolve()
    if requested:
        candidate = (root / requested).resolve()
        if candidate.is_relative_to(root) and candidate.is_file():
            return FileResponse(candidate)

    index = root / "index.html"
    if index.is_file():
        return FileResponse(index)

    return endpoint_listing(production=True)


@router.get("/{full_path:path}")
async def frontend_fallback(
    full_path: str,
    request: Request,
    settings: Settings = Depends(get_settings),
) -> Response:
    """Serve the frontend in production, otherwise describe the API."""
    if full_path == "api" or full_path.startswith("api/"):
        return api_not_found(request)

    if settings.is_production:
        static_dir = settings.frontend_dir()
        if static_dir is not None:
            return _serve_static(static_dir, full_path)

    return endpoint_listing(settings.is_production)
