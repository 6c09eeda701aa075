# Routes package init
"""
Survey Backend — API Routes Package
====================================

Route Inventory:
    - health.py:    GET    /api/health
    - surveys.py:   POST   /api/respuestas
                    GET    /api/respuestas
                    GET    /api/estadisticas
                    DELETE /api/respuestas/{id}
                    DELETE /api/respuestas
    - admin.py:     POST   /api/login
                    POST   /api/register
    - frontend.py:  ANY    /api/*   (404)
                    GET    /*       (static frontend or endpoint listing)

Design Principle:
    Routes are thin: read the body, get the gateway, call a service.
    Business rules live in app/services.
"""
