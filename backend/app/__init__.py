"""
Survey Backend — Application Package Initializer
=================================================

What: Marks the `app` directory as a Python package.
Why:  Enables module imports like `from app.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    This backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │      Services (Survey / Admin)      │  ← Validation rules, orchestration
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Persistence Gateway (database.py) │  ← One engine, owned by the lifespan
    └─────────────────────────────────────┘

    Routes never touch SQLAlchemy directly; they receive the gateway through
    a FastAPI dependency and hand it to a service.
"""

__version__ = "1.0.0"
