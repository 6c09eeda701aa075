"""
Survey Backend — Custom Exception Hierarchy
============================================

What:  Application-specific exceptions for every failure the API can report.
Why:   Services raise these instead of building responses; global handlers
       registered in main.py turn each type into one HTTP status and one
       JSON shape, so routes stay free of try/except blocks.
How:   Each exception carries a user-facing message and an optional context
       dict that is logged but never returned to the client.

Exception Hierarchy:
    SurveyAppError (base)
    ├── ClientValidationError      → 400 Bad Request (flat message)
    │   └── SchemaValidationError  → 400 Bad Request (per-field details)
    ├── AuthenticationError        → 401 Unauthorized
    ├── AuthorizationError         → 403 Forbidden
    ├── NotFoundError              → 404 Not Found
    ├── ConflictError              → 409 Conflict
    │   └── DuplicateKeyError      → 409 (raised by the persistence gateway)
    ├── PersistenceError           → 500 Internal Server Error
    └── FatalStartupError          → process exits before serving
"""

from typing import Any, Dict, List, Optional


class SurveyAppError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "Ocurrió un error inesperado",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ClientValidationError(SurveyAppError):
    """
    Raised when required input is missing or malformed before persistence.

    HTTP: 400 Bad Request. The response carries the flat message only.
    """

    def __init__(
        self,
        message: str = "Datos inválidos",
        details: Optional[List[Dict[str, str]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.details = details


class SchemaValidationError(ClientValidationError):
    """
    Raised when a record does not satisfy the persisted-record schema.

    HTTP: 400 Bad Request with one {field, message} entry per failing field.

    Example response:
        {
            "error": "validation_error",
            "message": "Error de validación",
            "details": [{"field": "seguridadGeneral", "message": "Field required"}]
        }
    """

    def __init__(
        self,
        details: List[Dict[str, str]],
        message: str = "Error de validación",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, details=details, context=context)


class AuthenticationError(SurveyAppError):
    """
    Raised when login credentials do not match.

    HTTP: 401 Unauthorized. The same message is used for an unknown user and
    a wrong password.
    """

    def __init__(self, message: str = "Credenciales incorrectas"):
        super().__init__(message=message)


class AuthorizationError(SurveyAppError):
    """Raised when the admin registration secret is wrong. HTTP: 403 Forbidden."""

    def __init__(self, message: str = "Token de autorización inválido"):
        super().__init__(message=message)


class NotFoundError(SurveyAppError):
    """
    Raised when a requested record does not exist.

    HTTP: 404 Not Found
    """

    def __init__(
        self,
        message: str = "Recurso no encontrado",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(SurveyAppError):
    """
    Raised when a write collides with a unique field.

    HTTP: 409 Conflict. `field` names the colliding column when known.
    """

    def __init__(
        self,
        message: str = "El registro ya existe",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class DuplicateKeyError(ConflictError):
    """
    Raised by the persistence gateway when the store rejects a duplicate key.

    Services usually catch this and raise a ConflictError with a message
    specific to the resource.
    """

    def __init__(self, field: Optional[str] = None, table: Optional[str] = None):
        super().__init__(
            message="Registro duplicado",
            field=field,
            context={"table": table} if table else None,
        )


class PersistenceError(SurveyAppError):
    """
    Raised when a store operation fails (driver error, store unavailable).

    HTTP: 500 Internal Server Error

    Security Note:
        Whether the underlying driver message reaches the client is decided by
        ErrorDetailPolicy in main.py; it is never included in production.
    """

    def __init__(
        self,
        message: str = "Error de base de datos",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FatalStartupError(SurveyAppError):
    """
    Raised when the process cannot start serving: missing configuration or a
    failed initial connection. The entrypoint logs it and exits with code 1.
    """
