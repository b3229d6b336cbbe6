"""Error taxonomy shared by repositories, services and the HTTP layer.

Every error carries a machine readable ``code`` and the HTTP status the API
renders it with. Services raise these instead of ``HTTPException`` so they
stay usable outside a request (CLI, tests).
"""

from typing import Any, Literal

ProviderErrorKind = Literal["timeout", "quota", "malformed", "unavailable"]


class CatalogError(Exception):
    """Base class for all classified application errors."""

    code = "error"
    status_code = 500

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_payload(self) -> dict[str, Any]:
        return {"detail": self.message, "error": self.code}


class UnauthorizedError(CatalogError):
    """No principal, or a principal that cannot be verified."""

    code = "unauthorized"
    status_code = 401


class ForbiddenError(UnauthorizedError):
    """Authenticated principal without the required role."""

    code = "forbidden"
    status_code = 403


class NotFoundError(CatalogError):
    code = "not_found"
    status_code = 404


class QueueEmptyError(NotFoundError):
    """Nothing left to grade. An expected terminal state, not a caller error."""

    code = "queue_empty"

    def __init__(self, message: str = "No products to grade", **context: Any) -> None:
        super().__init__(message, **context)


class ValidationError(CatalogError):
    code = "validation_error"
    status_code = 422


class ConflictError(CatalogError):
    """Unique-field collision or a delete blocked by dependent rows."""

    code = "conflict"
    status_code = 409


class ProviderError(CatalogError):
    """A completion call failed."""

    code = "provider_error"
    status_code = 502

    def __init__(self, message: str, *, kind: ProviderErrorKind, **context: Any) -> None:
        super().__init__(message, **context)
        self.kind = kind

    def to_payload(self) -> dict[str, Any]:
        return {**super().to_payload(), "kind": self.kind}


class GenerationError(CatalogError):
    """The generation pipeline aborted; ``step`` names the failing stage."""

    code = "generation_failed"
    status_code = 500

    def __init__(
        self, message: str, *, step: str, cause: Exception | None = None, **context: Any
    ) -> None:
        super().__init__(message, **context)
        self.step = step
        self.cause = cause

    def to_payload(self) -> dict[str, Any]:
        return {**super().to_payload(), "step": self.step}
