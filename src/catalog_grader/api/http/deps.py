"""FastAPI dependency implementations."""

from collections.abc import Iterator

from fastapi import Depends, Request
from loguru import logger
from sqlmodel import Session

from catalog_grader.api.http.app_data import ApplicationDependencies
from catalog_grader.core.errors import ForbiddenError, UnauthorizedError
from catalog_grader.core.services import CompletionProvider, JwtVerificationService
from catalog_grader.entities.core.user import User, UserRepository, UserRole


def get_session(request: Request) -> Iterator[Session]:
    """One database session per request, closed when the response is sent."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    session = app_deps.database_service.get_session()
    try:
        yield session
    finally:
        session.close()


def get_jwt_verify_service(request: Request) -> JwtVerificationService:
    """Get the JWT verification service instance."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.jwt_verify_service


def get_completion_provider(request: Request) -> CompletionProvider:
    """Get the completion provider instance."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.completion_provider


def get_current_user(
    request: Request,
    db: Session = Depends(get_session),
    jwt_verify: JwtVerificationService = Depends(get_jwt_verify_service),
) -> User:
    """Authenticate the request using a Bearer token whose subject is a user id."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise UnauthorizedError("Missing Bearer token")

    token = auth_header.split(" ", 1)[1].strip()
    claims = jwt_verify.verify_jwt(token)

    user = UserRepository(db).get(claims.subject)
    if user is None:
        logger.bind(subject=claims.subject).warning("Bearer token for unknown user")
        raise UnauthorizedError("Unknown user")

    request.state.claims = claims
    request.state.user_id = user.id
    return user


def require_role(required_role: UserRole):
    """Create a dependency that requires ``required_role`` (ADMIN always passes)."""

    def dep(user: User = Depends(get_current_user)) -> User:
        if not user.has_role(required_role):
            raise ForbiddenError(f"Missing required role: {required_role}")
        return user

    return dep


def ensure_admin_or_self(user: User, target_user_id: str) -> None:
    if user.role != UserRole.ADMIN and user.id != target_user_id:
        raise ForbiddenError("Admins only, or your own account")
