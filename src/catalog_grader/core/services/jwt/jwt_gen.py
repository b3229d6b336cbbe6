import time
from typing import Any

from authlib.common.security import generate_token
from authlib.jose import JoseError, jwt
from loguru import logger

from catalog_grader.core.errors import CatalogError
from catalog_grader.runtime.config.config_data import ConfigData
from catalog_grader.runtime.context import get_config


class JwtGeneratorService:
    """Service for generating JWT tokens for API authentication."""

    def generate_jwt(
        self,
        subject: str,
        claims: dict[str, Any] | None = None,
        expires_in_seconds: int | None = None,
        issuer: str | None = None,
        audience: str | list[str] | None = None,
        algorithm: str = "HS256",
        secret: str | None = None,
    ) -> str:
        """Generate a signed JWT token using authlib.

        Args:
            subject: Subject (sub) claim, the user id
            claims: Additional claims to include in the token
            expires_in_seconds: Token lifetime (defaults to the configured TTL)
            issuer: Issuer (iss) claim (defaults to config issuer)
            audience: Audience (aud) claim (defaults to config audiences)
            algorithm: Signing algorithm (default: HS256)
            secret: Signing key. If None, the configured signing secret is used.

        Returns:
            Signed JWT token string

        Raises:
            CatalogError: If the signing secret is missing or the algorithm is not allowed
        """
        config: ConfigData = get_config()

        secret = secret or config.app.session_signing_secret
        if not secret:
            raise CatalogError("JWT signing secret not configured")

        if algorithm not in config.jwt.allowed_algorithms:
            logger.debug(
                "Attempted to use disallowed algorithm: {}, only {} are allowed",
                algorithm,
                config.jwt.allowed_algorithms,
            )
            raise CatalogError(f"Algorithm {algorithm} not allowed")

        now = int(time.time())
        ttl = expires_in_seconds or config.jwt.access_token_ttl_seconds
        payload: dict[str, Any] = {
            "iss": issuer or config.jwt.gen_issuer,
            "sub": subject,
            "aud": audience or config.jwt.audiences,
            "exp": now + ttl,
            "iat": now,
            "nbf": now,
            "jti": generate_token(16),
        }

        # Registered claims cannot be overridden by extras
        if claims:
            payload.update(
                {
                    k: v
                    for k, v in claims.items()
                    if k not in {"iss", "sub", "aud", "exp", "iat", "nbf", "jti"}
                }
            )

        try:
            token = jwt.encode({"alg": algorithm, "typ": "JWT"}, payload, secret)
        except JoseError as e:
            raise CatalogError(f"JWT encoding failed: {e}") from e

        return token.decode() if isinstance(token, bytes) else token

    def generate_access_token(
        self,
        user_id: str,
        roles: list[str] | None = None,
        expires_in_seconds: int | None = None,
        **extra_claims: Any,
    ) -> str:
        """Generate an access token for ``user_id``.

        Roles are informational only; authorization always uses the role
        stored on the user.
        """
        claims: dict[str, Any] = dict(extra_claims)
        if roles:
            claims["roles"] = roles
        return self.generate_jwt(
            subject=user_id, claims=claims, expires_in_seconds=expires_in_seconds
        )
