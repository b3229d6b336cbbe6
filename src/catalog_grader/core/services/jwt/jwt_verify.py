"""JWT verification service."""

import time

from authlib.jose import JoseError, jwt
from loguru import logger

from catalog_grader.core.errors import CatalogError, UnauthorizedError
from catalog_grader.core.models.claims import TokenClaims
from catalog_grader.runtime.context import get_config


def _as_list(v):
    return [v] if isinstance(v, str) else list(v or ())


class JwtVerificationService:
    def verify_jwt(self, token: str, *, key: str | None = None) -> TokenClaims:
        """Verify an internally issued bearer token.

        Checks signature, algorithm, issuer, audience and the registered time
        claims with the configured clock skew.

        Raises:
            UnauthorizedError: If the token is malformed, forged, expired or
                addressed to someone else
            CatalogError: If no signing secret is configured
        """
        cfg = get_config()
        verification_key = key or cfg.app.session_signing_secret
        if not verification_key:
            raise CatalogError("JWT signing secret not configured")

        claims_options = {
            "iss": {"essential": True, "values": [cfg.jwt.gen_issuer]},
            "aud": {"essential": True, "values": _as_list(cfg.jwt.audiences)},
            "sub": {"essential": True},
        }

        try:
            claims = jwt.decode(token, verification_key, claims_options=claims_options)
            claims.validate(leeway=cfg.jwt.clock_skew)
        except (JoseError, ValueError) as exc:
            logger.debug("Bearer token rejected: {}", exc)
            raise UnauthorizedError("Invalid bearer token") from exc

        alg = claims.header.get("alg")
        if alg not in cfg.jwt.allowed_algorithms:
            raise UnauthorizedError("Disallowed JWT algorithm")

        # exp is optional for authlib; it is mandatory here
        now = int(time.time())
        exp = claims.get("exp")
        if exp is None or now > int(exp) + cfg.jwt.clock_skew:
            raise UnauthorizedError("Bearer token expired")

        return TokenClaims.from_claims(dict(claims))
