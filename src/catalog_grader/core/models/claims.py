"""Verified bearer token claims."""

from typing import Any

from pydantic import BaseModel, Field


class TokenClaims(BaseModel):
    """Claims of an access token that passed signature and time checks."""

    subject: str = Field(description="User id (sub)")
    issuer: str | None = Field(default=None, description="Token issuer (iss)")
    audience: list[str] = Field(default_factory=list)
    expires_at: int | None = None
    issued_at: int | None = None
    jti: str | None = None
    roles: list[str] = Field(default_factory=list)
    all_claims: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> "TokenClaims":
        aud = claims.get("aud")
        return cls(
            subject=str(claims["sub"]),
            issuer=claims.get("iss"),
            audience=[aud] if isinstance(aud, str) else list(aud or ()),
            expires_at=claims.get("exp"),
            issued_at=claims.get("iat"),
            jti=claims.get("jti"),
            roles=list(claims.get("roles") or ()),
            all_claims=dict(claims),
        )
