from typing import Any, Literal

from pydantic import BaseModel, Field

from verified_auth.domain.results import AuthResult


class AuthOut(BaseModel):
    success: bool
    error: str | None = None
    location: Literal["pending_verification"] | None = None
    auth_identity: dict[str, Any] | None = Field(
        None, description="The authenticated identity, without secrets"
    )
    token: str | None = Field(None, description="Bearer token for the new session")

    @classmethod
    def from_result(cls, result: AuthResult, token: str | None = None) -> "AuthOut":
        return cls(
            success=result.success,
            error=result.error,
            location=result.location,
            auth_identity=(
                result.auth_identity.to_dict() if result.auth_identity else None
            ),
            token=token,
        )
