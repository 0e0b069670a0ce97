from pydantic import BaseModel, ConfigDict, Field


class AuthenticateIn(BaseModel):
    """Missing fields are reported by the provider itself, not by FastAPI."""

    model_config = ConfigDict(extra="allow")

    email: str | None = Field(None, description="The email of the user", max_length=255)
    password: str | None = Field(None, description="The password of the user")
    callback_url: str | None = Field(
        None, description="Where the verification link should point to"
    )


class UpdateCredentialIn(BaseModel):
    entity_id: str | None = Field(None, description="The email the identity is keyed by")
    password: str | None = Field(None, description="The new password")
