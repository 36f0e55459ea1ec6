"""Authentication schemas."""

from pydantic import BaseModel, ConfigDict


class UserResponse(BaseModel):
    """User information response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    display_name: str
    picture_url: str | None = None
