"""Group schemas."""

from pydantic import BaseModel, ConfigDict, Field


class GroupCreate(BaseModel):
    """Create a new group."""

    name: str = Field("", max_length=255)
    menu: str = Field("", max_length=255)
    menu_image_url: str | None = Field(None, max_length=2000)


class GroupResponse(BaseModel):
    """Group response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    menu: str
    menu_image_url: str | None


class JoinGroupRequest(BaseModel):
    """Join an existing group."""

    group_id: int = 0


class JoinGroupResponse(BaseModel):
    """Response after joining a group."""

    group_id: int
    group_name: str
    user_id: int
    message: str
