"""Group API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from domeal.api.dependencies import get_current_user, get_group_service
from domeal.models.user import User
from domeal.schemas.group import GroupCreate, GroupResponse, JoinGroupRequest, JoinGroupResponse
from domeal.services.group_service import GroupService

router = APIRouter(prefix="/api", tags=["groups"])


@router.post("/create-group", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
def create_group(
    group_data: GroupCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[GroupService, Depends(get_group_service)],
):
    """Create a group owned by the current user."""
    return service.create_group(
        current_user, group_data.name, group_data.menu, group_data.menu_image_url
    )


@router.post("/join-group", response_model=JoinGroupResponse)
def join_group(
    request: JoinGroupRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[GroupService, Depends(get_group_service)],
):
    """Join an existing group."""
    group = service.join_group(current_user, request.group_id)
    return JoinGroupResponse(
        group_id=group.id,
        group_name=group.name,
        user_id=current_user.id,
        message="Successfully joined the group",
    )
