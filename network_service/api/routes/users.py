"""
User routes
"""
from fastapi import APIRouter, Depends, Query
from typing import Optional, List

from ...config import settings
from ...domain.models import User
from ...schemas import (
    UserSummary, UserProfile, ProfileView, ProfilePictureUpdate, CoverPhotoUpdate,
    DataResponse, ListResponse, MessageResponse, FollowResponse
)
from ...application.services import UserService
from ...application.graph_service import GraphService
from ...application.pagination import build_pagination
from ..dependencies import (
    get_user_service, get_graph_service, get_current_user, get_current_user_optional
)


router = APIRouter(prefix="/api/users", tags=["Users"])


def split_csv(value: Optional[str]) -> Optional[List[str]]:
    """Split a comma-separated query value into trimmed, non-empty items"""
    if not value:
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


@router.get("/search", response_model=ListResponse[UserSummary])
async def search_users(
    q: Optional[str] = Query(None, description="Full-text query"),
    skills: Optional[str] = Query(None, description="Comma-separated skills"),
    location: Optional[str] = None,
    company: Optional[str] = None,
    page: int = Query(1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE),
    user_service: UserService = Depends(get_user_service)
):
    """Search active users"""
    users, total = await user_service.search_users(
        q=q, skills=split_csv(skills), location=location, company=company,
        page=page, limit=limit
    )
    return ListResponse[UserSummary](data=users, pagination=build_pagination(page, limit, total))


@router.get("/suggestions", response_model=DataResponse[List[UserSummary]])
async def get_suggestions(
    current_user: User = Depends(get_current_user),
    graph_service: GraphService = Depends(get_graph_service)
):
    """People the current user is not yet related to"""
    return DataResponse[List[UserSummary]](data=await graph_service.suggestions(current_user.id))


@router.get("/pending-connections", response_model=DataResponse[List[UserSummary]])
async def get_pending_connections(
    current_user: User = Depends(get_current_user),
    graph_service: GraphService = Depends(get_graph_service)
):
    """Connection requests waiting for the current user's answer"""
    pending = await graph_service.summaries(await graph_service.pending_ids(current_user.id))
    return DataResponse[List[UserSummary]](data=pending)


@router.put("/profile-picture", response_model=DataResponse[UserProfile])
async def update_profile_picture(
    request: ProfilePictureUpdate,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
):
    """Record a profile picture URL"""
    profile = await user_service.set_profile_picture(current_user, request.profile_picture)
    return DataResponse[UserProfile](data=profile, message="Profile picture updated successfully")


@router.put("/cover-photo", response_model=DataResponse[UserProfile])
async def update_cover_photo(
    request: CoverPhotoUpdate,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
):
    """Record a cover photo URL"""
    profile = await user_service.set_cover_photo(current_user, request.cover_photo)
    return DataResponse[UserProfile](data=profile, message="Cover photo updated successfully")


@router.delete("/me", response_model=MessageResponse)
async def deactivate_account(
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
):
    """Deactivate the current user's account"""
    await user_service.deactivate_account(current_user)
    return MessageResponse(message="Account deactivated")


@router.get("/{user_id}", response_model=DataResponse[ProfileView])
async def get_user(
    user_id: str,
    current_user: Optional[User] = Depends(get_current_user_optional),
    user_service: UserService = Depends(get_user_service)
):
    """Get a user's profile"""
    viewer_id = current_user.id if current_user else None
    return DataResponse[ProfileView](data=await user_service.get_profile(user_id, viewer_id))


@router.post("/{user_id}/follow", response_model=FollowResponse)
async def follow_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    graph_service: GraphService = Depends(get_graph_service)
):
    """Follow or unfollow a user"""
    following = await graph_service.toggle_follow(current_user, user_id)
    return FollowResponse(
        message="User followed" if following else "User unfollowed",
        following=following
    )


@router.post("/{user_id}/connect", response_model=MessageResponse)
async def connect_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    graph_service: GraphService = Depends(get_graph_service)
):
    """Send a connection request"""
    connected = await graph_service.send_connection_request(current_user, user_id)
    return MessageResponse(message="Connection accepted" if connected else "Connection request sent")


@router.post("/{user_id}/accept-connection", response_model=MessageResponse)
async def accept_connection(
    user_id: str,
    current_user: User = Depends(get_current_user),
    graph_service: GraphService = Depends(get_graph_service)
):
    """Accept a connection request from a user"""
    await graph_service.accept_connection(current_user, user_id)
    return MessageResponse(message="Connection accepted")


@router.post("/{user_id}/reject-connection", response_model=MessageResponse)
async def reject_connection(
    user_id: str,
    current_user: User = Depends(get_current_user),
    graph_service: GraphService = Depends(get_graph_service)
):
    """Reject a connection request from a user"""
    await graph_service.reject_connection(current_user.id, user_id)
    return MessageResponse(message="Connection request rejected")


@router.get("/{user_id}/connections", response_model=DataResponse[List[UserSummary]])
async def get_connections(
    user_id: str,
    graph_service: GraphService = Depends(get_graph_service)
):
    """A user's connections"""
    user = await graph_service.get_user_or_404(user_id)
    connections = await graph_service.summaries(await graph_service.connection_ids(user.id))
    return DataResponse[List[UserSummary]](data=connections)


@router.get("/{user_id}/followers", response_model=DataResponse[List[UserSummary]])
async def get_followers(
    user_id: str,
    graph_service: GraphService = Depends(get_graph_service)
):
    """A user's followers"""
    user = await graph_service.get_user_or_404(user_id)
    followers = await graph_service.summaries(await graph_service.follower_ids(user.id))
    return DataResponse[List[UserSummary]](data=followers)


@router.get("/{user_id}/following", response_model=DataResponse[List[UserSummary]])
async def get_following(
    user_id: str,
    graph_service: GraphService = Depends(get_graph_service)
):
    """Users a user follows"""
    user = await graph_service.get_user_or_404(user_id)
    following = await graph_service.summaries(await graph_service.following_ids(user.id))
    return DataResponse[List[UserSummary]](data=following)
