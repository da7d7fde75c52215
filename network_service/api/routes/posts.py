"""
Post routes
"""
from fastapi import APIRouter, Depends, Query, status
from typing import Optional, List

from ...config import settings
from ...domain.models import User
from ...schemas import (
    PostCreate, PostUpdate, CommentCreate, PostResponse, PostDetailResponse,
    CommentResponse, DataResponse, ListResponse, MessageResponse, ToggleResponse
)
from ...application.post_service import PostService
from ...application.pagination import build_pagination
from ..dependencies import get_post_service, get_current_user, get_current_user_optional


router = APIRouter(prefix="/api/posts", tags=["Posts"])


@router.post("", response_model=DataResponse[PostResponse], status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    current_user: User = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service)
):
    """
    Create a post

    - **content**: 1-2000 characters; hashtags and mentions are extracted
    - **media**: HTTP/HTTPS URLs
    - **visibility**: public, connections or private
    """
    post = await post_service.create_post(
        author=current_user,
        content=post_data.content,
        media=post_data.media,
        visibility=post_data.visibility,
        location=post_data.location
    )
    return DataResponse[PostResponse](data=post)


@router.get("", response_model=ListResponse[PostResponse])
async def get_feed(
    page: int = Query(1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE),
    current_user: Optional[User] = Depends(get_current_user_optional),
    post_service: PostService = Depends(get_post_service)
):
    """Feed of posts visible to the caller"""
    posts, total = await post_service.get_feed(current_user, page, limit)
    return ListResponse[PostResponse](data=posts, pagination=build_pagination(page, limit, total))


@router.get("/search", response_model=ListResponse[PostResponse])
async def search_posts(
    q: Optional[str] = None,
    hashtag: Optional[str] = None,
    page: int = Query(1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE),
    post_service: PostService = Depends(get_post_service)
):
    """Search public posts by text or hashtag"""
    posts, total = await post_service.search_posts(q=q, hashtag=hashtag, page=page, limit=limit)
    return ListResponse[PostResponse](data=posts, pagination=build_pagination(page, limit, total))


@router.get("/user/{user_id}", response_model=ListResponse[PostResponse])
async def get_user_posts(
    user_id: str,
    page: int = Query(1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE),
    current_user: Optional[User] = Depends(get_current_user_optional),
    post_service: PostService = Depends(get_post_service)
):
    """Posts by a user"""
    posts, total = await post_service.get_user_posts(user_id, current_user, page, limit)
    return ListResponse[PostResponse](data=posts, pagination=build_pagination(page, limit, total))


@router.get("/{post_id}", response_model=DataResponse[PostDetailResponse])
async def get_post(
    post_id: str,
    current_user: Optional[User] = Depends(get_current_user_optional),
    post_service: PostService = Depends(get_post_service)
):
    """A post with its comments"""
    return DataResponse[PostDetailResponse](data=await post_service.get_post(post_id, current_user))


@router.put("/{post_id}", response_model=DataResponse[PostResponse])
async def update_post(
    post_id: str,
    post_data: PostUpdate,
    current_user: User = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service)
):
    """Edit a post (author only)"""
    post = await post_service.update_post(
        post_id,
        current_user,
        content=post_data.content,
        media=post_data.media,
        visibility=post_data.visibility,
        location=post_data.location
    )
    return DataResponse[PostResponse](data=post)


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: str,
    current_user: User = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service)
):
    """Delete a post (author only)"""
    await post_service.delete_post(post_id, current_user)
    return MessageResponse(message="Post deleted successfully")


@router.post("/{post_id}/like", response_model=ToggleResponse)
async def like_post(
    post_id: str,
    current_user: User = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service)
):
    """Like or unlike a post"""
    liked, like_count = await post_service.toggle_like(post_id, current_user)
    return ToggleResponse(
        message="Post liked" if liked else "Post unliked",
        liked=liked,
        like_count=like_count
    )


@router.post("/{post_id}/comments", response_model=DataResponse[CommentResponse],
             status_code=status.HTTP_201_CREATED)
async def add_comment(
    post_id: str,
    comment_data: CommentCreate,
    current_user: User = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service)
):
    """Comment on a post"""
    comment = await post_service.add_comment(post_id, current_user, comment_data.content)
    return DataResponse[CommentResponse](data=comment)


@router.get("/{post_id}/comments", response_model=DataResponse[List[CommentResponse]])
async def get_comments(
    post_id: str,
    current_user: Optional[User] = Depends(get_current_user_optional),
    post_service: PostService = Depends(get_post_service)
):
    """Comments of a post, oldest first"""
    comments = await post_service.list_comments(post_id, current_user)
    return DataResponse[List[CommentResponse]](data=comments)


@router.post("/{post_id}/share", response_model=DataResponse[int])
async def share_post(
    post_id: str,
    current_user: User = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service)
):
    """Share a post; each user may share a post once"""
    share_count = await post_service.share_post(post_id, current_user)
    return DataResponse[int](data=share_count, message="Post shared successfully")
