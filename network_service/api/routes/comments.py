"""
Comment and reply routes
"""
from fastapi import APIRouter, Depends, status

from ...domain.models import User
from ...schemas import (
    CommentCreate, ReplyCreate, CommentResponse, DataResponse, MessageResponse, ToggleResponse
)
from ...application.post_service import PostService
from ..dependencies import get_post_service, get_current_user


router = APIRouter(prefix="/api/comments", tags=["Comments"])


@router.post("/{post_id}/{comment_id}/reply", response_model=DataResponse[CommentResponse],
             status_code=status.HTTP_201_CREATED)
async def reply_to_comment(
    post_id: str,
    comment_id: str,
    reply_data: ReplyCreate,
    current_user: User = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service)
):
    """Reply to a comment"""
    comment = await post_service.reply_to_comment(post_id, comment_id, current_user, reply_data.content)
    return DataResponse[CommentResponse](data=comment)


@router.post("/{post_id}/{comment_id}/like", response_model=ToggleResponse)
async def like_comment(
    post_id: str,
    comment_id: str,
    current_user: User = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service)
):
    """Like or unlike a comment"""
    liked, like_count = await post_service.toggle_comment_like(post_id, comment_id, current_user)
    return ToggleResponse(
        message="Comment liked" if liked else "Comment unliked",
        liked=liked,
        like_count=like_count
    )


@router.put("/{post_id}/{comment_id}", response_model=DataResponse[CommentResponse])
async def update_comment(
    post_id: str,
    comment_id: str,
    comment_data: CommentCreate,
    current_user: User = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service)
):
    """Edit a comment (comment author only)"""
    comment = await post_service.update_comment(post_id, comment_id, current_user, comment_data.content)
    return DataResponse[CommentResponse](data=comment)


@router.delete("/{post_id}/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    post_id: str,
    comment_id: str,
    current_user: User = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service)
):
    """Delete a comment (comment author or post author)"""
    await post_service.delete_comment(post_id, comment_id, current_user)
    return MessageResponse(message="Comment deleted successfully")


@router.post("/{post_id}/{comment_id}/replies/{reply_id}/like", response_model=ToggleResponse)
async def like_reply(
    post_id: str,
    comment_id: str,
    reply_id: str,
    current_user: User = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service)
):
    """Like or unlike a reply"""
    liked, like_count = await post_service.toggle_reply_like(post_id, comment_id, reply_id, current_user)
    return ToggleResponse(
        message="Reply liked" if liked else "Reply unliked",
        liked=liked,
        like_count=like_count
    )


@router.delete("/{post_id}/{comment_id}/replies/{reply_id}", response_model=MessageResponse)
async def delete_reply(
    post_id: str,
    comment_id: str,
    reply_id: str,
    current_user: User = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service)
):
    """Delete a reply (reply author or post author)"""
    await post_service.delete_reply(post_id, comment_id, reply_id, current_user)
    return MessageResponse(message="Reply deleted successfully")
