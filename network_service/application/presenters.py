"""
Response shaping - domain models to API schemas
"""
from typing import Optional, Dict, List

from ..domain.models import User, Post, Comment, Reply
from ..schemas import (
    UserSummary, UserProfile, PostResponse, PostDetailResponse, LikeInfo,
    EditHistoryInfo, CommentResponse, ReplyResponse
)


def user_summary(user: Optional[User]) -> Optional[UserSummary]:
    """Compact reference to a user"""
    if user is None:
        return None
    return UserSummary(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        full_name=user.full_name,
        profile_picture=user.profile_picture,
        title=user.title,
        company=user.company,
        location=user.location,
        skills=user.skills,
    )


def user_profile(user: User, follower_count: int = 0, following_count: int = 0,
                 connection_count: int = 0) -> UserProfile:
    """Public profile - never carries the password hash or tokens"""
    return UserProfile(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        full_name=user.full_name,
        email=user.email,
        profile_picture=user.profile_picture,
        cover_photo=user.cover_photo,
        bio=user.bio,
        title=user.title,
        company=user.company,
        location=user.location,
        website=user.website,
        skills=user.skills,
        interests=user.interests,
        is_verified=user.is_verified,
        follower_count=follower_count,
        following_count=following_count,
        connection_count=connection_count,
        created_at=user.created_at,
    )


def reply_response(reply: Reply, users: Dict[str, User]) -> ReplyResponse:
    return ReplyResponse(
        id=reply.id,
        post_id=reply.post_id,
        comment_id=reply.comment_id,
        user=user_summary(users.get(reply.user_id)),
        content=reply.content,
        likes=reply.likes,
        like_count=reply.like_count,
        created_at=reply.created_at,
    )


def comment_response(comment: Comment, users: Dict[str, User]) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        post_id=comment.post_id,
        user=user_summary(users.get(comment.user_id)),
        content=comment.content,
        likes=comment.likes,
        like_count=comment.like_count,
        replies=[reply_response(r, users) for r in comment.replies],
        reply_count=comment.reply_count,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
    )


def post_response(post: Post, author: Optional[User], comment_count: int) -> PostResponse:
    return PostResponse(
        id=post.id,
        author=user_summary(author),
        author_id=post.author_id,
        content=post.content,
        media=post.media,
        hashtags=post.hashtags,
        mentions=post.mentions,
        likes=[LikeInfo(user_id=l.user_id, created_at=l.created_at) for l in post.likes],
        shares=[LikeInfo(user_id=s.user_id, created_at=s.created_at) for s in post.shares],
        like_count=post.like_count,
        comment_count=comment_count,
        share_count=post.share_count,
        visibility=post.visibility,
        location=post.location,
        is_edited=post.is_edited,
        edit_history=[EditHistoryInfo(content=e.content, edited_at=e.edited_at) for e in post.edit_history],
        created_at=post.created_at,
        updated_at=post.updated_at,
    )


def post_detail_response(post: Post, author: Optional[User], comments: List[Comment],
                         users: Dict[str, User], viewer_id: Optional[str]) -> PostDetailResponse:
    base = post_response(post, author, len(comments))
    return PostDetailResponse(
        **base.model_dump(),
        comments=[comment_response(c, users) for c in comments],
        user_liked=viewer_id is not None and post.has_user_liked(viewer_id),
        user_shared=viewer_id is not None and post.has_user_shared(viewer_id),
    )
