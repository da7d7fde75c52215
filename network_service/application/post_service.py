"""
Post service - posts, likes, shares, comments and replies
"""
from datetime import datetime
from typing import Optional, List, Tuple, Dict
from fastapi import HTTPException, status
import logging

from ..domain.models import (
    User, Post, Comment, Reply, Visibility, NotificationType, extract_hashtags, extract_mentions
)
from ..domain.repositories import IPostRepository, ICommentRepository, IUserRepository
from ..schemas import PostResponse, PostDetailResponse, CommentResponse
from .graph_service import GraphService
from .notification_service import NotificationService
from .pagination import paginate
from .presenters import post_response, post_detail_response, comment_response

logger = logging.getLogger(__name__)


def normalize_hashtag(tag: str) -> str:
    """Accept a tag with or without its leading '#'"""
    return "#" + tag.strip().lstrip("#").lower()


class PostService:
    """Post service - handles post and comment business logic"""

    def __init__(
        self,
        post_repository: IPostRepository,
        comment_repository: ICommentRepository,
        user_repository: IUserRepository,
        graph_service: GraphService,
        notification_service: NotificationService
    ):
        self.post_repo = post_repository
        self.comment_repo = comment_repository
        self.user_repo = user_repository
        self.graph = graph_service
        self.notifications = notification_service

    # Lookups

    async def _get_post(self, post_id: str) -> Post:
        post = await self.post_repo.find_by_id(post_id)
        if not post:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Post not found"
            )
        return post

    async def _get_visible_post(self, post_id: str, viewer: Optional[User]) -> Post:
        """Posts hidden from the viewer are reported as missing"""
        post = await self._get_post(post_id)
        viewer_id = viewer.id if viewer else None
        connection_ids = await self.graph.connection_ids(viewer_id) if viewer_id else []
        if not post.is_visible_to(viewer_id, connection_ids):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Post not found"
            )
        return post

    async def _get_comment(self, post_id: str, comment_id: str) -> Comment:
        comment = await self.comment_repo.find_comment(post_id, comment_id)
        if not comment:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Comment not found"
            )
        return comment

    async def _get_reply(self, comment_id: str, reply_id: str) -> Reply:
        reply = await self.comment_repo.find_reply(comment_id, reply_id)
        if not reply:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Reply not found"
            )
        return reply

    # Response building

    async def _build_posts(self, posts: List[Post]) -> List[PostResponse]:
        """Attach authors and comment counts in two batched queries"""
        authors = await self.user_repo.find_by_ids(list({p.author_id for p in posts}))
        authors_by_id = {user.id: user for user in authors}
        counts = await self.comment_repo.count_comments([p.id for p in posts])
        return [post_response(p, authors_by_id.get(p.author_id), counts.get(p.id, 0)) for p in posts]

    async def _build_comment(self, comment: Comment) -> CommentResponse:
        return (await self._build_comments([comment]))[0]

    async def _comment_users(self, comments: List[Comment]) -> Dict[str, User]:
        user_ids = {c.user_id for c in comments}
        for comment in comments:
            user_ids.update(r.user_id for r in comment.replies)
        return {user.id: user for user in await self.user_repo.find_by_ids(list(user_ids))}

    async def _build_comments(self, comments: List[Comment]) -> List[CommentResponse]:
        users = await self._comment_users(comments)
        return [comment_response(c, users) for c in comments]

    # Posts

    async def create_post(
        self,
        author: User,
        content: str,
        media: Optional[List[str]] = None,
        visibility: Visibility = Visibility.PUBLIC,
        location: str = ""
    ) -> PostResponse:
        """Create a post, deriving hashtags and mentions from its content"""
        post = Post(
            id="",
            author_id=author.id,
            content=content,
            media=media or [],
            hashtags=extract_hashtags(content),
            mentions=extract_mentions(content),
            visibility=visibility,
            location=location,
        )
        created = await self.post_repo.create(post)
        logger.info(f"User {author.id} created post {created.id}")
        return post_response(created, author, 0)

    async def get_feed(self, viewer: Optional[User], page: int = 1,
                       limit: int = 10) -> Tuple[List[PostResponse], int]:
        """
        Newest posts the viewer may see

        Returns:
            Tuple of (posts, total)
        """
        skip, limit = paginate(page, limit)
        viewer_id = viewer.id if viewer else None
        connection_ids = await self.graph.connection_ids(viewer_id) if viewer_id else []
        result = await self.post_repo.find_visible(viewer_id, connection_ids, skip=skip, limit=limit)
        return await self._build_posts(result.items), result.total

    async def get_user_posts(self, user_id: str, viewer: Optional[User], page: int = 1,
                             limit: int = 10) -> Tuple[List[PostResponse], int]:
        """Posts by one author, filtered by what the viewer may see"""
        await self.graph.get_user_or_404(user_id)
        skip, limit = paginate(page, limit)
        viewer_id = viewer.id if viewer else None
        connection_ids = await self.graph.connection_ids(viewer_id) if viewer_id else []
        result = await self.post_repo.find_visible(
            viewer_id, connection_ids, author_id=user_id, skip=skip, limit=limit
        )
        return await self._build_posts(result.items), result.total

    async def search_posts(self, q: Optional[str] = None, hashtag: Optional[str] = None,
                           page: int = 1, limit: int = 10) -> Tuple[List[PostResponse], int]:
        """Search public posts by text and/or hashtag"""
        skip, limit = paginate(page, limit)
        result = await self.post_repo.search(
            text=q or None,
            hashtag=normalize_hashtag(hashtag) if hashtag else None,
            skip=skip,
            limit=limit,
        )
        return await self._build_posts(result.items), result.total

    async def get_post(self, post_id: str, viewer: Optional[User]) -> PostDetailResponse:
        """A post with its comments and the viewer's like/share state"""
        post = await self._get_visible_post(post_id, viewer)
        author = await self.user_repo.find_by_id(post.author_id)
        comments = await self.comment_repo.list_comments(post.id)
        users = await self._comment_users(comments)
        return post_detail_response(post, author, comments, users, viewer.id if viewer else None)

    async def update_post(
        self,
        post_id: str,
        user: User,
        content: str,
        media: Optional[List[str]] = None,
        visibility: Optional[Visibility] = None,
        location: Optional[str] = None
    ) -> PostResponse:
        """Edit a post, keeping the previous content in its history"""
        post = await self._get_post(post_id)
        if not post.is_author(user.id):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not authorized to update this post"
            )

        post.edit(content, datetime.utcnow())
        if media is not None:
            post.media = media
        if visibility is not None:
            post.visibility = visibility
        if location is not None:
            post.location = location

        saved = await self.post_repo.save(post)
        return (await self._build_posts([saved]))[0]

    async def delete_post(self, post_id: str, user: User) -> None:
        """
        Delete a post with all of its comments and replies

        Notifications that reference the post are left in place.
        """
        post = await self._get_post(post_id)
        if not post.is_author(user.id):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not authorized to delete this post"
            )

        await self.comment_repo.delete_for_post(post.id)
        await self.post_repo.delete(post.id)
        logger.info(f"User {user.id} deleted post {post.id}")

    async def toggle_like(self, post_id: str, user: User) -> Tuple[bool, int]:
        """
        Like or unlike a post

        Returns:
            Tuple of (liked, like_count)
        """
        post = await self._get_visible_post(post_id, user)

        if post.has_user_liked(user.id):
            await self.post_repo.remove_like(post.id, user.id)
            liked = False
        else:
            liked = await self.post_repo.add_like(post.id, user.id)
            if liked and not post.is_author(user.id):
                await self.notifications.notify(
                    recipient_id=post.author_id,
                    sender_id=user.id,
                    type=NotificationType.LIKE,
                    post_id=post.id,
                    content=f"{user.full_name} liked your post",
                )

        refreshed = await self._get_post(post.id)
        return liked, refreshed.like_count

    async def share_post(self, post_id: str, user: User) -> int:
        """
        Share a post once

        Returns:
            The new share count
        """
        post = await self._get_visible_post(post_id, user)

        if post.has_user_shared(user.id) or not await self.post_repo.add_share(post.id, user.id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Post already shared"
            )

        if not post.is_author(user.id):
            await self.notifications.notify(
                recipient_id=post.author_id,
                sender_id=user.id,
                type=NotificationType.SHARE,
                post_id=post.id,
                content=f"{user.full_name} shared your post",
            )

        refreshed = await self._get_post(post.id)
        return refreshed.share_count

    # Comments

    async def add_comment(self, post_id: str, user: User, content: str) -> CommentResponse:
        post = await self._get_visible_post(post_id, user)
        comment = await self.comment_repo.create_comment(post.id, user.id, content)

        if not post.is_author(user.id):
            await self.notifications.notify(
                recipient_id=post.author_id,
                sender_id=user.id,
                type=NotificationType.COMMENT,
                post_id=post.id,
                comment_id=comment.id,
                content=f"{user.full_name} commented on your post",
            )
        return await self._build_comment(comment)

    async def list_comments(self, post_id: str, viewer: Optional[User]) -> List[CommentResponse]:
        post = await self._get_visible_post(post_id, viewer)
        return await self._build_comments(await self.comment_repo.list_comments(post.id))

    async def reply_to_comment(self, post_id: str, comment_id: str, user: User,
                               content: str) -> CommentResponse:
        """Reply to a comment; returns the comment with all of its replies"""
        post = await self._get_visible_post(post_id, user)
        comment = await self._get_comment(post.id, comment_id)
        await self.comment_repo.create_reply(post.id, comment.id, user.id, content)

        if comment.user_id != user.id:
            await self.notifications.notify(
                recipient_id=comment.user_id,
                sender_id=user.id,
                type=NotificationType.REPLY,
                post_id=post.id,
                comment_id=comment.id,
                content=f"{user.full_name} replied to your comment",
            )
        return await self._build_comment(await self._get_comment(post.id, comment.id))

    async def toggle_comment_like(self, post_id: str, comment_id: str,
                                  user: User) -> Tuple[bool, int]:
        post = await self._get_visible_post(post_id, user)
        comment = await self._get_comment(post.id, comment_id)

        liked = user.id not in comment.likes
        await self.comment_repo.set_comment_like(comment.id, user.id, liked)

        if liked and comment.user_id != user.id:
            await self.notifications.notify(
                recipient_id=comment.user_id,
                sender_id=user.id,
                type=NotificationType.LIKE,
                post_id=post.id,
                comment_id=comment.id,
                content=f"{user.full_name} liked your comment",
            )

        refreshed = await self._get_comment(post.id, comment.id)
        return liked, refreshed.like_count

    async def toggle_reply_like(self, post_id: str, comment_id: str, reply_id: str,
                                user: User) -> Tuple[bool, int]:
        post = await self._get_visible_post(post_id, user)
        comment = await self._get_comment(post.id, comment_id)
        reply = await self._get_reply(comment.id, reply_id)

        liked = user.id not in reply.likes
        await self.comment_repo.set_reply_like(reply.id, user.id, liked)

        refreshed = await self._get_reply(comment.id, reply.id)
        return liked, refreshed.like_count

    async def update_comment(self, post_id: str, comment_id: str, user: User,
                             content: str) -> CommentResponse:
        post = await self._get_post(post_id)
        comment = await self._get_comment(post.id, comment_id)
        if comment.user_id != user.id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not authorized to update this comment"
            )

        await self.comment_repo.update_comment(comment.id, content)
        return await self._build_comment(await self._get_comment(post.id, comment.id))

    async def delete_comment(self, post_id: str, comment_id: str, user: User) -> None:
        """Comment author or post author may delete a comment"""
        post = await self._get_post(post_id)
        comment = await self._get_comment(post.id, comment_id)
        if comment.user_id != user.id and not post.is_author(user.id):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not authorized to delete this comment"
            )
        await self.comment_repo.delete_comment(comment.id)

    async def delete_reply(self, post_id: str, comment_id: str, reply_id: str,
                           user: User) -> None:
        """Reply author or post author may delete a reply"""
        post = await self._get_post(post_id)
        comment = await self._get_comment(post.id, comment_id)
        reply = await self._get_reply(comment.id, reply_id)
        if reply.user_id != user.id and not post.is_author(user.id):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not authorized to delete this reply"
            )
        await self.comment_repo.delete_reply(reply.id)
