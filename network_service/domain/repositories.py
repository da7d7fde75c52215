"""
Repository interfaces - Define contracts for data access
"""
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any, List
from datetime import datetime

from .models import (
    User, Post, Comment, Reply, Relationship, RelationshipKind,
    RelationshipStatus, Notification, NotificationType, Page
)


class IUserRepository(ABC):
    """User repository interface"""

    @abstractmethod
    async def create(self, first_name: str, last_name: str, email: str,
                     password_hash: str) -> Optional[User]:
        """Create a new user, None if the email is already taken"""
        pass

    @abstractmethod
    async def find_by_id(self, user_id: str) -> Optional[User]:
        """Find user by ID"""
        pass

    @abstractmethod
    async def find_by_ids(self, user_ids: List[str]) -> List[User]:
        """Find active users by IDs"""
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        """Find user by email"""
        pass

    @abstractmethod
    async def exists_by_email(self, email: str) -> bool:
        """Check if a user exists with the email"""
        pass

    @abstractmethod
    async def update(self, user_id: str, updates: Dict[str, Any]) -> Optional[User]:
        """Update user fields"""
        pass

    @abstractmethod
    async def update_password(self, user_id: str, password_hash: str) -> None:
        """Set a new password hash and clear any reset token"""
        pass

    @abstractmethod
    async def set_reset_token(self, user_id: str, token_hash: str, expires_at: datetime) -> None:
        """Store a hashed password reset token"""
        pass

    @abstractmethod
    async def find_by_reset_token(self, token_hash: str, now: datetime) -> Optional[User]:
        """Find user holding an unexpired reset token"""
        pass

    @abstractmethod
    async def update_last_active(self, user_id: str) -> None:
        """Update user's last active timestamp"""
        pass

    @abstractmethod
    async def deactivate(self, user_id: str) -> None:
        """Deactivate user account"""
        pass

    @abstractmethod
    async def search(self, text: Optional[str] = None, skills: Optional[List[str]] = None,
                     location: Optional[str] = None, company: Optional[str] = None,
                     skip: int = 0, limit: int = 10) -> Page:
        """Search active users"""
        pass

    @abstractmethod
    async def find_excluding(self, excluded_ids: List[str], limit: int) -> List[User]:
        """Find active users not in the excluded set"""
        pass


class IPostRepository(ABC):
    """Post repository interface"""

    @abstractmethod
    async def create(self, post: Post) -> Post:
        """Create a new post"""
        pass

    @abstractmethod
    async def find_by_id(self, post_id: str) -> Optional[Post]:
        """Find post by ID"""
        pass

    @abstractmethod
    async def save(self, post: Post) -> Post:
        """Persist content, media, visibility, location and edit history of a post"""
        pass

    @abstractmethod
    async def delete(self, post_id: str) -> bool:
        """Delete post"""
        pass

    @abstractmethod
    async def add_like(self, post_id: str, user_id: str) -> bool:
        """Add a like unless the user already liked the post"""
        pass

    @abstractmethod
    async def remove_like(self, post_id: str, user_id: str) -> bool:
        """Remove the user's like"""
        pass

    @abstractmethod
    async def add_share(self, post_id: str, user_id: str) -> bool:
        """Add a share unless the user already shared the post"""
        pass

    @abstractmethod
    async def find_visible(self, viewer_id: Optional[str], connection_ids: List[str],
                           author_id: Optional[str] = None,
                           skip: int = 0, limit: int = 10) -> Page:
        """Find posts visible to a viewer, newest first"""
        pass

    @abstractmethod
    async def search(self, text: Optional[str] = None, hashtag: Optional[str] = None,
                     skip: int = 0, limit: int = 10) -> Page:
        """Search public posts"""
        pass


class ICommentRepository(ABC):
    """Comment and reply repository interface"""

    @abstractmethod
    async def create_comment(self, post_id: str, user_id: str, content: str) -> Comment:
        """Create a comment on a post"""
        pass

    @abstractmethod
    async def find_comment(self, post_id: str, comment_id: str) -> Optional[Comment]:
        """Find a comment of a post, with its replies"""
        pass

    @abstractmethod
    async def list_comments(self, post_id: str) -> List[Comment]:
        """List comments of a post with their replies, oldest first"""
        pass

    @abstractmethod
    async def count_comments(self, post_ids: List[str]) -> Dict[str, int]:
        """Count top-level comments per post"""
        pass

    @abstractmethod
    async def update_comment(self, comment_id: str, content: str) -> None:
        """Update comment content"""
        pass

    @abstractmethod
    async def set_comment_like(self, comment_id: str, user_id: str, liked: bool) -> None:
        """Add or remove a user's like on a comment"""
        pass

    @abstractmethod
    async def delete_comment(self, comment_id: str) -> None:
        """Delete a comment and its replies"""
        pass

    @abstractmethod
    async def create_reply(self, post_id: str, comment_id: str, user_id: str,
                           content: str) -> Reply:
        """Create a reply to a comment"""
        pass

    @abstractmethod
    async def find_reply(self, comment_id: str, reply_id: str) -> Optional[Reply]:
        """Find a reply of a comment"""
        pass

    @abstractmethod
    async def set_reply_like(self, reply_id: str, user_id: str, liked: bool) -> None:
        """Add or remove a user's like on a reply"""
        pass

    @abstractmethod
    async def delete_reply(self, reply_id: str) -> None:
        """Delete a reply"""
        pass

    @abstractmethod
    async def delete_for_post(self, post_id: str) -> None:
        """Delete every comment and reply of a post"""
        pass


class IRelationshipRepository(ABC):
    """Social graph edge repository interface"""

    @abstractmethod
    async def get(self, kind: RelationshipKind, source_id: str,
                  target_id: str) -> Optional[Relationship]:
        """Get the edge source -> target"""
        pass

    @abstractmethod
    async def create(self, kind: RelationshipKind, source_id: str, target_id: str,
                     status: RelationshipStatus) -> Optional[Relationship]:
        """Create an edge, returning None if it already exists"""
        pass

    @abstractmethod
    async def update_status(self, kind: RelationshipKind, source_id: str, target_id: str,
                            status: RelationshipStatus) -> bool:
        """Change the status of an edge"""
        pass

    @abstractmethod
    async def delete(self, kind: RelationshipKind, source_id: str, target_id: str,
                     status: Optional[RelationshipStatus] = None) -> bool:
        """Delete an edge, optionally only when in the given status"""
        pass

    @abstractmethod
    async def list_targets(self, kind: RelationshipKind, source_id: str,
                           status: RelationshipStatus) -> List[str]:
        """IDs of users the source points at"""
        pass

    @abstractmethod
    async def list_sources(self, kind: RelationshipKind, target_id: str,
                           status: RelationshipStatus) -> List[str]:
        """IDs of users pointing at the target"""
        pass


class INotificationRepository(ABC):
    """Notification repository interface"""

    @abstractmethod
    async def create(self, recipient_id: str, sender_id: str, type: NotificationType,
                     post_id: Optional[str] = None, comment_id: Optional[str] = None,
                     content: str = "", metadata: Optional[Dict[str, Any]] = None) -> Notification:
        """Create a notification"""
        pass

    @abstractmethod
    async def find_for_recipient(self, recipient_id: str, skip: int = 0,
                                 limit: int = 20) -> Page:
        """List non-deleted notifications, newest first"""
        pass

    @abstractmethod
    async def find_one(self, notification_id: str, recipient_id: str) -> Optional[Notification]:
        """Find a recipient's notification unless soft-deleted"""
        pass

    @abstractmethod
    async def count_unread(self, recipient_id: str) -> int:
        """Count unread, non-deleted notifications"""
        pass

    @abstractmethod
    async def mark_read(self, notification_id: str) -> None:
        """Mark one notification read"""
        pass

    @abstractmethod
    async def mark_all_read(self, recipient_id: str) -> int:
        """Mark all of a recipient's notifications read"""
        pass

    @abstractmethod
    async def mark_deleted(self, notification_id: str) -> None:
        """Soft-delete one notification"""
        pass

    @abstractmethod
    async def mark_all_deleted(self, recipient_id: str) -> int:
        """Soft-delete all of a recipient's notifications"""
        pass

    @abstractmethod
    async def delete_read_before(self, cutoff: datetime) -> int:
        """Remove read notifications created before the cutoff"""
        pass
