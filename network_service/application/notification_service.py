"""
Notification log - side-effect producer and inbox operations
"""
from datetime import datetime, timedelta
from typing import Optional, Dict, Any, List, Tuple
from fastapi import HTTPException, status
import logging

from ..domain.models import Notification, NotificationType
from ..domain.repositories import INotificationRepository, IUserRepository
from ..schemas import NotificationResponse
from ..config import settings
from .pagination import paginate
from .presenters import user_summary

logger = logging.getLogger(__name__)

CONTENT_MAX_LENGTH = 200


class NotificationService:
    """Notification service - writes and reads the notification log"""

    def __init__(
        self,
        notification_repository: INotificationRepository,
        user_repository: IUserRepository
    ):
        self.notification_repo = notification_repository
        self.user_repo = user_repository

    async def notify(
        self,
        recipient_id: str,
        sender_id: str,
        type: NotificationType,
        content: str = "",
        post_id: Optional[str] = None,
        comment_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> Optional[Notification]:
        """
        Append a notification for a social action

        Callers skip self-actions; a notification addressed to its own
        sender is never written.
        """
        if recipient_id == sender_id:
            return None

        notification = await self.notification_repo.create(
            recipient_id=recipient_id,
            sender_id=sender_id,
            type=type,
            post_id=post_id,
            comment_id=comment_id,
            content=content[:CONTENT_MAX_LENGTH],
            metadata=metadata,
        )
        logger.debug(f"Notification {type.value} from {sender_id} to {recipient_id}")
        return notification

    async def list_notifications(
        self, recipient_id: str, page: int = 1, limit: int = 20
    ) -> Tuple[List[NotificationResponse], int]:
        """
        List a user's notifications, newest first, excluding soft-deleted ones

        Returns:
            Tuple of (notifications, total)
        """
        skip, limit = paginate(page, limit)
        result = await self.notification_repo.find_for_recipient(recipient_id, skip, limit)

        senders = await self.user_repo.find_by_ids(list({n.sender_id for n in result.items}))
        senders_by_id = {user.id: user for user in senders}

        notifications = [
            NotificationResponse(
                id=n.id,
                recipient_id=n.recipient_id,
                sender=user_summary(senders_by_id.get(n.sender_id)),
                sender_id=n.sender_id,
                type=n.type,
                post_id=n.post_id,
                comment_id=n.comment_id,
                content=n.content,
                is_read=n.is_read,
                created_at=n.created_at,
            )
            for n in result.items
        ]
        return notifications, result.total

    async def unread_count(self, recipient_id: str) -> int:
        """Count unread notifications"""
        return await self.notification_repo.count_unread(recipient_id)

    async def _get_own(self, notification_id: str, recipient_id: str) -> Notification:
        notification = await self.notification_repo.find_one(notification_id, recipient_id)
        if not notification:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Notification not found"
            )
        return notification

    async def mark_read(self, notification_id: str, recipient_id: str) -> None:
        """Mark one of the recipient's notifications read"""
        notification = await self._get_own(notification_id, recipient_id)
        await self.notification_repo.mark_read(notification.id)

    async def mark_all_read(self, recipient_id: str) -> int:
        """Mark all of the recipient's notifications read"""
        return await self.notification_repo.mark_all_read(recipient_id)

    async def delete(self, notification_id: str, recipient_id: str) -> None:
        """Soft-delete one of the recipient's notifications"""
        notification = await self._get_own(notification_id, recipient_id)
        await self.notification_repo.mark_deleted(notification.id)

    async def delete_all(self, recipient_id: str) -> int:
        """Soft-delete all of the recipient's notifications"""
        return await self.notification_repo.mark_all_deleted(recipient_id)

    async def prune(self, days: Optional[int] = None) -> int:
        """
        Remove read notifications older than the retention window

        Unread notifications are kept regardless of age.

        Args:
            days: Retention window in days (default from settings)

        Returns:
            Number of notifications removed
        """
        if days is None:
            days = settings.NOTIFICATION_RETENTION_DAYS
        cutoff = datetime.utcnow() - timedelta(days=days)
        removed = await self.notification_repo.delete_read_before(cutoff)
        logger.info(f"Pruned {removed} read notifications older than {days} days")
        return removed
