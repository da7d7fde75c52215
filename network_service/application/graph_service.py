"""
Social graph service - follows and connections over relationship edges
"""
from collections import Counter
from typing import Optional, List, Dict
from fastapi import HTTPException, status
import logging

from ..domain.models import (
    User, Relationship, RelationshipKind, RelationshipStatus, NotificationType
)
from ..domain.repositories import IRelationshipRepository, IUserRepository
from ..schemas import UserSummary, NetworkStats
from ..config import settings
from .notification_service import NotificationService
from .presenters import user_summary

logger = logging.getLogger(__name__)

FOLLOW = RelationshipKind.FOLLOW
CONNECTION = RelationshipKind.CONNECTION
PENDING = RelationshipStatus.PENDING
ACCEPTED = RelationshipStatus.ACCEPTED


def _unique(ids: List[str]) -> List[str]:
    seen: List[str] = []
    for item in ids:
        if item not in seen:
            seen.append(item)
    return seen


class GraphService:
    """Graph service - follow toggling and the connection handshake"""

    def __init__(
        self,
        relationship_repository: IRelationshipRepository,
        user_repository: IUserRepository,
        notification_service: NotificationService
    ):
        self.relationship_repo = relationship_repository
        self.user_repo = user_repository
        self.notifications = notification_service

    async def get_user_or_404(self, user_id: str) -> User:
        user = await self.user_repo.find_by_id(user_id)
        if not user or not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found"
            )
        return user

    # Projections, limited to active accounts

    async def _active(self, user_ids: List[str]) -> List[str]:
        if not user_ids:
            return []
        return [user.id for user in await self.user_repo.find_by_ids(user_ids)]

    async def follower_ids(self, user_id: str) -> List[str]:
        return await self._active(await self.relationship_repo.list_sources(FOLLOW, user_id, ACCEPTED))

    async def following_ids(self, user_id: str) -> List[str]:
        return await self._active(await self.relationship_repo.list_targets(FOLLOW, user_id, ACCEPTED))

    async def connection_ids(self, user_id: str) -> List[str]:
        """Accepted connection edges in either direction"""
        outgoing = await self.relationship_repo.list_targets(CONNECTION, user_id, ACCEPTED)
        incoming = await self.relationship_repo.list_sources(CONNECTION, user_id, ACCEPTED)
        return await self._active(_unique(outgoing + incoming))

    async def pending_ids(self, user_id: str) -> List[str]:
        """Users who sent this user a connection request"""
        return await self._active(await self.relationship_repo.list_sources(CONNECTION, user_id, PENDING))

    async def sent_request_ids(self, user_id: str) -> List[str]:
        """Users this user sent a connection request to"""
        return await self._active(await self.relationship_repo.list_targets(CONNECTION, user_id, PENDING))

    async def _connection_between(self, a: str, b: str) -> Optional[Relationship]:
        edge = await self.relationship_repo.get(CONNECTION, a, b)
        if edge is None:
            edge = await self.relationship_repo.get(CONNECTION, b, a)
        return edge

    async def is_connected(self, a: str, b: str) -> bool:
        edge = await self._connection_between(a, b)
        return edge is not None and edge.is_accepted()

    async def summaries(self, user_ids: List[str]) -> List[UserSummary]:
        users = await self.user_repo.find_by_ids(user_ids)
        return [user_summary(user) for user in users]

    # Follow

    async def toggle_follow(self, user: User, target_id: str) -> bool:
        """
        Follow or unfollow a user

        Returns:
            True if the user now follows the target
        """
        user_id = user.id
        if user_id == target_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot follow yourself"
            )
        await self.get_user_or_404(target_id)

        if await self.relationship_repo.delete(FOLLOW, user_id, target_id):
            logger.info(f"User {user_id} unfollowed {target_id}")
            return False

        await self.relationship_repo.create(FOLLOW, user_id, target_id, ACCEPTED)
        await self.notifications.notify(
            recipient_id=target_id,
            sender_id=user_id,
            type=NotificationType.FOLLOW,
            content=f"{user.full_name} started following you",
        )
        logger.info(f"User {user_id} followed {target_id}")
        return True

    # Connection handshake

    async def send_connection_request(self, user: User, target_id: str) -> bool:
        """
        Send a connection request

        A request towards a user who already asked to connect accepts that
        pending request instead of opening a second one.

        Returns:
            True if the two users are now connected
        """
        user_id = user.id
        if user_id == target_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot connect with yourself"
            )
        await self.get_user_or_404(target_id)

        edge = await self._connection_between(user_id, target_id)
        if edge is None:
            if await self.relationship_repo.create(CONNECTION, user_id, target_id, PENDING):
                await self.notifications.notify(
                    recipient_id=target_id,
                    sender_id=user_id,
                    type=NotificationType.CONNECTION_REQUEST,
                    content=f"{user.full_name} sent you a connection request",
                )
                logger.info(f"User {user_id} requested connection with {target_id}")
                return False
            # Another request for this pair was stored first
            edge = await self._connection_between(user_id, target_id)

        if edge is not None and edge.is_accepted():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Already connected with this user"
            )
        if edge is None or edge.source_id == user_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Connection request already sent"
            )
        await self._accept(requester_id=target_id, user=user)
        return True

    async def _accept(self, requester_id: str, user: User) -> None:
        await self.relationship_repo.update_status(CONNECTION, requester_id, user.id, ACCEPTED)
        await self.notifications.notify(
            recipient_id=requester_id,
            sender_id=user.id,
            type=NotificationType.CONNECTION_ACCEPTED,
            content=f"{user.full_name} accepted your connection request",
        )
        logger.info(f"User {user.id} connected with {requester_id}")

    async def accept_connection(self, user: User, requester_id: str) -> None:
        """Accept a pending request sent by requester_id"""
        await self.get_user_or_404(requester_id)

        edge = await self.relationship_repo.get(CONNECTION, requester_id, user.id)
        if edge is None or not edge.is_pending():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No pending connection request from this user"
            )
        await self._accept(requester_id=requester_id, user=user)

    async def reject_connection(self, user_id: str, requester_id: str) -> None:
        """Drop a pending request sent by requester_id, without notifying"""
        await self.get_user_or_404(requester_id)
        await self.relationship_repo.delete(CONNECTION, requester_id, user_id, PENDING)

    async def cancel_connection_request(self, user_id: str, target_id: str) -> None:
        """Withdraw a request this user sent"""
        await self.get_user_or_404(target_id)
        if not await self.relationship_repo.delete(CONNECTION, user_id, target_id, PENDING):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No pending connection request to this user"
            )

    async def remove_connection(self, user_id: str, other_id: str) -> None:
        """Remove an accepted connection, whichever side requested it"""
        if user_id == other_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot remove yourself as a connection"
            )
        await self.get_user_or_404(other_id)

        edge = await self._connection_between(user_id, other_id)
        if edge is None or not edge.is_accepted():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Not connected with this user"
            )
        await self.relationship_repo.delete(CONNECTION, edge.source_id, edge.target_id)
        logger.info(f"User {user_id} removed connection with {other_id}")

    # Queries

    async def stats(self, user_id: str) -> NetworkStats:
        return NetworkStats(
            connections=len(await self.connection_ids(user_id)),
            followers=len(await self.follower_ids(user_id)),
            following=len(await self.following_ids(user_id)),
            pending_connections=len(await self.pending_ids(user_id)),
        )

    async def relationship_flags(self, viewer_id: Optional[str], user_id: str) -> Dict[str, bool]:
        """How the viewer relates to a profile owner"""
        flags = {"is_following": False, "is_connected": False, "has_pending_connection": False}
        if viewer_id is None or viewer_id == user_id:
            return flags
        flags["is_following"] = await self.relationship_repo.get(FOLLOW, viewer_id, user_id) is not None
        edge = await self._connection_between(viewer_id, user_id)
        if edge is not None:
            flags["is_connected"] = edge.is_accepted()
            flags["has_pending_connection"] = edge.is_pending() and edge.source_id == viewer_id
        return flags

    async def mutual_connections(self, user_id: str, other_id: str) -> List[UserSummary]:
        """Intersection of two users' connections"""
        await self.get_user_or_404(other_id)
        mine = await self.connection_ids(user_id)
        theirs = set(await self.connection_ids(other_id))
        return await self.summaries([uid for uid in mine if uid in theirs])

    async def _excluded_ids(self, user_id: str) -> List[str]:
        return _unique(
            [user_id]
            + await self.connection_ids(user_id)
            + await self.following_ids(user_id)
            + await self.pending_ids(user_id)
            + await self.sent_request_ids(user_id)
        )

    async def suggestions(self, user_id: str, ranked: bool = False,
                          limit: Optional[int] = None) -> List[UserSummary]:
        """
        Suggest people to connect with

        Args:
            ranked: Only second-degree connections, ordered by the number of
                shared connections
        """
        limit = limit or settings.SUGGESTION_LIMIT
        excluded = await self._excluded_ids(user_id)

        if not ranked:
            users = await self.user_repo.find_excluding(excluded, limit)
            return [user_summary(user) for user in users]

        shared: Counter = Counter()
        for connection_id in await self.connection_ids(user_id):
            for candidate in await self.connection_ids(connection_id):
                if candidate not in excluded:
                    shared[candidate] += 1

        ordered = [candidate for candidate, _ in shared.most_common()]
        users = await self.user_repo.find_by_ids(ordered)
        return [user_summary(user) for user in users[:limit]]

    async def filter_connections(
        self,
        user_id: str,
        company: Optional[str] = None,
        location: Optional[str] = None,
        skills: Optional[List[str]] = None
    ) -> List[UserSummary]:
        """Filter a user's connections by company, location or skills (case-insensitive)"""
        users = await self.user_repo.find_by_ids(await self.connection_ids(user_id))
        if company:
            users = [u for u in users if company.lower() in u.company.lower()]
        if location:
            users = [u for u in users if location.lower() in u.location.lower()]
        if skills:
            wanted = {skill.strip().lower() for skill in skills if skill.strip()}
            users = [u for u in users if wanted & {s.lower() for s in u.skills}]
        return [user_summary(user) for user in users]
