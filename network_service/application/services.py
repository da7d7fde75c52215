"""
Application services - Business logic layer
"""
from datetime import datetime
from typing import Optional, Dict, Any, Tuple, List
from fastapi import HTTPException, status
import logging

from ..domain.models import User
from ..domain.repositories import IUserRepository
from ..infrastructure.auth import (
    hash_password,
    verify_password,
    create_access_token,
    generate_token_hash,
    generate_reset_token
)
from ..schemas import UserProfile, ProfileView, UserSummary
from ..config import settings
from .graph_service import GraphService
from .pagination import paginate
from .presenters import user_profile, user_summary

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "first_name", "last_name", "bio", "title", "company",
    "location", "website", "skills", "interests"
)


class AuthService:
    """Authentication service - handles credentials and tokens"""

    def __init__(self, user_repository: IUserRepository):
        self.user_repo = user_repository

    def _issue_token(self, user: User) -> str:
        return create_access_token(data={"sub": user.id, "email": user.email})

    async def register(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str
    ) -> Tuple[str, User]:
        """
        Register a new user

        Returns:
            Tuple of (access_token, user)
        """
        duplicate = HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User already exists with this email"
        )
        if await self.user_repo.exists_by_email(email):
            raise duplicate

        user = await self.user_repo.create(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_hash=hash_password(password)
        )
        # The unique email index catches a concurrent registration
        if user is None:
            raise duplicate
        logger.info(f"Registered user {user.id}")
        return self._issue_token(user), user

    async def login(self, email: str, password: str) -> Tuple[str, User]:
        """
        Login with email and password

        Returns:
            Tuple of (access_token, user)
        """
        user = await self.user_repo.find_by_email(email)

        # Same answer for unknown email and wrong password
        if not user or not verify_password(password, user.password_hash):
            logger.warning("Failed login attempt")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid credentials"
            )

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Account is deactivated"
            )

        await self.user_repo.update_last_active(user.id)
        return self._issue_token(user), user

    async def change_password(self, user: User, current_password: str, new_password: str) -> None:
        """Change password after verifying the current one"""
        stored = await self.user_repo.find_by_id(user.id)
        if not stored:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found"
            )

        if not verify_password(current_password, stored.password_hash):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Current password is incorrect"
            )

        await self.user_repo.update_password(user.id, hash_password(new_password))
        logger.info(f"Password changed for user {user.id}")

    async def forgot_password(self, email: str) -> Optional[str]:
        """
        Issue a password reset token

        Only the SHA-256 of the token is stored. The raw token would be
        mailed to the user; it is handed back to the caller in debug mode.

        Returns:
            The raw token when DEBUG is on, otherwise None
        """
        user = await self.user_repo.find_by_email(email)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found"
            )

        token, token_hash, expires_at = generate_reset_token()
        await self.user_repo.set_reset_token(user.id, token_hash, expires_at)
        logger.info(f"Password reset requested for user {user.id}")

        return token if settings.DEBUG else None

    async def reset_password(self, token: str, password: str) -> None:
        """Consume a reset token and set a new password"""
        user = await self.user_repo.find_by_reset_token(generate_token_hash(token), datetime.utcnow())
        if not user:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid or expired reset token"
            )

        await self.user_repo.update_password(user.id, hash_password(password))
        logger.info(f"Password reset for user {user.id}")


class UserService:
    """User service - profiles and directory search"""

    def __init__(self, user_repository: IUserRepository, graph_service: GraphService):
        self.user_repo = user_repository
        self.graph = graph_service

    async def build_profile(self, user: User) -> UserProfile:
        """Public profile with relationship counts"""
        return user_profile(
            user,
            follower_count=len(await self.graph.follower_ids(user.id)),
            following_count=len(await self.graph.following_ids(user.id)),
            connection_count=len(await self.graph.connection_ids(user.id)),
        )

    async def get_profile(self, user_id: str, viewer_id: Optional[str] = None) -> ProfileView:
        """Profile of a user as seen by an optional viewer"""
        user = await self.graph.get_user_or_404(user_id)

        followers = await self.graph.follower_ids(user.id)
        following = await self.graph.following_ids(user.id)
        connections = await self.graph.connection_ids(user.id)
        flags = await self.graph.relationship_flags(viewer_id, user.id)

        profile = user_profile(
            user,
            follower_count=len(followers),
            following_count=len(following),
            connection_count=len(connections),
        )
        return ProfileView(
            **profile.model_dump(),
            followers=followers,
            following=following,
            connections=connections,
            **flags,
        )

    async def update_profile(self, user: User, updates: Dict[str, Any]) -> UserProfile:
        """Update whitelisted profile fields"""
        allowed = {k: v for k, v in updates.items() if k in PROFILE_FIELDS and v is not None}
        if not allowed:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No fields to update"
            )

        updated = await self.user_repo.update(user.id, allowed)
        if not updated:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found"
            )
        return await self.build_profile(updated)

    async def set_profile_picture(self, user: User, url: str) -> UserProfile:
        updated = await self.user_repo.update(user.id, {"profile_picture": url})
        return await self.build_profile(updated)

    async def set_cover_photo(self, user: User, url: str) -> UserProfile:
        updated = await self.user_repo.update(user.id, {"cover_photo": url})
        return await self.build_profile(updated)

    async def deactivate_account(self, user: User) -> None:
        await self.user_repo.deactivate(user.id)
        logger.info(f"Deactivated user {user.id}")

    async def search_users(
        self,
        q: Optional[str] = None,
        skills: Optional[List[str]] = None,
        location: Optional[str] = None,
        company: Optional[str] = None,
        page: int = 1,
        limit: int = 10
    ) -> Tuple[List[UserSummary], int]:
        """
        Search active users

        Returns:
            Tuple of (users, total)
        """
        skip, limit = paginate(page, limit)
        result = await self.user_repo.search(
            text=q, skills=skills, location=location, company=company,
            skip=skip, limit=limit
        )
        return [user_summary(user) for user in result.items], result.total
