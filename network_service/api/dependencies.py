"""
FastAPI dependencies
"""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional

from ..domain.models import User
from ..domain.repositories import (
    IUserRepository, IPostRepository, ICommentRepository,
    IRelationshipRepository, INotificationRepository
)
from ..infrastructure.database.connection import MongoDB, get_database
from ..infrastructure.database.repositories import (
    UserRepository, PostRepository, CommentRepository,
    RelationshipRepository, NotificationRepository
)
from ..infrastructure.auth import decode_token
from ..application.services import AuthService, UserService
from ..application.graph_service import GraphService
from ..application.post_service import PostService
from ..application.notification_service import NotificationService


# Security scheme
security = HTTPBearer(auto_error=False)


async def get_user_repository(db: MongoDB = Depends(get_database)) -> IUserRepository:
    """Get user repository dependency"""
    return UserRepository(db)


async def get_post_repository(db: MongoDB = Depends(get_database)) -> IPostRepository:
    """Get post repository dependency"""
    return PostRepository(db)


async def get_comment_repository(db: MongoDB = Depends(get_database)) -> ICommentRepository:
    """Get comment repository dependency"""
    return CommentRepository(db)


async def get_relationship_repository(db: MongoDB = Depends(get_database)) -> IRelationshipRepository:
    """Get relationship repository dependency"""
    return RelationshipRepository(db)


async def get_notification_repository(db: MongoDB = Depends(get_database)) -> INotificationRepository:
    """Get notification repository dependency"""
    return NotificationRepository(db)


async def get_notification_service(
    notification_repo: INotificationRepository = Depends(get_notification_repository),
    user_repo: IUserRepository = Depends(get_user_repository)
) -> NotificationService:
    """Get notification service dependency"""
    return NotificationService(notification_repo, user_repo)


async def get_graph_service(
    relationship_repo: IRelationshipRepository = Depends(get_relationship_repository),
    user_repo: IUserRepository = Depends(get_user_repository),
    notification_service: NotificationService = Depends(get_notification_service)
) -> GraphService:
    """Get graph service dependency"""
    return GraphService(relationship_repo, user_repo, notification_service)


async def get_auth_service(
    user_repo: IUserRepository = Depends(get_user_repository)
) -> AuthService:
    """Get auth service dependency"""
    return AuthService(user_repo)


async def get_user_service(
    user_repo: IUserRepository = Depends(get_user_repository),
    graph_service: GraphService = Depends(get_graph_service)
) -> UserService:
    """Get user service dependency"""
    return UserService(user_repo, graph_service)


async def get_post_service(
    post_repo: IPostRepository = Depends(get_post_repository),
    comment_repo: ICommentRepository = Depends(get_comment_repository),
    user_repo: IUserRepository = Depends(get_user_repository),
    graph_service: GraphService = Depends(get_graph_service),
    notification_service: NotificationService = Depends(get_notification_service)
) -> PostService:
    """Get post service dependency"""
    return PostService(post_repo, comment_repo, user_repo, graph_service, notification_service)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    user_repo: IUserRepository = Depends(get_user_repository)
) -> User:
    """
    Get current authenticated user from JWT token

    The token is verified once per request and the loaded user is passed
    down to the handlers explicitly.

    Raises:
        HTTPException: If token is invalid or user not found
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, no token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_token(credentials.credentials)
    if not payload or payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, token failed",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await user_repo.find_by_id(user_id)
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    user_repo: IUserRepository = Depends(get_user_repository)
) -> Optional[User]:
    """
    Get current authenticated user from JWT token (optional)

    Returns None if not authenticated instead of raising exception
    """
    if not credentials:
        return None

    try:
        return await get_current_user(credentials, user_repo)
    except HTTPException:
        return None
