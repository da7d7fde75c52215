"""
Pydantic schemas for request/response validation
"""
from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List, Generic, TypeVar
from datetime import datetime
import re

from .config import settings
from .domain.models import Visibility, NotificationType


T = TypeVar("T")

URL_PATTERN = re.compile(r"^https?://.+")

# bcrypt only looks at the first 72 bytes and rejects longer input
PASSWORD_MAX_BYTES = 72


class CamelModel(BaseModel):
    """Base schema serialized with camelCase keys"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


def _strip(v):
    return v.strip() if isinstance(v, str) else v


def _check_password_bytes(v):
    if len(v.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"Password cannot be longer than {PASSWORD_MAX_BYTES} bytes")
    return v


# Request Schemas
class UserRegister(CamelModel):
    """User registration request"""
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=settings.PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_BYTES)

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def strip_names(cls, v):
        return _strip(v)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v):
        return _check_password_bytes(v)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower()


class UserLogin(CamelModel):
    """User login request"""
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower()


class UpdateProfile(CamelModel):
    """Update profile request"""
    first_name: Optional[str] = Field(None, min_length=2, max_length=50)
    last_name: Optional[str] = Field(None, min_length=2, max_length=50)
    bio: Optional[str] = Field(None, max_length=500)
    title: Optional[str] = Field(None, max_length=100)
    company: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = Field(None, max_length=100)
    website: Optional[str] = None
    skills: Optional[List[str]] = None
    interests: Optional[List[str]] = None

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def strip_names(cls, v):
        return _strip(v)

    @field_validator("skills", "interests")
    @classmethod
    def drop_blank_entries(cls, v):
        """Trim entries and drop empty ones"""
        if v is None:
            return v
        return [item.strip() for item in v if item.strip()]


class ChangePassword(CamelModel):
    """Change password request"""
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=settings.PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_BYTES)

    @field_validator("new_password")
    @classmethod
    def password_fits_bcrypt(cls, v):
        return _check_password_bytes(v)


class ForgotPassword(CamelModel):
    """Password reset request"""
    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower()


class ResetPassword(CamelModel):
    """Password reset with token"""
    password: str = Field(..., min_length=settings.PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_BYTES)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v):
        return _check_password_bytes(v)


class ProfilePictureUpdate(CamelModel):
    """Profile picture URL returned by the storage provider"""
    profile_picture: str

    @field_validator("profile_picture")
    @classmethod
    def validate_url(cls, v):
        if not URL_PATTERN.match(v):
            raise ValueError("Please provide a valid URL for profile picture")
        return v


class CoverPhotoUpdate(CamelModel):
    """Cover photo URL returned by the storage provider"""
    cover_photo: str

    @field_validator("cover_photo")
    @classmethod
    def validate_url(cls, v):
        if not URL_PATTERN.match(v):
            raise ValueError("Please provide a valid URL for cover photo")
        return v


class PostCreate(CamelModel):
    """Post creation request"""
    content: str = Field(..., min_length=1, max_length=2000)
    media: List[str] = Field(default_factory=list)
    visibility: Visibility = Visibility.PUBLIC
    location: str = Field("", max_length=100)

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v):
        return _strip(v)

    @field_validator("media")
    @classmethod
    def validate_media(cls, v):
        for url in v:
            if not URL_PATTERN.match(url):
                raise ValueError("Media URLs must be valid HTTP/HTTPS URLs")
        return v


class PostUpdate(CamelModel):
    """Post update request"""
    content: str = Field(..., min_length=1, max_length=2000)
    media: Optional[List[str]] = None
    visibility: Optional[Visibility] = None
    location: Optional[str] = Field(None, max_length=100)

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v):
        return _strip(v)

    @field_validator("media")
    @classmethod
    def validate_media(cls, v):
        for url in v or []:
            if not URL_PATTERN.match(url):
                raise ValueError("Media URLs must be valid HTTP/HTTPS URLs")
        return v


class CommentCreate(CamelModel):
    """Comment creation or update request"""
    content: str = Field(..., min_length=1, max_length=500)

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v):
        return _strip(v)


class ReplyCreate(CamelModel):
    """Reply creation request"""
    content: str = Field(..., min_length=1, max_length=300)

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v):
        return _strip(v)


# Response Schemas
class Pagination(CamelModel):
    """Pagination metadata"""
    page: int
    limit: int
    total: int
    pages: int


class MessageResponse(CamelModel):
    """Generic message response"""
    success: bool = True
    message: str


class DataResponse(CamelModel, Generic[T]):
    """Single payload response"""
    success: bool = True
    data: T
    message: Optional[str] = None


class ListResponse(CamelModel, Generic[T]):
    """Paginated list response"""
    success: bool = True
    data: List[T]
    pagination: Pagination


class UserSummary(CamelModel):
    """Compact user reference"""
    id: str
    first_name: str
    last_name: str
    full_name: str
    profile_picture: str = ""
    title: str = ""
    company: str = ""
    location: str = ""
    skills: List[str] = []


class UserProfile(CamelModel):
    """Public user profile"""
    id: str
    first_name: str
    last_name: str
    full_name: str
    email: str
    profile_picture: str = ""
    cover_photo: str = ""
    bio: str = ""
    title: str = ""
    company: str = ""
    location: str = ""
    website: str = ""
    skills: List[str] = []
    interests: List[str] = []
    is_verified: bool = False
    follower_count: int = 0
    following_count: int = 0
    connection_count: int = 0
    created_at: Optional[datetime] = None


class ProfileView(UserProfile):
    """Profile as seen by a viewer"""
    followers: List[str] = []
    following: List[str] = []
    connections: List[str] = []
    is_following: bool = False
    is_connected: bool = False
    has_pending_connection: bool = False


class AuthResponse(CamelModel):
    """Token response"""
    success: bool = True
    token: str
    user: UserProfile


class ForgotPasswordResponse(CamelModel):
    """Reset token issued"""
    success: bool = True
    message: str
    reset_token: Optional[str] = None


class LikeInfo(CamelModel):
    """Like or share entry"""
    user_id: str
    created_at: datetime


class EditHistoryInfo(CamelModel):
    """Edit history entry"""
    content: str
    edited_at: datetime


class ReplyResponse(CamelModel):
    """Reply response"""
    id: str
    post_id: str
    comment_id: str
    user: Optional[UserSummary] = None
    content: str
    likes: List[str] = []
    like_count: int = 0
    created_at: Optional[datetime] = None


class CommentResponse(CamelModel):
    """Comment response"""
    id: str
    post_id: str
    user: Optional[UserSummary] = None
    content: str
    likes: List[str] = []
    like_count: int = 0
    replies: List[ReplyResponse] = []
    reply_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PostResponse(CamelModel):
    """Post response"""
    id: str
    author: Optional[UserSummary] = None
    author_id: str
    content: str
    media: List[str] = []
    hashtags: List[str] = []
    mentions: List[str] = []
    likes: List[LikeInfo] = []
    shares: List[LikeInfo] = []
    like_count: int = 0
    comment_count: int = 0
    share_count: int = 0
    visibility: Visibility
    location: str = ""
    is_edited: bool = False
    edit_history: List[EditHistoryInfo] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PostDetailResponse(PostResponse):
    """Post with comments and viewer state"""
    comments: List[CommentResponse] = []
    user_liked: bool = False
    user_shared: bool = False


class ToggleResponse(CamelModel):
    """Like toggle result"""
    success: bool = True
    message: str
    liked: bool
    like_count: int = 0


class FollowResponse(CamelModel):
    """Follow toggle result"""
    success: bool = True
    message: str
    following: bool


class NetworkStats(CamelModel):
    """Relationship counts"""
    connections: int
    followers: int
    following: int
    pending_connections: int


class NotificationResponse(CamelModel):
    """Notification response"""
    id: str
    recipient_id: str
    sender: Optional[UserSummary] = None
    sender_id: str
    type: NotificationType
    post_id: Optional[str] = None
    comment_id: Optional[str] = None
    content: str = ""
    is_read: bool = False
    created_at: Optional[datetime] = None


class UnreadCount(CamelModel):
    """Unread notification count"""
    count: int
