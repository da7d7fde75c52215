"""
Domain models - Core business entities
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List, Dict, Any
from enum import Enum
import re


HASHTAG_PATTERN = re.compile(r"#\w+")
MENTION_PATTERN = re.compile(r"@\w+")


def extract_hashtags(text: str) -> List[str]:
    """Extract lower-cased, de-duplicated hashtags in order of first appearance"""
    if not text:
        return []
    seen = []
    for tag in HASHTAG_PATTERN.findall(text):
        tag = tag.lower()
        if tag not in seen:
            seen.append(tag)
    return seen


def extract_mentions(text: str) -> List[str]:
    """Extract de-duplicated @mentions"""
    if not text:
        return []
    seen = []
    for mention in MENTION_PATTERN.findall(text):
        if mention not in seen:
            seen.append(mention)
    return seen


class Visibility(str, Enum):
    """Post visibility"""
    PUBLIC = "public"
    CONNECTIONS = "connections"
    PRIVATE = "private"


class NotificationType(str, Enum):
    """Kinds of notification events"""
    LIKE = "like"
    COMMENT = "comment"
    REPLY = "reply"
    SHARE = "share"
    FOLLOW = "follow"
    CONNECTION_REQUEST = "connection_request"
    CONNECTION_ACCEPTED = "connection_accepted"
    MENTION = "mention"
    POST_SHARED = "post_shared"
    PROFILE_VIEW = "profile_view"


class RelationshipKind(str, Enum):
    """Edge kinds in the social graph"""
    FOLLOW = "follow"
    CONNECTION = "connection"


class RelationshipStatus(str, Enum):
    """Edge status"""
    PENDING = "pending"
    ACCEPTED = "accepted"


@dataclass
class User:
    """User domain model"""
    id: str
    first_name: str
    last_name: str
    email: str
    password_hash: Optional[str] = None
    profile_picture: str = ""
    cover_photo: str = ""
    bio: str = ""
    title: str = ""
    company: str = ""
    location: str = ""
    website: str = ""
    skills: List[str] = field(default_factory=list)
    interests: List[str] = field(default_factory=list)
    is_verified: bool = False
    is_active: bool = True
    last_active: Optional[datetime] = None
    reset_password_token: Optional[str] = None
    reset_password_expire: Optional[datetime] = None
    email_verification_token: Optional[str] = None
    email_verification_expire: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def is_owner(self, user_id: str) -> bool:
        """Check if the given user_id is this user"""
        return self.id == user_id

    def has_valid_reset_token(self, token_hash: str, now: datetime) -> bool:
        """Check a hashed reset token against the stored one and its expiry"""
        if not self.reset_password_token or not self.reset_password_expire:
            return False
        return self.reset_password_token == token_hash and self.reset_password_expire > now


@dataclass
class Like:
    """A like on a post"""
    user_id: str
    created_at: datetime


@dataclass
class Share:
    """A share of a post"""
    user_id: str
    created_at: datetime


@dataclass
class EditHistoryEntry:
    """Previous content of an edited post"""
    content: str
    edited_at: datetime


@dataclass
class Post:
    """Post domain model"""
    id: str
    author_id: str
    content: str
    media: List[str] = field(default_factory=list)
    hashtags: List[str] = field(default_factory=list)
    mentions: List[str] = field(default_factory=list)
    likes: List[Like] = field(default_factory=list)
    shares: List[Share] = field(default_factory=list)
    visibility: Visibility = Visibility.PUBLIC
    location: str = ""
    is_edited: bool = False
    edit_history: List[EditHistoryEntry] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def like_count(self) -> int:
        return len(self.likes)

    @property
    def share_count(self) -> int:
        return len(self.shares)

    def is_author(self, user_id: str) -> bool:
        return self.author_id == user_id

    def has_user_liked(self, user_id: str) -> bool:
        return any(like.user_id == user_id for like in self.likes)

    def has_user_shared(self, user_id: str) -> bool:
        return any(share.user_id == user_id for share in self.shares)

    def set_content(self, content: str) -> None:
        """Replace content and recompute derived hashtags and mentions"""
        self.content = content
        self.hashtags = extract_hashtags(content)
        self.mentions = extract_mentions(content)

    def edit(self, content: str, edited_at: datetime) -> None:
        """Record the current content in the history, then overwrite it"""
        self.edit_history.append(EditHistoryEntry(content=self.content, edited_at=edited_at))
        self.set_content(content)
        self.is_edited = True

    def is_visible_to(self, viewer_id: Optional[str], connection_ids: List[str]) -> bool:
        """Check if a viewer may see this post given the viewer's connections"""
        if self.visibility == Visibility.PUBLIC:
            return True
        if viewer_id is None:
            return False
        if self.author_id == viewer_id:
            return True
        if self.visibility == Visibility.CONNECTIONS:
            return self.author_id in connection_ids
        return False


@dataclass
class Reply:
    """Reply to a comment"""
    id: str
    post_id: str
    comment_id: str
    user_id: str
    content: str
    likes: List[str] = field(default_factory=list)
    created_at: Optional[datetime] = None

    @property
    def like_count(self) -> int:
        return len(self.likes)


@dataclass
class Comment:
    """Comment on a post"""
    id: str
    post_id: str
    user_id: str
    content: str
    likes: List[str] = field(default_factory=list)
    replies: List[Reply] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def like_count(self) -> int:
        return len(self.likes)

    @property
    def reply_count(self) -> int:
        return len(self.replies)


@dataclass
class Relationship:
    """Directed edge between two users"""
    kind: RelationshipKind
    source_id: str
    target_id: str
    status: RelationshipStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def is_pending(self) -> bool:
        return self.status == RelationshipStatus.PENDING

    def is_accepted(self) -> bool:
        return self.status == RelationshipStatus.ACCEPTED


def pair_key(kind: RelationshipKind, source_id: str, target_id: str) -> str:
    """
    Uniqueness key of an edge

    Follows are directed. A connection is a single edge per unordered pair,
    so A->B and B->A share a key.
    """
    if kind == RelationshipKind.CONNECTION:
        source_id, target_id = sorted((source_id, target_id))
    return f"{source_id}:{target_id}"


@dataclass
class Notification:
    """Notification domain model"""
    id: str
    recipient_id: str
    sender_id: str
    type: NotificationType
    post_id: Optional[str] = None
    comment_id: Optional[str] = None
    content: str = ""
    is_read: bool = False
    is_deleted: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Page:
    """One page of a paginated query"""
    items: list
    total: int
