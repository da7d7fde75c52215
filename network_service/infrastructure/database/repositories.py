"""
Repository implementations - Data access layer
"""
from dataclasses import fields
from datetime import datetime
from typing import Optional, Dict, Any, List
import re

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from ...domain.models import (
    User, Post, Like, Share, EditHistoryEntry, Visibility, Comment, Reply,
    Relationship, RelationshipKind, RelationshipStatus, Notification,
    NotificationType, Page, pair_key
)
from ...domain.repositories import (
    IUserRepository, IPostRepository, ICommentRepository,
    IRelationshipRepository, INotificationRepository
)
from .connection import MongoDB


def to_object_id(value: Optional[str]) -> Optional[ObjectId]:
    """Convert a string ID to ObjectId, None if malformed"""
    if value is None:
        return None
    if isinstance(value, ObjectId):
        return value
    if not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


def to_object_ids(values: List[str]) -> List[ObjectId]:
    """Convert string IDs, dropping malformed ones"""
    return [oid for oid in (to_object_id(v) for v in values) if oid is not None]


def _str_id(value: Optional[ObjectId]) -> Optional[str]:
    return str(value) if value is not None else None


def _case_insensitive(value: str) -> Dict[str, Any]:
    return {"$regex": re.escape(value), "$options": "i"}


USER_FIELDS = {f.name for f in fields(User)}


class UserRepository(IUserRepository):
    """User repository implementation using MongoDB"""

    def __init__(self, db: MongoDB):
        self.collection = db.users

    def _doc_to_user(self, doc: Optional[Dict[str, Any]]) -> Optional[User]:
        """Convert a document to a User model"""
        if not doc:
            return None
        data = {k: v for k, v in doc.items() if k in USER_FIELDS}
        data["id"] = str(doc["_id"])
        return User(**data)

    async def create(self, first_name: str, last_name: str, email: str,
                     password_hash: str) -> Optional[User]:
        now = datetime.utcnow()
        doc = {
            "first_name": first_name,
            "last_name": last_name,
            "email": email.lower(),
            "password_hash": password_hash,
            "profile_picture": "",
            "cover_photo": "",
            "bio": "",
            "title": "",
            "company": "",
            "location": "",
            "website": "",
            "skills": [],
            "interests": [],
            "is_verified": False,
            "is_active": True,
            "last_active": now,
            "created_at": now,
            "updated_at": now,
        }
        try:
            result = await self.collection.insert_one(doc)
        except DuplicateKeyError:
            return None
        doc["_id"] = result.inserted_id
        return self._doc_to_user(doc)

    async def find_by_id(self, user_id: str) -> Optional[User]:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        return self._doc_to_user(await self.collection.find_one({"_id": oid}))

    async def find_by_ids(self, user_ids: List[str]) -> List[User]:
        if not user_ids:
            return []
        cursor = self.collection.find({"_id": {"$in": to_object_ids(user_ids)}, "is_active": True})
        users = {user.id: user for user in map(self._doc_to_user, await cursor.to_list(length=None))}
        # Preserve the order of the requested IDs
        return [users[uid] for uid in user_ids if uid in users]

    async def find_by_email(self, email: str) -> Optional[User]:
        return self._doc_to_user(await self.collection.find_one({"email": email.lower()}))

    async def exists_by_email(self, email: str) -> bool:
        doc = await self.collection.find_one({"email": email.lower()}, {"_id": 1})
        return doc is not None

    async def update(self, user_id: str, updates: Dict[str, Any]) -> Optional[User]:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        doc = await self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": {**updates, "updated_at": datetime.utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        return self._doc_to_user(doc)

    async def update_password(self, user_id: str, password_hash: str) -> None:
        await self.collection.update_one(
            {"_id": to_object_id(user_id)},
            {
                "$set": {"password_hash": password_hash, "updated_at": datetime.utcnow()},
                "$unset": {"reset_password_token": "", "reset_password_expire": ""},
            },
        )

    async def set_reset_token(self, user_id: str, token_hash: str, expires_at: datetime) -> None:
        await self.collection.update_one(
            {"_id": to_object_id(user_id)},
            {"$set": {"reset_password_token": token_hash, "reset_password_expire": expires_at}},
        )

    async def find_by_reset_token(self, token_hash: str, now: datetime) -> Optional[User]:
        doc = await self.collection.find_one({
            "reset_password_token": token_hash,
            "reset_password_expire": {"$gt": now},
        })
        return self._doc_to_user(doc)

    async def update_last_active(self, user_id: str) -> None:
        await self.collection.update_one(
            {"_id": to_object_id(user_id)},
            {"$set": {"last_active": datetime.utcnow()}},
        )

    async def deactivate(self, user_id: str) -> None:
        await self.collection.update_one(
            {"_id": to_object_id(user_id)},
            {"$set": {"is_active": False, "updated_at": datetime.utcnow()}},
        )

    async def search(self, text: Optional[str] = None, skills: Optional[List[str]] = None,
                     location: Optional[str] = None, company: Optional[str] = None,
                     skip: int = 0, limit: int = 10) -> Page:
        query: Dict[str, Any] = {"is_active": True}
        if text:
            query["$text"] = {"$search": text}
        if skills:
            query["skills"] = {"$in": [re.compile(f"^{re.escape(s)}$", re.IGNORECASE) for s in skills]}
        if location:
            query["location"] = _case_insensitive(location)
        if company:
            query["company"] = _case_insensitive(company)

        total = await self.collection.count_documents(query)
        cursor = self.collection.find(query).sort("created_at", -1).skip(skip).limit(limit)
        docs = await cursor.to_list(length=limit)
        return Page(items=[self._doc_to_user(d) for d in docs], total=total)

    async def find_excluding(self, excluded_ids: List[str], limit: int) -> List[User]:
        query = {"_id": {"$nin": to_object_ids(excluded_ids)}, "is_active": True}
        cursor = self.collection.find(query).sort("created_at", -1).limit(limit)
        return [self._doc_to_user(d) for d in await cursor.to_list(length=limit)]


class PostRepository(IPostRepository):
    """Post repository implementation using MongoDB"""

    def __init__(self, db: MongoDB):
        self.collection = db.posts

    def _doc_to_post(self, doc: Optional[Dict[str, Any]]) -> Optional[Post]:
        """Convert a document to a Post model"""
        if not doc:
            return None
        return Post(
            id=str(doc["_id"]),
            author_id=str(doc["author_id"]),
            content=doc["content"],
            media=doc.get("media", []),
            hashtags=doc.get("hashtags", []),
            mentions=doc.get("mentions", []),
            likes=[Like(user_id=str(l["user_id"]), created_at=l["created_at"]) for l in doc.get("likes", [])],
            shares=[Share(user_id=str(s["user_id"]), created_at=s["created_at"]) for s in doc.get("shares", [])],
            visibility=Visibility(doc.get("visibility", Visibility.PUBLIC.value)),
            location=doc.get("location", ""),
            is_edited=doc.get("is_edited", False),
            edit_history=[
                EditHistoryEntry(content=e["content"], edited_at=e["edited_at"])
                for e in doc.get("edit_history", [])
            ],
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
        )

    def _visible_query(self, viewer_id: Optional[str], connection_ids: List[str]) -> Dict[str, Any]:
        if viewer_id is None:
            return {"visibility": Visibility.PUBLIC.value}
        return {"$or": [
            {"visibility": Visibility.PUBLIC.value},
            {"visibility": Visibility.CONNECTIONS.value, "author_id": {"$in": to_object_ids(connection_ids)}},
            {"author_id": to_object_id(viewer_id)},
        ]}

    async def _find_page(self, query: Dict[str, Any], skip: int, limit: int) -> Page:
        total = await self.collection.count_documents(query)
        cursor = self.collection.find(query).sort("created_at", -1).skip(skip).limit(limit)
        docs = await cursor.to_list(length=limit)
        return Page(items=[self._doc_to_post(d) for d in docs], total=total)

    async def create(self, post: Post) -> Post:
        now = datetime.utcnow()
        doc = {
            "author_id": to_object_id(post.author_id),
            "content": post.content,
            "media": post.media,
            "hashtags": post.hashtags,
            "mentions": post.mentions,
            "likes": [],
            "shares": [],
            "visibility": post.visibility.value,
            "location": post.location,
            "is_edited": False,
            "edit_history": [],
            "created_at": now,
            "updated_at": now,
        }
        result = await self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return self._doc_to_post(doc)

    async def find_by_id(self, post_id: str) -> Optional[Post]:
        oid = to_object_id(post_id)
        if oid is None:
            return None
        return self._doc_to_post(await self.collection.find_one({"_id": oid}))

    async def save(self, post: Post) -> Post:
        doc = await self.collection.find_one_and_update(
            {"_id": to_object_id(post.id)},
            {"$set": {
                "content": post.content,
                "media": post.media,
                "hashtags": post.hashtags,
                "mentions": post.mentions,
                "visibility": post.visibility.value,
                "location": post.location,
                "is_edited": post.is_edited,
                "edit_history": [
                    {"content": e.content, "edited_at": e.edited_at} for e in post.edit_history
                ],
                "updated_at": datetime.utcnow(),
            }},
            return_document=ReturnDocument.AFTER,
        )
        return self._doc_to_post(doc)

    async def delete(self, post_id: str) -> bool:
        result = await self.collection.delete_one({"_id": to_object_id(post_id)})
        return result.deleted_count == 1

    async def add_like(self, post_id: str, user_id: str) -> bool:
        uid = to_object_id(user_id)
        result = await self.collection.update_one(
            {"_id": to_object_id(post_id), "likes.user_id": {"$ne": uid}},
            {"$push": {"likes": {"user_id": uid, "created_at": datetime.utcnow()}}},
        )
        return result.modified_count == 1

    async def remove_like(self, post_id: str, user_id: str) -> bool:
        result = await self.collection.update_one(
            {"_id": to_object_id(post_id)},
            {"$pull": {"likes": {"user_id": to_object_id(user_id)}}},
        )
        return result.modified_count == 1

    async def add_share(self, post_id: str, user_id: str) -> bool:
        uid = to_object_id(user_id)
        result = await self.collection.update_one(
            {"_id": to_object_id(post_id), "shares.user_id": {"$ne": uid}},
            {"$push": {"shares": {"user_id": uid, "created_at": datetime.utcnow()}}},
        )
        return result.modified_count == 1

    async def find_visible(self, viewer_id: Optional[str], connection_ids: List[str],
                           author_id: Optional[str] = None,
                           skip: int = 0, limit: int = 10) -> Page:
        query = self._visible_query(viewer_id, connection_ids)
        if author_id is not None:
            query = {"$and": [query, {"author_id": to_object_id(author_id)}]}
        return await self._find_page(query, skip, limit)

    async def search(self, text: Optional[str] = None, hashtag: Optional[str] = None,
                     skip: int = 0, limit: int = 10) -> Page:
        query: Dict[str, Any] = {"visibility": Visibility.PUBLIC.value}
        if text:
            query["$text"] = {"$search": text}
        if hashtag:
            query["hashtags"] = hashtag
        return await self._find_page(query, skip, limit)


class CommentRepository(ICommentRepository):
    """Comment and reply repository implementation using MongoDB"""

    def __init__(self, db: MongoDB):
        self.comments = db.comments
        self.replies = db.replies

    def _doc_to_reply(self, doc: Dict[str, Any]) -> Reply:
        return Reply(
            id=str(doc["_id"]),
            post_id=str(doc["post_id"]),
            comment_id=str(doc["comment_id"]),
            user_id=str(doc["user_id"]),
            content=doc["content"],
            likes=[str(u) for u in doc.get("likes", [])],
            created_at=doc.get("created_at"),
        )

    def _doc_to_comment(self, doc: Dict[str, Any], replies: List[Reply]) -> Comment:
        return Comment(
            id=str(doc["_id"]),
            post_id=str(doc["post_id"]),
            user_id=str(doc["user_id"]),
            content=doc["content"],
            likes=[str(u) for u in doc.get("likes", [])],
            replies=replies,
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
        )

    async def create_comment(self, post_id: str, user_id: str, content: str) -> Comment:
        now = datetime.utcnow()
        doc = {
            "post_id": to_object_id(post_id),
            "user_id": to_object_id(user_id),
            "content": content,
            "likes": [],
            "created_at": now,
            "updated_at": now,
        }
        result = await self.comments.insert_one(doc)
        doc["_id"] = result.inserted_id
        return self._doc_to_comment(doc, [])

    async def find_comment(self, post_id: str, comment_id: str) -> Optional[Comment]:
        oid = to_object_id(comment_id)
        if oid is None:
            return None
        doc = await self.comments.find_one({"_id": oid, "post_id": to_object_id(post_id)})
        if not doc:
            return None
        cursor = self.replies.find({"comment_id": oid}).sort("created_at", 1)
        replies = [self._doc_to_reply(r) for r in await cursor.to_list(length=None)]
        return self._doc_to_comment(doc, replies)

    async def list_comments(self, post_id: str) -> List[Comment]:
        oid = to_object_id(post_id)
        comment_docs = await self.comments.find({"post_id": oid}).sort("created_at", 1).to_list(length=None)
        reply_docs = await self.replies.find({"post_id": oid}).sort("created_at", 1).to_list(length=None)

        replies_by_comment: Dict[str, List[Reply]] = {}
        for doc in reply_docs:
            reply = self._doc_to_reply(doc)
            replies_by_comment.setdefault(reply.comment_id, []).append(reply)

        return [
            self._doc_to_comment(doc, replies_by_comment.get(str(doc["_id"]), []))
            for doc in comment_docs
        ]

    async def count_comments(self, post_ids: List[str]) -> Dict[str, int]:
        if not post_ids:
            return {}
        pipeline = [
            {"$match": {"post_id": {"$in": to_object_ids(post_ids)}}},
            {"$group": {"_id": "$post_id", "count": {"$sum": 1}}},
        ]
        results = await self.comments.aggregate(pipeline).to_list(length=None)
        counts = {str(row["_id"]): row["count"] for row in results}
        return {post_id: counts.get(post_id, 0) for post_id in post_ids}

    async def update_comment(self, comment_id: str, content: str) -> None:
        await self.comments.update_one(
            {"_id": to_object_id(comment_id)},
            {"$set": {"content": content, "updated_at": datetime.utcnow()}},
        )

    async def set_comment_like(self, comment_id: str, user_id: str, liked: bool) -> None:
        operator = "$addToSet" if liked else "$pull"
        await self.comments.update_one(
            {"_id": to_object_id(comment_id)},
            {operator: {"likes": to_object_id(user_id)}},
        )

    async def delete_comment(self, comment_id: str) -> None:
        oid = to_object_id(comment_id)
        await self.comments.delete_one({"_id": oid})
        await self.replies.delete_many({"comment_id": oid})

    async def create_reply(self, post_id: str, comment_id: str, user_id: str,
                           content: str) -> Reply:
        doc = {
            "post_id": to_object_id(post_id),
            "comment_id": to_object_id(comment_id),
            "user_id": to_object_id(user_id),
            "content": content,
            "likes": [],
            "created_at": datetime.utcnow(),
        }
        result = await self.replies.insert_one(doc)
        doc["_id"] = result.inserted_id
        return self._doc_to_reply(doc)

    async def find_reply(self, comment_id: str, reply_id: str) -> Optional[Reply]:
        oid = to_object_id(reply_id)
        if oid is None:
            return None
        doc = await self.replies.find_one({"_id": oid, "comment_id": to_object_id(comment_id)})
        return self._doc_to_reply(doc) if doc else None

    async def set_reply_like(self, reply_id: str, user_id: str, liked: bool) -> None:
        operator = "$addToSet" if liked else "$pull"
        await self.replies.update_one(
            {"_id": to_object_id(reply_id)},
            {operator: {"likes": to_object_id(user_id)}},
        )

    async def delete_reply(self, reply_id: str) -> None:
        await self.replies.delete_one({"_id": to_object_id(reply_id)})

    async def delete_for_post(self, post_id: str) -> None:
        oid = to_object_id(post_id)
        await self.replies.delete_many({"post_id": oid})
        await self.comments.delete_many({"post_id": oid})


class RelationshipRepository(IRelationshipRepository):
    """Social graph edge repository using MongoDB"""

    def __init__(self, db: MongoDB):
        self.collection = db.relationships

    def _doc_to_relationship(self, doc: Optional[Dict[str, Any]]) -> Optional[Relationship]:
        if not doc:
            return None
        return Relationship(
            kind=RelationshipKind(doc["kind"]),
            source_id=str(doc["source_id"]),
            target_id=str(doc["target_id"]),
            status=RelationshipStatus(doc["status"]),
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
        )

    def _key(self, kind: RelationshipKind, source_id: str, target_id: str) -> Dict[str, Any]:
        return {
            "kind": kind.value,
            "source_id": to_object_id(source_id),
            "target_id": to_object_id(target_id),
        }

    async def get(self, kind: RelationshipKind, source_id: str,
                  target_id: str) -> Optional[Relationship]:
        doc = await self.collection.find_one(self._key(kind, source_id, target_id))
        return self._doc_to_relationship(doc)

    async def create(self, kind: RelationshipKind, source_id: str, target_id: str,
                     status: RelationshipStatus) -> Optional[Relationship]:
        now = datetime.utcnow()
        doc = {**self._key(kind, source_id, target_id), "pair": pair_key(kind, source_id, target_id),
               "status": status.value, "created_at": now, "updated_at": now}
        try:
            await self.collection.insert_one(doc)
        except DuplicateKeyError:
            return None
        return self._doc_to_relationship(doc)

    async def update_status(self, kind: RelationshipKind, source_id: str, target_id: str,
                            status: RelationshipStatus) -> bool:
        result = await self.collection.update_one(
            self._key(kind, source_id, target_id),
            {"$set": {"status": status.value, "updated_at": datetime.utcnow()}},
        )
        return result.modified_count == 1

    async def delete(self, kind: RelationshipKind, source_id: str, target_id: str,
                     status: Optional[RelationshipStatus] = None) -> bool:
        query = self._key(kind, source_id, target_id)
        if status is not None:
            query["status"] = status.value
        result = await self.collection.delete_one(query)
        return result.deleted_count == 1

    async def list_targets(self, kind: RelationshipKind, source_id: str,
                           status: RelationshipStatus) -> List[str]:
        cursor = self.collection.find(
            {"kind": kind.value, "source_id": to_object_id(source_id), "status": status.value},
            {"target_id": 1},
        ).sort("created_at", 1)
        return [str(doc["target_id"]) for doc in await cursor.to_list(length=None)]

    async def list_sources(self, kind: RelationshipKind, target_id: str,
                           status: RelationshipStatus) -> List[str]:
        cursor = self.collection.find(
            {"kind": kind.value, "target_id": to_object_id(target_id), "status": status.value},
            {"source_id": 1},
        ).sort("created_at", 1)
        return [str(doc["source_id"]) for doc in await cursor.to_list(length=None)]


class NotificationRepository(INotificationRepository):
    """Notification repository implementation using MongoDB"""

    def __init__(self, db: MongoDB):
        self.collection = db.notifications

    def _doc_to_notification(self, doc: Optional[Dict[str, Any]]) -> Optional[Notification]:
        if not doc:
            return None
        return Notification(
            id=str(doc["_id"]),
            recipient_id=str(doc["recipient_id"]),
            sender_id=str(doc["sender_id"]),
            type=NotificationType(doc["type"]),
            post_id=_str_id(doc.get("post_id")),
            comment_id=_str_id(doc.get("comment_id")),
            content=doc.get("content", ""),
            is_read=doc.get("is_read", False),
            is_deleted=doc.get("is_deleted", False),
            metadata=doc.get("metadata", {}),
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
        )

    async def create(self, recipient_id: str, sender_id: str, type: NotificationType,
                     post_id: Optional[str] = None, comment_id: Optional[str] = None,
                     content: str = "", metadata: Optional[Dict[str, Any]] = None) -> Notification:
        now = datetime.utcnow()
        doc = {
            "recipient_id": to_object_id(recipient_id),
            "sender_id": to_object_id(sender_id),
            "type": type.value,
            "post_id": to_object_id(post_id),
            "comment_id": to_object_id(comment_id),
            "content": content,
            "is_read": False,
            "is_deleted": False,
            "metadata": metadata or {},
            "created_at": now,
            "updated_at": now,
        }
        result = await self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return self._doc_to_notification(doc)

    async def find_for_recipient(self, recipient_id: str, skip: int = 0,
                                 limit: int = 20) -> Page:
        query = {"recipient_id": to_object_id(recipient_id), "is_deleted": False}
        total = await self.collection.count_documents(query)
        cursor = self.collection.find(query).sort("created_at", -1).skip(skip).limit(limit)
        docs = await cursor.to_list(length=limit)
        return Page(items=[self._doc_to_notification(d) for d in docs], total=total)

    async def find_one(self, notification_id: str, recipient_id: str) -> Optional[Notification]:
        oid = to_object_id(notification_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({
            "_id": oid,
            "recipient_id": to_object_id(recipient_id),
            "is_deleted": False,
        })
        return self._doc_to_notification(doc)

    async def count_unread(self, recipient_id: str) -> int:
        return await self.collection.count_documents({
            "recipient_id": to_object_id(recipient_id),
            "is_read": False,
            "is_deleted": False,
        })

    async def mark_read(self, notification_id: str) -> None:
        await self.collection.update_one(
            {"_id": to_object_id(notification_id)},
            {"$set": {"is_read": True, "updated_at": datetime.utcnow()}},
        )

    async def mark_all_read(self, recipient_id: str) -> int:
        result = await self.collection.update_many(
            {"recipient_id": to_object_id(recipient_id), "is_read": False},
            {"$set": {"is_read": True, "updated_at": datetime.utcnow()}},
        )
        return result.modified_count

    async def mark_deleted(self, notification_id: str) -> None:
        await self.collection.update_one(
            {"_id": to_object_id(notification_id)},
            {"$set": {"is_deleted": True, "updated_at": datetime.utcnow()}},
        )

    async def mark_all_deleted(self, recipient_id: str) -> int:
        result = await self.collection.update_many(
            {"recipient_id": to_object_id(recipient_id), "is_deleted": False},
            {"$set": {"is_deleted": True, "updated_at": datetime.utcnow()}},
        )
        return result.modified_count

    async def delete_read_before(self, cutoff: datetime) -> int:
        result = await self.collection.delete_many({"created_at": {"$lt": cutoff}, "is_read": True})
        return result.deleted_count
