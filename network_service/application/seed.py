"""
Sample data for local development
"""
from typing import Optional, Dict, List
import logging

from ..domain.models import (
    Post, Visibility, RelationshipKind, RelationshipStatus,
    extract_hashtags, extract_mentions
)
from ..domain.repositories import (
    IUserRepository, IPostRepository, ICommentRepository, IRelationshipRepository
)
from ..infrastructure.auth import hash_password

logger = logging.getLogger(__name__)

SAMPLE_PASSWORD = "password123"

SAMPLE_USERS = [
    {
        "first_name": "John",
        "last_name": "Doe",
        "email": "john@example.com",
        "title": "Senior Software Engineer",
        "company": "TechCorp",
        "location": "San Francisco, CA",
        "bio": "Passionate about web development and open source",
        "skills": ["JavaScript", "React", "Node.js", "MongoDB"],
        "interests": ["Web Development", "AI", "Open Source"],
    },
    {
        "first_name": "Sarah",
        "last_name": "Johnson",
        "email": "sarah@example.com",
        "title": "Product Manager",
        "company": "InnovateCo",
        "location": "New York, NY",
        "bio": "Building products that make a difference",
        "skills": ["Product Management", "User Research", "Agile", "Data Analysis"],
        "interests": ["Product Strategy", "User Experience", "Startups"],
    },
    {
        "first_name": "Michael",
        "last_name": "Chen",
        "email": "michael@example.com",
        "title": "UX Designer",
        "company": "DesignStudio",
        "location": "Los Angeles, CA",
        "bio": "Creating beautiful and functional user experiences",
        "skills": ["UI/UX Design", "Figma", "Prototyping", "User Research"],
        "interests": ["Design Systems", "Accessibility", "Creative Technology"],
    },
    {
        "first_name": "Emily",
        "last_name": "Rodriguez",
        "email": "emily@example.com",
        "title": "Data Scientist",
        "company": "DataCorp",
        "location": "Austin, TX",
        "bio": "Turning data into insights and stories",
        "skills": ["Python", "Machine Learning", "SQL", "Data Visualization"],
        "interests": ["AI/ML", "Data Science", "Analytics"],
    },
]

# (author index, content)
SAMPLE_POSTS = [
    (0, "Just shipped a new feature that reduces page load time by 40%! The key was "
        "lazy loading and a smaller bundle. #webdev #performance"),
    (1, "Reflecting on an amazing quarter! Our team launched 3 major features and grew "
        "engagement by 25%. What's your biggest win this quarter? #product #teamwork #growth"),
    (2, "Design tip: always test your prototypes with real users before finalizing. "
        "#design #ux #usability"),
    (3, "Bootstrapping a startup teaches you to be resourceful. Every decision matters. "
        "#startup #entrepreneurship #growth"),
]

# Index pairs into SAMPLE_USERS
SAMPLE_CONNECTIONS = [(0, 1), (0, 2), (1, 3), (2, 3)]
SAMPLE_FOLLOWS = [
    (1, 0), (2, 0), (3, 0),
    (0, 1), (2, 1),
    (0, 2), (1, 2), (3, 2),
    (0, 3), (1, 3),
]
# (post index, user index)
SAMPLE_LIKES = [(0, 1), (0, 2), (1, 0), (1, 2), (1, 3), (2, 0), (2, 1), (3, 0), (3, 1), (3, 2)]
# (post index, user index, content)
SAMPLE_COMMENTS = [
    (0, 1, "Great work! Performance improvements are always exciting to see."),
    (1, 0, "Congratulations! That's an impressive achievement."),
    (2, 3, "So true! User research is the foundation of good design."),
]


async def seed_sample_data(
    user_repository: IUserRepository,
    post_repository: IPostRepository,
    comment_repository: ICommentRepository,
    relationship_repository: IRelationshipRepository
) -> Optional[Dict[str, int]]:
    """
    Load the sample users, posts and graph

    Returns:
        Counts per kind of record, or None when the sample users already exist
    """
    if await user_repository.exists_by_email(SAMPLE_USERS[0]["email"]):
        logger.info("Sample data already present, skipping")
        return None

    password_hash = hash_password(SAMPLE_PASSWORD)
    user_ids: List[str] = []
    for sample in SAMPLE_USERS:
        profile = {k: v for k, v in sample.items()
                   if k not in ("first_name", "last_name", "email")}
        user = await user_repository.create(
            first_name=sample["first_name"],
            last_name=sample["last_name"],
            email=sample["email"],
            password_hash=password_hash
        )
        if user is None:
            user = await user_repository.find_by_email(sample["email"])
        await user_repository.update(user.id, profile)
        user_ids.append(user.id)

    post_ids: List[str] = []
    for author, content in SAMPLE_POSTS:
        post = await post_repository.create(Post(
            id="",
            author_id=user_ids[author],
            content=content,
            hashtags=extract_hashtags(content),
            mentions=extract_mentions(content),
            visibility=Visibility.PUBLIC,
        ))
        post_ids.append(post.id)

    for a, b in SAMPLE_CONNECTIONS:
        await relationship_repository.create(
            RelationshipKind.CONNECTION, user_ids[a], user_ids[b], RelationshipStatus.ACCEPTED
        )
    for source, target in SAMPLE_FOLLOWS:
        await relationship_repository.create(
            RelationshipKind.FOLLOW, user_ids[source], user_ids[target], RelationshipStatus.ACCEPTED
        )
    for post, user in SAMPLE_LIKES:
        await post_repository.add_like(post_ids[post], user_ids[user])
    for post, user, content in SAMPLE_COMMENTS:
        await comment_repository.create_comment(post_ids[post], user_ids[user], content)

    counts = {
        "users": len(user_ids),
        "posts": len(post_ids),
        "connections": len(SAMPLE_CONNECTIONS),
        "follows": len(SAMPLE_FOLLOWS),
        "likes": len(SAMPLE_LIKES),
        "comments": len(SAMPLE_COMMENTS),
    }
    logger.info(f"Seeded sample data: {counts}")
    return counts
