"""Activity feed: round reports and other posts, newest first."""
from typing import List, Optional

from errors import NotFoundError, ValidationError
from models import Post
from scheduling import parse_datetime
from storage import Storage


def create_post(
    storage: Storage,
    user_id: int,
    content: str,
    image_url: Optional[str] = None,
    course_id: Optional[int] = None,
    score: Optional[int] = None,
    played_date=None,
) -> Post:
    content = (content or "").strip()
    if not content:
        raise ValidationError("Post content cannot be empty")
    if not storage.get_user(user_id):
        raise NotFoundError(f"User {user_id} not found")
    if course_id is not None and not storage.get_course(course_id):
        raise NotFoundError(f"Course {course_id} not found")

    return storage.create_post(
        Post(
            user_id=user_id,
            content=content,
            image_url=image_url,
            course_id=course_id,
            score=score,
            played_date=parse_datetime(played_date) if played_date else None,
        )
    )


def _with_details(storage: Storage, posts: List[Post]) -> List[dict]:
    results = []
    for post in posts:
        course = storage.get_course(post.course_id) if post.course_id else None
        results.append({**post.model_dump(), "user": storage.get_user(post.user_id), "course": course})
    return results


def list_posts(storage: Storage) -> List[dict]:
    return _with_details(storage, storage.list_posts())


def user_posts(storage: Storage, user_id: int) -> List[dict]:
    if not storage.get_user(user_id):
        raise NotFoundError(f"User {user_id} not found")
    return _with_details(storage, storage.list_posts(user_id))
