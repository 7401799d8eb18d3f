from datetime import datetime, timezone
from typing import Optional, List
from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field, Relationship
from enum import Enum


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Aware UTC datetime; naive values are taken to already be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def pair_key(user_a: int, user_b: int) -> str:
    """Canonical key for an unordered pair of users."""
    low, high = sorted((user_a, user_b))
    return f"{low}:{high}"


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(index=True, unique=True)
    full_name: str
    age: Optional[int] = None
    handicap: Optional[int] = None
    skill_level: Optional[str] = None  # "Beginner", "Intermediate", "Advanced"
    gender: Optional[str] = None
    bio: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class Course(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    location: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    price_range: Optional[str] = None
    rating: Optional[int] = None

    tee_times: List["TeeTime"] = Relationship(back_populates="course")


class SwipeDirection(str, Enum):
    right = "right"  # interested
    left = "left"  # not interested


class Swipe(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    swiper_id: int = Field(foreign_key="user.id", index=True)
    swipee_id: int = Field(foreign_key="user.id", index=True)
    direction: SwipeDirection
    created_at: datetime = Field(default_factory=utcnow)


class MatchStatus(str, Enum):
    active = "active"
    inactive = "inactive"


class Match(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user1_id: int = Field(foreign_key="user.id", index=True)
    user2_id: int = Field(foreign_key="user.id", index=True)
    pair_key: str = Field(index=True, unique=True)
    status: MatchStatus = MatchStatus.active
    matched_at: datetime = Field(default_factory=utcnow)

    messages: List["Message"] = Relationship(
        back_populates="match",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )

    def involves(self, user_id: int) -> bool:
        return user_id in (self.user1_id, self.user2_id)

    def other_user_id(self, user_id: int) -> int:
        return self.user2_id if self.user1_id == user_id else self.user1_id


class Message(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    match_id: int = Field(foreign_key="match.id", index=True)
    sender_id: int = Field(foreign_key="user.id")
    receiver_id: int = Field(foreign_key="user.id")
    content: str
    sent_at: datetime = Field(default_factory=utcnow, index=True)
    is_read: bool = False

    match: Optional[Match] = Relationship(back_populates="messages")


class TeeTimeStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"


class TeeTime(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    course_id: int = Field(foreign_key="course.id")
    date: datetime
    status: TeeTimeStatus = TeeTimeStatus.pending
    created_by: int = Field(foreign_key="user.id", index=True)
    participants: List[int] = Field(default_factory=list, sa_column=Column(JSON))

    course: Optional[Course] = Relationship(back_populates="tee_times")


class Post(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    content: str
    image_url: Optional[str] = None
    course_id: Optional[int] = Field(default=None, foreign_key="course.id")
    score: Optional[int] = None
    played_date: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)


# Request bodies

class UserCreate(SQLModel):
    username: str
    full_name: str
    age: Optional[int] = None
    handicap: Optional[int] = None
    skill_level: Optional[str] = None
    gender: Optional[str] = None
    bio: Optional[str] = None


class UserUpdate(SQLModel):
    full_name: Optional[str] = None
    age: Optional[int] = None
    handicap: Optional[int] = None
    skill_level: Optional[str] = None
    gender: Optional[str] = None
    bio: Optional[str] = None


class SwipeCreate(SQLModel):
    swipee_id: int
    # Kept as plain strings so the engine reports bad values as ValidationError
    direction: Optional[str] = None


class MessageCreate(SQLModel):
    content: str = ""


class TeeTimeCreate(SQLModel):
    course_id: int
    date: Optional[str] = None
    participants: Optional[List[int]] = None


class PostCreate(SQLModel):
    content: str = ""
    image_url: Optional[str] = None
    course_id: Optional[int] = None
    score: Optional[int] = None
    played_date: Optional[str] = None
