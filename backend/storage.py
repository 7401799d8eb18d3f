"""
Entity store for the matching engine.

`Storage` is the narrow set of reads and writes the engine needs. The engine
modules only talk to this interface, so a different backend can be dropped in
without touching them. `SQLStorage` is the SQLModel implementation used by the
API; ids are assigned by the database.
"""
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Set, Tuple

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from models import Course, Match, Message, Post, Swipe, SwipeDirection, TeeTime, User

logger = logging.getLogger(__name__)


class Storage(ABC):
    # Users
    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]: ...

    @abstractmethod
    def create_user(self, user: User) -> User: ...

    @abstractmethod
    def update_user(self, user_id: int, changes: dict) -> Optional[User]: ...

    @abstractmethod
    def users_excluding(self, excluded_ids: Set[int]) -> List[User]: ...

    # Courses
    @abstractmethod
    def get_course(self, course_id: int) -> Optional[Course]: ...

    @abstractmethod
    def list_courses(self) -> List[Course]: ...

    @abstractmethod
    def create_course(self, course: Course) -> Course: ...

    # Swipes
    @abstractmethod
    def create_swipe(self, swipe: Swipe) -> Swipe: ...

    @abstractmethod
    def swiped_user_ids(self, swiper_id: int) -> Set[int]: ...

    @abstractmethod
    def has_swiped_right(self, swiper_id: int, swipee_id: int) -> bool: ...

    # Matches
    @abstractmethod
    def get_match(self, match_id: int) -> Optional[Match]: ...

    @abstractmethod
    def get_match_by_pair(self, key: str) -> Optional[Match]: ...

    @abstractmethod
    def matches_for_user(self, user_id: int) -> List[Match]: ...

    @abstractmethod
    def create_match_if_absent(self, match: Match) -> Tuple[Match, bool]:
        """Insert `match` unless one exists for its pair key.

        Returns the stored match and whether it was created by this call.
        """

    # Messages
    @abstractmethod
    def messages_for_match(self, match_id: int) -> List[Message]: ...

    @abstractmethod
    def create_message(self, message: Message) -> Message: ...

    @abstractmethod
    def mark_messages_read(self, match_id: int, receiver_id: int) -> int: ...

    # Tee times
    @abstractmethod
    def tee_times_for_user(self, user_id: int) -> List[TeeTime]: ...

    @abstractmethod
    def create_tee_time(self, tee_time: TeeTime) -> TeeTime: ...

    # Posts
    @abstractmethod
    def list_posts(self, user_id: Optional[int] = None) -> List[Post]: ...

    @abstractmethod
    def create_post(self, post: Post) -> Post: ...


class SQLStorage(Storage):
    def __init__(self, session: Session):
        self.session = session

    def _save(self, obj):
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    # Users
    def get_user(self, user_id):
        return self.session.get(User, user_id)

    def get_user_by_username(self, username):
        return self.session.exec(select(User).where(User.username == username)).first()

    def create_user(self, user):
        return self._save(user)

    def update_user(self, user_id, changes):
        user = self.get_user(user_id)
        if not user:
            return None
        for key, value in changes.items():
            setattr(user, key, value)
        return self._save(user)

    def users_excluding(self, excluded_ids):
        query = select(User).where(User.id.not_in(sorted(excluded_ids))).order_by(User.id)
        return self.session.exec(query).all()

    # Courses
    def get_course(self, course_id):
        return self.session.get(Course, course_id)

    def list_courses(self):
        return self.session.exec(select(Course).order_by(Course.id)).all()

    def create_course(self, course):
        return self._save(course)

    # Swipes
    def create_swipe(self, swipe):
        return self._save(swipe)

    def swiped_user_ids(self, swiper_id):
        # Uses the swiper_id index, so this is proportional to the user's own swipes
        query = select(Swipe.swipee_id).where(Swipe.swiper_id == swiper_id).distinct()
        return set(self.session.exec(query).all())

    def has_swiped_right(self, swiper_id, swipee_id):
        query = select(Swipe.id).where(
            Swipe.swiper_id == swiper_id,
            Swipe.swipee_id == swipee_id,
            Swipe.direction == SwipeDirection.right,
        )
        return self.session.exec(query).first() is not None

    # Matches
    def get_match(self, match_id):
        return self.session.get(Match, match_id)

    def get_match_by_pair(self, key):
        return self.session.exec(select(Match).where(Match.pair_key == key)).first()

    def matches_for_user(self, user_id):
        query = (
            select(Match)
            .where((Match.user1_id == user_id) | (Match.user2_id == user_id))
            .order_by(Match.matched_at, Match.id)
        )
        return self.session.exec(query).all()

    def create_match_if_absent(self, match):
        existing = self.get_match_by_pair(match.pair_key)
        if existing:
            return existing, False

        self.session.add(match)
        try:
            self.session.commit()
        except IntegrityError:
            # Another request inserted the same pair first; the unique pair_key wins
            self.session.rollback()
            logger.info("Concurrent match insert for pair %s, reusing existing", match.pair_key)
            return self.get_match_by_pair(match.pair_key), False
        self.session.refresh(match)
        return match, True

    # Messages
    def messages_for_match(self, match_id):
        query = (
            select(Message)
            .where(Message.match_id == match_id)
            .order_by(Message.sent_at, Message.id)
        )
        return self.session.exec(query).all()

    def create_message(self, message):
        return self._save(message)

    def mark_messages_read(self, match_id, receiver_id):
        unread = self.session.exec(
            select(Message).where(
                Message.match_id == match_id,
                Message.receiver_id == receiver_id,
                Message.is_read == False,  # noqa: E712
            )
        ).all()
        for message in unread:
            message.is_read = True
            self.session.add(message)
        self.session.commit()
        return len(unread)

    # Tee times
    def tee_times_for_user(self, user_id):
        # participants is a JSON list, so membership is checked here rather than in SQL
        tee_times = self.session.exec(select(TeeTime).order_by(TeeTime.date, TeeTime.id)).all()
        return [
            t for t in tee_times
            if t.created_by == user_id or user_id in (t.participants or [])
        ]

    def create_tee_time(self, tee_time):
        return self._save(tee_time)

    # Posts
    def list_posts(self, user_id=None):
        query = select(Post)
        if user_id is not None:
            query = query.where(Post.user_id == user_id)
        query = query.order_by(Post.created_at.desc(), Post.id.desc())
        return self.session.exec(query).all()

    def create_post(self, post):
        return self._save(post)
