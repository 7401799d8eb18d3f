"""
Swipe ledger, match detection and the discovery deck.

Swipes are append-only: re-swiping the same person adds another row, and any
prior decision (left or right) keeps that person out of the swiper's deck.
A match is created the first time two users have both swiped right on each
other; later mutual swipes return the existing match for the pair.
"""
import logging
from typing import List, Optional, Tuple

from errors import NotFoundError, ValidationError
from models import Match, MatchStatus, Swipe, SwipeDirection, User, pair_key
from storage import Storage

logger = logging.getLogger(__name__)

DIRECTION_ALIASES = {
    "right": SwipeDirection.right,
    "interested": SwipeDirection.right,
    "left": SwipeDirection.left,
    "not_interested": SwipeDirection.left,
    "not-interested": SwipeDirection.left,
}


def parse_direction(direction) -> SwipeDirection:
    if isinstance(direction, SwipeDirection):
        return direction
    if not direction:
        raise ValidationError("Swipe direction is required")
    parsed = DIRECTION_ALIASES.get(str(direction).strip().lower())
    if parsed is None:
        raise ValidationError(f"Unknown swipe direction: {direction!r}")
    return parsed


def record_swipe(storage: Storage, swiper_id: int, swipee_id: int, direction) -> Swipe:
    direction = parse_direction(direction)
    if swiper_id == swipee_id:
        raise ValidationError("Users cannot swipe on themselves")
    if not storage.get_user(swiper_id):
        raise NotFoundError(f"User {swiper_id} not found")
    if not storage.get_user(swipee_id):
        raise NotFoundError(f"User {swipee_id} not found")

    swipe = storage.create_swipe(
        Swipe(swiper_id=swiper_id, swipee_id=swipee_id, direction=direction)
    )
    logger.debug("User %s swiped %s on %s", swiper_id, direction.value, swipee_id)
    return swipe


def evaluate_and_maybe_match(
    storage: Storage, swiper_id: int, swipee_id: int, direction
) -> Optional[Match]:
    """Return the pair's match if this swipe completes mutual interest."""
    if parse_direction(direction) != SwipeDirection.right or swiper_id == swipee_id:
        return None
    if not storage.has_swiped_right(swipee_id, swiper_id):
        return None

    match, created = storage.create_match_if_absent(
        Match(
            user1_id=swiper_id,
            user2_id=swipee_id,
            pair_key=pair_key(swiper_id, swipee_id),
            status=MatchStatus.active,
        )
    )
    if created:
        logger.info("New match %s between users %s and %s", match.id, swiper_id, swipee_id)
    return match


def swipe(
    storage: Storage, swiper_id: int, swipee_id: int, direction
) -> Tuple[Swipe, Optional[Match]]:
    recorded = record_swipe(storage, swiper_id, swipee_id, direction)
    match = evaluate_and_maybe_match(storage, swiper_id, swipee_id, recorded.direction)
    return recorded, match


def candidates_for(storage: Storage, user_id: int) -> List[User]:
    excluded = storage.swiped_user_ids(user_id)
    excluded.add(user_id)
    return storage.users_excluding(excluded)


def matches_for(storage: Storage, user_id: int) -> List[dict]:
    """Matches the user is part of, each paired with the other user's record."""
    results = []
    for match in storage.matches_for_user(user_id):
        other = storage.get_user(match.other_user_id(user_id))
        results.append({**match.model_dump(), "other_user": other})
    return results


def matches_involving(storage: Storage, user_a: int, user_b: int) -> List[Match]:
    match = storage.get_match_by_pair(pair_key(user_a, user_b))
    return [match] if match else []
