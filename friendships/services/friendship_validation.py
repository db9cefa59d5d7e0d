from typing import Any, Callable, Dict, Mapping

from friendships.models.friendship import Friendship, FriendshipStatus
from friendships.services.transition_policy import is_transition_allowed
from friendships.utils.logger import get_logger

logger = get_logger(__name__)

FieldValidator = Callable[[Friendship, Any, str], bool]


def validate_status_initiator(friendship: Friendship, value: Any, actor_id: str) -> bool:
    """The initiator must be one of the two users of the friendship."""
    return friendship.involves(value)


def validate_status(friendship: Friendship, value: Any, actor_id: str) -> bool:
    """Check the transition against the status and initiator as currently stored."""
    return is_transition_allowed(
        friendship.status,
        friendship.status_initiator,
        actor_id,
        value,
    )


FIELD_VALIDATORS: Dict[str, FieldValidator] = {
    "status_initiator": validate_status_initiator,
    "status": validate_status,
}


def validate_changes(friendship: Friendship, changes: Mapping[str, Any], actor_id: str) -> bool:
    """Run the validator of every changed field; the first failure rejects the whole change."""
    for field, value in changes.items():
        validator = FIELD_VALIDATORS.get(field)
        if validator is None:
            continue
        if not validator(friendship, value, actor_id):
            logger.info(
                f"Rejected change of {field} to {value!r} on friendship {friendship.id} by {actor_id}"
            )
            return False
    return True


def can_modify(friendship: Friendship, actor_id: str) -> bool:
    """
    A user who did not set the current status may not touch a friendship
    that is blocked or in the trash.
    """
    if friendship.status_initiator == actor_id:
        return True
    if friendship.is_status(FriendshipStatus.BLOCKED) or friendship.trashed:
        logger.info(f"User {actor_id} cannot modify friendship {friendship.id}: blocked or trashed by the other side")
        return False
    return True


def can_remake(friendship: Friendship, actor_id: str) -> bool:
    """Like ``can_modify`` but a trashed friendship may be revived by either user."""
    if friendship.status_initiator == actor_id:
        return True
    if friendship.is_status(FriendshipStatus.BLOCKED):
        logger.info(f"User {actor_id} cannot renew friendship {friendship.id}: blocked by the other side")
        return False
    return True
