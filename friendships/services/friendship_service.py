from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from friendships.actor import ActorLike, resolve_actor_id
from friendships.config import settings
from friendships.crud.base import RelationshipRepository, StatusFilter
from friendships.exceptions import ConflictError, InvalidActorError, StaleRecordError, TransientConflictError
from friendships.models.friendship import MUTABLE_FIELDS, Friendship, FriendshipStatus
from friendships.services.friendship_validation import can_modify, can_remake, validate_changes
from friendships.utils.logger import get_logger

logger = get_logger(__name__)

Guard = Callable[[Friendship, str], bool]


class FriendshipService:
    """
    Friendship operations seen from one of the two users.

    Every method takes the acting user explicitly. Rejected transitions are
    reported as ``None`` (or ``False`` for deletes) and leave storage
    untouched; only usage faults and storage failures raise.
    """

    def __init__(self, repository: RelationshipRepository, write_retries: Optional[int] = None):
        self.repository = repository
        self.write_retries = settings.FRIENDSHIP_WRITE_RETRIES if write_retries is None else write_retries

    # Lookups

    def get_friendship(
        self,
        actor: ActorLike,
        other_id: str,
        status: StatusFilter = None,
        include_trashed: bool = False,
        initiator: Optional[str] = None,
    ) -> Optional[Friendship]:
        return self.repository.find_between(
            resolve_actor_id(actor), other_id, include_trashed=include_trashed, status=status, initiator=initiator
        )

    def statused(
        self,
        actor: ActorLike,
        other_id: str,
        status: StatusFilter = None,
        include_trashed: bool = False,
        initiator: Optional[str] = None,
    ) -> bool:
        return self.get_friendship(actor, other_id, status, include_trashed, initiator) is not None

    def get_friendships(self, actor: ActorLike, status: StatusFilter = None) -> List[Friendship]:
        return self.repository.find_all_for(resolve_actor_id(actor), status)

    def get_friendships_count(self, actor: ActorLike, status: StatusFilter = None) -> int:
        return self.repository.count_for(resolve_actor_id(actor), status)

    def get_sent_friendships(self, actor: ActorLike, status: StatusFilter = None) -> List[Friendship]:
        return self.repository.find_all_for(resolve_actor_id(actor), status, role="sender")

    def get_received_friendships(self, actor: ActorLike, status: StatusFilter = None) -> List[Friendship]:
        return self.repository.find_all_for(resolve_actor_id(actor), status, role="recipient")

    def get_friends(self, actor: ActorLike, status: StatusFilter = FriendshipStatus.ACCEPTED) -> List[str]:
        """IDs of the users on the other side of the actor's friendships, without duplicates."""
        actor_id = resolve_actor_id(actor)
        friends: Dict[str, None] = {}
        for friendship in self.repository.find_all_for(actor_id, status):
            for user_id in (friendship.sender_id, friendship.recipient_id):
                if user_id != actor_id:
                    friends.setdefault(user_id, None)
        return list(friends)

    # Mutations

    def make_friendship(
        self,
        actor: ActorLike,
        other_id: str,
        status: Union[FriendshipStatus, int] = FriendshipStatus.PENDING,
    ) -> Optional[Friendship]:
        """
        Get-or-create the friendship with ``other_id`` and move it to ``status``.

        A trashed friendship is revived in the same write that changes its status.

        Returns:
            Friendship: The created or updated friendship
            None: If the transition was rejected

        Raises:
            InvalidActorError: If the actor tries to befriend themselves
            TransientConflictError: If concurrent writers kept winning
        """
        actor_id = resolve_actor_id(actor)
        status = FriendshipStatus(status)
        if actor_id == other_id:
            raise InvalidActorError(f"User {actor_id} cannot be in a friendship with themselves")

        friendship = self.repository.find_between(actor_id, other_id, include_trashed=True)
        if friendship is None:
            try:
                friendship = self.repository.insert(
                    Friendship(sender_id=actor_id, recipient_id=other_id, status=status, status_initiator=actor_id)
                )
                logger.info(f"Friendship {friendship.id} created by {actor_id} with {other_id} as {status.name}")
                return friendship
            except ConflictError:
                # Lost the race to create the pair; continue against the winner's row
                logger.warning(f"Concurrent creation of friendship {actor_id}/{other_id}, re-reading")
                friendship = self.repository.find_between(actor_id, other_id, include_trashed=True)
                if friendship is None:
                    raise TransientConflictError(
                        f"Friendship {actor_id}/{other_id} conflicted on insert but could not be read back"
                    )

        return self._write(actor_id, friendship, {"status": status}, guard=can_remake, revive=friendship.trashed)

    def update_friendship(
        self,
        actor: ActorLike,
        friendship: Optional[Friendship],
        attributes: Optional[Mapping[str, Any]] = None,
        restore_if_trashed: bool = False,
    ) -> Optional[Friendship]:
        """
        Apply ``attributes`` to ``friendship`` if the actor is allowed to.

        ``status_initiator`` defaults to the actor, so an empty update just
        records the actor as the last one to touch the status.
        """
        if friendship is None:
            return None
        changes = self._check_fields(attributes or {})
        return self._write(
            resolve_actor_id(actor),
            friendship,
            changes,
            guard=can_modify,
            revive=restore_if_trashed and friendship.trashed,
        )

    def save_friendship(self, actor: ActorLike, friendship: Friendship) -> Optional[Friendship]:
        """Validate and persist the changes staged on ``friendship``."""
        actor_id = resolve_actor_id(actor)
        if not friendship.involves(actor_id):
            raise InvalidActorError(f"User {actor_id} is not part of friendship {friendship.id}")
        changes = friendship.staged_changes()
        friendship.clear_staged()
        return self._write(actor_id, friendship, changes, guard=can_modify)

    def update_friendship_by_recipient(
        self, actor: ActorLike, other_id: str, attributes: Optional[Mapping[str, Any]] = None
    ) -> Optional[Friendship]:
        return self.update_friendship(actor, self.get_friendship(actor, other_id), attributes)

    def delete_friendship(self, actor: ActorLike, friendship: Optional[Friendship]) -> bool:
        """
        Trash ``friendship`` and record the actor as status initiator in the same write.

        A missing friendship counts as already deleted.
        """
        if friendship is None:
            return True
        actor_id = resolve_actor_id(actor)
        if self._write(actor_id, friendship, {}, guard=can_modify, trash=True) is None:
            return False
        logger.info(f"Friendship {friendship.id} deleted by {actor_id}")
        return True

    def delete_friendship_by_recipient(self, actor: ActorLike, other_id: str) -> bool:
        return self.delete_friendship(actor, self.get_friendship(actor, other_id))

    def restore_friendship(self, actor: ActorLike, other_id: str) -> Optional[Friendship]:
        """Take the friendship with ``other_id`` out of the trash without changing its status."""
        actor_id = resolve_actor_id(actor)
        friendship = self.get_friendship(actor_id, other_id, include_trashed=True)
        if friendship is None or not friendship.trashed:
            return friendship
        restored = self._write(actor_id, friendship, {}, guard=can_modify, revive=True)
        if restored is not None:
            logger.info(f"Friendship {restored.id} restored by {actor_id}")
        return restored

    # Internals

    @staticmethod
    def _check_fields(attributes: Mapping[str, Any]) -> Dict[str, Any]:
        unknown = set(attributes) - set(MUTABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update friendship fields: {sorted(unknown)}")
        return dict(attributes)

    def _write(
        self,
        actor_id: str,
        friendship: Friendship,
        changes: Mapping[str, Any],
        guard: Guard,
        revive: bool = False,
        trash: bool = False,
    ) -> Optional[Friendship]:
        """
        Validate against the stored state, apply and save in a single write;
        re-validate when a concurrent write wins.

        ``revive`` clears the trash marker and ``trash`` sets it, as part of the same save.
        """
        changes = dict(changes)
        changes.setdefault("status_initiator", actor_id)

        for attempt in range(self.write_retries + 1):
            if not guard(friendship, actor_id) or not validate_changes(friendship, changes, actor_id):
                return None
            friendship._apply_validated(changes)
            if revive:
                friendship.deleted_at = None
            if trash:
                friendship.deleted_at = datetime.now(timezone.utc)
            try:
                saved = self.repository.save(friendship)
            except StaleRecordError:
                logger.warning(
                    f"Friendship {friendship.id} changed concurrently, re-validating (attempt {attempt + 1})"
                )
                self.repository.reload(friendship)
                continue
            logger.info(
                f"Friendship {saved.id} set to {saved.status.name} by {actor_id}"
            )
            return saved

        raise TransientConflictError(
            f"Friendship {friendship.id} kept changing after {self.write_retries + 1} attempts"
        )
