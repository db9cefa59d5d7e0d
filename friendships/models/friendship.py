from sqlalchemy import Column, String, DateTime, Integer, UniqueConstraint, CheckConstraint, event
from sqlalchemy.sql import func
from sqlalchemy.orm import reconstructor
from sqlalchemy.ext.hybrid import hybrid_property
from typing import Any, Dict, Iterable, Optional, Tuple, Union
from friendships.database import Base
from friendships.exceptions import InvalidActorError
import enum

class FriendshipStatus(enum.IntEnum):
    PENDING = 1
    ACCEPTED = 2
    DENIED = 3
    BLOCKED = 4

# Fields that may only change through a validated update
MUTABLE_FIELDS = ("status", "status_initiator")

def canonical_pair(a: str, b: str) -> Tuple[str, str]:
    return (a, b) if a < b else (b, a)

class Friendship(Base):
    """Friendship between two users, with the status and who set it last."""
    __tablename__ = "friendships"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sender_id = Column(String, nullable=False, index=True)
    recipient_id = Column(String, nullable=False, index=True)

    # Canonical pair (always low < high) so (a, b) and (b, a) hit the same unique key
    user_low_id = Column(String, nullable=False)
    user_high_id = Column(String, nullable=False)

    _status = Column("status", Integer, nullable=False, index=True)
    _status_initiator = Column("status_initiator", String, nullable=False)

    version_id = Column(Integer, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime, nullable=True, index=True)

    __table_args__ = (
        UniqueConstraint("user_low_id", "user_high_id", name="unique_friendship_pair"),
        CheckConstraint("sender_id != recipient_id", name="chk_no_self_friendship"),
        CheckConstraint("status IN (1, 2, 3, 4)", name="chk_valid_friendship_status"),
    )
    __mapper_args__ = {"version_id_col": version_id}

    def __init__(
        self,
        sender_id: str,
        recipient_id: str,
        status: Union[FriendshipStatus, int] = FriendshipStatus.PENDING,
        status_initiator: Optional[str] = None,
        **kwargs,
    ):
        if sender_id == recipient_id:
            raise InvalidActorError(f"User {sender_id} cannot be in a friendship with themselves")
        if status_initiator is None:
            status_initiator = sender_id
        if status_initiator not in (sender_id, recipient_id):
            raise InvalidActorError(
                f"Status initiator {status_initiator} is neither sender {sender_id} nor recipient {recipient_id}"
            )
        user_low_id, user_high_id = canonical_pair(sender_id, recipient_id)
        super().__init__(
            sender_id=sender_id,
            recipient_id=recipient_id,
            user_low_id=user_low_id,
            user_high_id=user_high_id,
            _status=int(FriendshipStatus(status)),
            _status_initiator=status_initiator,
            **kwargs,
        )
        self._staged = {}

    @reconstructor
    def _init_on_load(self):
        self._staged = {}

    # status and status_initiator have no setters: assigning them raises AttributeError.
    @hybrid_property
    def status(self) -> Optional[FriendshipStatus]:
        return FriendshipStatus(self._status) if self._status is not None else None

    @status.expression
    def status(cls):
        return cls._status

    @hybrid_property
    def status_initiator(self) -> Optional[str]:
        return self._status_initiator

    @status_initiator.expression
    def status_initiator(cls):
        return cls._status_initiator

    @property
    def trashed(self) -> bool:
        return self.deleted_at is not None

    def involves(self, user_id: str) -> bool:
        return user_id in (self.sender_id, self.recipient_id)

    def other_party(self, user_id: str) -> str:
        """Return the participant that is not ``user_id``."""
        if user_id == self.sender_id:
            return self.recipient_id
        if user_id == self.recipient_id:
            return self.sender_id
        raise InvalidActorError(f"User {user_id} is not part of friendship {self.id}")

    def is_status(self, status: Union[int, Iterable[int]], initiator: Optional[str] = None) -> bool:
        statuses = [status] if isinstance(status, int) else list(status)
        if initiator is None:
            return self.status in statuses
        return self.status in statuses and self.status_initiator == initiator

    def stage(self, **attributes: Any) -> "Friendship":
        """Queue changes for ``FriendshipService.save_friendship``; nothing is applied yet."""
        unknown = set(attributes) - set(MUTABLE_FIELDS)
        if unknown:
            raise AttributeError(f"Cannot stage non-mutable fields: {sorted(unknown)}")
        self._staged.update(attributes)
        return self

    def staged_changes(self) -> Dict[str, Any]:
        return dict(self._staged)

    def clear_staged(self):
        self._staged = {}

    def _apply_validated(self, changes: Dict[str, Any]):
        # Only called by FriendshipService after the field validators passed
        if "status" in changes:
            self._status = int(FriendshipStatus(changes["status"]))
        if "status_initiator" in changes:
            self._status_initiator = changes["status_initiator"]

    def __repr__(self):
        return (
            f"<Friendship id={self.id} sender={self.sender_id} recipient={self.recipient_id} "
            f"status={self.status.name if self.status else None} initiator={self.status_initiator} "
            f"trashed={self.trashed}>"
        )


@event.listens_for(Friendship, "before_insert")
@event.listens_for(Friendship, "before_update")
def check_status_initiator(mapper, connection, target):
    """Refuse to persist a friendship whose initiator is not one of its two users."""
    if target.status_initiator not in (target.sender_id, target.recipient_id):
        raise InvalidActorError(
            f"Status initiator {target.status_initiator} is not part of friendship {target.id}"
        )
