from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Union

from friendships.models.friendship import Friendship

StatusFilter = Optional[Union[int, Iterable[int]]]


class RelationshipRepository(ABC):
    """Storage operations the friendship service relies on."""

    @abstractmethod
    def find_between(
        self,
        user_a: str,
        user_b: str,
        include_trashed: bool = False,
        status: StatusFilter = None,
        initiator: Optional[str] = None,
    ) -> Optional[Friendship]:
        """Friendship between two users in either direction."""

    @abstractmethod
    def find_all_for(self, user_id: str, status: StatusFilter = None, role: Optional[str] = None) -> List[Friendship]:
        """Live friendships of a user in insertion order. ``role`` narrows to "sender" or "recipient"."""

    @abstractmethod
    def count_for(self, user_id: str, status: StatusFilter = None, role: Optional[str] = None) -> int:
        """Count of what ``find_all_for`` returns for the same arguments."""

    @abstractmethod
    def insert(self, friendship: Friendship) -> Friendship:
        """Store a new friendship. Raises ConflictError if the pair already has one."""

    @abstractmethod
    def save(self, friendship: Friendship) -> Friendship:
        """Write pending changes in one statement. Raises StaleRecordError if the row changed since it was read."""

    @abstractmethod
    def soft_delete(self, friendship: Friendship) -> Friendship:
        """Move a friendship to the trash."""

    @abstractmethod
    def restore(self, friendship: Friendship) -> Friendship:
        """Take a friendship out of the trash."""

    @abstractmethod
    def reload(self, friendship: Friendship) -> Friendship:
        """Discard in-memory state and re-read the stored row."""
