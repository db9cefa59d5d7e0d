from datetime import datetime, timezone
from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session
from sqlalchemy.orm.exc import StaleDataError
from typing import List, Optional
from friendships.crud.base import RelationshipRepository, StatusFilter
from friendships.exceptions import ConflictError, StaleRecordError
from friendships.models.friendship import Friendship
from friendships.utils.logger import get_logger

logger = get_logger(__name__)

ROLES = ("sender", "recipient")


def where_status(query: Query, status: StatusFilter) -> Query:
    """Filter by one status or several; None and 0 mean any status."""
    if status is None or status == 0:
        return query
    if isinstance(status, int):
        return query.filter(Friendship.status == int(status))
    return query.filter(Friendship.status.in_([int(s) for s in status]))


def where_initiator(query: Query, initiator: Optional[str]) -> Query:
    if initiator is None:
        return query
    return query.filter(Friendship.status_initiator == initiator)


def where_between(query: Query, user_a: str, user_b: str) -> Query:
    return query.filter(
        or_(
            and_(Friendship.sender_id == user_a, Friendship.recipient_id == user_b),
            and_(Friendship.sender_id == user_b, Friendship.recipient_id == user_a),
        )
    )


def where_user(query: Query, user_id: str, role: Optional[str] = None) -> Query:
    if role is None:
        return query.filter(or_(Friendship.sender_id == user_id, Friendship.recipient_id == user_id))
    if role not in ROLES:
        raise ValueError(f"Unknown friendship role {role!r}, expected one of {ROLES}")
    column = Friendship.sender_id if role == "sender" else Friendship.recipient_id
    return query.filter(column == user_id)


class FriendshipCRUD(RelationshipRepository):
    """SQLAlchemy-backed friendship storage bound to one session."""

    def __init__(self, db: Session):
        self.db = db

    def _live(self, include_trashed: bool = False) -> Query:
        query = self.db.query(Friendship)
        if not include_trashed:
            query = query.filter(Friendship.deleted_at.is_(None))
        return query

    def _user_query(self, user_id: str, status: StatusFilter, role: Optional[str]) -> Query:
        return where_status(where_user(self._live(), user_id, role), status)

    def find_between(
        self,
        user_a: str,
        user_b: str,
        include_trashed: bool = False,
        status: StatusFilter = None,
        initiator: Optional[str] = None,
    ) -> Optional[Friendship]:
        query = where_between(self._live(include_trashed), user_a, user_b)
        query = where_initiator(where_status(query, status), initiator)
        return query.first()

    def find_all_for(self, user_id: str, status: StatusFilter = None, role: Optional[str] = None) -> List[Friendship]:
        return self._user_query(user_id, status, role).order_by(Friendship.id).all()

    def count_for(self, user_id: str, status: StatusFilter = None, role: Optional[str] = None) -> int:
        return self._user_query(user_id, status, role).count()

    def insert(self, friendship: Friendship) -> Friendship:
        try:
            self.db.add(friendship)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(
                f"Friendship between {friendship.sender_id} and {friendship.recipient_id} already exists: {e.orig}"
            )
            raise ConflictError(
                f"Friendship between {friendship.sender_id} and {friendship.recipient_id} already exists"
            ) from e
        except SQLAlchemyError as e:
            logger.error(f"Error inserting friendship: {e}")
            self.db.rollback()
            raise
        self.db.refresh(friendship)
        return friendship

    def save(self, friendship: Friendship) -> Friendship:
        try:
            self.db.commit()
        except StaleDataError as e:
            self.db.rollback()
            raise StaleRecordError(f"Friendship {friendship.id} was changed concurrently") from e
        except SQLAlchemyError as e:
            logger.error(f"Error saving friendship {friendship.id}: {e}")
            self.db.rollback()
            raise
        self.db.refresh(friendship)
        return friendship

    def soft_delete(self, friendship: Friendship) -> Friendship:
        friendship.deleted_at = datetime.now(timezone.utc)
        return self.save(friendship)

    def restore(self, friendship: Friendship) -> Friendship:
        friendship.deleted_at = None
        return self.save(friendship)

    def reload(self, friendship: Friendship) -> Friendship:
        self.db.refresh(friendship)
        return friendship
