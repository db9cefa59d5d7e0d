from friendships.crud.base import RelationshipRepository
from friendships.crud.friendships import FriendshipCRUD

__all__ = [
    # Storage interface
    "RelationshipRepository",

    # SQLAlchemy implementation
    "FriendshipCRUD"
]
