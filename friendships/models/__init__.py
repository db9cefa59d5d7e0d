from friendships.database import Base
from friendships.models.friendship import Friendship, FriendshipStatus, canonical_pair

__all__ = ["Base", "Friendship", "FriendshipStatus", "canonical_pair"]
