from friendships.schemas.friendships import (
    FriendshipCreate, FriendshipUpdate, FriendshipResponse, FriendshipsListResponse,
    FriendshipCountResponse, FriendsResponse, FriendshipStatusResponse
)

__all__ = [
    "FriendshipCreate", "FriendshipUpdate", "FriendshipResponse", "FriendshipsListResponse",
    "FriendshipCountResponse", "FriendsResponse", "FriendshipStatusResponse"
]
