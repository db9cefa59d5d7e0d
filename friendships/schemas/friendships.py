from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime
from friendships.models.friendship import FriendshipStatus

class FriendshipCreate(BaseModel):
    status: FriendshipStatus = Field(FriendshipStatus.PENDING, description="Initial status of the friendship")

class FriendshipUpdate(BaseModel):
    status: Optional[FriendshipStatus] = Field(None, description="New status; omit to only record yourself as initiator")
    restore_if_trashed: bool = False

class FriendshipResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    sender_id: str
    recipient_id: str
    status: FriendshipStatus
    status_initiator: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

class FriendshipsListResponse(BaseModel):
    friendships: List[FriendshipResponse]
    total_count: int

class FriendshipCountResponse(BaseModel):
    count: int

class FriendsResponse(BaseModel):
    friend_ids: List[str]

class FriendshipStatusResponse(BaseModel):
    message: str
    status: str
