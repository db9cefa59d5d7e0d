from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional
from friendships.actor import ActorContext
from friendships.auth import get_actor_context
from friendships.dependencies import get_friendship_service
from friendships.exceptions import InvalidActorError, TransientConflictError
from friendships.models.friendship import FriendshipStatus
from friendships.schemas.friendships import (
    FriendshipCreate, FriendshipUpdate, FriendshipResponse, FriendshipsListResponse,
    FriendshipCountResponse, FriendsResponse, FriendshipStatusResponse
)
from friendships.services.friendship_service import FriendshipService
from friendships.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/friendships", tags=["friendships"])

def _status_filter(status: Optional[int]) -> Optional[FriendshipStatus]:
    # 0 and missing both mean any status
    return FriendshipStatus(status) if status else None

StatusQuery = Query(None, ge=0, le=4, description="Status filter (1=pending, 2=accepted, 3=denied, 4=blocked; 0 = any)")

@router.get("", response_model=FriendshipsListResponse)
async def list_friendships(
    status: Optional[int] = StatusQuery,
    actor: ActorContext = Depends(get_actor_context),
    service: FriendshipService = Depends(get_friendship_service)
):
    """List the current user's friendships"""
    try:
        friendships = service.get_friendships(actor, _status_filter(status))
        return FriendshipsListResponse(
            friendships=[FriendshipResponse.model_validate(f) for f in friendships],
            total_count=len(friendships)
        )
    except Exception as e:
        logger.error(f"Error in list_friendships: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.get("/count", response_model=FriendshipCountResponse)
async def count_friendships(
    status: Optional[int] = StatusQuery,
    actor: ActorContext = Depends(get_actor_context),
    service: FriendshipService = Depends(get_friendship_service)
):
    """Count the current user's friendships"""
    try:
        return FriendshipCountResponse(count=service.get_friendships_count(actor, _status_filter(status)))
    except Exception as e:
        logger.error(f"Error in count_friendships: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.get("/friends", response_model=FriendsResponse)
async def list_friends(
    status: Optional[int] = Query(FriendshipStatus.ACCEPTED.value, ge=0, le=4),
    actor: ActorContext = Depends(get_actor_context),
    service: FriendshipService = Depends(get_friendship_service)
):
    """IDs of users the current user is friends with"""
    try:
        return FriendsResponse(friend_ids=service.get_friends(actor, _status_filter(status)))
    except Exception as e:
        logger.error(f"Error in list_friends: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

# Per-user routes sit under /users so a user ID can never collide with /count or /friends

@router.get("/users/{other_id}", response_model=FriendshipResponse)
async def get_friendship(
    other_id: str,
    status: Optional[int] = StatusQuery,
    include_trashed: bool = Query(False),
    actor: ActorContext = Depends(get_actor_context),
    service: FriendshipService = Depends(get_friendship_service)
):
    """Get the friendship between the current user and another user"""
    try:
        friendship = service.get_friendship(actor, other_id, _status_filter(status), include_trashed=include_trashed)
        if not friendship:
            raise HTTPException(status_code=404, detail="Friendship not found")
        return FriendshipResponse.model_validate(friendship)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error in get_friendship: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.post("/users/{other_id}", response_model=FriendshipResponse)
async def make_friendship(
    other_id: str,
    request: Optional[FriendshipCreate] = None,
    actor: ActorContext = Depends(get_actor_context),
    service: FriendshipService = Depends(get_friendship_service)
):
    """Send a friend request, or move an existing friendship to the requested status"""
    status = request.status if request else FriendshipStatus.PENDING
    try:
        friendship = service.make_friendship(actor, other_id, status)
        if not friendship:
            raise HTTPException(
                status_code=400,
                detail=f"Unable to set friendship with {other_id} to {status.name.lower()}"
            )
        return FriendshipResponse.model_validate(friendship)
    except HTTPException:
        raise
    except InvalidActorError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except TransientConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Error in make_friendship: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.patch("/users/{other_id}", response_model=FriendshipResponse)
async def update_friendship(
    other_id: str,
    request: FriendshipUpdate,
    actor: ActorContext = Depends(get_actor_context),
    service: FriendshipService = Depends(get_friendship_service)
):
    """Change the status of an existing friendship"""
    try:
        friendship = service.get_friendship(actor, other_id, include_trashed=request.restore_if_trashed)
        if not friendship:
            raise HTTPException(status_code=404, detail="Friendship not found")

        attributes = {"status": request.status} if request.status is not None else {}
        updated = service.update_friendship(actor, friendship, attributes, restore_if_trashed=request.restore_if_trashed)
        if not updated:
            raise HTTPException(status_code=400, detail="Status change not allowed")
        return FriendshipResponse.model_validate(updated)
    except HTTPException:
        raise
    except TransientConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Error in update_friendship: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.delete("/users/{other_id}", response_model=FriendshipStatusResponse)
async def delete_friendship(
    other_id: str,
    actor: ActorContext = Depends(get_actor_context),
    service: FriendshipService = Depends(get_friendship_service)
):
    """Remove a friendship (it can be revived later)"""
    try:
        if not service.delete_friendship_by_recipient(actor, other_id):
            raise HTTPException(status_code=400, detail="Friendship cannot be removed")
        return FriendshipStatusResponse(message="Friendship removed successfully", status="deleted")
    except HTTPException:
        raise
    except TransientConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Error in delete_friendship: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.post("/users/{other_id}/restore", response_model=FriendshipResponse)
async def restore_friendship(
    other_id: str,
    actor: ActorContext = Depends(get_actor_context),
    service: FriendshipService = Depends(get_friendship_service)
):
    """Bring back a removed friendship with its previous status"""
    try:
        friendship = service.restore_friendship(actor, other_id)
        if friendship is None:
            if not service.statused(actor, other_id, include_trashed=True):
                raise HTTPException(status_code=404, detail="Friendship not found")
            raise HTTPException(status_code=400, detail="Friendship cannot be restored")
        return FriendshipResponse.model_validate(friendship)
    except HTTPException:
        raise
    except TransientConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Error in restore_friendship: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
