from fastapi import Depends
from sqlalchemy.orm import Session
from friendships.crud.friendships import FriendshipCRUD
from friendships.database import get_db
from friendships.services.friendship_service import FriendshipService


def get_friendship_service(db: Session = Depends(get_db)) -> FriendshipService:
    """
    FastAPI dependency building a FriendshipService over the request's session.

    Usage:
        @router.get("/example")
        async def example_endpoint(service: FriendshipService = Depends(get_friendship_service)):
            ...
    """
    return FriendshipService(FriendshipCRUD(db))
