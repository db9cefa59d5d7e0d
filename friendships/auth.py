from fastapi import HTTPException, Request, status
from friendships.actor import ActorContext
from friendships.config import settings

def get_actor_context(request: Request) -> ActorContext:
    """
    Resolve the acting user for this request.

    Identity is established upstream (gateway or auth proxy) and forwarded
    in the actor header, ``X-User-ID`` by default. The resulting
    ActorContext is passed explicitly to every service call.

    Args:
        request: The incoming request.

    Returns:
        ActorContext: The user the request acts for

    Raises:
        HTTPException: If the actor header is missing or blank
    """
    actor_id = (request.headers.get(settings.ACTOR_HEADER) or "").strip()
    if not actor_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"{settings.ACTOR_HEADER} header is required",
        )
    return ActorContext(actor_id)
