from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class ActorContext:
    """The user on whose behalf a friendship operation runs."""
    actor_id: str

    def current_actor_id(self) -> str:
        return self.actor_id

    def acting_as(self, actor_id: str) -> "ActorContext":
        """Explicit override, e.g. for admin tooling acting on a user's behalf."""
        return ActorContext(actor_id)


ActorLike = Union[ActorContext, str]


def resolve_actor_id(actor: ActorLike) -> str:
    if isinstance(actor, ActorContext):
        return actor.current_actor_id()
    if not actor:
        raise ValueError("An acting user is required")
    return actor
