class FriendshipError(Exception):
    """Base class for friendship failures that are raised rather than returned."""


class InvalidActorError(FriendshipError):
    """The acting party is not a participant of the friendship it is acting on."""


class ConflictError(FriendshipError):
    """A friendship already exists for this unordered pair of users."""


class StaleRecordError(FriendshipError):
    """The friendship row changed since it was read."""


class TransientConflictError(FriendshipError):
    """Concurrent writers kept winning; the caller may retry the operation."""
