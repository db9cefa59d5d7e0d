"""
Status transition rules for friendships.

Who may move a friendship to which status depends on whether the acting user
is the one who set the current status (the initiator) or the other side. The
initiator of a pending request can only escalate it to a block, while the
other side may accept, deny or block it. A block is frozen for the blocked
user; only the blocker can lift it.
"""
import enum
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Union

from friendships.models.friendship import FriendshipStatus


class RuleKind(enum.Enum):
    ANY = "any"
    SUBSET = "subset"
    NONE = "none"


@dataclass(frozen=True)
class TransitionRule:
    """Statuses reachable from one status: all of them, a subset, or none."""
    kind: RuleKind
    statuses: FrozenSet[FriendshipStatus] = frozenset()

    @classmethod
    def any(cls) -> "TransitionRule":
        return cls(RuleKind.ANY)

    @classmethod
    def only(cls, *statuses: FriendshipStatus) -> "TransitionRule":
        return cls(RuleKind.SUBSET, frozenset(statuses))

    @classmethod
    def none(cls) -> "TransitionRule":
        return cls(RuleKind.NONE)

    def permits(self, proposed: FriendshipStatus) -> bool:
        if self.kind is RuleKind.ANY:
            return True
        if self.kind is RuleKind.NONE:
            return False
        return proposed in self.statuses


# Acting user set the current status
SELF_RULES: Dict[FriendshipStatus, TransitionRule] = {
    FriendshipStatus.PENDING: TransitionRule.only(FriendshipStatus.BLOCKED),
    FriendshipStatus.ACCEPTED: TransitionRule.any(),
    FriendshipStatus.DENIED: TransitionRule.any(),
    FriendshipStatus.BLOCKED: TransitionRule.any(),
}

# Acting user is the other side
OPPONENT_RULES: Dict[FriendshipStatus, TransitionRule] = {
    FriendshipStatus.PENDING: TransitionRule.any(),
    FriendshipStatus.ACCEPTED: TransitionRule.any(),
    FriendshipStatus.DENIED: TransitionRule.only(FriendshipStatus.PENDING, FriendshipStatus.BLOCKED),
    FriendshipStatus.BLOCKED: TransitionRule.none(),
}


def rule_for(current_status: FriendshipStatus, is_initiator: bool) -> TransitionRule:
    rules = SELF_RULES if is_initiator else OPPONENT_RULES
    return rules[FriendshipStatus(current_status)]


def is_transition_allowed(
    current_status: Optional[Union[FriendshipStatus, int]],
    current_initiator: Optional[str],
    acting_party: str,
    proposed_status: Union[FriendshipStatus, int],
) -> bool:
    """
    Decide whether ``acting_party`` may move a friendship to ``proposed_status``.

    Args:
        current_status: Status before the change, or None for a friendship not stored yet
        current_initiator: User who set ``current_status``
        acting_party: User attempting the change
        proposed_status: Requested status

    Returns:
        bool: True when the transition is legal

    Raises:
        ValueError: If either status is not a FriendshipStatus value
    """
    proposed = FriendshipStatus(proposed_status)
    if current_status is None:
        return True
    current = FriendshipStatus(current_status)
    if proposed == current:
        return True
    return rule_for(current, acting_party == current_initiator).permits(proposed)
