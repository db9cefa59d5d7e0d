import pytest

from friendships.models.friendship import FriendshipStatus
from friendships.services.transition_policy import (
    OPPONENT_RULES,
    SELF_RULES,
    RuleKind,
    TransitionRule,
    is_transition_allowed,
)

PENDING = FriendshipStatus.PENDING
ACCEPTED = FriendshipStatus.ACCEPTED
DENIED = FriendshipStatus.DENIED
BLOCKED = FriendshipStatus.BLOCKED

ALICE = "alice"
BOB = "bob"


def allowed_targets(current, acting_party):
    return {
        s for s in FriendshipStatus
        if s != current and is_transition_allowed(current, ALICE, acting_party, s)
    }


class TestTransitionRule:

    def test_any_permits_every_status(self):
        rule = TransitionRule.any()
        assert rule.kind is RuleKind.ANY
        assert all(rule.permits(s) for s in FriendshipStatus)

    def test_none_permits_nothing(self):
        rule = TransitionRule.none()
        assert rule.kind is RuleKind.NONE
        assert not any(rule.permits(s) for s in FriendshipStatus)

    def test_only_permits_listed_statuses(self):
        rule = TransitionRule.only(PENDING, BLOCKED)
        assert rule.kind is RuleKind.SUBSET
        assert rule.permits(PENDING)
        assert rule.permits(BLOCKED)
        assert not rule.permits(ACCEPTED)

    def test_tables_cover_every_status(self):
        assert set(SELF_RULES) == set(FriendshipStatus)
        assert set(OPPONENT_RULES) == set(FriendshipStatus)


class TestIsTransitionAllowed:

    def test_new_friendship_accepts_any_status(self):
        for status in FriendshipStatus:
            assert is_transition_allowed(None, None, ALICE, status)

    @pytest.mark.parametrize("status", list(FriendshipStatus))
    @pytest.mark.parametrize("acting_party", [ALICE, BOB])
    def test_same_status_is_always_allowed(self, status, acting_party):
        assert is_transition_allowed(status, ALICE, acting_party, status)

    def test_initiator_of_pending_may_only_block(self):
        assert allowed_targets(PENDING, ALICE) == {BLOCKED}

    @pytest.mark.parametrize("current", [ACCEPTED, DENIED, BLOCKED])
    def test_initiator_may_move_anywhere_from_settled_states(self, current):
        assert allowed_targets(current, ALICE) == set(FriendshipStatus) - {current}

    @pytest.mark.parametrize("current", [PENDING, ACCEPTED])
    def test_opponent_may_answer_pending_and_accepted(self, current):
        assert allowed_targets(current, BOB) == set(FriendshipStatus) - {current}

    def test_opponent_of_denied_may_only_repropose_or_block(self):
        assert allowed_targets(DENIED, BOB) == {PENDING, BLOCKED}
        assert not is_transition_allowed(DENIED, ALICE, BOB, ACCEPTED)

    def test_blocked_user_cannot_change_anything(self):
        assert allowed_targets(BLOCKED, BOB) == set()

    def test_accepts_raw_integers(self):
        assert is_transition_allowed(1, ALICE, BOB, 2)
        assert not is_transition_allowed(1, ALICE, ALICE, 2)

    def test_unknown_status_is_a_usage_error(self):
        with pytest.raises(ValueError):
            is_transition_allowed(PENDING, ALICE, BOB, 9)
