import pytest
from sqlalchemy import update

from friendships.exceptions import ConflictError, InvalidActorError
from friendships.models.friendship import Friendship, FriendshipStatus, canonical_pair


class TestFriendshipModel:

    def test_defaults_to_pending_set_by_sender(self):
        friendship = Friendship(sender_id="alice", recipient_id="bob")
        assert friendship.status == FriendshipStatus.PENDING
        assert friendship.status_initiator == "alice"
        assert (friendship.user_low_id, friendship.user_high_id) == canonical_pair("bob", "alice")
        assert not friendship.trashed

    def test_status_cannot_be_assigned_directly(self):
        friendship = Friendship(sender_id="alice", recipient_id="bob")
        with pytest.raises(AttributeError):
            friendship.status = FriendshipStatus.ACCEPTED
        with pytest.raises(AttributeError):
            friendship.status_initiator = "bob"

    def test_initiator_must_be_a_participant(self):
        with pytest.raises(InvalidActorError):
            Friendship(sender_id="alice", recipient_id="bob", status_initiator="carol")

    def test_no_friendship_with_self(self):
        with pytest.raises(InvalidActorError):
            Friendship(sender_id="alice", recipient_id="alice")

    def test_is_status(self):
        friendship = Friendship(sender_id="alice", recipient_id="bob", status=FriendshipStatus.BLOCKED)
        assert friendship.is_status(FriendshipStatus.BLOCKED)
        assert friendship.is_status([FriendshipStatus.PENDING, FriendshipStatus.BLOCKED])
        assert friendship.is_status(FriendshipStatus.BLOCKED, initiator="alice")
        assert not friendship.is_status(FriendshipStatus.BLOCKED, initiator="bob")
        assert not friendship.is_status(FriendshipStatus.ACCEPTED)

    def test_other_party(self):
        friendship = Friendship(sender_id="alice", recipient_id="bob")
        assert friendship.other_party("alice") == "bob"
        assert friendship.other_party("bob") == "alice"
        with pytest.raises(InvalidActorError):
            friendship.other_party("carol")

    def test_stage_rejects_immutable_fields(self):
        friendship = Friendship(sender_id="alice", recipient_id="bob")
        with pytest.raises(AttributeError):
            friendship.stage(sender_id="carol")
        friendship.stage(status=FriendshipStatus.BLOCKED)
        assert friendship.staged_changes() == {"status": FriendshipStatus.BLOCKED}
        assert friendship.status == FriendshipStatus.PENDING


class TestFriendshipPersistence:

    def test_pair_is_unique_in_either_direction(self, repository):
        repository.insert(Friendship(sender_id="alice", recipient_id="bob"))
        with pytest.raises(ConflictError):
            repository.insert(Friendship(sender_id="bob", recipient_id="alice"))

    def test_loaded_friendship_can_be_staged(self, repository, session_factory):
        created = repository.insert(Friendship(sender_id="alice", recipient_id="bob"))
        other_session = session_factory()
        try:
            loaded = other_session.get(Friendship, created.id)
            loaded.stage(status=FriendshipStatus.BLOCKED)
            assert loaded.staged_changes() == {"status": FriendshipStatus.BLOCKED}
        finally:
            other_session.close()

    def test_version_increments_on_save(self, repository):
        friendship = repository.insert(Friendship(sender_id="alice", recipient_id="bob"))
        first_version = friendship.version_id
        friendship._apply_validated({"status": FriendshipStatus.ACCEPTED, "status_initiator": "bob"})
        repository.save(friendship)
        assert friendship.version_id == first_version + 1

    def test_flush_refuses_foreign_initiator(self, repository, db):
        friendship = repository.insert(Friendship(sender_id="alice", recipient_id="bob"))
        friendship._apply_validated({"status_initiator": "mallory"})
        with pytest.raises(InvalidActorError):
            db.flush()
        db.rollback()

    def test_find_between_ignores_direction(self, repository):
        repository.insert(Friendship(sender_id="alice", recipient_id="bob"))
        assert repository.find_between("bob", "alice") is not None
        assert repository.find_between("alice", "carol") is None

    def test_trashed_rows_are_hidden_unless_requested(self, repository):
        friendship = repository.insert(Friendship(sender_id="alice", recipient_id="bob"))
        repository.soft_delete(friendship)
        assert repository.find_between("alice", "bob") is None
        assert repository.find_between("alice", "bob", include_trashed=True).trashed
        assert repository.count_for("alice") == 0

        repository.restore(friendship)
        assert repository.find_between("alice", "bob") is not None

    def test_role_filter(self, repository):
        repository.insert(Friendship(sender_id="alice", recipient_id="bob"))
        repository.insert(Friendship(sender_id="carol", recipient_id="alice"))
        assert [f.recipient_id for f in repository.find_all_for("alice", role="sender")] == ["bob"]
        assert [f.sender_id for f in repository.find_all_for("alice", role="recipient")] == ["carol"]
        with pytest.raises(ValueError):
            repository.find_all_for("alice", role="bystander")

    def test_status_column_is_queryable(self, repository, db):
        friendship = repository.insert(Friendship(sender_id="alice", recipient_id="bob"))
        db.execute(
            update(Friendship.__table__)
            .where(Friendship.__table__.c.id == friendship.id)
            .values(status=int(FriendshipStatus.DENIED))
        )
        db.commit()
        assert repository.find_between("alice", "bob", status=FriendshipStatus.DENIED) is not None
        assert repository.find_between("alice", "bob", status=[FriendshipStatus.PENDING]) is None
