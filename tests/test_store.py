import pytest

from app.core.exceptions import ValidationError
from app.schemas.records import (
    EntryRecord,
    EntrySource,
    GiveawayRecord,
    ReferralCodeRecord,
    UserRecord,
    WinnerRecord,
)
from app.store import SqlStore, UniqueViolation


def test_ids_are_sequential_per_kind(store, make_user, make_giveaway):
    first = make_user()
    second = make_user()
    giveaway = make_giveaway()

    assert (first.id, second.id) == (1, 2)
    assert giveaway.id == 1


def test_ids_are_not_reused_after_delete(store, make_giveaway):
    make_giveaway()
    second = make_giveaway()

    assert store.delete(GiveawayRecord, second.id) is True
    third = make_giveaway()

    assert third.id == 3


def test_missing_records(store):
    assert store.get(UserRecord, 99) is None
    assert store.update(UserRecord, 99, {"is_admin": True}) is None
    assert store.delete(UserRecord, 99) is False


def test_reads_return_fresh_copies(store, make_user):
    user = make_user("alice")
    user.full_name = "Mutated Locally"

    assert store.get(UserRecord, user.id).full_name == "Alice"


def test_update_applies_partial_changes(store, make_user):
    user = make_user("bob")

    updated = store.update(UserRecord, user.id, {"is_admin": True})

    assert updated.is_admin is True
    assert updated.username == "bob"
    assert store.get(UserRecord, user.id).is_admin is True


def test_list_count_and_find_one_filter_by_equality(store, make_user, make_giveaway):
    alice = make_user("alice")
    bob = make_user("bob")
    giveaway = make_giveaway()
    other = make_giveaway(title="Other")
    for user in (alice, bob):
        store.create(EntryRecord, {"user_id": user.id, "giveaway_id": giveaway.id})
    store.create(EntryRecord, {"user_id": alice.id, "giveaway_id": other.id})

    rows = store.list(EntryRecord, giveaway_id=giveaway.id)

    assert [row.user_id for row in rows] == [alice.id, bob.id]
    assert store.count(EntryRecord, giveaway_id=giveaway.id) == 2
    assert store.count(EntryRecord, user_id=alice.id) == 2
    assert store.find_one(UserRecord, username="bob").id == bob.id
    assert store.find_one(UserRecord, username="carol") is None


def test_unique_username_and_email(store, make_user):
    make_user("alice")

    with pytest.raises(UniqueViolation):
        make_user("alice", email="other@example.com")
    with pytest.raises(UniqueViolation):
        make_user("alice2", email="alice@example.com")


def test_direct_entry_is_unique_per_user_and_giveaway(store, make_user, make_giveaway):
    user = make_user()
    giveaway = make_giveaway()
    store.create(EntryRecord, {"user_id": user.id, "giveaway_id": giveaway.id})

    with pytest.raises(UniqueViolation):
        store.create(EntryRecord, {"user_id": user.id, "giveaway_id": giveaway.id})

    bonus = store.create(
        EntryRecord,
        {"user_id": user.id, "giveaway_id": giveaway.id, "entry_source": EntrySource.referral_bonus},
    )
    assert bonus.entry_source is EntrySource.referral_bonus
    assert store.count(EntryRecord, user_id=user.id, giveaway_id=giveaway.id) == 2


def test_winner_is_unique_per_giveaway(store, make_user, make_giveaway):
    user = make_user()
    giveaway = make_giveaway()
    entry = store.create(EntryRecord, {"user_id": user.id, "giveaway_id": giveaway.id})
    store.create(WinnerRecord, {"giveaway_id": giveaway.id, "user_id": user.id, "entry_id": entry.id})

    with pytest.raises(UniqueViolation):
        store.create(WinnerRecord, {"giveaway_id": giveaway.id, "user_id": user.id, "entry_id": entry.id})


def test_update_into_taken_unique_key_is_rejected(store, make_user):
    owner = make_user()
    first = store.create(ReferralCodeRecord, {"user_id": owner.id, "code": "FIRST"})
    second = store.create(ReferralCodeRecord, {"user_id": owner.id, "code": "SECOND"})

    with pytest.raises(UniqueViolation):
        store.update(ReferralCodeRecord, second.id, {"code": "FIRST"})

    assert store.find_one(ReferralCodeRecord, code="FIRST").id == first.id
    assert store.find_one(ReferralCodeRecord, code="SECOND").id == second.id


def test_unknown_entry_source_is_a_schema_violation(store, make_user, make_giveaway):
    user = make_user()
    giveaway = make_giveaway()

    with pytest.raises(ValidationError):
        store.create(EntryRecord, {"user_id": user.id, "giveaway_id": giveaway.id, "entry_source": "referral"})
    assert store.count(EntryRecord) == 0


def test_transaction_rolls_back_every_write(store, make_user):
    make_user("keeper")

    with pytest.raises(RuntimeError):
        with store.transaction():
            store.create(UserRecord, {
                "username": "ghost",
                "password_hash": "x",
                "email": "ghost@example.com",
                "full_name": "Ghost",
                "country": "Global",
            })
            store.update(UserRecord, 1, {"is_admin": True})
            raise RuntimeError("abort")

    assert store.find_one(UserRecord, username="ghost") is None
    assert store.get(UserRecord, 1).is_admin is False


def test_transaction_commits_on_success(store, make_user, make_giveaway):
    user = make_user()
    giveaway = make_giveaway()

    with store.transaction():
        entry = store.create(EntryRecord, {"user_id": user.id, "giveaway_id": giveaway.id})
        store.update(EntryRecord, entry.id, {"is_winner": True})

    assert store.get(EntryRecord, entry.id).is_winner is True


def test_sql_store_persists_across_restarts(tmp_path):
    url = f"sqlite:///{tmp_path / 'restart.db'}"
    first = SqlStore(url)
    first.create_schema()
    first.create(UserRecord, {
        "username": "durable",
        "password_hash": "x",
        "email": "durable@example.com",
        "full_name": "Durable",
        "country": "Global",
    })
    first.close()

    second = SqlStore(url)
    second.create_schema()
    try:
        user = second.find_one(UserRecord, username="durable")
        assert user is not None
        assert user.id == 1
    finally:
        second.close()
