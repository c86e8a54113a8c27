from datetime import datetime, timedelta, timezone

import pytest

from app.core.exceptions import Conflict, NotFound, ValidationError
from app.schemas.giveaway import GiveawayStatus
from app.schemas.records import Category, GiveawayRecord, Region
from app.services import entry_service, giveaway_service

NOW = datetime(2024, 6, 1)
BEFORE = datetime(2024, 5, 1)
AFTER = datetime(2024, 7, 1)


def _fields(**overrides) -> dict:
    data = {
        "title": "Spotify Family",
        "description": "Six months of Spotify Family",
        "image_url": "https://img.example.com/spotify.png",
        "prize": "Spotify Family",
        "category": Category.spotify,
        "region": Region.europe,
        "eligibility_requirements": "EU residents, 18+",
        "start_date": BEFORE,
        "end_date": AFTER,
    }
    data.update(overrides)
    return data


def test_create_giveaway_records_creator(store, make_user):
    admin = make_user(is_admin=True)

    giveaway = giveaway_service.create_giveaway(store, _fields(), created_by_user_id=admin.id)

    assert giveaway.id == 1
    assert giveaway.created_by_user_id == admin.id
    assert giveaway.is_active is True


def test_create_giveaway_rejects_inverted_window(store):
    with pytest.raises(ValidationError):
        giveaway_service.create_giveaway(store, _fields(start_date=AFTER, end_date=BEFORE))


def test_create_giveaway_with_unknown_creator(store):
    with pytest.raises(NotFound):
        giveaway_service.create_giveaway(store, _fields(), created_by_user_id=55)


def test_update_validates_the_merged_window(store):
    giveaway = giveaway_service.create_giveaway(store, _fields())

    with pytest.raises(ValidationError):
        giveaway_service.update_giveaway(store, giveaway.id, {"end_date": datetime(2024, 1, 1)})

    updated = giveaway_service.update_giveaway(store, giveaway.id, {"title": "Renamed", "is_featured": True})
    assert updated.title == "Renamed"
    assert updated.is_featured is True
    assert updated.end_date == AFTER


def test_update_rejects_nulling_required_fields(store):
    giveaway = giveaway_service.create_giveaway(store, _fields())

    with pytest.raises(ValidationError):
        giveaway_service.update_giveaway(store, giveaway.id, {"title": None})


def test_update_missing_giveaway(store):
    with pytest.raises(NotFound):
        giveaway_service.update_giveaway(store, 9, {"title": "x"})


def test_delete_giveaway(store, make_user):
    empty = giveaway_service.create_giveaway(store, _fields())
    entered = giveaway_service.create_giveaway(store, _fields(title="Entered"))
    entry_service.submit_entry(store, make_user().id, entered.id)

    giveaway_service.delete_giveaway(store, empty.id)

    assert store.get(GiveawayRecord, empty.id) is None
    with pytest.raises(Conflict):
        giveaway_service.delete_giveaway(store, entered.id)
    with pytest.raises(NotFound):
        giveaway_service.delete_giveaway(store, empty.id)


def test_active_listing_filters_and_paginates(store):
    open_ids = [giveaway_service.create_giveaway(store, _fields(title=f"Open {n}")).id for n in range(3)]
    giveaway_service.create_giveaway(store, _fields(title="Ended", end_date=datetime(2024, 5, 31)))
    giveaway_service.create_giveaway(store, _fields(title="Paused", is_active=False))
    netflix = giveaway_service.create_giveaway(store, _fields(title="Netflix", category=Category.netflix, region=Region.global_))

    active = giveaway_service.list_active_giveaways(store, now=NOW)
    assert [row.id for row in active] == open_ids + [netflix.id]

    page = giveaway_service.list_active_giveaways(store, limit=2, offset=1, now=NOW)
    assert [row.id for row in page] == open_ids[1:3]

    by_category = giveaway_service.list_active_giveaways(store, category=Category.netflix, now=NOW)
    assert [row.id for row in by_category] == [netflix.id]
    by_region = giveaway_service.list_active_giveaways(store, region=Region.europe, now=NOW)
    assert [row.id for row in by_region] == open_ids


def test_end_date_itself_is_still_active(store):
    giveaway = giveaway_service.create_giveaway(store, _fields(end_date=NOW))

    assert giveaway_service.is_active_now(giveaway, NOW) is True
    assert giveaway_service.giveaway_status(store, giveaway, NOW) is GiveawayStatus.open


def test_featured_listing(store):
    for n in range(5):
        giveaway_service.create_giveaway(store, _fields(title=f"Featured {n}", is_featured=True))
    giveaway_service.create_giveaway(store, _fields(title="Plain"))
    giveaway_service.create_giveaway(store, _fields(title="Old", is_featured=True, end_date=BEFORE))

    featured = giveaway_service.list_featured_giveaways(store, limit=4, now=NOW)

    assert [row.title for row in featured] == [f"Featured {n}" for n in range(4)]


def test_describe_giveaway_includes_derived_fields(store, make_user):
    giveaway = giveaway_service.create_giveaway(store, _fields())
    entry_service.submit_entry(store, make_user().id, giveaway.id)

    open_view = giveaway_service.describe_giveaway(store, giveaway, now=NOW)
    ended_view = giveaway_service.describe_giveaway(store, giveaway, now=datetime(2024, 8, 1))

    assert open_view["isActiveNow"] is True
    assert open_view["status"] == "OPEN"
    assert open_view["entryCount"] == 1
    assert open_view["category"] == "Spotify"
    assert ended_view["isActiveNow"] is False
    assert ended_view["status"] == "ENDED"


def test_create_giveaway_accepts_mixed_offset_dates(store):
    giveaway = giveaway_service.create_giveaway(
        store,
        _fields(start_date=datetime(2024, 5, 1, tzinfo=timezone.utc), end_date=AFTER),
    )

    assert giveaway.start_date == BEFORE
    assert giveaway.start_date.tzinfo is None


def test_create_giveaway_compares_offset_dates_in_utc(store):
    # 2024-07-01 01:00 at +02:00 is 2024-06-30 23:00 UTC, before the naive end date
    start = datetime(2024, 7, 1, 1, 0, tzinfo=timezone(timedelta(hours=2)))
    giveaway = giveaway_service.create_giveaway(store, _fields(start_date=start, end_date=AFTER))
    assert giveaway.start_date == datetime(2024, 6, 30, 23, 0)

    with pytest.raises(ValidationError):
        giveaway_service.create_giveaway(
            store,
            _fields(start_date=datetime(2024, 8, 1, tzinfo=timezone.utc), end_date=AFTER),
        )
