import logging
from datetime import datetime
from typing import Any

from app.core.clock import utcnow
from app.core.exceptions import Conflict, NotFound, ValidationError
from app.schemas.giveaway import GiveawayStatus
from app.schemas.records import Category, EntryRecord, GiveawayRecord, Region, UserRecord, WinnerRecord
from app.services.serializers import giveaway_to_dict
from app.store import EntityStore
from app.store.base import validate_record

logger = logging.getLogger(__name__)


def _check_dates(start_date: datetime, end_date: datetime) -> None:
    if end_date < start_date:
        raise ValidationError("endDate must not be before startDate")


def is_active_now(giveaway: GiveawayRecord, now: datetime | None = None) -> bool:
    return giveaway.is_active and (now or utcnow()) <= giveaway.end_date


def giveaway_status(store: EntityStore, giveaway: GiveawayRecord, now: datetime | None = None) -> GiveawayStatus:
    if store.find_one(WinnerRecord, giveaway_id=giveaway.id):
        return GiveawayStatus.decided
    if (now or utcnow()) > giveaway.end_date:
        return GiveawayStatus.ended
    return GiveawayStatus.open


def describe_giveaway(store: EntityStore, giveaway: GiveawayRecord, now: datetime | None = None) -> dict:
    now = now or utcnow()
    data = giveaway_to_dict(giveaway)
    data["isActiveNow"] = is_active_now(giveaway, now)
    data["status"] = giveaway_status(store, giveaway, now).value
    data["entryCount"] = store.count(EntryRecord, giveaway_id=giveaway.id)
    return data


def get_giveaway_or_raise(store: EntityStore, giveaway_id: int) -> GiveawayRecord:
    giveaway = store.get(GiveawayRecord, giveaway_id)
    if not giveaway:
        raise NotFound("Giveaway not found")
    return giveaway


def create_giveaway(store: EntityStore, fields: dict[str, Any], created_by_user_id: int | None = None) -> GiveawayRecord:
    if created_by_user_id is not None and not store.get(UserRecord, created_by_user_id):
        raise NotFound("User not found")
    candidate = validate_record(GiveawayRecord, {**fields, "created_by_user_id": created_by_user_id})
    _check_dates(candidate.start_date, candidate.end_date)
    giveaway = store.create(GiveawayRecord, candidate.model_dump(exclude={"id"}))
    logger.info("Created giveaway id=%s title=%r", giveaway.id, giveaway.title)
    return giveaway


def update_giveaway(store: EntityStore, giveaway_id: int, changes: dict[str, Any]) -> GiveawayRecord:
    current = get_giveaway_or_raise(store, giveaway_id)
    merged = current.model_copy(update=changes)
    # validate the merged record so a patch cannot invert the date window
    candidate = validate_record(GiveawayRecord, merged.model_dump())
    _check_dates(candidate.start_date, candidate.end_date)
    updated = store.update(GiveawayRecord, giveaway_id, changes)
    if not updated:
        raise NotFound("Giveaway not found")
    return updated


def delete_giveaway(store: EntityStore, giveaway_id: int) -> None:
    get_giveaway_or_raise(store, giveaway_id)
    if store.count(EntryRecord, giveaway_id=giveaway_id):
        raise Conflict("Giveaway already has entries and cannot be deleted")
    store.delete(GiveawayRecord, giveaway_id)
    logger.info("Deleted giveaway id=%s", giveaway_id)


def list_giveaways(store: EntityStore) -> list[GiveawayRecord]:
    return store.list(GiveawayRecord)


def list_active_giveaways(
    store: EntityStore,
    limit: int = 10,
    offset: int = 0,
    category: Category | None = None,
    region: Region | None = None,
    now: datetime | None = None,
) -> list[GiveawayRecord]:
    now = now or utcnow()
    filters: dict[str, Any] = {"is_active": True}
    if category is not None:
        filters["category"] = category
    if region is not None:
        filters["region"] = region
    rows = [row for row in store.list(GiveawayRecord, **filters) if now <= row.end_date]
    return rows[offset : offset + limit]


def list_featured_giveaways(store: EntityStore, limit: int = 4, now: datetime | None = None) -> list[GiveawayRecord]:
    now = now or utcnow()
    rows = store.list(GiveawayRecord, is_active=True, is_featured=True)
    return [row for row in rows if now <= row.end_date][:limit]
