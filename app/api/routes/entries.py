from fastapi import APIRouter, Depends, status

from app.api.deps import get_current_user, get_store, resolve_acting_user_id
from app.schemas.entry import EntryCreate, EntryWithReferralCreate
from app.schemas.records import UserRecord
from app.services import entry_service
from app.services.serializers import entry_to_dict
from app.store import EntityStore

router = APIRouter()


@router.post("/", status_code=status.HTTP_201_CREATED)
def submit_entry(
    payload: EntryCreate,
    store: EntityStore = Depends(get_store),
    user: UserRecord = Depends(get_current_user),
):
    user_id = resolve_acting_user_id(user, payload.userId)
    entry = entry_service.submit_entry(store, user_id, payload.giveawayId)
    return {"data": entry_to_dict(entry)}


@router.post("/with-referral", status_code=status.HTTP_201_CREATED)
def submit_entry_with_referral(
    payload: EntryWithReferralCreate,
    store: EntityStore = Depends(get_store),
    user: UserRecord = Depends(get_current_user),
):
    user_id = resolve_acting_user_id(user, payload.userId)
    entry = entry_service.submit_entry_with_referral(store, user_id, payload.giveawayId, payload.referralCode)
    return {"data": entry_to_dict(entry)}


@router.get("/giveaway/{giveaway_id}")
def entries_for_giveaway(giveaway_id: int, store: EntityStore = Depends(get_store)):
    rows = entry_service.list_entries_for_giveaway(store, giveaway_id)
    return {"data": [entry_to_dict(row) for row in rows]}


@router.get("/user/{user_id}")
def entries_for_user(user_id: int, store: EntityStore = Depends(get_store)):
    rows = entry_service.list_entries_for_user(store, user_id)
    return {"data": [entry_to_dict(row) for row in rows]}


@router.get("/count/{giveaway_id}")
def entry_count(giveaway_id: int, store: EntityStore = Depends(get_store)):
    return {"data": {"count": entry_service.count_entries(store, giveaway_id)}}
