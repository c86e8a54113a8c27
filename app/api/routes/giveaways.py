from fastapi import APIRouter, Depends, Query, Response, status

from app.api.deps import get_app_settings, get_store, require_admin
from app.core.config import Settings
from app.schemas.giveaway import GiveawayCreate, GiveawayUpdate, SelectWinnerRequest
from app.schemas.records import Category, Region, UserRecord
from app.services import giveaway_service, winner_service
from app.services.serializers import winner_to_dict
from app.store import EntityStore

router = APIRouter()


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_giveaway(
    payload: GiveawayCreate,
    store: EntityStore = Depends(get_store),
    admin: UserRecord = Depends(require_admin),
):
    giveaway = giveaway_service.create_giveaway(store, payload.to_record_fields(), created_by_user_id=admin.id)
    return {"data": giveaway_service.describe_giveaway(store, giveaway)}


@router.get("/")
def list_giveaways(store: EntityStore = Depends(get_store)):
    rows = giveaway_service.list_giveaways(store)
    return {"data": [giveaway_service.describe_giveaway(store, row) for row in rows]}


@router.get("/active")
def list_active(
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    category: Category | None = Query(default=None),
    region: Region | None = Query(default=None),
    store: EntityStore = Depends(get_store),
):
    rows = giveaway_service.list_active_giveaways(
        store, limit=limit, offset=offset, category=category, region=region
    )
    return {"data": [giveaway_service.describe_giveaway(store, row) for row in rows]}


@router.get("/featured")
def list_featured(
    store: EntityStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    rows = giveaway_service.list_featured_giveaways(store, limit=settings.FEATURED_LIMIT)
    return {"data": [giveaway_service.describe_giveaway(store, row) for row in rows]}


@router.get("/{giveaway_id}")
def get_giveaway(giveaway_id: int, store: EntityStore = Depends(get_store)):
    giveaway = giveaway_service.get_giveaway_or_raise(store, giveaway_id)
    return {"data": giveaway_service.describe_giveaway(store, giveaway)}


@router.patch("/{giveaway_id}")
def update_giveaway(
    giveaway_id: int,
    payload: GiveawayUpdate,
    store: EntityStore = Depends(get_store),
    _: UserRecord = Depends(require_admin),
):
    giveaway = giveaway_service.update_giveaway(store, giveaway_id, payload.to_record_fields())
    return {"data": giveaway_service.describe_giveaway(store, giveaway)}


@router.delete("/{giveaway_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_giveaway(
    giveaway_id: int,
    store: EntityStore = Depends(get_store),
    _: UserRecord = Depends(require_admin),
):
    giveaway_service.delete_giveaway(store, giveaway_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{giveaway_id}/select-winner")
def select_winner(
    giveaway_id: int,
    payload: SelectWinnerRequest | None = None,
    store: EntityStore = Depends(get_store),
    _: UserRecord = Depends(require_admin),
):
    payload = payload or SelectWinnerRequest()
    winner = winner_service.select_winner(
        store,
        giveaway_id,
        testimonial=payload.testimonial,
        location=payload.location,
    )
    return {"data": winner_to_dict(winner)}
