from fastapi import APIRouter, Depends, Query

from app.api.deps import get_store
from app.services import winner_service
from app.services.serializers import winner_to_dict
from app.store import EntityStore

router = APIRouter()


@router.get("/")
def list_winners(store: EntityStore = Depends(get_store)):
    return {"data": [winner_to_dict(row) for row in winner_service.list_winners(store)]}


@router.get("/recent")
def recent_winners(
    limit: int = Query(default=5, ge=1, le=50),
    store: EntityStore = Depends(get_store),
):
    return {"data": winner_service.recent_winners(store, limit=limit)}


@router.get("/giveaway/{giveaway_id}")
def winners_for_giveaway(giveaway_id: int, store: EntityStore = Depends(get_store)):
    rows = winner_service.list_winners_for_giveaway(store, giveaway_id)
    return {"data": [winner_to_dict(row) for row in rows]}
