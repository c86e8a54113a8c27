from fastapi import APIRouter, Depends

from app.api.deps import get_store, require_admin
from app.schemas.records import UserRecord
from app.services import auth_service
from app.services.serializers import user_to_dict
from app.store import EntityStore

router = APIRouter()


@router.get("/")
def list_users(
    store: EntityStore = Depends(get_store),
    _: UserRecord = Depends(require_admin),
):
    return {"data": auth_service.list_users(store)}


@router.get("/{user_id}")
def get_user(user_id: int, store: EntityStore = Depends(get_store)):
    return {"data": user_to_dict(auth_service.get_user_or_raise(store, user_id))}


@router.post("/{user_id}/make-admin")
def make_admin(
    user_id: int,
    store: EntityStore = Depends(get_store),
    _: UserRecord = Depends(require_admin),
):
    user = auth_service.make_admin(store, user_id)
    return {"data": {"message": "User promoted to admin successfully", "user": user_to_dict(user)}}
