from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_app_settings, get_current_user, get_store, resolve_acting_user_id
from app.core.config import Settings
from app.core.exceptions import NotFound
from app.schemas.records import UserRecord
from app.schemas.referral import ReferralCodeCreate, ReferralCodePatch
from app.services import referral_service
from app.services.serializers import referral_code_to_dict
from app.store import EntityStore

router = APIRouter()


@router.post("/referral-codes", status_code=status.HTTP_201_CREATED)
def issue_code(
    payload: ReferralCodeCreate,
    store: EntityStore = Depends(get_store),
    user: UserRecord = Depends(get_current_user),
    settings: Settings = Depends(get_app_settings),
):
    user_id = resolve_acting_user_id(user, payload.userId)
    code = referral_service.issue_code(
        store,
        user_id,
        payload.code,
        attempts=settings.REFERRAL_CODE_ATTEMPTS,
    )
    return {"data": referral_code_to_dict(code)}


@router.get("/referral-codes/user/{user_id}")
def codes_for_user(user_id: int, store: EntityStore = Depends(get_store)):
    rows = referral_service.list_codes_for_user(store, user_id)
    return {"data": [referral_code_to_dict(row) for row in rows]}


@router.get("/referral-codes/{code}")
def resolve_code(code: str, store: EntityStore = Depends(get_store)):
    row = referral_service.resolve_code(store, code)
    if not row:
        raise NotFound("Referral code not found")
    return {"data": referral_code_to_dict(row)}


@router.patch("/referral-codes/{referral_code_id}")
def set_code_active(
    referral_code_id: int,
    payload: ReferralCodePatch,
    store: EntityStore = Depends(get_store),
    user: UserRecord = Depends(get_current_user),
):
    code = referral_service.get_code_or_raise(store, referral_code_id)
    if code.user_id != user.id and not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not the owner of this referral code")
    row = referral_service.set_code_active(store, referral_code_id, payload.isActive)
    return {"data": referral_code_to_dict(row)}


@router.get("/referral-stats/user/{user_id}")
def referral_stats(user_id: int, store: EntityStore = Depends(get_store)):
    return {"data": referral_service.referral_stats(store, user_id)}
