from fastapi import APIRouter, Depends, status

from app.api.deps import get_current_user, get_store
from app.schemas.auth import LoginRequest, SignupRequest
from app.schemas.records import UserRecord
from app.services import auth_service
from app.services.serializers import user_to_dict
from app.store import EntityStore

router = APIRouter()


@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(payload: SignupRequest, store: EntityStore = Depends(get_store)):
    data = auth_service.signup(
        store,
        username=payload.username,
        email=payload.email,
        password=payload.password,
        full_name=payload.fullName,
        country=payload.country,
        subscribed_to_newsletter=payload.subscribedToNewsletter,
    )
    return {"data": data}


@router.post("/login")
def login(payload: LoginRequest, store: EntityStore = Depends(get_store)):
    return {"data": auth_service.login(store, payload.username, payload.password)}


@router.get("/me")
def me(user: UserRecord = Depends(get_current_user)):
    return {"data": user_to_dict(user)}
