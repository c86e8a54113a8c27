from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import Settings
from app.core.security import InvalidToken, decode_access_token
from app.schemas.records import UserRecord
from app.store import EntityStore

bearer_scheme = HTTPBearer(auto_error=False)


def get_store(request: Request) -> EntityStore:
    return request.app.state.store


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    store: EntityStore = Depends(get_store),
) -> UserRecord:
    if not credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")

    try:
        user_id = decode_access_token(credentials.credentials)
    except InvalidToken as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc

    user = store.get(UserRecord, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user


def require_admin(user: UserRecord = Depends(get_current_user)) -> UserRecord:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
    return user


def resolve_acting_user_id(user: UserRecord, requested_user_id: int | None) -> int:
    """Users act for themselves; admins may act on behalf of another user id."""
    if requested_user_id is None or requested_user_id == user.id:
        return user.id
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot act on behalf of another user")
    return requested_user_id
