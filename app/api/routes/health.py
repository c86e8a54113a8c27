from fastapi import APIRouter, Depends

from app.api.deps import get_app_settings, get_store
from app.core.config import Settings
from app.store import EntityStore

router = APIRouter()


@router.get("/health")
def health(
    store: EntityStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    return {
        "status": "ok",
        "storage": store.backend_name,
        "environment": settings.ENVIRONMENT,
    }
