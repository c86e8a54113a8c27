from fastapi import APIRouter

from app.api.routes import auth, catalog, entries, giveaways, health, referrals, users, winners

api_router = APIRouter()
api_router.include_router(health.router, tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(giveaways.router, prefix="/giveaways", tags=["giveaways"])
api_router.include_router(entries.router, prefix="/entries", tags=["entries"])
api_router.include_router(winners.router, prefix="/winners", tags=["winners"])
api_router.include_router(referrals.router, tags=["referrals"])
api_router.include_router(catalog.router, tags=["catalog"])
