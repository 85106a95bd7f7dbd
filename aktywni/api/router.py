from fastapi import APIRouter

from aktywni.api.routers import activities, admin, auth, health

api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(activities.router)
api_router.include_router(admin.router)
