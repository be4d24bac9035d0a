# ============================================================================
# FILE: app/api/v1/router.py
# ============================================================================
from fastapi import APIRouter
from app.api.v1.endpoints import admin, auth, playlist, song, user

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(user.router, prefix="/users", tags=["users"])
api_router.include_router(playlist.router, prefix="/playlists", tags=["playlists"])
api_router.include_router(song.router, tags=["songs"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
