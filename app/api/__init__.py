"""
API routes package
"""
from fastapi import APIRouter
from app.api.routes import auth, geofences, users

api_router = APIRouter()

# Include all route modules
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(geofences.router)
