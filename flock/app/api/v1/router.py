# flock/app/api/v1/router.py
from fastapi import APIRouter

from flock.app.api.v1.endpoints import auth, messages, users

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(messages.router, prefix="/messages", tags=["messages"])
