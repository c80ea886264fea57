# flock/app/api/v1/endpoints/auth.py
from typing import Optional

from fastapi import APIRouter, Depends

from flock.app.api import deps
from flock.app.api.binding import JsonBody
from flock.app.schemas.error import ErrorResponse
from flock.app.schemas.user import LoginRequest
from flock.app.services.users import UserService

router = APIRouter()


@router.post("/token", response_model=str, responses={401: {"model": ErrorResponse}})
async def login(
        body: Optional[LoginRequest] = Depends(JsonBody(LoginRequest)),
        service: UserService = Depends(deps.get_user_service),
):
    """Exchange login and password for a new token."""
    return await service.authenticate(body)
