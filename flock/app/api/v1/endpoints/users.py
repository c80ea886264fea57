# flock/app/api/v1/endpoints/users.py
"""
/users        GET list, POST register, PUT avatar, DELETE self
/users/{id}   GET read, POST update / follow
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Request, Response

from flock.app.api import deps
from flock.app.api.binding import (
    IdRef,
    JsonBody,
    QueryParams,
    get_query,
    set_continuation_token,
    user_id_path,
)
from flock.app.schemas.error import ErrorResponse
from flock.app.schemas.user import Avatar, UserCreate, UserRecord, UserResponse, UserUpdate
from flock.app.services.users import ListMode, UserService

router = APIRouter(responses={
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
})


async def _list(service: UserService, caller: UserRecord, query: QueryParams, response: Response,
                mode: ListMode, target: Optional[IdRef]) -> List[UserResponse]:
    page = await service.list(
        caller,
        mode,
        target.resolve(caller) if target is not None else None,
        limit=query.integer("limit"),
        cursor=query.string("continuationToken"),
    )
    set_continuation_token(response, page.cursor)
    return page.items


@router.get("", response_model=List[UserResponse])
async def list_users(
        response: Response,
        query: QueryParams = Depends(get_query),
        caller: UserRecord = Depends(deps.get_current_user),
        service: UserService = Depends(deps.get_user_service),
):
    """
    All users, or with `followedBy=<id|me>` the users that id follows,
    or with `followerOf=<id|me>` the followers of that id.
    """
    if query.has("followedBy"):
        return await _list(service, caller, query, response, ListMode.FOLLOWED_BY,
                           query.identifier("followedBy") or query.identifier("id"))
    if query.has("followerOf"):
        return await _list(service, caller, query, response, ListMode.FOLLOWER_OF,
                           query.identifier("followerOf") or query.identifier("id"))
    return await _list(service, caller, query, response, ListMode.ALL, None)


@router.post("", response_model=str)
async def create_user(
        body: Optional[UserCreate] = Depends(JsonBody(UserCreate)),
        service: UserService = Depends(deps.get_user_service),
):
    """Register a user. Replies with a token for the new account."""
    return await service.create(body)


@router.put("/avatar", response_model=Avatar, responses={415: {"model": ErrorResponse}})
async def upload_avatar(
        request: Request,
        caller: UserRecord = Depends(deps.get_current_user),
        service: UserService = Depends(deps.get_user_service),
):
    """The raw request body is the image, typed by its Content-Type."""
    data = await request.body()
    return await service.upload_avatar(caller, data, request.headers.get("Content-Type"))


@router.delete("")
async def delete_me(
        caller: UserRecord = Depends(deps.get_current_user),
        service: UserService = Depends(deps.get_user_service),
):
    await service.delete(caller)
    return Response(status_code=200)


@router.get("/{user_id}", response_model=UserResponse)
async def read_user(
        user_ref: IdRef = Depends(user_id_path),
        caller: UserRecord = Depends(deps.get_current_user),
        service: UserService = Depends(deps.get_user_service),
):
    return await service.read(caller, user_ref.resolve(caller))


@router.post("/{user_id}", response_model=UserResponse)
async def update_user(
        user_ref: IdRef = Depends(user_id_path),
        caller: UserRecord = Depends(deps.get_current_user),
        body: Optional[UserUpdate] = Depends(JsonBody(UserUpdate, required=False)),
        query: QueryParams = Depends(get_query),
        service: UserService = Depends(deps.get_user_service),
):
    """
    Edit one's own profile with the attributes present in the body.
    `?followed=true|false` follows or unfollows the user of the path.
    """
    return await service.update(caller, user_ref.resolve(caller), body, query.boolean("followed"))


@router.get("/{user_id}/followed", response_model=List[UserResponse])
async def list_followed(
        response: Response,
        user_ref: IdRef = Depends(user_id_path),
        query: QueryParams = Depends(get_query),
        caller: UserRecord = Depends(deps.get_current_user),
        service: UserService = Depends(deps.get_user_service),
):
    return await _list(service, caller, query, response, ListMode.FOLLOWED_BY, user_ref)


@router.get("/{user_id}/followers", response_model=List[UserResponse])
async def list_followers(
        response: Response,
        user_ref: IdRef = Depends(user_id_path),
        query: QueryParams = Depends(get_query),
        caller: UserRecord = Depends(deps.get_current_user),
        service: UserService = Depends(deps.get_user_service),
):
    return await _list(service, caller, query, response, ListMode.FOLLOWER_OF, user_ref)
