# flock/app/api/v1/endpoints/messages.py
"""
/messages        GET list (own, or ?user=<id> when followed), POST create
/messages/{id}   GET read, POST update, DELETE
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Response

from flock.app.api import deps
from flock.app.api.binding import JsonBody, QueryParams, get_query, message_id_path, set_continuation_token
from flock.app.schemas.error import ErrorResponse
from flock.app.schemas.message import MessageIn, MessageResponse
from flock.app.schemas.user import UserRecord
from flock.app.services.messages import MessageService

router = APIRouter(responses={
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
})


@router.get("", response_model=List[MessageResponse])
async def list_messages(
        response: Response,
        query: QueryParams = Depends(get_query),
        caller: UserRecord = Depends(deps.get_current_user),
        service: MessageService = Depends(deps.get_message_service),
):
    target = query.identifier("user")
    page = await service.list_for_user(
        caller,
        target.resolve(caller) if target is not None else None,
        limit=query.integer("limit"),
        cursor=query.string("continuationToken"),
    )
    set_continuation_token(response, page.cursor)
    return page.items


@router.post("", response_model=MessageResponse)
async def create_message(
        caller: UserRecord = Depends(deps.get_current_user),
        body: Optional[MessageIn] = Depends(JsonBody(MessageIn)),
        service: MessageService = Depends(deps.get_message_service),
):
    return await service.create(caller, body)


@router.get("/{message_id}", response_model=MessageResponse)
async def read_message(
        message_id: int = Depends(message_id_path),
        caller: UserRecord = Depends(deps.get_current_user),
        service: MessageService = Depends(deps.get_message_service),
):
    return await service.read(caller, message_id)


@router.post("/{message_id}", response_model=MessageResponse)
async def update_message(
        message_id: int = Depends(message_id_path),
        caller: UserRecord = Depends(deps.get_current_user),
        body: Optional[MessageIn] = Depends(JsonBody(MessageIn)),
        service: MessageService = Depends(deps.get_message_service),
):
    return await service.update(caller, message_id, body)


@router.delete("/{message_id}")
async def delete_message(
        message_id: int = Depends(message_id_path),
        caller: UserRecord = Depends(deps.get_current_user),
        service: MessageService = Depends(deps.get_message_service),
):
    await service.delete(caller, message_id)
    return Response(status_code=200)
