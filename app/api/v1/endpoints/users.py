"""
User management endpoints — listing, lookup, update, delete, role assignment.

All endpoints require an authenticated caller.
"""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, Query

from app.api.v1.deps import get_current_user, get_user_service
from app.models.user import User
from app.schemas.common import DeleteResponse
from app.schemas.user import AddRoleRequest, UserPage, UserRead, UserUpdate
from app.services.user_query import UserQuery
from app.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger(__name__)


@router.get("", response_model=UserPage)
async def list_users(
    limit: int = 0,
    offset: int = 0,
    order_by: str | None = None,
    sort: str | None = None,
    filter_text: str | None = Query(default=None, alias="filter"),
    service: UserService = Depends(get_user_service),
    _user: User = Depends(get_current_user),
) -> UserPage:
    """List users with filter, sort and pagination. ``limit=0`` uses the default page size."""
    logger.info(
        "List request: limit=%d offset=%d order_by=%s sort=%s filter=%s",
        limit, offset, order_by, sort, filter_text,
    )
    query = UserQuery.from_params(limit, offset, order_by, sort, filter_text)
    users, total = await service.list_users(query)
    logger.info("Listed %d of %d users", len(users), total)
    return UserPage(
        items=[UserRead.model_validate(u) for u in users],
        total=total,
        limit=query.limit,
        offset=query.offset,
    )


@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: uuid.UUID,
    service: UserService = Depends(get_user_service),
    _user: User = Depends(get_current_user),
) -> User:
    return await service.get_user(user_id)


@router.put("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: uuid.UUID,
    body: UserUpdate,
    service: UserService = Depends(get_user_service),
    _user: User = Depends(get_current_user),
) -> User:
    """Replace every field of the user."""
    logger.info("Update request: user_id=%s name=%s email=%s age=%d", user_id, body.name, body.email, body.age)
    return await service.update_user(user_id, body.name, body.age, body.email, body.password)


@router.delete("/{user_id}", response_model=DeleteResponse)
async def delete_user(
    user_id: uuid.UUID,
    service: UserService = Depends(get_user_service),
    _user: User = Depends(get_current_user),
) -> DeleteResponse:
    """Delete the user together with its recorded tokens and role links."""
    user = await service.delete_user(user_id)
    return DeleteResponse(success=True, message=f"User '{user.name}' deleted")


@router.post("/{user_id}/roles", response_model=UserRead)
async def add_role(
    user_id: uuid.UUID,
    body: AddRoleRequest,
    service: UserService = Depends(get_user_service),
    _user: User = Depends(get_current_user),
) -> User:
    logger.info("Add role request: user_id=%s role=%s", user_id, body.role_name)
    return await service.add_role(user_id, body.role_name)
