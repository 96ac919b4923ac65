"""Tests for the storage-level uniqueness guards in UserRepository.

These bypass the service's validation step, so the database constraint is
the only thing standing between two writers and a duplicate.
"""

import pytest
from sqlalchemy import insert

from app.core.exceptions import ConflictError
from app.core.security import get_password_hash
from app.models.role import RoleName
from app.models.user import user_roles


@pytest.mark.asyncio
async def test_create_user_duplicate_email_conflicts(repository, make_user):
    await make_user("Original", email="same@example.com")

    with pytest.raises(ConflictError) as exc_info:
        await repository.create_user(
            name="Copy",
            email="same@example.com",
            hashed_password=get_password_hash("pw-1234"),
            age=22,
            roles=[],
        )
    assert exc_info.value.message == "Email is not unique"


@pytest.mark.asyncio
async def test_update_user_duplicate_email_conflicts(repository, make_user):
    await make_user("First", email="first@example.com")
    second = await make_user("Second", email="second@example.com")
    second_id = second.id

    with pytest.raises(ConflictError) as exc_info:
        await repository.update_user(
            second,
            name="Second",
            age=30,
            email="first@example.com",
            hashed_password=second.hashed_password,
        )
    assert exc_info.value.message == "Email is not unique"

    # The failed write was rolled back
    reloaded = await repository.get_by_id(second_id)
    assert reloaded.email == "second@example.com"


@pytest.mark.asyncio
async def test_add_role_duplicate_link_conflicts(repository, make_user, db_session):
    user = await make_user("Raced")
    admin = await repository.get_role(RoleName.ADMIN)

    # Another writer links the role after this session loaded the user
    await db_session.execute(insert(user_roles).values(user_id=user.id, role_id=int(RoleName.ADMIN)))
    await db_session.commit()

    with pytest.raises(ConflictError) as exc_info:
        await repository.add_role(user, admin)
    assert exc_info.value.message == "Role 'Admin' is already assigned"
