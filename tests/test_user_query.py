"""Tests for the user listing query plan and its execution."""

import pytest

from app.core.exceptions import InvalidInputError
from app.services.user_query import UserQuery, _escape_like


# ── Parameter normalisation ─────────────────────────────────────────
def test_zero_limit_means_default_page_size():
    query = UserQuery.from_params(limit=0)
    assert query.limit == 10
    assert query.offset == 0


def test_defaults():
    query = UserQuery.from_params()
    assert query.order_by == "name"
    assert query.descending is False
    assert query.filter_text is None


@pytest.mark.parametrize(
    "kwargs, fields",
    [
        ({"limit": -1}, ["limit"]),
        ({"offset": -1}, ["offset"]),
        ({"limit": -3, "offset": -2}, ["limit", "offset"]),
    ],
)
def test_rejects_out_of_range(kwargs, fields):
    with pytest.raises(InvalidInputError) as exc_info:
        UserQuery.from_params(**kwargs)
    assert [err["field"] for err in exc_info.value.errors] == fields


def test_max_page_size_is_accepted():
    assert UserQuery.from_params(limit=500).limit == 500


def test_limit_above_max_is_capped():
    assert UserQuery.from_params(limit=501).limit == 500
    assert UserQuery.from_params(limit=10**6).limit == 500


def test_order_by_and_sort_are_case_insensitive():
    query = UserQuery.from_params(order_by="EMAIL", sort="Desc")
    assert query.order_by == "email"
    assert query.descending is True


def test_unknown_order_by_falls_back_to_name():
    assert UserQuery.from_params(order_by="password").order_by == "name"


def test_unknown_sort_falls_back_to_ascending():
    query = UserQuery.from_params(order_by="age", sort="sideways")
    assert query.order_by == "age"
    assert query.descending is False


def test_blank_filter_is_ignored():
    assert UserQuery.from_params(filter_text="   ").filter_text is None
    assert UserQuery.from_params(filter_text="").filter_text is None
    assert UserQuery.from_params(filter_text=" bob ").filter_text == " bob "


def test_escape_like():
    assert _escape_like("100%_\\") == "100\\%\\_\\\\"


# ── Execution ───────────────────────────────────────────────────────
async def _names(service, **params):
    users, total = await service.list_users(UserQuery.from_params(**params))
    return [u.name for u in users], total


@pytest.mark.asyncio
async def test_filter_matches_name_email_and_age(service, make_user):
    await make_user("Alpha", email="alpha@example.com", age=41)
    await make_user("Beta", email="beta@example.com", age=52)

    assert await _names(service, filter_text="ALPHA") == (["Alpha"], 1)
    assert await _names(service, filter_text="beta@") == (["Beta"], 1)
    assert await _names(service, filter_text="41") == (["Alpha"], 1)
    assert await _names(service, filter_text="nobody") == ([], 0)


@pytest.mark.asyncio
async def test_filter_wildcards_are_literal(service, make_user):
    await make_user("100% Pure", email="pure@example.com")
    await make_user("100 Pure", email="plain@example.com")
    await make_user("a_b", email="ab1@example.com")
    await make_user("axb", email="ab2@example.com")

    assert await _names(service, filter_text="100%") == (["100% Pure"], 1)
    assert await _names(service, filter_text="a_b") == (["a_b"], 1)


@pytest.mark.asyncio
async def test_filter_keeps_surrounding_spaces(service, make_user):
    await make_user("Jane Smith", email="jane@example.com")
    await make_user("Goldsmith", email="gold@example.com")

    assert await _names(service, filter_text=" smith") == (["Jane Smith"], 1)
    assert await _names(service, filter_text="smith") == (["Goldsmith", "Jane Smith"], 2)


@pytest.mark.asyncio
async def test_order_by_name_desc(service, make_user):
    for name in ("Carol", "Alice", "Bob"):
        await make_user(name)

    names, _ = await _names(service, order_by="name", sort="desc")
    assert names == ["Carol", "Bob", "Alice"]


@pytest.mark.asyncio
async def test_order_by_role(service, make_user):
    """Users order by the most privileged role they hold."""
    plain = await make_user("Rank Plain")
    admin = await make_user("Rank Admin")
    boss = await make_user("Rank Boss")
    await service.add_role(boss.id, "SuperAdmin")
    await service.add_role(admin.id, "admin")

    names, _ = await _names(service, order_by="role", filter_text="rank")
    assert names == [plain.name, admin.name, boss.name]

    names, _ = await _names(service, order_by="role", sort="desc", filter_text="rank")
    assert names == [boss.name, admin.name, plain.name]


@pytest.mark.asyncio
async def test_offset_past_end_is_empty(service, make_user):
    await make_user("Only One")
    assert await _names(service, offset=5) == ([], 1)
