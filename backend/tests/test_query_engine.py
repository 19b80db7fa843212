import pytest

from backoffice.crud.listings import USER_LISTING
from backoffice.crud.paginate import PaginateOptions, find_all_paginate
from backoffice.errors import ValidationError


async def _seed_users(make_user, count: int) -> None:
    for index in range(count):
        await make_user(f"user{index:02d}@example.com", name=f"user-{index:02d}")


@pytest.mark.anyio
async def test_pages_are_bounded_and_do_not_repeat(session, make_user) -> None:
    await _seed_users(make_user, 25)

    seen: list = []
    sizes = []
    for page_number in range(3):
        page = await find_all_paginate(
            session,
            USER_LISTING,
            PaginateOptions(page_number=page_number, per_page=10, sort="name"),
        )
        assert page.total == 25
        assert page.page == page_number + 1
        assert page.per_page == 10
        sizes.append(len(page.rows))
        seen.extend(user.id for user in page.rows)

    assert sizes == [10, 10, 5]
    assert len(seen) == len(set(seen)) == 25


@pytest.mark.anyio
async def test_page_past_the_end_is_empty(session, make_user) -> None:
    await _seed_users(make_user, 3)

    page = await find_all_paginate(
        session, USER_LISTING, PaginateOptions(page_number=5, per_page=10)
    )

    assert page.rows == []
    assert page.total == 3


@pytest.mark.anyio
async def test_default_per_page_is_used(session, make_user) -> None:
    await _seed_users(make_user, 12)

    page = await find_all_paginate(session, USER_LISTING, PaginateOptions())

    assert page.per_page == 10
    assert len(page.rows) == 10


@pytest.mark.anyio
async def test_sort_descending_is_case_insensitive(session, make_user) -> None:
    await _seed_users(make_user, 3)

    page = await find_all_paginate(
        session, USER_LISTING, PaginateOptions(sort="name", order="desc")
    )

    assert [user.name for user in page.rows] == ["user-02", "user-01", "user-00"]


@pytest.mark.anyio
@pytest.mark.parametrize(
    "options",
    [
        PaginateOptions(per_page=0),
        PaginateOptions(per_page=-1),
        PaginateOptions(per_page=101),
        PaginateOptions(page_number=-1),
        PaginateOptions(sort="password"),
        PaginateOptions(order="sideways"),
        PaginateOptions(filters={"password": "x"}),
        PaginateOptions(filters={"status": "active"}),
    ],
)
async def test_invalid_options_are_rejected(session, options) -> None:
    with pytest.raises(ValidationError):
        await find_all_paginate(session, USER_LISTING, options)


@pytest.mark.anyio
async def test_filters_are_coerced_and_anded(session, make_user) -> None:
    await make_user("a@example.com", name="Alice", status=1)
    await make_user("b@example.com", name="Bob", status=0)
    await make_user("c@example.com", name="Carol", status=0)

    page = await find_all_paginate(
        session,
        USER_LISTING,
        PaginateOptions(filters={"status": "0", "name": "Bob"}),
    )

    assert [user.email for user in page.rows] == ["b@example.com"]
    assert page.total == 1


@pytest.mark.anyio
async def test_search_is_case_insensitive_across_fields(session, make_user) -> None:
    await make_user("alice@example.com", name="Alice")
    await make_user("bob@example.com", name="Bob", phone_no="555-ALICE")
    await make_user("carol@example.com", name="Carol")

    page = await find_all_paginate(
        session, USER_LISTING, PaginateOptions(q="aLiCe", sort="email")
    )

    assert [user.email for user in page.rows] == ["alice@example.com", "bob@example.com"]


@pytest.mark.anyio
async def test_search_skips_ignored_fields(session, make_user) -> None:
    await make_user("alice@example.com", name="Alice")
    await make_user("someone@example.com", name="Alice Cooper")

    page = await find_all_paginate(
        session,
        USER_LISTING,
        PaginateOptions(q="alice@", ignore_global=frozenset({"name", "phoneNo"})),
    )
    assert [user.email for user in page.rows] == ["alice@example.com"]

    nothing = await find_all_paginate(
        session,
        USER_LISTING,
        PaginateOptions(q="alice", ignore_global=frozenset({"name", "email", "phoneNo"})),
    )
    assert nothing.rows == []
    assert nothing.total == 0


@pytest.mark.anyio
async def test_search_treats_wildcards_literally(session, make_user) -> None:
    await make_user("a@example.com", name="100% cotton")
    await make_user("b@example.com", name="plain")
    await make_user("c@example.com", name="snake_case")

    percent = await find_all_paginate(session, USER_LISTING, PaginateOptions(q="%"))
    underscore = await find_all_paginate(session, USER_LISTING, PaginateOptions(q="_"))

    assert [user.name for user in percent.rows] == ["100% cotton"]
    assert [user.name for user in underscore.rows] == ["snake_case"]


@pytest.mark.anyio
async def test_blank_search_matches_everything(session, make_user) -> None:
    await _seed_users(make_user, 4)

    page = await find_all_paginate(session, USER_LISTING, PaginateOptions(q="   "))

    assert page.total == 4
