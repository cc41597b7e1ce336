"""
PicPlace Backend — Repository Tests
=====================================

What:  CRUD operations and the paired-write primitive against a real
       (SQLite) transaction.
"""

import uuid
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from picplace.exceptions import NotFoundError, PersistenceError
from picplace.models.place import Place
from picplace.models.user import User
from picplace.repository import parse_id, places_repo, users_repo, with_transaction


def _user(email="a@x.com"):
    return User(name="A", email=email, password="digest", image="img.png", places=[])


def _place(creator):
    return Place(
        title="T",
        description="Description",
        address="Somewhere",
        lat=1.0,
        lng=2.0,
        creator_id=creator.id,
    )


class TestParseId:

    def test_valid(self):
        value = uuid.uuid4()
        assert parse_id(str(value)) == value
        assert parse_id(value) is value

    @pytest.mark.parametrize("raw", ["p1", "", None, "1234"])
    def test_malformed(self, raw):
        assert parse_id(raw) is None


class TestCrud:

    @pytest.mark.asyncio
    async def test_insert_and_find(self, db_session):
        user = await users_repo.insert(db_session, _user())
        await db_session.commit()

        assert (await users_repo.find_by_id(db_session, str(user.id))).email == "a@x.com"
        assert (await users_repo.find_one(db_session, email="a@x.com")).id == user.id
        assert await users_repo.find_one(db_session, email="b@x.com") is None

    @pytest.mark.asyncio
    async def test_find_by_malformed_id_is_a_miss(self, db_session):
        assert await users_repo.find_by_id(db_session, "not-a-uuid") is None

    @pytest.mark.asyncio
    async def test_find_filters(self, db_session):
        u1 = await users_repo.insert(db_session, _user("a@x.com"))
        u2 = await users_repo.insert(db_session, _user("b@x.com"))
        await places_repo.insert(db_session, _place(u1))
        await places_repo.insert(db_session, _place(u1))
        await places_repo.insert(db_session, _place(u2))
        await db_session.commit()

        assert len(await places_repo.find(db_session, creator_id=u1.id)) == 2
        assert len(await places_repo.find(db_session)) == 3

    @pytest.mark.asyncio
    async def test_update_fields(self, db_session):
        user = await users_repo.insert(db_session, _user())
        await users_repo.update_fields(db_session, user, name="Renamed")
        await db_session.commit()

        assert (await users_repo.find_by_id(db_session, user.id)).name == "Renamed"

    @pytest.mark.asyncio
    async def test_update_unknown_field_rejected(self, db_session):
        user = await users_repo.insert(db_session, _user())
        with pytest.raises(AttributeError):
            await users_repo.update_fields(db_session, user, nickname="x")

    @pytest.mark.asyncio
    async def test_delete(self, db_session):
        user = await users_repo.insert(db_session, _user())
        place = await places_repo.insert(db_session, _place(user))
        await db_session.commit()

        await places_repo.delete(db_session, place)
        await db_session.commit()
        assert await places_repo.find_by_id(db_session, place.id) is None

    @pytest.mark.asyncio
    async def test_duplicate_email_is_integrity_violation(self, db_session):
        await users_repo.insert(db_session, _user())
        await db_session.commit()

        with pytest.raises(PersistenceError) as exc_info:
            await users_repo.insert(db_session, _user())
        assert exc_info.value.context["integrity_violation"] is True
        await db_session.rollback()

    @pytest.mark.asyncio
    async def test_store_failure_becomes_persistence_error(self, mock_db_session):
        mock_db_session.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("db down")))

        with pytest.raises(PersistenceError) as exc_info:
            await users_repo.find(mock_db_session)
        # Generic message only; details stay in the logs
        assert "db down" not in exc_info.value.message
        assert exc_info.value.context["operation"] == "find"


class TestWithTransaction:

    @pytest.mark.asyncio
    async def test_commits_all_writes(self, db_session, session_factory):
        user = await users_repo.insert(db_session, _user())
        await db_session.commit()

        async def work(session):
            place = await places_repo.insert(session, _place(user))
            await users_repo.update_fields(session, user, places=[str(place.id)])
            return place

        place = await with_transaction(db_session, work)

        async with session_factory() as fresh:
            assert await places_repo.find_by_id(fresh, place.id) is not None
            assert (await users_repo.find_by_id(fresh, user.id)).places == [str(place.id)]

    @pytest.mark.asyncio
    async def test_failure_in_second_write_rolls_back_first(self, db_session, session_factory):
        user = await users_repo.insert(db_session, _user())
        await db_session.commit()
        user_id = user.id

        async def work(session):
            await places_repo.insert(session, _place(user))
            raise PersistenceError(context={"operation": "update_fields"})

        with pytest.raises(PersistenceError):
            await with_transaction(db_session, work)

        async with session_factory() as fresh:
            assert await places_repo.find(fresh) == []
            assert (await users_repo.find_by_id(fresh, user_id)).places == []

    @pytest.mark.asyncio
    async def test_application_errors_propagate_unchanged(self, db_session):
        async def work(session):
            raise NotFoundError("gone")

        with pytest.raises(NotFoundError):
            await with_transaction(db_session, work)
