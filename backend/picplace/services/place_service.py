"""
PicPlace Backend — Place Service (Business Logic Orchestrator)
================================================================

What:  Implements the five place use cases: get by id, list by user,
       create, update and delete.
Why:   Encapsulates the place rules independent of HTTP concerns.
How:   Composes the validation rules, FileService, the geocoding client and
       the repository layer. Stateless; every call receives the request's
       database session.

Create flow (POST /api/places):
    ┌──────────┐   ┌───────────┐   ┌───────────┐   ┌──────────┐   ┌──────────────┐
    │ Validate │──▶│ Geocode   │──▶│ Creator   │──▶│ Store    │──▶│ Paired write │
    │ fields + │   │ address   │   │ exists?   │   │ image    │   │ place + user │
    │ image    │   │ (422/500) │   │ (404)     │   │ (500)    │   │ (500)        │
    └──────────┘   └───────────┘   └───────────┘   └──────────┘   └──────────────┘

    A failure after the image is written removes the image again.

Consistency invariant:
    user.places == ids of places whose creator_id is user.id. Only the paired
    writes in create_place and delete_place touch either side. Each runs inside
    repository.with_transaction(), locks the creator row first and rebuilds
    user.places from the places table, so concurrent writes for one user
    cannot drop each other's entries.
"""

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from picplace.exceptions import ForbiddenError, NotFoundError
from picplace.models.place import Place
from picplace.models.user import User
from picplace.repository import parse_id, places_repo, users_repo, with_transaction
from picplace.schemas.place import PlaceResponse
from picplace.services.file_service import ImageUpload, file_service
from picplace.services.geocoding_service import geocoding_service
from picplace.validation import validate_input

logger = logging.getLogger(__name__)


class PlaceService:
    """
    Business logic layer for place operations.

    `acting_user_id` is only passed when place authorization is enabled
    (PLACES_AUTH_REQUIRED); it is then compared with the place's creator.
    """

    async def _load_place(self, db: AsyncSession, place_id: str) -> Place:
        place = await places_repo.find_by_id(db, place_id)
        if place is None:
            raise NotFoundError(
                "Could not find a place for the provided id.",
                resource="place",
                resource_id=place_id,
            )
        return place

    @staticmethod
    def _check_owner(place: Place, acting_user_id: Optional[str], action: str) -> None:
        if acting_user_id is not None and str(place.creator_id) != str(acting_user_id):
            raise ForbiddenError(f"You are not allowed to {action} this place.")

    @staticmethod
    async def _lock_creator(session: AsyncSession, creator_id) -> Optional[User]:
        # Concurrent paired writes for one user queue up here
        return await users_repo.find_by_id(session, creator_id, for_update=True)

    @staticmethod
    async def _relink(session: AsyncSession, owner: User) -> None:
        """Rewrite owner.places from the places table as seen inside the transaction."""
        place_ids = await places_repo.find_ids(session, creator_id=owner.id)
        await users_repo.update_fields(session, owner, places=place_ids)

    async def get_place_by_id(self, db: AsyncSession, place_id: str) -> PlaceResponse:
        place = await self._load_place(db, place_id)
        return PlaceResponse.from_model(place)

    async def get_places_by_user(self, db: AsyncSession, user_id: str) -> List[PlaceResponse]:
        """
        Places whose creator is `user_id`, oldest first.

        Raises:
            NotFoundError: malformed id, unknown user, or a user with no places.
        """
        creator_id = parse_id(user_id)
        places = await places_repo.find(db, creator_id=creator_id) if creator_id else []
        if not places:
            raise NotFoundError(
                "Could not find places for the provided user id.",
                resource="user",
                resource_id=user_id,
            )
        return [PlaceResponse.from_model(p) for p in places]

    async def create_place(
        self,
        db: AsyncSession,
        title: str,
        description: str,
        address: str,
        creator_id: str,
        image: Optional[ImageUpload] = None,
        acting_user_id: Optional[str] = None,
    ) -> PlaceResponse:
        """
        Create a geocoded place owned by an existing user.

        Raises:
            ValidationError: bad fields, bad image, or unresolvable address (422)
            GeocodeUnavailableError: geocoder unreachable (500)
            ForbiddenError: creator differs from the authenticated user (403)
            NotFoundError: creator does not exist (404)
            PersistenceError / FileStorageError: store failure, nothing persisted (500)
        """
        fields = validate_input("create_place", title=title, description=description, address=address)
        if image is not None:
            file_service.validate(image)
        if acting_user_id is not None and str(creator_id) != str(acting_user_id):
            raise ForbiddenError("You are not allowed to create places for another user.")

        location = await geocoding_service.resolve(fields.address)

        creator = await users_repo.find_by_id(db, creator_id)
        if creator is None:
            raise NotFoundError(
                "Could not find user for provided id.",
                resource="user",
                resource_id=creator_id,
            )

        image_path = await file_service.store(image) if image is not None else None
        place = Place(
            title=fields.title,
            description=fields.description,
            address=fields.address,
            lat=location.lat,
            lng=location.lng,
            image=image_path,
            creator_id=creator.id,
        )

        async def insert_and_link(session: AsyncSession) -> Place:
            owner = await self._lock_creator(session, creator.id)
            await places_repo.insert(session, place)
            if owner is not None:
                await self._relink(session, owner)
            return place

        try:
            created = await with_transaction(db, insert_and_link)
        except Exception:
            await file_service.cleanup_file(image_path)
            raise

        logger.info("Place %s created by user %s", created.id, created.creator_id)
        return PlaceResponse.from_model(created)

    async def update_place(
        self,
        db: AsyncSession,
        place_id: str,
        title: str,
        description: str,
        acting_user_id: Optional[str] = None,
    ) -> PlaceResponse:
        """
        Change title and description only; address, location and creator are fixed.

        Raises:
            ValidationError (422), NotFoundError (404), ForbiddenError (403),
            PersistenceError (500)
        """
        fields = validate_input("update_place", title=title, description=description)
        place = await self._load_place(db, place_id)
        self._check_owner(place, acting_user_id, "edit")

        place = await with_transaction(
            db,
            lambda session: places_repo.update_fields(
                session, place, title=fields.title, description=fields.description
            ),
        )
        logger.info("Place %s updated", place.id)
        return PlaceResponse.from_model(place)

    async def delete_place(
        self,
        db: AsyncSession,
        place_id: str,
        acting_user_id: Optional[str] = None,
    ) -> None:
        """
        Delete a place and drop it from its creator's places, atomically.

        The stored image is released after the commit; failing to remove it
        is logged by FileService and does not fail the request.
        """
        place = await self._load_place(db, place_id)
        self._check_owner(place, acting_user_id, "delete")

        place_key = str(place.id)
        image_path = place.image

        async def delete_and_unlink(session: AsyncSession) -> None:
            owner = await self._lock_creator(session, place.creator_id)
            await places_repo.delete(session, place)
            if owner is not None:
                await self._relink(session, owner)
            else:
                logger.warning("Place %s has no existing creator; deleting anyway", place_key)

        await with_transaction(db, delete_and_unlink)
        logger.info("Place %s deleted", place_key)

        await file_service.cleanup_file(image_path)


# ── Singleton Instance ────────────────────────────────────────────────────
place_service = PlaceService()
