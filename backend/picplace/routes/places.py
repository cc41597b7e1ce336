"""
PicPlace Backend — Places Route Handlers
==========================================

What:  Place lookups by id and by creator, plus create, update and delete.
How:   Extracts path/form/body data, delegates to PlaceService, wraps the
       result in a {message, ...} envelope.
Who:   Called by the frontend place list, place form and place item views.

Authorization:
    Mutating routes depend on place_write_claims. With PLACES_AUTH_REQUIRED
    off it yields None and anyone may mutate; with it on, the token's user
    becomes the acting user and PlaceService enforces ownership.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from picplace.auth import place_write_claims
from picplace.database import get_db_session
from picplace.routes.uploads import read_image_upload
from picplace.schemas.common import ErrorResponse
from picplace.schemas.place import (
    MessageResponse,
    PlaceEnvelope,
    PlaceListEnvelope,
    PlaceUpdateRequest,
)
from picplace.services.credential_service import TokenClaims
from picplace.services.place_service import place_service

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/api/places", tags=["Places"])


def _acting_user(claims: Optional[TokenClaims]) -> Optional[str]:
    return claims.user_id if claims is not None else None


@router.get(
    "/user/{user_id}",
    response_model=PlaceListEnvelope,
    responses={
        404: {"description": "User has no places", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List the places created by a user",
)
async def get_places_by_user(
    user_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> PlaceListEnvelope:
    places = await place_service.get_places_by_user(db, user_id)
    return PlaceListEnvelope(message="Fetching places for user success!", places=places)


@router.get(
    "/{place_id}",
    response_model=PlaceEnvelope,
    responses={
        404: {"description": "Place not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get a single place by id",
)
async def get_place(
    place_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> PlaceEnvelope:
    place = await place_service.get_place_by_id(db, place_id)
    return PlaceEnvelope(message="Fetching place success!", place=place)


@router.post(
    "",
    status_code=201,
    response_model=PlaceEnvelope,
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        403: {"description": "Creator is not the authenticated user", "model": ErrorResponse},
        404: {"description": "Creator not found", "model": ErrorResponse},
        422: {"description": "Invalid input or unknown address", "model": ErrorResponse},
        500: {"description": "Geocoder or storage failure", "model": ErrorResponse},
    },
    summary="Create a place",
    description=(
        "Multipart form with title, description, address, creator and an optional "
        "image (PNG/JPEG, max 500 KB). The address is geocoded before the place is stored."
    ),
)
async def create_place(
    title: str = Form(default=""),
    description: str = Form(default=""),
    address: str = Form(default=""),
    creator: str = Form(default="", description="Creator user id; defaults to the token's user"),
    image: Optional[UploadFile] = File(default=None),
    claims: Optional[TokenClaims] = Depends(place_write_claims),
    db: AsyncSession = Depends(get_db_session),
) -> PlaceEnvelope:
    """
    Error responses (handled by global exception handlers):
        422: field rules, image type/size, address not found
        404: creator does not exist
        500: geocoder unreachable, store failure
    """
    acting_user_id = _acting_user(claims)
    upload = await read_image_upload(image)

    place = await place_service.create_place(
        db,
        title=title,
        description=description,
        address=address,
        creator_id=creator or acting_user_id or "",
        image=upload,
        acting_user_id=acting_user_id,
    )
    return PlaceEnvelope(message="Place created successfully!", place=place)


@router.patch(
    "/{place_id}",
    response_model=PlaceEnvelope,
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        403: {"description": "Not the owner", "model": ErrorResponse},
        404: {"description": "Place not found", "model": ErrorResponse},
        422: {"description": "Invalid input", "model": ErrorResponse},
    },
    summary="Update a place's title and description",
)
async def update_place(
    place_id: str,
    body: PlaceUpdateRequest,
    claims: Optional[TokenClaims] = Depends(place_write_claims),
    db: AsyncSession = Depends(get_db_session),
) -> PlaceEnvelope:
    place = await place_service.update_place(
        db,
        place_id,
        title=body.title,
        description=body.description,
        acting_user_id=_acting_user(claims),
    )
    return PlaceEnvelope(message="Place updated successfully!", place=place)


@router.delete(
    "/{place_id}",
    response_model=MessageResponse,
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        403: {"description": "Not the owner", "model": ErrorResponse},
        404: {"description": "Place not found", "model": ErrorResponse},
    },
    summary="Delete a place",
)
async def delete_place(
    place_id: str,
    claims: Optional[TokenClaims] = Depends(place_write_claims),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await place_service.delete_place(db, place_id, acting_user_id=_acting_user(claims))
    return MessageResponse(message="Deleted place.")
