"""
PicPlace Backend — Place Request/Response Schemas
===================================================

What:  Pydantic models defining the places API contract.
Why:   Schemas are separate from the ORM model so the API controls exactly
       which fields are exposed and how (location nested, ids as strings).
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from picplace.models.place import Place


class Location(BaseModel):
    """Coordinates derived from a place's address by the geocoder."""
    lat: float = Field(description="Latitude in decimal degrees")
    lng: float = Field(description="Longitude in decimal degrees")


class PlaceResponse(BaseModel):
    """
    What:  Public representation of a place.
    Who:   Nested in every places endpoint response.
    """
    id: str = Field(description="Unique place identifier")
    title: str
    description: str
    address: str = Field(description="Human-readable address as submitted")
    location: Location
    creator: str = Field(description="Id of the user who created the place")
    image: Optional[str] = Field(
        default=None,
        description="Public path of the uploaded image, if any",
    )

    @classmethod
    def from_model(cls, place: Place) -> "PlaceResponse":
        return cls(
            id=str(place.id),
            title=place.title,
            description=place.description,
            address=place.address,
            location=Location(lat=place.lat, lng=place.lng),
            creator=str(place.creator_id),
            image=place.image,
        )


class PlaceUpdateRequest(BaseModel):
    """
    Body of PATCH /api/places/{pid}.

    Only title and description are updatable. Fields default to "" so a
    missing field fails the update_place rules with the standard 422 body.
    """
    title: str = ""
    description: str = ""


class PlaceEnvelope(BaseModel):
    message: str
    place: PlaceResponse


class PlaceListEnvelope(BaseModel):
    message: str
    places: List[PlaceResponse]


class MessageResponse(BaseModel):
    message: str
