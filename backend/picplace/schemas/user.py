"""
PicPlace Backend — User Request/Response Schemas
==================================================

What:  Pydantic models defining the users API contract.

Security:
    UserResponse has no password field at all, so a digest can never be
    serialized by accident, whichever endpoint returns a user.
"""

from typing import List

from pydantic import BaseModel, Field

from picplace.models.user import User


class UserResponse(BaseModel):
    id: str = Field(description="Unique user identifier")
    name: str
    email: str
    image: str = Field(description="Avatar URL or public path of the uploaded image")
    places: List[str] = Field(description="Ids of places created by this user")

    @classmethod
    def from_model(cls, user: User) -> "UserResponse":
        return cls(
            id=str(user.id),
            name=user.name,
            email=user.email,
            image=user.image,
            places=list(user.places or []),
        )


class LoginRequest(BaseModel):
    """Raw login body; the login rule set validates and normalizes it."""
    email: str = ""
    password: str = ""


class AuthEnvelope(BaseModel):
    """
    What:  Response of signup and login.
    Why:   The client needs both the account and a bearer token to call
           authenticated routes.
    """
    message: str
    user: UserResponse
    token: str = Field(description="Signed bearer token, valid for one hour")


class UserListEnvelope(BaseModel):
    message: str
    users: List[UserResponse]
