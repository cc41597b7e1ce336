"""
PicPlace Backend — Users Route Handlers
=========================================

What:  GET /api/users, POST /api/users/signup, POST /api/users/login.
How:   Thin handlers over UserService. Signup is multipart because it may
       carry an avatar; login is JSON.

Security:
    Every user in a response is a UserResponse, which has no password field.
    Signup and login bodies are never logged.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from picplace.database import get_db_session
from picplace.routes.uploads import read_image_upload
from picplace.schemas.common import ErrorResponse
from picplace.schemas.user import AuthEnvelope, LoginRequest, UserListEnvelope
from picplace.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get(
    "",
    response_model=UserListEnvelope,
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List all users",
)
async def list_users(db: AsyncSession = Depends(get_db_session)) -> UserListEnvelope:
    users = await user_service.list_users(db)
    return UserListEnvelope(message="Fetching users success!", users=users)


@router.post(
    "/signup",
    status_code=201,
    response_model=AuthEnvelope,
    responses={
        422: {"description": "Invalid input or email already registered", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create an account",
    description=(
        "Multipart form with name, email, password (min 6 characters) and an optional "
        "avatar image. Returns the new user and a bearer token."
    ),
)
async def signup(
    name: str = Form(default=""),
    email: str = Form(default=""),
    password: str = Form(default=""),
    image: Optional[UploadFile] = File(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> AuthEnvelope:
    upload = await read_image_upload(image)
    user, token = await user_service.signup(
        db, name=name, email=email, password=password, image=upload
    )
    return AuthEnvelope(message="User created successfully!", user=user, token=token)


@router.post(
    "/login",
    response_model=AuthEnvelope,
    responses={
        401: {"description": "Invalid credentials", "model": ErrorResponse},
        422: {"description": "Invalid input", "model": ErrorResponse},
    },
    summary="Log in with email and password",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthEnvelope:
    user, token = await user_service.login(db, email=body.email, password=body.password)
    return AuthEnvelope(message="Logged in successfully!", user=user, token=token)
