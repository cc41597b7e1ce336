"""
PicPlace Backend — User Service
=================================

What:  list users, signup and login.
How:   Validation rules → repository lookups → CredentialService for the
       digest and token. Responses are built from UserResponse, which has no
       password field, so no code path can serialize a digest.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from picplace.config import settings
from picplace.exceptions import ConflictError, PersistenceError, UnauthorizedError
from picplace.models.user import User
from picplace.repository import users_repo, with_transaction
from picplace.schemas.user import UserResponse
from picplace.services.credential_service import credential_service
from picplace.services.file_service import ImageUpload, file_service
from picplace.validation import validate_input

logger = logging.getLogger(__name__)


class UserService:

    async def list_users(self, db: AsyncSession) -> List[UserResponse]:
        """
        All users without password digests.

        An empty list is a valid result; a store failure raises
        PersistenceError (500) instead.
        """
        users = await users_repo.find(db)
        return [UserResponse.from_model(u) for u in users]

    async def signup(
        self,
        db: AsyncSession,
        name: str,
        email: str,
        password: str,
        image: Optional[ImageUpload] = None,
    ) -> Tuple[UserResponse, str]:
        """
        Register a new account and issue its first token.

        Raises:
            ValidationError: bad fields or image (422)
            ConflictError: email already registered (422)
            PersistenceError / FileStorageError (500)
        """
        fields = validate_input("signup", name=name, email=email, password=password)
        if image is not None:
            file_service.validate(image)

        if await users_repo.find_one(db, email=fields.email) is not None:
            logger.info("Signup rejected: email already registered")
            raise ConflictError()

        # bcrypt is CPU-bound; keep it off the event loop
        digest = await run_in_threadpool(credential_service.hash_password, fields.password)
        image_path = await file_service.store(image) if image is not None else None
        user = User(
            name=fields.name,
            email=fields.email,
            password=digest,
            image=image_path or settings.default_user_image,
            places=[],
        )

        try:
            await with_transaction(db, lambda session: users_repo.insert(session, user))
        except PersistenceError as exc:
            await file_service.cleanup_file(image_path)
            if exc.context.get("integrity_violation"):
                # Lost a race with a concurrent signup for the same email
                raise ConflictError() from exc
            raise
        except Exception:
            await file_service.cleanup_file(image_path)
            raise

        logger.info("User %s signed up", user.id)
        token = credential_service.issue_token(str(user.id), user.email)
        return UserResponse.from_model(user), token

    async def login(self, db: AsyncSession, email: str, password: str) -> Tuple[UserResponse, str]:
        """
        Check credentials and issue a token.

        Unknown email and wrong password produce the same 401 so the response
        does not reveal which accounts exist.
        """
        fields = validate_input("login", email=email, password=password)

        user = await users_repo.find_one(db, email=fields.email)
        if user is None or not await run_in_threadpool(
            credential_service.verify_password, fields.password, user.password
        ):
            logger.info("Login rejected: invalid credentials")
            raise UnauthorizedError("Invalid credentials, could not log you in.")

        logger.info("User %s logged in", user.id)
        token = credential_service.issue_token(str(user.id), user.email)
        return UserResponse.from_model(user), token


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
