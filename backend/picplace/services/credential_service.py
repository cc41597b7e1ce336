"""
PicPlace Backend — Credential Service
=======================================

What:  Password hashing/verification and bearer token issue/verification.
Why:   One place owns every secret-handling primitive, so no other module
       touches bcrypt or JWT directly.
How:   passlib's CryptContext with the bcrypt scheme (work factor from
       settings, 12 by default); python-jose for HS256-signed JWTs carrying
       userId and email with a one hour expiry.
Who:   UserService (signup/login) and the place authorization dependency.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from picplace.config import settings
from picplace.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried by a verified bearer token."""
    user_id: str
    email: str


class CredentialService:
    """
    Hashes passwords and signs tokens.

    The signing key is read once, when the service is constructed at import
    time; main.py refuses to start when it is empty.
    """

    def __init__(
        self,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
        expires_minutes: Optional[int] = None,
        rounds: Optional[int] = None,
    ):
        self._secret = settings.jwt_secret if secret is None else secret
        self._algorithm = algorithm or settings.jwt_algorithm
        self._expires = timedelta(minutes=expires_minutes or settings.jwt_expires_minutes)
        self._pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds or settings.password_hash_rounds,
        )

    # ── Passwords ─────────────────────────────────────────────────────────

    def hash_password(self, password: str) -> str:
        """Salted, slow one-way digest of a plaintext password."""
        return self._pwd_context.hash(password)

    def verify_password(self, password: str, digest: str) -> bool:
        """True when `password` matches the stored digest."""
        try:
            return self._pwd_context.verify(password, digest)
        except (TypeError, ValueError):
            # Digest not produced by this context (corrupt or legacy plaintext)
            logger.warning("Stored password digest could not be verified")
            return False

    # ── Tokens ────────────────────────────────────────────────────────────

    def issue_token(self, user_id: str, email: str) -> str:
        """Signed, time-limited bearer token encoding userId and email."""
        if not self._secret:
            raise RuntimeError("JWT_SECRET is not configured; cannot sign tokens")
        expire = datetime.now(timezone.utc) + self._expires
        claims = {"userId": str(user_id), "email": email, "exp": expire}
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify_token(self, token: str) -> TokenClaims:
        """
        Decode and check a bearer token.

        Raises:
            UnauthorizedError: bad signature, expired, malformed, or missing claims.
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as exc:
            logger.info("Rejected bearer token: %s", type(exc).__name__)
            raise UnauthorizedError("Authentication failed!") from exc

        user_id = payload.get("userId")
        email = payload.get("email")
        if not user_id or not email:
            raise UnauthorizedError("Authentication failed!")
        return TokenClaims(user_id=str(user_id), email=str(email))


# ── Singleton Instance ────────────────────────────────────────────────────
credential_service = CredentialService()
