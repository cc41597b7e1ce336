"""
PicPlace Backend — Place Route Authorization
==============================================

What:  FastAPI dependency guarding the mutating place routes.
Why:   Whether creating, editing and deleting places needs a token is a
       deployment decision (PLACES_AUTH_REQUIRED), not something the routes
       should guess.
How:   Disabled → returns None and the routes behave as an open API.
       Enabled  → requires `Authorization: Bearer <token>`, verifies it with
       CredentialService and returns the caller's TokenClaims; services then
       enforce ownership. The caller's id is also put on request.state for
       the access log.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from picplace.config import settings
from picplace.exceptions import UnauthorizedError
from picplace.services.credential_service import TokenClaims, credential_service

_bearer = HTTPBearer(auto_error=False)


async def place_write_claims(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> Optional[TokenClaims]:
    if not settings.places_auth_required:
        return None
    if credentials is None:
        raise UnauthorizedError("Authentication failed!")
    claims = credential_service.verify_token(credentials.credentials)
    # Picked up by the access log line
    request.state.user_id = claims.user_id
    return claims
