"""
Identity verification - Firebase ID tokens presented as Bearer credentials.
"""

import logging
import re
from typing import Optional

from fastapi.concurrency import run_in_threadpool
from firebase_admin import auth

from exceptions import IdentityIncompleteError, InvalidCredentialError, MissingCredentialError
from models import VerifiedIdentity
from .app import FirebaseHandle, get_firebase_handle

logger = logging.getLogger(__name__)

BEARER_PATTERN = re.compile(r"^Bearer (.+)$")


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Extract the token from an ``Authorization: Bearer <token>`` header.

    Raises:
        MissingCredentialError: Header absent or not a Bearer credential
    """
    match = BEARER_PATTERN.match(authorization or "")
    if not match:
        raise MissingCredentialError()
    return match.group(1)


class IdentityVerifier:
    """Verifies Firebase ID tokens and extracts the caller's email."""

    def __init__(self, handle: Optional[FirebaseHandle] = None):
        self.handle = handle or get_firebase_handle()

    def _verify_token(self, token: str) -> dict:
        # Initialization errors propagate: they are not credential rejections
        app = self.handle.app
        try:
            return auth.verify_id_token(token, app=app)
        except (auth.InvalidIdTokenError, auth.UserDisabledError) as e:
            # ExpiredIdTokenError and RevokedIdTokenError are InvalidIdTokenError subclasses
            logger.info(f"Identity token rejected: {type(e).__name__}")
            raise InvalidCredentialError(type(e).__name__) from e

    async def verify(self, authorization: Optional[str]) -> VerifiedIdentity:
        """
        Verify a Bearer credential.

        Args:
            authorization: Raw Authorization header value

        Returns:
            VerifiedIdentity for the token's email claim

        Raises:
            MissingCredentialError: No Bearer credential
            InvalidCredentialError: Token rejected by Firebase
            IdentityIncompleteError: Token valid but carries no email
        """
        token = extract_bearer_token(authorization)
        claims = await run_in_threadpool(self._verify_token, token)

        email = claims.get("email") if isinstance(claims, dict) else None
        if not isinstance(email, str) or not email:
            raise IdentityIncompleteError()
        return VerifiedIdentity(email=email)
