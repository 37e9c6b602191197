"""
Firestore-backed entitlement store.

Each allowed user is a document keyed by email in the entitlement collection:
``{active: bool, plan: str, trialEndsAt: Timestamp}``.
"""

import logging
from typing import Optional

from fastapi.concurrency import run_in_threadpool

from exceptions import AuthCheckFailedError
from models import EntitlementRecord
from settings import FirebaseSettings, get_firebase_settings
from .app import FirebaseHandle, get_firebase_handle

logger = logging.getLogger(__name__)


class FirestoreEntitlementStore:
    """Read-only entitlement lookup against Firestore."""

    def __init__(
        self,
        handle: Optional[FirebaseHandle] = None,
        settings: Optional[FirebaseSettings] = None,
    ):
        self.handle = handle or get_firebase_handle()
        self.settings = settings or get_firebase_settings()

    def _get_document(self, email: str) -> Optional[EntitlementRecord]:
        doc = (
            self.handle.db
            .collection(self.settings.entitlement_collection)
            .document(email)
            .get(timeout=self.settings.firestore_timeout_seconds)
        )
        if not doc.exists:
            return None
        return EntitlementRecord.from_document(doc.to_dict())

    async def fetch(self, email: str) -> Optional[EntitlementRecord]:
        """
        Look up the entitlement record for an email (exact, case-sensitive).

        Returns:
            EntitlementRecord, or None if no document exists

        Raises:
            AuthCheckFailedError: Firestore could not be read
        """
        try:
            return await run_in_threadpool(self._get_document, email)
        except Exception as e:
            logger.error(
                f"Firestore read from '{self.settings.entitlement_collection}' failed: {type(e).__name__}",
                exc_info=True,
            )
            raise AuthCheckFailedError(type(e).__name__) from e
