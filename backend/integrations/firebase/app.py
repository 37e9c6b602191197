"""
Firebase Admin app handle - lazy, once-per-process initialization.

The Admin SDK must be initialized at most once per app name. Concurrent first
requests race here, so initialization is guarded by a lock.
"""

import json
import logging
import threading
from typing import Any, Dict, Optional

import firebase_admin
from firebase_admin import credentials, firestore

from settings import FirebaseSettings, get_firebase_settings

logger = logging.getLogger(__name__)


class FirebaseConfigError(RuntimeError):
    """Firebase service account missing or malformed."""
    pass


def load_service_account(raw: Optional[str]) -> Dict[str, Any]:
    """
    Parse the service account JSON from configuration.

    Private keys pasted into environment variables usually carry escaped
    newlines; those are converted back to real newlines.
    """
    if not raw:
        raise FirebaseConfigError("FIREBASE_SERVICE_ACCOUNT is not set")
    try:
        info = json.loads(raw)
    except json.JSONDecodeError as e:
        raise FirebaseConfigError(f"FIREBASE_SERVICE_ACCOUNT is not valid JSON: {e.msg}") from e
    if not isinstance(info, dict):
        raise FirebaseConfigError("FIREBASE_SERVICE_ACCOUNT must be a JSON object")
    if info.get("private_key"):
        info["private_key"] = info["private_key"].replace("\\n", "\n")
    return info


class FirebaseHandle:
    """
    Process-wide handle to the Firebase app and its Firestore client.

    Safe for concurrent reuse once initialized.
    """

    def __init__(self, settings: Optional[FirebaseSettings] = None):
        self.settings = settings or get_firebase_settings()
        self._lock = threading.Lock()
        self._app: Optional[firebase_admin.App] = None
        self._db: Optional[Any] = None

    @property
    def initialized(self) -> bool:
        return self._app is not None

    def _initialize(self) -> firebase_admin.App:
        name = self.settings.firebase_app_name
        try:
            app = firebase_admin.get_app(name)
            logger.info(f"Reusing existing Firebase app '{name}'")
            return app
        except ValueError:
            pass

        info = load_service_account(self.settings.firebase_service_account)
        options = {}
        if self.settings.firebase_project_id:
            options["projectId"] = self.settings.firebase_project_id

        app = firebase_admin.initialize_app(
            credentials.Certificate(info),
            options=options or None,
            name=name,
        )
        logger.info(f"Initialized Firebase app '{name}'")
        return app

    @property
    def app(self) -> firebase_admin.App:
        """Get the Firebase app, initializing it on first use."""
        if self._app is None:
            with self._lock:
                if self._app is None:
                    self._app = self._initialize()
        return self._app

    @property
    def db(self) -> Any:
        """Get the Firestore client, creating it on first use."""
        if self._db is None:
            app = self.app
            with self._lock:
                if self._db is None:
                    self._db = firestore.client(app)
        return self._db


# Global singleton instance
_firebase_handle: Optional[FirebaseHandle] = None
_handle_lock = threading.Lock()


def get_firebase_handle() -> FirebaseHandle:
    """
    Get global FirebaseHandle instance (singleton).

    Creating the handle is cheap; the Admin SDK is only initialized when a
    request first needs it.
    """
    global _firebase_handle
    if _firebase_handle is None:
        with _handle_lock:
            if _firebase_handle is None:
                _firebase_handle = FirebaseHandle()
    return _firebase_handle
