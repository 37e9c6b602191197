"""
Entitlement policy - decides whether a verified identity may use the service now.

The record itself lives in an external store (see
integrations/firebase/entitlements.py); this module only applies policy.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Protocol

from exceptions import (
    AuthCheckFailedError,
    GatewayError,
    InactiveError,
    NotAllowedError,
    TrialExpiredError,
)
from models import EntitlementRecord, VerifiedIdentity
from settings import FirebaseSettings, get_firebase_settings

logger = logging.getLogger(__name__)

# Method names that convert a timestamp object to epoch milliseconds
_MILLIS_METHODS = ("ToMilliseconds", "to_millis", "toMillis")


class EntitlementStore(Protocol):
    """Read-only lookup of entitlement records keyed by email."""

    async def fetch(self, email: str) -> Optional[EntitlementRecord]:
        ...


def _now_ms() -> int:
    return int(time.time() * 1000)


def _datetime_to_ms(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


def _parse_timestamp_string(value: str) -> Optional[int]:
    value = value.strip()
    if not value:
        return None
    try:
        if value.isascii() and value.isdigit():
            return int(value)
        if value.endswith(("Z", "z")):
            value = value[:-1] + "+00:00"
        return _datetime_to_ms(datetime.fromisoformat(value))
    except (ValueError, OverflowError):
        return None


def normalize_trial_boundary(value: Any) -> Optional[int]:
    """
    Normalize a stored trial end time to epoch milliseconds.

    Accepts datetimes (Firestore timestamps are datetime subclasses), objects
    exposing a millisecond conversion, numeric epoch milliseconds and
    timestamp strings.

    Returns:
        Epoch milliseconds, or None when absent or unparsable
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        try:
            return _datetime_to_ms(value)
        except (ValueError, OverflowError):
            return None

    for name in _MILLIS_METHODS:
        method = getattr(value, name, None)
        if callable(method):
            try:
                return int(method())
            except (TypeError, ValueError, OverflowError):
                return None

    # bool is an int subclass
    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        return int(value)

    if isinstance(value, str):
        return _parse_timestamp_string(value)

    return None


class EntitlementChecker:
    """
    Applies activation and trial policy to an identity's entitlement record.
    """

    def __init__(
        self,
        store: EntitlementStore,
        settings: Optional[FirebaseSettings] = None,
        clock: Callable[[], int] = _now_ms,
    ):
        """
        Args:
            store: Entitlement record lookup
            settings: Policy settings (uses global if None)
            clock: Returns the current time in epoch milliseconds
        """
        self.store = store
        self.settings = settings or get_firebase_settings()
        self.clock = clock

    def _trial_applies(self, record: EntitlementRecord) -> bool:
        if self.settings.trial_enforcement == "always":
            return True
        return record.plan == self.settings.trial_plan_name

    async def check(self, identity: VerifiedIdentity) -> None:
        """
        Grant or deny access for a verified identity.

        Raises:
            NotAllowedError: No record for the email
            InactiveError: Record's ``active`` is not exactly True
            TrialExpiredError: Trial boundary is in the past
            AuthCheckFailedError: The store lookup itself failed
        """
        try:
            record = await self.store.fetch(identity.email)
        except GatewayError:
            raise
        except Exception as e:
            logger.error(f"Entitlement lookup failed: {type(e).__name__}", exc_info=True)
            raise AuthCheckFailedError(type(e).__name__) from e

        if record is None:
            raise NotAllowedError()

        if record.active is not True:
            raise InactiveError()

        if not self._trial_applies(record):
            return

        trial_end_ms = normalize_trial_boundary(record.trial_ends_at)
        if trial_end_ms is None:
            if record.trial_ends_at is not None:
                logger.warning(
                    f"Ignoring unparsable trial boundary of type {type(record.trial_ends_at).__name__}"
                )
            return

        if trial_end_ms < self.clock():
            raise TrialExpiredError()
