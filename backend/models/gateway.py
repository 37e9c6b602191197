"""
Request-scoped data model for the translate pipeline.

Nothing here outlives a single request/response cycle.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional


class Stage(str, Enum):
    """Pipeline stages, in execution order."""
    METHOD_CHECK = "method_check"
    AUTHENTICATING = "authenticating"
    CHECKING_ENTITLEMENT = "checking_entitlement"
    RUNNING_OCR = "running_ocr"
    TRANSLATING = "translating"
    RESPONDING = "responding"


@dataclass(frozen=True)
class IncomingRequest:
    """Immutable view of the inbound HTTP request."""
    method: str
    origin: Optional[str] = None
    authorization: Optional[str] = None
    requested_headers: Optional[str] = None
    body: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "body", MappingProxyType(dict(self.body)))

    @property
    def image_data(self) -> Optional[str]:
        """The base64 image payload, or None when absent, empty or not a string."""
        value = self.body.get("base64ImageData")
        if isinstance(value, str) and value:
            return value
        return None


@dataclass(frozen=True)
class VerifiedIdentity:
    """Identity extracted from a successfully verified bearer credential."""
    email: str

    def __post_init__(self):
        if not isinstance(self.email, str) or not self.email:
            raise ValueError("VerifiedIdentity requires a non-empty email")


@dataclass(frozen=True)
class EntitlementRecord:
    """Authorization record as stored in the entitlement store.

    ``trial_ends_at`` is kept in its raw stored shape; see
    ``services.entitlement.normalize_trial_boundary``.
    """
    active: Any = None
    plan: Optional[str] = None
    trial_ends_at: Any = None

    @classmethod
    def from_document(cls, data: Optional[Dict[str, Any]]) -> "EntitlementRecord":
        data = data or {}
        return cls(
            active=data.get("active"),
            plan=data.get("plan"),
            trial_ends_at=data.get("trialEndsAt"),
        )


@dataclass(frozen=True)
class CorsDecision:
    """Cross-origin headers resolved for one request."""
    allow_origin: Optional[str]
    allow_methods: str
    allow_headers: str
    max_age: int

    def headers(self) -> Dict[str, str]:
        """Render the decision as response headers."""
        headers = {
            "Vary": "Origin",
            "Access-Control-Allow-Methods": self.allow_methods,
            "Access-Control-Allow-Headers": self.allow_headers,
            "Access-Control-Max-Age": str(self.max_age),
        }
        if self.allow_origin:
            headers["Access-Control-Allow-Origin"] = self.allow_origin
        return headers


@dataclass(frozen=True)
class PipelineOutcome:
    """Exactly one outcome per request: success body, error body, or empty preflight."""
    status_code: int
    body: Optional[Dict[str, Any]] = None
    headers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def success(cls, translated: str, headers: Dict[str, str]) -> "PipelineOutcome":
        return cls(status_code=200, body={"translated": translated}, headers=headers)

    @classmethod
    def failure(cls, status_code: int, code: str, headers: Dict[str, str]) -> "PipelineOutcome":
        return cls(status_code=status_code, body={"error": code}, headers=headers)

    @classmethod
    def preflight(cls, headers: Dict[str, str]) -> "PipelineOutcome":
        return cls(status_code=204, body=None, headers=headers)
