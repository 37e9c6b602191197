"""Request-scoped gateway models."""

from .gateway import (
    Stage,
    IncomingRequest,
    VerifiedIdentity,
    EntitlementRecord,
    CorsDecision,
    PipelineOutcome,
)

__all__ = [
    "Stage",
    "IncomingRequest",
    "VerifiedIdentity",
    "EntitlementRecord",
    "CorsDecision",
    "PipelineOutcome",
]
