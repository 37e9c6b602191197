"""
Gateway exception classes.

Every failure the translate pipeline can produce maps to one of these classes,
each carrying the HTTP status and the machine-readable error code returned
to the caller as ``{"error": code}``.
"""

from typing import Optional


class GatewayError(Exception):
    """Base exception for the translate gateway"""

    status_code: int = 500
    code: str = "Server error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail
        super().__init__(detail or self.code)

    def __str__(self) -> str:
        parts = [f"{self.status_code} {self.code}"]
        if self.detail:
            parts.append(self.detail)
        return " | ".join(parts)


class MethodNotAllowedError(GatewayError):
    """Request method is neither POST nor OPTIONS (405)"""
    status_code = 405
    code = "Method not allowed"


# Authentication failures: caller could not be identified

class MissingCredentialError(GatewayError):
    """Authorization header absent or not a Bearer credential (401)"""
    status_code = 401
    code = "missing_token"


class InvalidCredentialError(GatewayError):
    """Identity token rejected by the verifier (401)"""
    status_code = 401
    code = "invalid_token"


# Denials: caller identified but not entitled

class IdentityIncompleteError(GatewayError):
    """Verified token carries no email claim (403)"""
    status_code = 403
    code = "email_required"


class NotAllowedError(GatewayError):
    """No entitlement record for the identity (403)"""
    status_code = 403
    code = "not_allowed"


class InactiveError(GatewayError):
    """Entitlement record exists but is not active (403)"""
    status_code = 403
    code = "inactive"


class TrialExpiredError(GatewayError):
    """Trial window has elapsed (403)"""
    status_code = 403
    code = "trial_expired"


# Infrastructure failures: the answer could not be determined

class AuthCheckFailedError(GatewayError):
    """Entitlement store lookup itself failed (500)"""
    status_code = 500
    code = "auth_check_failed"


class NoImageDataError(GatewayError):
    """Request body carries no image payload (400)"""
    status_code = 400
    code = "No image data provided"


class OcrFailedError(GatewayError):
    """OCR engine returned no extractable text (500)"""
    status_code = 500
    code = "OCR failed"


class TranslationFailedError(GatewayError):
    """Translation engine returned no translated text (500)"""
    status_code = 500
    code = "Translation failed"


class UpstreamTimeoutError(GatewayError):
    """An outbound OCR or translation call exceeded its timeout (504)"""
    status_code = 504
    code = "upstream_timeout"

    def __init__(self, service: str, timeout: float):
        super().__init__(f"{service} did not respond within {timeout:g}s")
        self.service = service
        self.timeout = timeout
