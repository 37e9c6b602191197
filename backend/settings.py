"""
Settings and configuration for the translation gateway, Firebase and Google APIs
"""
import os
import logging
from typing import List, Literal, Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_ALLOWED_ORIGINS = "https://gazouhonnyaku-auth.web.app,http://localhost:5000"


class AppSettings(BaseSettings):
    """Process-level server configuration"""

    app_name: str = "Image Translate Gateway"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "8000"))

    class Config:
        env_file = ".env"
        extra = "ignore"  # Ignore extra environment variables not defined in this class


class CorsSettings(BaseSettings):
    """Cross-origin policy for the translate endpoint"""

    cors_allowed_origins: str = os.getenv("CORS_ALLOWED_ORIGINS", DEFAULT_ALLOWED_ORIGINS)
    cors_default_origin: Optional[str] = os.getenv("CORS_DEFAULT_ORIGIN", None)
    cors_strict_origin: bool = os.getenv("CORS_STRICT_ORIGIN", "").lower() in ("true", "1", "yes")
    cors_allowed_methods: str = "POST,OPTIONS"
    cors_allowed_headers: str = os.getenv("CORS_ALLOWED_HEADERS", "Content-Type,Authorization")
    cors_max_age: int = int(os.getenv("CORS_MAX_AGE", "86400"))

    class Config:
        env_file = ".env"
        extra = "ignore"

    def get_allowed_origins(self) -> List[str]:
        """Get list of allow-listed origins"""
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]

    def get_default_origin(self) -> Optional[str]:
        """Origin echoed back to callers that are not on the allow-list.

        Falls back to the first allow-listed origin when not set explicitly.
        """
        if self.cors_default_origin:
            return self.cors_default_origin
        origins = self.get_allowed_origins()
        return origins[0] if origins else None


class FirebaseSettings(BaseSettings):
    """Firebase Admin configuration (identity tokens and entitlement store)"""

    firebase_service_account: Optional[str] = os.getenv("FIREBASE_SERVICE_ACCOUNT", None)
    firebase_project_id: Optional[str] = os.getenv("FIREBASE_PROJECT_ID", None)
    firebase_app_name: str = os.getenv("FIREBASE_APP_NAME", "[DEFAULT]")

    # Entitlement policy
    entitlement_collection: str = os.getenv("ENTITLEMENT_COLLECTION", "allowedEmails")
    trial_enforcement: Literal["always", "trial_plan"] = os.getenv("TRIAL_ENFORCEMENT", "always")
    trial_plan_name: str = os.getenv("TRIAL_PLAN_NAME", "trial")
    firestore_timeout_seconds: float = float(os.getenv("FIRESTORE_TIMEOUT_SECONDS", "10"))

    class Config:
        env_file = ".env"
        extra = "ignore"

    @field_validator("firestore_timeout_seconds", mode="after")
    @classmethod
    def validate_firestore_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("FIRESTORE_TIMEOUT_SECONDS must be greater than zero")
        return v


class GoogleSettings(BaseSettings):
    """Google Cloud Vision and Translation REST configuration"""

    google_api_key: Optional[str] = os.getenv("GOOGLE_API_KEY", None)
    google_vision_base_url: str = os.getenv("GOOGLE_VISION_BASE_URL", "https://vision.googleapis.com")
    google_translate_base_url: str = os.getenv("GOOGLE_TRANSLATE_BASE_URL", "https://translation.googleapis.com")
    translate_target_language: str = os.getenv("TRANSLATE_TARGET_LANGUAGE", "ja")
    translate_format: Literal["text", "html"] = os.getenv("TRANSLATE_FORMAT", "text")
    upstream_timeout_seconds: float = float(os.getenv("UPSTREAM_TIMEOUT_SECONDS", "30"))

    class Config:
        env_file = ".env"
        extra = "ignore"

    @field_validator("upstream_timeout_seconds", mode="after")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Outbound calls must always be bounded."""
        if v <= 0:
            raise ValueError("UPSTREAM_TIMEOUT_SECONDS must be greater than zero")
        return v

    def validate(self) -> None:
        """Validate settings and log warnings."""
        if not self.google_api_key:
            logger.warning("GOOGLE_API_KEY is not configured - OCR and translation calls will fail")


# Global settings instances
app_settings = AppSettings()
cors_settings = CorsSettings()
firebase_settings = FirebaseSettings()
google_settings = GoogleSettings()


def get_cors_settings() -> CorsSettings:
    """Get global CORS settings."""
    return cors_settings


def get_firebase_settings() -> FirebaseSettings:
    """Get global Firebase settings."""
    return firebase_settings


def get_google_settings() -> GoogleSettings:
    """Get global Google API settings."""
    return google_settings
