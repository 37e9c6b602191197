from pydantic import BaseModel


class TranslateResponse(BaseModel):
    """Successful translation"""
    translated: str


class ErrorResponse(BaseModel):
    """Error envelope shared by every failure"""
    error: str


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    firebase_initialized: bool
    target_language: str
