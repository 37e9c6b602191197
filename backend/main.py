from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException
from fastapi.responses import JSONResponse
import logging
from contextlib import asynccontextmanager

from integrations.firebase.app import get_firebase_handle
from routes import translate
from schemas import HealthResponse
from settings import app_settings, google_settings

# Configure logging
logging.basicConfig(level=app_settings.log_level.upper())
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # On startup
    google_settings.validate()
    logger.info(f"Starting {app_settings.app_name} (target language: {google_settings.translate_target_language})")
    yield
    # On shutdown
    # (Firebase and httpx clients hold no resources that need closing)

# Initialize FastAPI app
app = FastAPI(
    title=app_settings.app_name,
    description="Authenticated image OCR and translation API",
    version="1.0.0",
    lifespan=lifespan
)

# Global exception handler for consistent error responses
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None)
    )

@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {type(exc).__name__}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Server error"}
    )

# Include routes
app.include_router(translate.router)

# Routes
@app.get("/")
async def root():
    return {"message": f"{app_settings.app_name} is running"}


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Report service status without initializing Firebase"""
    return HealthResponse(
        status="healthy",
        firebase_initialized=get_firebase_handle().initialized,
        target_language=google_settings.translate_target_language
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=app_settings.host, port=app_settings.port)
