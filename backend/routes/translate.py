"""
Translate Routes - image OCR + translation endpoint.
"""

import json
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from integrations.firebase.app import get_firebase_handle
from integrations.firebase.entitlements import FirestoreEntitlementStore
from integrations.firebase.identity import IdentityVerifier
from integrations.google.translation import TranslationClient
from integrations.google.vision import VisionClient
from models import IncomingRequest
from schemas import ErrorResponse, TranslateResponse
from services.entitlement import EntitlementChecker
from services.pipeline import TranslatePipeline
from settings import get_cors_settings, get_firebase_settings, get_google_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["translate"])

# Every method is routed here so the pipeline, not the router, answers
# preflights and 405s with CORS headers attached.
ROUTED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def get_pipeline() -> TranslatePipeline:
    """Build the pipeline from process-wide clients."""
    handle = get_firebase_handle()
    firebase_settings = get_firebase_settings()
    google_settings = get_google_settings()
    return TranslatePipeline(
        verifier=IdentityVerifier(handle),
        entitlements=EntitlementChecker(
            FirestoreEntitlementStore(handle, firebase_settings),
            firebase_settings,
        ),
        recognizer=VisionClient(google_settings),
        translator=TranslationClient(google_settings),
        cors_settings=get_cors_settings(),
    )


async def _read_body(request: Request) -> Dict[str, Any]:
    """Parse the JSON body; anything that is not a JSON object counts as empty."""
    if request.method != "POST":
        return {}
    raw = await request.body()
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except (ValueError, UnicodeDecodeError):
        logger.info("Ignoring request body that is not valid JSON")
        return {}
    return data if isinstance(data, dict) else {}


@router.api_route(
    "/translate",
    methods=ROUTED_METHODS,
    responses={
        200: {"model": TranslateResponse},
        204: {"description": "CORS preflight"},
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        405: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
)
async def translate_image(
    request: Request,
    pipeline: TranslatePipeline = Depends(get_pipeline),
):
    """
    OCR an image and translate the extracted text.

    Body: ``{"base64ImageData": "<base64>"}`` with ``Authorization: Bearer <Firebase ID token>``.
    Returns ``{"translated": "<text>"}`` or ``{"error": "<code>"}``.
    """
    incoming = IncomingRequest(
        method=request.method,
        origin=request.headers.get("origin"),
        authorization=request.headers.get("authorization"),
        requested_headers=request.headers.get("access-control-request-headers"),
        body=await _read_body(request),
    )

    outcome = await pipeline.handle(incoming)

    if outcome.body is None:
        return Response(status_code=outcome.status_code, headers=outcome.headers)
    return JSONResponse(status_code=outcome.status_code, content=outcome.body, headers=outcome.headers)
