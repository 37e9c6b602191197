"""
Translate Pipeline - CORS → method check → identity → entitlement → OCR → translation.

This is the only place that knows the whole request flow. Each stage either
succeeds and hands its output to the next, or fails and ends the request with
exactly one error outcome. Nothing is retried.
"""

import logging
from typing import Optional, Protocol

from exceptions import (
    GatewayError,
    MethodNotAllowedError,
    NoImageDataError,
    OcrFailedError,
    TranslationFailedError,
)
from models import IncomingRequest, PipelineOutcome, Stage, VerifiedIdentity
from settings import CorsSettings
from services.cors import negotiate

logger = logging.getLogger(__name__)

SERVER_ERROR = "Server error"


class Verifier(Protocol):
    async def verify(self, authorization: Optional[str]) -> VerifiedIdentity:
        ...


class Entitlements(Protocol):
    async def check(self, identity: VerifiedIdentity) -> None:
        ...


class Recognizer(Protocol):
    async def detect_text(self, base64_image: str) -> Optional[str]:
        ...


class Translator(Protocol):
    async def translate(self, text: str) -> Optional[str]:
        ...


class TranslatePipeline:
    """Runs one request through every stage in strict sequence."""

    def __init__(
        self,
        verifier: Verifier,
        entitlements: Entitlements,
        recognizer: Recognizer,
        translator: Translator,
        cors_settings: Optional[CorsSettings] = None,
    ):
        self.verifier = verifier
        self.entitlements = entitlements
        self.recognizer = recognizer
        self.translator = translator
        self.cors_settings = cors_settings

    async def handle(self, request: IncomingRequest) -> PipelineOutcome:
        """
        Produce the single outcome for a request.

        Never raises: stage failures and unexpected errors are both turned
        into error outcomes carrying the CORS headers.
        """
        decision = negotiate(request.origin, request.requested_headers, self.cors_settings)
        headers = decision.headers()

        if request.method == "OPTIONS":
            return PipelineOutcome.preflight(headers)

        stage = Stage.METHOD_CHECK
        try:
            if request.method != "POST":
                raise MethodNotAllowedError(request.method)

            stage = Stage.AUTHENTICATING
            identity = await self.verifier.verify(request.authorization)

            stage = Stage.CHECKING_ENTITLEMENT
            await self.entitlements.check(identity)

            stage = Stage.RUNNING_OCR
            image_data = request.image_data
            if image_data is None:
                raise NoImageDataError()
            text = await self.recognizer.detect_text(image_data)
            if not text:
                raise OcrFailedError()

            stage = Stage.TRANSLATING
            translated = await self.translator.translate(text)
            if not translated:
                raise TranslationFailedError()

            stage = Stage.RESPONDING
            return PipelineOutcome.success(translated, headers)

        except GatewayError as e:
            if e.status_code >= 500:
                logger.error(f"[{stage.value}] {e.code} ({type(e).__name__})")
            else:
                logger.info(f"[{stage.value}] request rejected: {e.code}")
            return PipelineOutcome.failure(e.status_code, e.code, headers)
        except Exception as e:
            logger.error(f"[{stage.value}] unexpected error: {type(e).__name__}", exc_info=True)
            return PipelineOutcome.failure(500, SERVER_ERROR, headers)
