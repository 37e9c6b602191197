"""
Google Cloud Vision client for full-text OCR
"""
import logging
from typing import Any, Optional

import httpx

from exceptions import UpstreamTimeoutError
from settings import GoogleSettings, get_google_settings

logger = logging.getLogger(__name__)

# images:annotate accepts a batch of requests; we always send exactly one
ANNOTATE_ENDPOINT = "/v1/images:annotate"
FEATURE_TYPE = "TEXT_DETECTION"


def extract_full_text(data: Any) -> Optional[str]:
    """
    Pull ``responses[0].fullTextAnnotation.text`` out of an annotate response.

    Returns:
        The text, or None for empty or malformed responses
    """
    if not isinstance(data, dict):
        return None
    responses = data.get("responses")
    if not isinstance(responses, list) or not responses:
        return None
    first = responses[0]
    if not isinstance(first, dict):
        return None

    error = first.get("error")
    if isinstance(error, dict) and error.get("message"):
        logger.warning(f"Vision API returned a per-image error: code={error.get('code')}")

    annotation = first.get("fullTextAnnotation")
    if not isinstance(annotation, dict):
        return None
    text = annotation.get("text")
    if isinstance(text, str) and text:
        return text
    return None


class VisionClient:
    """Sends base64 images to Cloud Vision and returns the detected text."""

    def __init__(self, settings: Optional[GoogleSettings] = None):
        self.settings = settings or get_google_settings()

    @property
    def url(self) -> str:
        return f"{self.settings.google_vision_base_url.rstrip('/')}{ANNOTATE_ENDPOINT}"

    async def detect_text(self, base64_image: str) -> Optional[str]:
        """
        Run full-text detection on a base64-encoded image.

        Args:
            base64_image: Base64 image content, passed through untouched

        Returns:
            Full-text annotation, or None if the engine found nothing usable

        Raises:
            UpstreamTimeoutError: Vision did not answer within the configured timeout
            httpx.HTTPError: Transport failure
        """
        payload = {
            "requests": [
                {
                    "image": {"content": base64_image},
                    "features": [{"type": FEATURE_TYPE}],
                }
            ]
        }
        timeout = self.settings.upstream_timeout_seconds

        async with httpx.AsyncClient(timeout=timeout) as client:
            try:
                response = await client.post(
                    self.url,
                    params={"key": self.settings.google_api_key or ""},
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
            except httpx.TimeoutException as e:
                logger.error(f"Vision API timed out after {timeout}s")
                raise UpstreamTimeoutError("vision", timeout) from e

        if response.status_code != 200:
            logger.error(f"Vision API request failed: status={response.status_code}, body={response.text[:200]}")

        try:
            data = response.json()
        except ValueError:
            logger.error(f"Vision API returned non-JSON response: status={response.status_code}")
            return None

        return extract_full_text(data)
