"""
Google Cloud Translation (v2 REST) client
"""
import logging
from typing import Any, Optional

import httpx

from exceptions import UpstreamTimeoutError
from settings import GoogleSettings, get_google_settings

logger = logging.getLogger(__name__)

TRANSLATE_ENDPOINT = "/language/translate/v2"


def extract_translated_text(data: Any) -> Optional[str]:
    """Pull ``data.translations[0].translatedText`` out of a v2 response."""
    if not isinstance(data, dict):
        return None
    body = data.get("data")
    if not isinstance(body, dict):
        return None
    translations = body.get("translations")
    if not isinstance(translations, list) or not translations:
        return None
    first = translations[0]
    if not isinstance(first, dict):
        return None
    text = first.get("translatedText")
    if isinstance(text, str) and text:
        return text
    return None


class TranslationClient:
    """Translates text into the configured target language."""

    def __init__(self, settings: Optional[GoogleSettings] = None):
        self.settings = settings or get_google_settings()

    @property
    def url(self) -> str:
        return f"{self.settings.google_translate_base_url.rstrip('/')}{TRANSLATE_ENDPOINT}"

    @property
    def target_language(self) -> str:
        return self.settings.translate_target_language

    async def translate(self, text: str) -> Optional[str]:
        """
        Translate text into the target language.

        Returns:
            Translated text, or None if the response carries none

        Raises:
            UpstreamTimeoutError: Translation did not answer within the configured timeout
            httpx.HTTPError: Transport failure
        """
        payload = {
            "q": text,
            "target": self.target_language,
            "format": self.settings.translate_format,
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
                logger.error(f"Translation API timed out after {timeout}s")
                raise UpstreamTimeoutError("translation", timeout) from e

        if response.status_code != 200:
            logger.error(f"Translation API request failed: status={response.status_code}, body={response.text[:200]}")

        try:
            data = response.json()
        except ValueError:
            logger.error(f"Translation API returned non-JSON response: status={response.status_code}")
            return None

        return extract_translated_text(data)
