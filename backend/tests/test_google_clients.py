"""
Tests for Google Cloud Vision and Translation clients
"""
import pytest
from unittest.mock import AsyncMock, MagicMock, patch
import httpx

from exceptions import UpstreamTimeoutError
from integrations.google.translation import TranslationClient, extract_translated_text
from integrations.google.vision import VisionClient, extract_full_text
from settings import GoogleSettings


@pytest.fixture
def google_settings():
    return GoogleSettings(
        google_api_key="test-key",
        google_vision_base_url="https://vision.googleapis.com",
        google_translate_base_url="https://translation.googleapis.com",
        translate_target_language="ja",
        translate_format="text",
        upstream_timeout_seconds=5,
    )


def _response(status_code=200, json_data=None, json_error=None):
    response = MagicMock()
    response.status_code = status_code
    response.text = "" if json_data is None else str(json_data)
    if json_error:
        response.json.side_effect = json_error
    else:
        response.json.return_value = json_data
    return response


class TestExtractFullText:
    """Test OCR response parsing"""

    def test_full_text(self):
        data = {"responses": [{"fullTextAnnotation": {"text": "Hello\nWorld"}}]}
        assert extract_full_text(data) == "Hello\nWorld"

    @pytest.mark.parametrize("data", [
        None,
        {},
        {"responses": []},
        {"responses": [{}]},
        {"responses": [{"fullTextAnnotation": {}}]},
        {"responses": [{"fullTextAnnotation": {"text": ""}}]},
        {"responses": [{"error": {"code": 3, "message": "Bad image data."}}]},
        {"responses": "oops"},
        ["not", "a", "dict"],
    ])
    def test_no_text(self, data):
        assert extract_full_text(data) is None


class TestExtractTranslatedText:
    """Test translation response parsing"""

    def test_translated_text(self):
        data = {"data": {"translations": [{"translatedText": "こんにちは", "detectedSourceLanguage": "en"}]}}
        assert extract_translated_text(data) == "こんにちは"

    @pytest.mark.parametrize("data", [
        None,
        {},
        {"data": {}},
        {"data": {"translations": []}},
        {"data": {"translations": [{}]}},
        {"error": {"code": 400, "message": "API key not valid."}},
    ])
    def test_no_text(self, data):
        assert extract_translated_text(data) is None


class TestVisionClient:
    """Test Cloud Vision requests"""

    @pytest.mark.asyncio
    async def test_detect_text_success(self, google_settings):
        response = _response(json_data={"responses": [{"fullTextAnnotation": {"text": "Hello"}}]})

        with patch("integrations.google.vision.httpx.AsyncClient") as mock_client:
            mock_instance = AsyncMock()
            mock_client.return_value.__aenter__.return_value = mock_instance
            mock_instance.post.return_value = response

            text = await VisionClient(google_settings).detect_text("aGVsbG8=")

            assert text == "Hello"
            mock_client.assert_called_once_with(timeout=5)
            call_args = mock_instance.post.call_args
            assert call_args[0][0] == "https://vision.googleapis.com/v1/images:annotate"
            assert call_args[1]["params"] == {"key": "test-key"}
            assert call_args[1]["json"] == {
                "requests": [{
                    "image": {"content": "aGVsbG8="},
                    "features": [{"type": "TEXT_DETECTION"}],
                }]
            }

    @pytest.mark.asyncio
    async def test_detect_text_error_status(self, google_settings):
        """Non-2xx responses carry no annotation and yield None"""
        response = _response(status_code=403, json_data={"error": {"code": 403, "message": "denied"}})

        with patch("integrations.google.vision.httpx.AsyncClient") as mock_client:
            mock_instance = AsyncMock()
            mock_client.return_value.__aenter__.return_value = mock_instance
            mock_instance.post.return_value = response

            assert await VisionClient(google_settings).detect_text("aGVsbG8=") is None

    @pytest.mark.asyncio
    async def test_detect_text_non_json(self, google_settings):
        response = _response(status_code=502, json_error=ValueError("no json"))

        with patch("integrations.google.vision.httpx.AsyncClient") as mock_client:
            mock_instance = AsyncMock()
            mock_client.return_value.__aenter__.return_value = mock_instance
            mock_instance.post.return_value = response

            assert await VisionClient(google_settings).detect_text("aGVsbG8=") is None

    @pytest.mark.asyncio
    async def test_detect_text_timeout(self, google_settings):
        with patch("integrations.google.vision.httpx.AsyncClient") as mock_client:
            mock_instance = AsyncMock()
            mock_client.return_value.__aenter__.return_value = mock_instance
            mock_instance.post.side_effect = httpx.ReadTimeout("timed out")

            with pytest.raises(UpstreamTimeoutError) as exc_info:
                await VisionClient(google_settings).detect_text("aGVsbG8=")

            assert exc_info.value.status_code == 504
            assert exc_info.value.service == "vision"

    @pytest.mark.asyncio
    async def test_detect_text_connection_error_propagates(self, google_settings):
        with patch("integrations.google.vision.httpx.AsyncClient") as mock_client:
            mock_instance = AsyncMock()
            mock_client.return_value.__aenter__.return_value = mock_instance
            mock_instance.post.side_effect = httpx.ConnectError("refused")

            with pytest.raises(httpx.ConnectError):
                await VisionClient(google_settings).detect_text("aGVsbG8=")


class TestTranslationClient:
    """Test Cloud Translation requests"""

    @pytest.mark.asyncio
    async def test_translate_success(self, google_settings):
        response = _response(json_data={"data": {"translations": [{"translatedText": "こんにちは"}]}})

        with patch("integrations.google.translation.httpx.AsyncClient") as mock_client:
            mock_instance = AsyncMock()
            mock_client.return_value.__aenter__.return_value = mock_instance
            mock_instance.post.return_value = response

            translated = await TranslationClient(google_settings).translate("Hello")

            assert translated == "こんにちは"
            call_args = mock_instance.post.call_args
            assert call_args[0][0] == "https://translation.googleapis.com/language/translate/v2"
            assert call_args[1]["params"] == {"key": "test-key"}
            assert call_args[1]["json"] == {"q": "Hello", "target": "ja", "format": "text"}

    @pytest.mark.asyncio
    async def test_translate_empty_response(self, google_settings):
        response = _response(json_data={"data": {"translations": []}})

        with patch("integrations.google.translation.httpx.AsyncClient") as mock_client:
            mock_instance = AsyncMock()
            mock_client.return_value.__aenter__.return_value = mock_instance
            mock_instance.post.return_value = response

            assert await TranslationClient(google_settings).translate("Hello") is None

    @pytest.mark.asyncio
    async def test_translate_timeout(self, google_settings):
        with patch("integrations.google.translation.httpx.AsyncClient") as mock_client:
            mock_instance = AsyncMock()
            mock_client.return_value.__aenter__.return_value = mock_instance
            mock_instance.post.side_effect = httpx.ConnectTimeout("timed out")

            with pytest.raises(UpstreamTimeoutError) as exc_info:
                await TranslationClient(google_settings).translate("Hello")

            assert exc_info.value.service == "translation"

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValueError):
            GoogleSettings(upstream_timeout_seconds=0)
