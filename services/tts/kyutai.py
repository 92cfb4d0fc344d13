"""
Kyutai TTS HTTP clients.

KyutaiClient talks to the Kyutai TTS server directly:
- GET  {endpoint}/health      - availability check (ok status = available)
- POST {endpoint}/stream      - chunked audio for streaming / real-time playback
- POST {endpoint}/synthesize  - complete audio in one response (used by the API)

BackendTTSClient talks to our own API's batch route (POST /kyutai/tts),
which synthesizes, caches the audio and returns a URL to fetch it from.
"""

import logging
from typing import Any, Iterator, Optional
from urllib.parse import urljoin

import httpx

from config.settings import get_settings
from services.errors import ExternalServiceError

logger = logging.getLogger(__name__)


class KyutaiError(ExternalServiceError):
    """The Kyutai server (or our batch route) could not produce audio."""


class KyutaiClient:
    """Client for the Kyutai TTS server."""

    def __init__(
        self,
        endpoint: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        health_timeout: Optional[float] = None,
        request_timeout: Optional[float] = None,
    ):
        settings = get_settings()
        self.endpoint = (endpoint or settings.kyutai_tts_endpoint).rstrip("/")
        self.health_timeout = health_timeout or settings.kyutai_health_timeout
        self.request_timeout = request_timeout or settings.kyutai_request_timeout
        self._client = client or httpx.Client()

    def check_health(self) -> bool:
        """True if the server answers /health with a 2xx status."""
        try:
            response = self._client.get(f"{self.endpoint}/health", timeout=self.health_timeout)
            available = response.is_success
        except httpx.HTTPError as e:
            logger.info(f"Kyutai TTS not available, using fallback ({e.__class__.__name__})")
            return False
        logger.info(f"Kyutai TTS availability: {available}")
        return available

    def stream(self, payload: dict[str, Any]) -> Iterator[bytes]:
        """
        Stream synthesized audio chunks.

        Raises:
            KyutaiError if the server answers with a non-2xx status
            httpx.HTTPError on transport failures
        """
        with self._client.stream(
            "POST",
            f"{self.endpoint}/stream",
            json=payload,
            timeout=self.request_timeout,
        ) as response:
            if not response.is_success:
                raise KyutaiError(f"Streaming TTS failed: {response.status_code}")
            for chunk in response.iter_bytes():
                if chunk:
                    yield chunk

    def synthesize(self, payload: dict[str, Any]) -> tuple[bytes, str]:
        """
        Synthesize complete audio.

        Returns:
            Tuple of (audio bytes, content type)
        """
        try:
            response = self._client.post(
                f"{self.endpoint}/synthesize",
                json=payload,
                timeout=self.request_timeout,
            )
        except httpx.HTTPError as e:
            raise KyutaiError(f"Kyutai TTS unreachable: {e}") from e

        if not response.is_success:
            raise KyutaiError(f"Kyutai TTS failed: {response.status_code}")
        if not response.content:
            raise KyutaiError("Kyutai TTS returned no audio")

        content_type = response.headers.get("content-type", "audio/wav").split(";")[0]
        return response.content, content_type

    def close(self):
        self._client.close()


class BackendTTSClient:
    """Client for the API's batch Kyutai route."""

    def __init__(self, base_url: Optional[str] = None, client: Optional[httpx.Client] = None):
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/") + "/"
        self.timeout = settings.kyutai_request_timeout
        self._client = client or httpx.Client()

    def tts(self, payload: dict[str, Any]) -> dict[str, Any]:
        """
        Request batch synthesis.

        Returns:
            The route's JSON body: success, audio_url, latency_ms, voice_used, message
        """
        response = self._client.post(urljoin(self.base_url, "kyutai/tts"), json=payload, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def fetch_audio(self, audio_url: str) -> tuple[bytes, str]:
        """Download audio from a (possibly relative) URL returned by tts()."""
        response = self._client.get(urljoin(self.base_url, audio_url), timeout=self.timeout)
        response.raise_for_status()
        content_type = response.headers.get("content-type", "audio/wav").split(";")[0]
        return response.content, content_type
