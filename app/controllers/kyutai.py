"""
Kyutai Controller

Batch text-to-speech for clients that can't stream from the Kyutai
server themselves. Synthesized audio is cached in memory and served from
/kyutai/audio/{audio_id}; the cache keeps the most recent entries only.
"""

import logging
import time
import uuid
from collections import OrderedDict
from datetime import datetime, timezone
from threading import Lock

from fastapi import APIRouter, Depends, HTTPException, Response

from app.models import KyutaiHealthResponse, KyutaiTTSRequest, KyutaiTTSResponse
from services.tts.kyutai import KyutaiClient, KyutaiError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/kyutai", tags=["kyutai"])

MAX_CACHED_AUDIO = 100


class AudioCache:
    """Bounded in-memory store of synthesized audio."""

    def __init__(self, max_items: int = MAX_CACHED_AUDIO):
        self.max_items = max_items
        self._items: OrderedDict[str, tuple[bytes, str]] = OrderedDict()
        self._lock = Lock()

    def put(self, audio: bytes, mime_type: str) -> str:
        audio_id = uuid.uuid4().hex
        with self._lock:
            self._items[audio_id] = (audio, mime_type)
            while len(self._items) > self.max_items:
                self._items.popitem(last=False)
        return audio_id

    def get(self, audio_id: str) -> tuple[bytes, str] | None:
        with self._lock:
            return self._items.get(audio_id)

    def clear(self):
        with self._lock:
            self._items.clear()


audio_cache = AudioCache()


def get_kyutai_client():
    client = KyutaiClient()
    try:
        yield client
    finally:
        client.close()


def get_audio_cache() -> AudioCache:
    return audio_cache


@router.post("/tts", response_model=KyutaiTTSResponse)
def synthesize(
    body: KyutaiTTSRequest,
    client: KyutaiClient = Depends(get_kyutai_client),
    cache: AudioCache = Depends(get_audio_cache),
):
    """
    Synthesize speech and return a URL to fetch it from.

    An unreachable or failing Kyutai server is reported with
    success=False (still HTTP 200) so clients can fall back to device
    speech.
    """
    payload = body.model_dump(exclude_none=True)
    started = time.perf_counter()
    try:
        audio, mime_type = client.synthesize(payload)
    except KyutaiError as e:
        logger.warning(f"Kyutai synthesis failed: {e.message}")
        return KyutaiTTSResponse(success=False, message=e.message)
    latency_ms = (time.perf_counter() - started) * 1000

    audio_id = cache.put(audio, mime_type)
    voice_used = body.voice_style or body.voice
    logger.info(f"Kyutai TTS: {len(audio)} bytes in {latency_ms:.0f}ms with {voice_used}")
    return KyutaiTTSResponse(
        success=True,
        audio_url=f"/kyutai/audio/{audio_id}",
        latency_ms=latency_ms,
        voice_used=voice_used,
        message=f'TTS request processed for: "{body.text}" with voice: {voice_used}',
    )


@router.get("/audio/{audio_id}")
def get_audio(audio_id: str, cache: AudioCache = Depends(get_audio_cache)):
    cached = cache.get(audio_id)
    if not cached:
        raise HTTPException(status_code=404, detail="Audio not found")
    audio, mime_type = cached
    return Response(content=audio, media_type=mime_type)


@router.get("/health", response_model=KyutaiHealthResponse)
def health():
    return KyutaiHealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        service="kyutai-tts",
    )
