"""
Audio playback buffer.

Streamlit can only play audio by rendering it, so "playing" means queuing
a clip for the next render. Real-time playback opens a clip on the first
streamed chunk and keeps appending to it until the stream ends.
"""

import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class PlaybackItem:
    """A clip waiting to be rendered."""
    audio: bytes
    mime_type: str
    source: str
    realtime: bool = False


class AudioPlayer:
    """Collects audio for the UI to render."""

    def __init__(self):
        self._queue: list[PlaybackItem] = []
        self._realtime: Optional[bytearray] = None
        self._realtime_mime = "audio/wav"
        self._realtime_source = ""

    @property
    def is_playing(self) -> bool:
        return bool(self._queue) or self._realtime is not None

    def play_bytes(self, audio: bytes, mime_type: str = "audio/wav", source: str = "") -> PlaybackItem:
        item = PlaybackItem(audio=audio, mime_type=mime_type, source=source)
        self._queue.append(item)
        logger.debug(f"Queued {len(audio)} bytes of {mime_type} from {source or 'unknown'}")
        return item

    def start_realtime(self, first_chunk: bytes, mime_type: str = "audio/wav", source: str = ""):
        """Begin real-time playback with the first streamed chunk."""
        self._realtime = bytearray(first_chunk)
        self._realtime_mime = mime_type
        self._realtime_source = source
        logger.info("Started real-time audio playback")

    def append_chunk(self, chunk: bytes):
        if self._realtime is None:
            self.start_realtime(chunk)
            return
        self._realtime.extend(chunk)

    def finish_realtime(self) -> Optional[PlaybackItem]:
        """Close the real-time clip and queue it."""
        if self._realtime is None:
            return None
        item = PlaybackItem(
            audio=bytes(self._realtime),
            mime_type=self._realtime_mime,
            source=self._realtime_source,
            realtime=True,
        )
        self._realtime = None
        self._queue.append(item)
        return item

    def cancel_realtime(self):
        self._realtime = None

    def stop(self):
        """Drop everything that hasn't been rendered yet."""
        self._queue.clear()
        self._realtime = None

    def take_pending(self) -> list[PlaybackItem]:
        """Hand queued clips to the UI and clear the queue."""
        items, self._queue = self._queue, []
        return items
