"""
Unmute Client - realtime voice conversations over WebSocket.

Unmute speaks an OpenAI-Realtime-style protocol: the client sends JSON
events (session.update, conversation.item.create, response.create,
input_audio_buffer.*) and the server streams events back, including
base64 pcm16 audio deltas for the spoken reply.

The client is synchronous so it can live in st.session_state across
Streamlit reruns; `receive_until_done()` drains server events after each
request.
"""

import base64
import io
import json
import logging
import time
import wave
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import websockets
from websockets.sync.client import connect as ws_connect

from config.settings import get_settings
from models.user_preferences import DEFAULT_UNMUTE_INSTRUCTIONS, UnmutePreferences
from models.voice import ConnectionStatus, LogLevel, VoiceMessage
from services.errors import ExternalServiceError

logger = logging.getLogger(__name__)

MAX_RECONNECT_ATTEMPTS = 3
NORMAL_CLOSURE = 1000
PCM_SAMPLE_RATE = 24000


class UnmuteConnectionError(ExternalServiceError):
    """Could not reach the Unmute server."""


@dataclass
class UnmuteConfig:
    server_url: str = "ws://localhost:8000/ws"
    voice: str = "alloy"
    language: str = "en"
    instructions: str = DEFAULT_UNMUTE_INSTRUCTIONS
    temperature: float = 0.8
    max_tokens: int = 150

    @classmethod
    def from_preferences(cls, prefs: UnmutePreferences) -> "UnmuteConfig":
        return cls(
            server_url=prefs.server_url or get_settings().unmute_server_url,
            voice=prefs.voice,
            language=prefs.language,
            instructions=prefs.instructions,
            temperature=prefs.temperature,
            max_tokens=prefs.max_tokens,
        )


@dataclass
class ResponseBuffer:
    """Audio and transcript collected for the response in progress."""
    audio: bytearray = field(default_factory=bytearray)
    transcript: list[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(self.transcript)


def _event_id(prefix: str) -> str:
    return f"{prefix}_{int(time.time() * 1000)}"


def pcm16_to_wav(pcm: bytes, sample_rate: int = PCM_SAMPLE_RATE) -> bytes:
    """Wrap raw mono pcm16 audio in a WAV container."""
    output = io.BytesIO()
    with wave.open(output, "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(pcm)
    return output.getvalue()


class UnmuteClient:
    """WebSocket client for an Unmute server."""

    def __init__(
        self,
        on_message: Callable[[VoiceMessage], None],
        on_status_change: Callable[[ConnectionStatus], None],
        on_debug_log: Callable[[LogLevel, str, Any], None],
        config: Optional[UnmuteConfig] = None,
        connector: Callable[..., Any] = ws_connect,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.on_message = on_message
        self.on_status_change = on_status_change
        self.on_debug_log = on_debug_log
        self.config = config or UnmuteConfig()
        self._connector = connector
        self._sleep = sleep

        self.ws = None
        self.is_connected = False
        self.is_connecting = False
        self.is_recording = False
        self.reconnect_attempts = 0
        self.session_id: Optional[str] = None
        self.response = ResponseBuffer()

        self._log("info", "UnmuteClient initialized", {
            "serverUrl": self.config.server_url,
            "voice": self.config.voice,
        })

    # ==========================================
    # Connection
    # ==========================================

    def connect(self):
        """
        Open the socket and initialise the session.

        Failures retry with exponential backoff (2, 4, 8 seconds). After
        the last attempt the error is raised.

        Raises:
            UnmuteConnectionError when the server stays unreachable
        """
        if self.is_connected or self.is_connecting:
            self._log("warn", "Already connected or connecting")
            return

        self.is_connecting = True
        self._set_status("connecting")
        self._log("info", "Connecting to Unmute server...", {"url": self.config.server_url})

        try:
            self.ws = self._connector(self.config.server_url)
        except (OSError, websockets.exceptions.WebSocketException) as e:
            self.is_connecting = False
            self._set_status("error")
            self._log("error", "Failed to create WebSocket connection", str(e))
            if self._attempt_reconnect():
                return self.connect()
            raise UnmuteConnectionError(f"Could not connect to Unmute server: {e}") from e

        self.is_connected = True
        self.is_connecting = False
        self.reconnect_attempts = 0
        self._log("success", "WebSocket connection established")
        self._set_status("connected")
        self._initialize_session()

    def disconnect(self):
        self._log("info", "Disconnecting from Unmute server...")
        if self.ws is not None:
            try:
                self.ws.close(code=NORMAL_CLOSURE, reason="Client disconnect")
            except websockets.exceptions.WebSocketException as e:
                logger.warning(f"Error closing Unmute socket: {e}")
        self.ws = None
        self.is_connected = False
        self.is_connecting = False
        self.is_recording = False
        self.reconnect_attempts = 0
        self.session_id = None
        self.response = ResponseBuffer()
        self._set_status("disconnected")

    def _attempt_reconnect(self) -> bool:
        if self.reconnect_attempts >= MAX_RECONNECT_ATTEMPTS:
            self._log("error", "Max reconnection attempts reached")
            return False
        self.reconnect_attempts += 1
        delay = 2 ** self.reconnect_attempts
        self._log(
            "info",
            f"Attempting to reconnect in {delay * 1000}ms "
            f"(attempt {self.reconnect_attempts}/{MAX_RECONNECT_ATTEMPTS})",
        )
        self._sleep(delay)
        return True

    def _handle_closed(self, code: Optional[int], reason: str):
        self._log("warn", "WebSocket connection closed", {"code": code, "reason": reason})
        self.ws = None
        self.is_connected = False
        self.is_connecting = False
        self.is_recording = False
        if code != NORMAL_CLOSURE:
            self._set_status("error")
            if self._attempt_reconnect():
                self.connect()
        else:
            self._set_status("disconnected")

    # ==========================================
    # Outgoing events
    # ==========================================

    def _initialize_session(self):
        self.session_id = f"session_{int(time.time() * 1000)}"
        self.send_event({
            "type": "session.update",
            "event_id": _event_id("event"),
            "session": {
                "modalities": ["text", "audio"],
                "instructions": self.config.instructions,
                "voice": self.config.voice,
                "input_audio_format": "pcm16",
                "output_audio_format": "pcm16",
                "input_audio_transcription": {"model": "whisper-1"},
                "turn_detection": {
                    "type": "server_vad",
                    "threshold": 0.5,
                    "prefix_padding_ms": 300,
                    "silence_duration_ms": 500,
                },
                "temperature": self.config.temperature,
                "max_response_output_tokens": self.config.max_tokens,
            },
        })
        self._log("success", "Session initialized", {"sessionId": self.session_id})

    def send_event(self, event: dict) -> bool:
        """Send one event. Dropped (and logged) when not connected."""
        if not self.is_connected or self.ws is None:
            self._log("error", "Cannot send event - WebSocket not ready", {"eventType": event.get("type")})
            return False
        try:
            self.ws.send(json.dumps(event))
        except websockets.exceptions.WebSocketException as e:
            self._log("error", "Failed to send event", {"eventType": event.get("type"), "error": str(e)})
            return False
        self._log("info", f"Sent event: {event['type']}", {"eventId": event.get("event_id")})
        return True

    def send_text_message(self, text: str) -> bool:
        if not self.is_connected:
            self._log("error", "Cannot send text message - not connected")
            return False

        self._log("info", "Sending text message", {"text": text[:100]})
        self.response = ResponseBuffer()
        created = self.send_event({
            "type": "conversation.item.create",
            "event_id": _event_id("item"),
            "item": {
                "id": _event_id("msg"),
                "type": "message",
                "role": "user",
                "content": [{"type": "input_text", "text": text}],
            },
        })
        if not created:
            return False
        return self.send_event({
            "type": "response.create",
            "event_id": _event_id("response"),
            "response": {
                "modalities": ["text", "audio"],
                "voice": self.config.voice,
                "output_audio_format": "pcm16",
            },
        })

    def start_recording(self) -> bool:
        if self.is_recording or not self.is_connected:
            self._log("warn", "Cannot start recording", {
                "isRecording": self.is_recording,
                "isConnected": self.is_connected,
            })
            return False
        self.is_recording = True
        self.response = ResponseBuffer()
        self._log("success", "Recording started successfully")
        return True

    def append_audio(self, audio: bytes) -> bool:
        """Stream a chunk of pcm16 microphone audio to the server."""
        return self.send_event({
            "type": "input_audio_buffer.append",
            "event_id": _event_id("audio"),
            "audio": base64.b64encode(audio).decode("ascii"),
        })

    def commit_audio(self) -> bool:
        return self.send_event({
            "type": "input_audio_buffer.commit",
            "event_id": _event_id("commit"),
        })

    def stop_recording(self) -> bool:
        if not self.is_recording:
            self._log("warn", "Cannot stop recording - not currently recording")
            return False
        committed = self.commit_audio()
        self.is_recording = False
        self._log("success", "Recording stopped successfully")
        return committed

    def update_config(self, **changes):
        """Change settings; a live session is re-initialised with them."""
        for key, value in changes.items():
            if not hasattr(self.config, key):
                raise KeyError(f"Unknown Unmute setting: {key}")
            setattr(self.config, key, value)
        self._log("info", "Configuration updated", changes)
        if self.is_connected:
            self._initialize_session()

    # ==========================================
    # Incoming events
    # ==========================================

    def receive_until_done(self, timeout: float = 15.0) -> ResponseBuffer:
        """
        Consume server events until response.done, a timeout or a close.

        Returns:
            The audio and transcript collected for the response
        """
        deadline = time.monotonic() + timeout
        while self.is_connected and self.ws is not None:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                self._log("warn", "Timed out waiting for response")
                break
            try:
                raw = self.ws.recv(timeout=remaining)
            except TimeoutError:
                self._log("warn", "Timed out waiting for response")
                break
            except websockets.exceptions.ConnectionClosed as e:
                code = e.rcvd.code if e.rcvd else None
                reason = e.rcvd.reason if e.rcvd else ""
                self._handle_closed(code, reason)
                break
            if self.handle_event(raw) == "response.done":
                break
        return self.response

    def handle_event(self, raw) -> Optional[str]:
        """Dispatch one raw server event. Returns its type."""
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            self._log("error", "Failed to parse WebSocket message", {"error": str(e), "rawData": str(raw)[:200]})
            return None
        if not isinstance(data, dict):
            self._log("error", "WebSocket message is not an event object", {"rawData": str(raw)[:200]})
            return None

        event_type = data.get("type")
        self._log("info", f"Received event: {event_type}", {"eventId": data.get("event_id")})

        handler = self._handlers().get(event_type)
        if handler is None:
            self._log("warn", f"Unhandled event type: {event_type}", data)
        else:
            handler(data)
        return event_type

    def take_audio(self) -> Optional[bytes]:
        """Collected reply audio as WAV, clearing the buffer."""
        if not self.response.audio:
            return None
        audio = pcm16_to_wav(bytes(self.response.audio))
        self.response.audio = bytearray()
        return audio

    def _handlers(self) -> dict[str, Callable[[dict], None]]:
        return {
            "session.created": lambda d: self._log(
                "success", "Session created successfully", {"sessionId": (d.get("session") or {}).get("id")}
            ),
            "session.updated": lambda d: self._log("success", "Session updated successfully"),
            "input_audio_buffer.speech_started": lambda d: self._log("info", "Speech detection started"),
            "input_audio_buffer.speech_stopped": lambda d: self._log("info", "Speech detection stopped"),
            "conversation.item.created": self._on_item_created,
            "response.created": lambda d: self._log(
                "info", "Response generation started", {"responseId": (d.get("response") or {}).get("id")}
            ),
            "response.output_item.added": lambda d: self._log(
                "info", "Response output item added",
                {"itemId": (d.get("item") or {}).get("id"), "type": (d.get("item") or {}).get("type")},
            ),
            "response.audio.delta": self._on_audio_delta,
            "response.audio_transcript.delta": self._on_transcript_delta,
            "response.done": lambda d: self._log(
                "success", "Response generation completed", {"responseId": (d.get("response") or {}).get("id")}
            ),
            "error": lambda d: self._log("error", "Server error received", {"error": d.get("error")}),
        }

    def _on_item_created(self, data: dict):
        item = data.get("item") or {}
        text_content = next(
            (c for c in item.get("content") or [] if c.get("type") in ("text", "input_text")),
            None,
        )
        if not text_content or not text_content.get("text"):
            return
        message = VoiceMessage(
            id=item.get("id") or _event_id("msg"),
            role="user" if item.get("role") == "user" else "assistant",
            text=text_content["text"],
        )
        self.on_message(message)
        self._log("success", f"{item.get('role')} message created", {"text": message.text[:100]})

    def _on_audio_delta(self, data: dict):
        delta = data.get("delta")
        if not delta:
            return
        try:
            self.response.audio.extend(base64.b64decode(delta))
        except ValueError as e:
            self._log("error", "Failed to decode audio delta", str(e))

    def _on_transcript_delta(self, data: dict):
        delta = data.get("delta")
        if delta:
            self.response.transcript.append(delta)
            self._log("info", "Audio transcript delta received", {"delta": delta})

    def _set_status(self, status: ConnectionStatus):
        self.on_status_change(status)

    def _log(self, level: LogLevel, message: str, data: Any = None):
        log = logger.error if level == "error" else logger.warning if level == "warn" else logger.debug
        log(f"[Unmute] {message}")
        self.on_debug_log(level, message, data)
