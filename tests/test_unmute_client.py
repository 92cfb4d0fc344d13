import base64
import json

import pytest

from services.unmute_client import (
    NORMAL_CLOSURE,
    UnmuteClient,
    UnmuteConfig,
    UnmuteConnectionError,
    pcm16_to_wav,
)


class FakeSocket:
    def __init__(self, incoming=None):
        self.incoming = list(incoming or [])
        self.sent = []
        self.closed_with = None

    def send(self, message):
        self.sent.append(json.loads(message))

    def recv(self, timeout=None):
        if not self.incoming:
            raise TimeoutError()
        return self.incoming.pop(0)

    def close(self, code=1000, reason=""):
        self.closed_with = (code, reason)

    def sent_types(self):
        return [event["type"] for event in self.sent]


class Harness:
    """An UnmuteClient wired to a fake socket and recording callbacks."""

    def __init__(self, socket=None, connector=None, config=None):
        self.socket = socket or FakeSocket()
        self.messages = []
        self.statuses = []
        self.logs = []
        self.sleeps = []
        self.client = UnmuteClient(
            on_message=self.messages.append,
            on_status_change=self.statuses.append,
            on_debug_log=lambda level, message, data=None: self.logs.append((level, message)),
            config=config or UnmuteConfig(server_url="ws://unmute.test/ws", voice="nova"),
            connector=connector or (lambda url: self.socket),
            sleep=self.sleeps.append,
        )


def event(**data):
    return json.dumps(data)


class TestConnection:
    def test_connect_initialises_session(self):
        harness = Harness()

        harness.client.connect()

        assert harness.client.is_connected
        assert harness.statuses == ["connecting", "connected"]
        update = harness.socket.sent[0]
        assert update["type"] == "session.update"
        assert update["session"]["voice"] == "nova"
        assert update["session"]["input_audio_format"] == "pcm16"
        assert update["session"]["turn_detection"]["type"] == "server_vad"

    def test_connect_retries_with_backoff_then_raises(self):
        def refuse(url):
            raise OSError("connection refused")

        harness = Harness(connector=refuse)

        with pytest.raises(UnmuteConnectionError):
            harness.client.connect()

        assert harness.sleeps == [2, 4, 8]
        assert not harness.client.is_connected
        assert harness.statuses[-1] == "error"

    def test_disconnect_closes_normally(self):
        harness = Harness()
        harness.client.connect()

        harness.client.disconnect()

        assert harness.socket.closed_with == (NORMAL_CLOSURE, "Client disconnect")
        assert not harness.client.is_connected
        assert harness.statuses[-1] == "disconnected"

    def test_normal_close_does_not_reconnect(self):
        harness = Harness()
        harness.client.connect()

        harness.client._handle_closed(NORMAL_CLOSURE, "bye")

        assert harness.statuses[-1] == "disconnected"
        assert harness.sleeps == []


class TestOutgoingEvents:
    def test_text_message_creates_item_and_requests_response(self):
        harness = Harness()
        harness.client.connect()

        assert harness.client.send_text_message("What's for dinner?")

        created, response = harness.socket.sent[1:]
        assert created["type"] == "conversation.item.create"
        assert created["item"]["content"] == [{"type": "input_text", "text": "What's for dinner?"}]
        assert response["type"] == "response.create"
        assert response["response"]["voice"] == "nova"

    def test_nothing_sent_when_disconnected(self):
        harness = Harness()
        assert not harness.client.send_text_message("Hello?")
        assert harness.socket.sent == []
        assert ("error", "Cannot send text message - not connected") in harness.logs

    def test_recording_streams_and_commits_audio(self):
        harness = Harness()
        harness.client.connect()

        assert harness.client.start_recording()
        assert harness.client.append_audio(b"\x01\x02")
        assert harness.client.stop_recording()

        assert harness.socket.sent_types()[1:] == ["input_audio_buffer.append", "input_audio_buffer.commit"]
        assert base64.b64decode(harness.socket.sent[1]["audio"]) == b"\x01\x02"
        assert not harness.client.is_recording

    def test_update_config_reinitialises_live_session(self):
        harness = Harness()
        harness.client.connect()

        harness.client.update_config(voice="echo", temperature=0.5)

        latest = harness.socket.sent[-1]
        assert latest["type"] == "session.update"
        assert latest["session"]["voice"] == "echo"
        assert latest["session"]["temperature"] == 0.5
        with pytest.raises(KeyError):
            harness.client.update_config(colour="blue")


class TestIncomingEvents:
    def test_response_is_collected_until_done(self):
        pcm = b"\x00\x01" * 10
        socket = FakeSocket([
            event(type="conversation.item.created", item={
                "id": "msg_1", "role": "user", "content": [{"type": "input_text", "text": "Hi"}],
            }),
            event(type="response.audio_transcript.delta", delta="Hello "),
            event(type="response.audio.delta", delta=base64.b64encode(pcm).decode()),
            event(type="response.audio_transcript.delta", delta="there"),
            event(type="response.done", response={"id": "resp_1"}),
            event(type="session.updated"),
        ])
        harness = Harness(socket=socket)
        harness.client.connect()

        response = harness.client.receive_until_done()

        assert response.text == "Hello there"
        assert [(m.role, m.text) for m in harness.messages] == [("user", "Hi")]
        wav = harness.client.take_audio()
        assert wav == pcm16_to_wav(pcm)
        assert wav.startswith(b"RIFF")
        assert harness.client.take_audio() is None
        # Events after response.done are left for the next call
        assert len(socket.incoming) == 1

    def test_timeout_returns_partial_response(self):
        socket = FakeSocket([event(type="response.audio_transcript.delta", delta="Partial")])
        harness = Harness(socket=socket)
        harness.client.connect()

        assert harness.client.receive_until_done(timeout=1.0).text == "Partial"
        assert ("warn", "Timed out waiting for response") in harness.logs

    def test_bad_payloads_are_logged(self):
        harness = Harness()

        assert harness.client.handle_event("{not json") is None
        assert harness.client.handle_event(event(type="mystery.event")) == "mystery.event"

        levels = [level for level, _ in harness.logs]
        assert "error" in levels
        assert ("warn", "Unhandled event type: mystery.event") in harness.logs

    @pytest.mark.parametrize("raw", ["[]", "42", '"session.updated"', "null"])
    def test_non_object_frames_are_logged(self, raw):
        harness = Harness()

        assert harness.client.handle_event(raw) is None
        assert ("error", "WebSocket message is not an event object") in harness.logs
