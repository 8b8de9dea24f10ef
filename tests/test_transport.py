"""Tests for host transports and the native-messaging framing."""

import io
import struct
import subprocess
from unittest.mock import patch

import pytest

from extractor.config.models import TransportConfig
from extractor.domain.models import HostPayload
from extractor.exceptions import TransportError
from extractor.transport import (
    ConsoleTransport,
    NativeMessagingTransport,
    build_host_message,
    create_transport,
    decode_message,
    encode_message,
)


@pytest.fixture
def payload():
    return HostPayload(
        text="JOB TITLE: Data Engineer\n\nDESCRIPTION:\nBuild pipelines",
        metadata={
            "provider": "ollama",
            "model": "llama3.1:8b",
            "api_key": None,
            "source_url": "https://www.linkedin.com/jobs/view/1",
            "request_id": "req-1",
        },
    )


def completed(stdout=b"", returncode=0, stderr=b""):
    return subprocess.CompletedProcess(args=["host"], returncode=returncode, stdout=stdout, stderr=stderr)


# ============================================================================
# Framing
# ============================================================================


class TestFraming:
    """Length-prefixed JSON messages."""

    def test_encode_prefix(self):
        frame = encode_message({"status": "success"})

        (length,) = struct.unpack("<I", frame[:4])
        assert length == len(frame) - 4
        assert frame[4:] == b'{"status": "success"}'

    def test_decode_encoded(self):
        message = {"text": "Zürich – remote", "settings": {"provider": "ollama"}}

        assert decode_message(encode_message(message)) == message

    def test_decode_ignores_trailing_bytes(self):
        assert decode_message(encode_message({"a": 1}) + b"garbage") == {"a": 1}

    @pytest.mark.parametrize(
        "data, match",
        [
            (b"\x01\x00", "too short"),
            (struct.pack("<I", 10) + b"{}", "truncated"),
            (struct.pack("<I", 3) + b"{x}", "not valid JSON"),
            (struct.pack("<I", 2) + b"[]", "JSON object"),
        ],
    )
    def test_decode_errors(self, data, match):
        with pytest.raises(TransportError, match=match):
            decode_message(data)


class TestBuildHostMessage:
    """Payload to host request translation."""

    def test_ollama_settings(self, payload):
        message = build_host_message(payload)

        assert message == {
            "text": payload.text,
            "settings": {
                "provider": "ollama",
                "sourceUrl": "https://www.linkedin.com/jobs/view/1",
                "ollamaModel": "llama3.1:8b",
            },
        }

    def test_perplexity_settings(self):
        payload = HostPayload(text="Role", metadata={"provider": "perplexity", "api_key": "pplx-123"})

        settings = build_host_message(payload)["settings"]

        assert settings["perplexityKey"] == "pplx-123"
        assert settings["perplexityModel"] == "sonar-pro"
        assert "ollamaModel" not in settings

    def test_default_provider_without_metadata(self):
        settings = build_host_message(HostPayload(text="Role"))["settings"]

        assert settings == {"provider": "ollama", "sourceUrl": "", "ollamaModel": "qwen2.5:7b"}

    def test_invalid_provider(self):
        with pytest.raises(TransportError, match="provider settings"):
            build_host_message(HostPayload(text="Role", metadata={"provider": "chatbot"}))


# ============================================================================
# Native messaging transport
# ============================================================================


class TestNativeMessagingTransport:
    """One host process per payload."""

    @pytest.fixture
    def transport(self):
        return NativeMessagingTransport(["python3", "host.py"], timeout=5)

    @pytest.mark.asyncio
    async def test_successful_exchange(self, transport, payload):
        reply = encode_message({"status": "success", "filename": "job_1.txt", "json_file": "job_1.json"})

        with patch("extractor.transport.native.subprocess.run", return_value=completed(reply)) as mock_run:
            ack = await transport.send(payload)

        assert ack.ok
        assert ack.filename == "job_1.txt"
        assert ack.json_file == "job_1.json"

        args, kwargs = mock_run.call_args
        assert args[0] == ["python3", "host.py"]
        assert kwargs["timeout"] == 5
        sent = decode_message(kwargs["input"])
        assert sent["text"] == payload.text
        assert sent["settings"]["ollamaModel"] == "llama3.1:8b"

    @pytest.mark.asyncio
    async def test_error_status_raises(self, transport, payload):
        reply = encode_message({"status": "error", "filename": "raw_1.txt"})

        with patch("extractor.transport.native.subprocess.run", return_value=completed(reply)):
            with pytest.raises(TransportError) as exc_info:
                await transport.send(payload)

        assert "Host reported status 'error'" in str(exc_info.value)
        assert "raw_1.txt" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_unexpected_reply_shape(self, transport, payload):
        with patch("extractor.transport.native.subprocess.run", return_value=completed(encode_message({"ok": True}))):
            with pytest.raises(TransportError, match="unexpected shape"):
                await transport.send(payload)

    @pytest.mark.asyncio
    async def test_nonzero_exit(self, transport, payload):
        with patch(
            "extractor.transport.native.subprocess.run",
            return_value=completed(returncode=2, stderr=b"Traceback: boom"),
        ):
            with pytest.raises(TransportError, match="exited with status 2: Traceback: boom"):
                await transport.send(payload)

    @pytest.mark.asyncio
    async def test_timeout(self, transport, payload):
        with patch(
            "extractor.transport.native.subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd="python3", timeout=5),
        ):
            with pytest.raises(TransportError, match="did not answer within 5s"):
                await transport.send(payload)

    @pytest.mark.asyncio
    async def test_missing_executable(self, transport, payload):
        with patch("extractor.transport.native.subprocess.run", side_effect=FileNotFoundError("python3")):
            with pytest.raises(TransportError, match="Failed to start host"):
                await transport.send(payload)

    def test_requires_command(self):
        with pytest.raises(ValueError):
            NativeMessagingTransport([])


# ============================================================================
# Console transport and factory
# ============================================================================


class TestConsoleTransport:
    """Dry-run output."""

    @pytest.mark.asyncio
    async def test_writes_metadata_and_text(self):
        stream = io.StringIO()
        payload = HostPayload(
            text="Role text",
            metadata={"site": "generic", "api_key": "secret", "tab_id": None},
        )

        ack = await ConsoleTransport(stream).send(payload)

        output = stream.getvalue()
        assert output == "# api_key: ***\n# site: generic\n\nRole text\n"
        assert "secret" not in output
        assert ack.ok
        assert ack.filename == "<stdout>"


class TestCreateTransport:
    def test_console_by_default(self):
        assert isinstance(create_transport(TransportConfig()), ConsoleTransport)

    def test_native(self):
        transport = create_transport(TransportConfig(type="native", command=["host"], timeout_ms="30s"))

        assert isinstance(transport, NativeMessagingTransport)
        assert transport.timeout == 30

    def test_native_requires_command(self):
        with pytest.raises(ValueError, match="transport.command"):
            TransportConfig(type="native")
