"""Native-messaging host transport.

Messages use the browser native-messaging framing in both directions: a
4-byte little-endian unsigned length followed by that many bytes of UTF-8
JSON. One host process is started per message; it reads one request from
stdin and writes one reply to stdout:

    request: {"text": ..., "settings": {"provider", "ollamaModel",
              "perplexityKey", "perplexityModel", "sourceUrl"}}
    reply:   {"status": "success" | "error", "filename": ..., "json_file": ...}
"""

import asyncio
import json
import struct
import subprocess
from typing import Any, Dict, List

from pydantic import ValidationError

from extractor.config.models import ProviderName, ProviderSettings
from extractor.domain.models import HostAck, HostPayload
from extractor.exceptions import TransportError
from extractor.logging import get_logger

from .base import HostTransport

logger = get_logger(__name__, component="transport")

LENGTH_PREFIX = struct.Struct("<I")
MAX_MESSAGE_BYTES = 64 * 1024 * 1024


def encode_message(message: Dict[str, Any]) -> bytes:
    """Frame a JSON-serialisable mapping as length prefix + UTF-8 JSON."""
    body = json.dumps(message, ensure_ascii=False).encode("utf-8")
    if len(body) > MAX_MESSAGE_BYTES:
        raise TransportError(f"Message of {len(body)} bytes exceeds the {MAX_MESSAGE_BYTES} byte limit")
    return LENGTH_PREFIX.pack(len(body)) + body


def decode_message(data: bytes) -> Dict[str, Any]:
    """
    Decode one framed message.

    Args:
        data: Bytes starting with the length prefix; trailing bytes are ignored

    Returns:
        Decoded JSON object

    Raises:
        TransportError: On a short frame, invalid JSON or a non-object body
    """
    if len(data) < LENGTH_PREFIX.size:
        raise TransportError(f"Host reply too short for a length prefix ({len(data)} bytes)")

    (length,) = LENGTH_PREFIX.unpack_from(data)
    body = data[LENGTH_PREFIX.size:LENGTH_PREFIX.size + length]
    if len(body) < length:
        raise TransportError(f"Host reply truncated: expected {length} bytes, got {len(body)}")

    try:
        message = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise TransportError(f"Host reply is not valid JSON: {e}") from e

    if not isinstance(message, dict):
        raise TransportError(f"Host reply must be a JSON object, got {type(message).__name__}")
    return message


def build_host_message(payload: HostPayload) -> Dict[str, Any]:
    """Translate a payload into the host's request shape."""
    metadata = payload.metadata or {}
    try:
        provider = ProviderSettings(
            provider=metadata.get("provider") or ProviderName.OLLAMA,
            model=metadata.get("model"),
            api_key=metadata.get("api_key"),
        )
    except ValidationError as e:
        raise TransportError(f"Invalid provider settings in payload metadata: {e}") from e

    settings: Dict[str, Any] = {
        "provider": provider.provider,
        "sourceUrl": metadata.get("source_url", ""),
    }
    if provider.provider == ProviderName.PERPLEXITY.value:
        settings["perplexityKey"] = provider.api_key or ""
        settings["perplexityModel"] = provider.resolved_model
    else:
        settings["ollamaModel"] = provider.resolved_model

    return {"text": payload.text, "settings": settings}


class NativeMessagingTransport(HostTransport):
    """Starts the host command and exchanges one framed message with it.

    Args:
        command: Host executable and arguments
        timeout: Seconds allowed for the host to answer
    """

    name = "native"

    def __init__(self, command: List[str], timeout: float = 60.0) -> None:
        if not command:
            raise ValueError("NativeMessagingTransport requires a host command")
        self.command = list(command)
        self.timeout = timeout

    async def send(self, payload: HostPayload) -> HostAck:
        frame = encode_message(build_host_message(payload))

        logger.info(
            "Sending payload to native host",
            extra={
                "event": "transport.native.sending",
                "host": self.command[0],
                "bytes": len(frame),
            },
        )

        stdout = await asyncio.to_thread(self._exchange, frame)
        reply = decode_message(stdout)

        try:
            ack = HostAck.model_validate(reply)
        except ValidationError as e:
            raise TransportError(f"Host reply has an unexpected shape: {reply}") from e

        if not ack.ok:
            detail = f" (raw text saved to {ack.filename})" if ack.filename else ""
            raise TransportError(f"Host reported status '{ack.status}'{detail}")

        logger.info(
            "Native host accepted payload",
            extra={
                "event": "transport.native.delivered",
                "filename": ack.filename,
                "json_file": ack.json_file,
            },
        )
        return ack

    def _exchange(self, frame: bytes) -> bytes:
        try:
            completed = subprocess.run(
                self.command,
                input=frame,
                capture_output=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise TransportError(f"Host {self.command[0]} did not answer within {self.timeout:g}s") from e
        except OSError as e:
            raise TransportError(f"Failed to start host {self.command[0]}: {e}") from e

        if completed.returncode != 0:
            stderr = completed.stderr.decode("utf-8", errors="replace").strip()
            message = f"Host {self.command[0]} exited with status {completed.returncode}"
            raise TransportError(f"{message}: {stderr}" if stderr else message)

        return completed.stdout
