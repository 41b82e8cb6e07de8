"""
Channel B: single-shot request/response call to a trusted local process.

The local process blocks on the full (non-streamed) provider response, so a
"stream" over this channel is always exactly one chunk.
"""
import json
import logging
from typing import Any, Callable, Dict, Iterator, Optional

from ...exceptions import DecodeError, TransportError
from ..llm.client import GeminiRestClient
from .base import ChatTransport, ProviderRequest, RawChunk
from .reassembly import single_chunk

logger = logging.getLogger("ipc_transport")

# Handle to the local process: takes the {isStream, args} envelope and
# returns the JSON-stringified provider response.
IpcInvoke = Callable[[Dict[str, Any]], str]


class IpcTransport(ChatTransport):
    """Calls the provider through a local request/response handle."""

    name = "ipc"

    def __init__(self, invoke: IpcInvoke):
        self._invoke = invoke

    def _round_trip(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response_text = self._invoke(payload)
        except Exception as e:
            raise TransportError(str(e) or type(e).__name__) from e

        try:
            body = json.loads(response_text)
        except (TypeError, json.JSONDecodeError) as e:
            raise DecodeError(f"IPC returned invalid JSON: {e}", snippet=str(response_text))
        if not isinstance(body, dict):
            raise DecodeError("IPC returned a non-object JSON body", snippet=str(response_text))
        return body

    def stream(self, request: ProviderRequest) -> Iterator[RawChunk]:
        payload = self._round_trip(request.to_payload(is_stream=True))
        logger.debug("IPC response received, presenting as a single chunk")
        yield from single_chunk(payload)

    def call(self, request: ProviderRequest) -> Dict[str, Any]:
        return self._round_trip(request.to_payload(is_stream=False))


class ProviderBridge:
    """
    The local process side of the IPC channel.

    Owns the provider credentials and answers {isStream, args} envelopes with
    the JSON-stringified provider response. Streaming is not available over
    this channel; isStream is accepted and ignored.
    """

    def __init__(self, client: Optional[GeminiRestClient]):
        self.client = client

    def handle(self, payload: Dict[str, Any]) -> str:
        if self.client is None:
            raise RuntimeError("AI SDK not initialized.")

        args = payload.get("args") or {}
        if payload.get("isStream"):
            logger.debug("Streaming requested over IPC; collecting full response instead")

        try:
            response = self.client.generate_content(args)
        except Exception as e:
            logger.error("Provider call failed in bridge: %s", e)
            raise RuntimeError(f"An error occurred while calling the Gemini API: {e}") from e

        return json.dumps(response)
