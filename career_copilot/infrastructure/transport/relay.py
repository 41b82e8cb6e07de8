"""
Channel A: HTTP relay endpoint returning newline-delimited JSON.
"""
import contextlib
import logging
from typing import Any, Dict, Iterator, Optional

import requests

from ...config import RELAY_URL, RELAY_TIMEOUT
from ...exceptions import DecodeError, TransportError
from .base import ChatTransport, ProviderRequest, RawChunk
from .reassembly import iter_ndjson

logger = logging.getLogger("relay_transport")


def _relay_error_message(resp: requests.Response) -> str:
    """Pull the relay's {"error": ...} message out of a failed response."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return f"Relay error {resp.status_code}: {body['error']}"
    return f"Relay request failed with HTTP {resp.status_code}"


class RelayHttpTransport(ChatTransport):
    """Talks to the relay endpoint over HTTP."""

    name = "relay"

    def __init__(self,
                 endpoint: str = RELAY_URL,
                 timeout: float = RELAY_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.endpoint = endpoint
        self.timeout = timeout
        self._session = session or requests.Session()

    def _post(self, payload: Dict[str, Any], stream: bool) -> requests.Response:
        try:
            return self._session.post(
                self.endpoint,
                json=payload,
                headers={"Content-Type": "application/json"},
                stream=stream,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"Could not reach relay at {self.endpoint}: {e}") from e

    def stream(self, request: ProviderRequest) -> Iterator[RawChunk]:
        """
        Stream chunks from the relay.

        The connection stays open only while the returned generator is alive;
        closing the generator closes the response.
        """
        resp = self._post(request.to_payload(is_stream=True), stream=True)
        with contextlib.closing(resp):
            if not resp.ok:
                raise TransportError(_relay_error_message(resp))
            logger.debug("Relay stream opened (%s)", resp.headers.get("Content-Type"))
            yield from iter_ndjson(self._iter_blocks(resp))
            logger.debug("Relay stream closed by server")

    @staticmethod
    def _iter_blocks(resp: requests.Response) -> Iterator[bytes]:
        try:
            for block in resp.iter_content(chunk_size=None):
                yield block
        except requests.RequestException as e:
            raise TransportError(f"Relay stream interrupted: {e}") from e

    def call(self, request: ProviderRequest) -> Dict[str, Any]:
        resp = self._post(request.to_payload(is_stream=False), stream=False)
        if not resp.ok:
            raise TransportError(_relay_error_message(resp))
        try:
            body = resp.json()
        except ValueError as e:
            raise DecodeError(f"Relay returned a non-JSON body: {e}", snippet=resp.text)
        if not isinstance(body, dict):
            raise DecodeError("Relay returned a non-object JSON body", snippet=resp.text)
        return body

    def close(self) -> None:
        self._session.close()
