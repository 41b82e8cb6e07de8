"""
Transport abstraction over the two delivery channels to the provider.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Union

from ...exceptions import DecodeError
from ..llm.client import response_text


@dataclass(frozen=True)
class RawChunk:
    """One decoded unit of provider output carrying a text fragment."""
    text: str
    payload: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_payload(cls, payload: Any) -> "RawChunk":
        """Build a chunk from a decoded provider response object."""
        if not isinstance(payload, dict):
            raise DecodeError(
                f"Expected a JSON object chunk, got {type(payload).__name__}",
                snippet=repr(payload),
            )
        return cls(text=response_text(payload), payload=payload)


@dataclass
class ProviderRequest:
    """A request for the provider, in the SDK's {model, contents, config} shape."""
    model: str
    contents: Union[str, Dict[str, Any]]
    config: Dict[str, Any] = field(default_factory=dict)

    def to_args(self) -> Dict[str, Any]:
        return {"model": self.model, "contents": self.contents, "config": dict(self.config)}

    def to_payload(self, is_stream: bool) -> Dict[str, Any]:
        """Envelope accepted by both the relay endpoint and the IPC handler."""
        return {"isStream": is_stream, "args": self.to_args()}


class ChatTransport(ABC):
    """
    Delivers requests to the provider, hiding which channel is used.

    Subclasses must implement:
    - stream(): lazy, finite, non-restartable sequence of RawChunk
    - call(): one full provider response for non-streaming features
    """

    name: str = "transport"

    @abstractmethod
    def stream(self, request: ProviderRequest) -> Iterator[RawChunk]:
        """
        Start a streaming request.

        Raises (while iterating):
            TransportError: If the channel fails
            DecodeError: If a chunk is not valid JSON
        """

    @abstractmethod
    def call(self, request: ProviderRequest) -> Dict[str, Any]:
        """
        Run a non-streaming request and return the provider response.

        Raises:
            TransportError: If the channel fails
            DecodeError: If the response is not valid JSON
        """

    def close(self) -> None:
        """Release pooled resources."""
