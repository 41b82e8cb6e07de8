"""Infrastructure components for the career copilot.

This module contains the low-level pieces that talk to the provider:
the REST client and the transports that carry requests to it.
"""

# LLM infrastructure
from .llm import GeminiRestClient, response_text

# Transport infrastructure
from .transport import (
    ChatTransport, ProviderRequest, RawChunk,
    RelayHttpTransport, IpcTransport, ProviderBridge,
    create_transport
)

__all__ = [
    # LLM client
    "GeminiRestClient", "response_text",

    # Transports
    "ChatTransport", "ProviderRequest", "RawChunk",
    "RelayHttpTransport", "IpcTransport", "ProviderBridge",
    "create_transport"
]
