"""
Transport adapters for reaching the provider.

A transport is chosen once at startup by create_transport() and injected
into whatever needs it.
"""
import logging
from typing import Optional

from ...config import Config
from ..llm.client import GeminiRestClient
from .base import ChatTransport, ProviderRequest, RawChunk
from .ipc import IpcInvoke, IpcTransport, ProviderBridge
from .reassembly import NdjsonReassembler, iter_ndjson, single_chunk
from .relay import RelayHttpTransport

logger = logging.getLogger("transport")


def create_transport(config: Config, ipc_invoke: Optional[IpcInvoke] = None) -> ChatTransport:
    """
    Pick the channel available in this runtime.

    Args:
        config: Loaded configuration
        ipc_invoke: Handle to a desktop bridge process, when one is running

    Returns:
        The transport every consumer should share
    """
    if ipc_invoke is not None:
        logger.info("Using IPC transport (external bridge)")
        return IpcTransport(ipc_invoke)

    if config.transport == "ipc":
        client = GeminiRestClient(
            api_key=config.api_key,
            project=config.google_cloud_project,
            location=config.vertex_location,
            model=config.model_name,
            credentials_json=config.google_application_credentials,
        )
        logger.info("Using IPC transport (in-process bridge, %s)",
                    "Vertex AI" if client.uses_vertex else "API key")
        return IpcTransport(ProviderBridge(client).handle)

    logger.info("Using relay transport at %s", config.relay_url)
    return RelayHttpTransport(config.relay_url, timeout=config.relay_timeout)


__all__ = [
    "ChatTransport", "ProviderRequest", "RawChunk",
    "RelayHttpTransport", "IpcTransport", "IpcInvoke", "ProviderBridge",
    "NdjsonReassembler", "iter_ndjson", "single_chunk",
    "create_transport",
]
