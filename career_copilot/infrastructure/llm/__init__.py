"""LLM provider client."""

from .client import GeminiRestClient, build_request_body, response_text

__all__ = ["GeminiRestClient", "build_request_body", "response_text"]
