"""
Gemini REST client for provider calls.
"""
import json
import logging
from typing import Optional, Dict, Any, List

import requests
import google.auth
import google.auth.transport.requests
from google.oauth2 import service_account

from ...config import (
    MODEL_NAME, GEMINI_API_BASE, VERTEX_LOCATION, LLM_TIMEOUT, CLOUD_PLATFORM_SCOPE
)

logger = logging.getLogger("llm_client")

# Keys of the SDK-style "config" object that map 1:1 onto REST generationConfig
GENERATION_CONFIG_KEYS = (
    "temperature",
    "maxOutputTokens",
    "topK",
    "topP",
    "stopSequences",
    "responseMimeType",
    "responseSchema",
)


def response_text(resp_json: Dict[str, Any]) -> str:
    """
    Extract the generated text from a provider response (or stream chunk).

    Tries a top-level "text" field first, then the Gemini schema
    candidates[0].content.parts[*].text. Returns "" when there is no text.
    """
    if not isinstance(resp_json, dict):
        return ""

    if isinstance(resp_json.get("text"), str):
        return resp_json["text"]

    cands = resp_json.get("candidates")
    if isinstance(cands, list) and cands and isinstance(cands[0], dict):
        content = cands[0].get("content") or {}
        if not isinstance(content, dict):
            return ""
        parts = content.get("parts")
        if isinstance(parts, list):
            return "".join(
                p["text"] for p in parts
                if isinstance(p, dict) and isinstance(p.get("text"), str)
            )
        # Some responses put text directly in content
        if isinstance(content.get("text"), str):
            return content["text"]

    return ""


def build_request_body(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convert SDK-style args ({"model", "contents", "config"}) into a REST body.

    "contents" may be a prompt string, a {"parts": [...]} object, or an
    already-formed list of content objects.
    """
    contents = args.get("contents", "")
    if isinstance(contents, str):
        rest_contents: List[Dict[str, Any]] = [{"role": "user", "parts": [{"text": contents}]}]
    elif isinstance(contents, dict) and "parts" in contents:
        rest_contents = [{"role": contents.get("role", "user"), "parts": list(contents["parts"])}]
    elif isinstance(contents, list):
        rest_contents = list(contents)
    else:
        raise ValueError(f"Unsupported contents type: {type(contents).__name__}")

    body: Dict[str, Any] = {"contents": rest_contents}

    config = args.get("config") or {}
    generation_config = {k: config[k] for k in GENERATION_CONFIG_KEYS if k in config}
    if generation_config:
        body["generationConfig"] = generation_config
    if config.get("systemInstruction"):
        body["systemInstruction"] = {"parts": [{"text": config["systemInstruction"]}]}

    return body


class GeminiRestClient:
    """
    REST-based client for Gemini models.

    Uses an API key against the Generative Language API when one is given,
    otherwise Vertex AI with OAuth credentials from google-auth.
    """

    def __init__(self,
                 api_key: Optional[str] = None,
                 project: Optional[str] = None,
                 location: str = VERTEX_LOCATION,
                 model: str = MODEL_NAME,
                 credentials_json: Optional[str] = None,
                 timeout: int = LLM_TIMEOUT,
                 session: Optional[requests.Session] = None):
        if not api_key and not project:
            raise ValueError("GeminiRestClient needs an api_key or a Vertex project")
        self.api_key = api_key
        self.project = project
        self.location = location
        self.model = model
        self.credentials_json = credentials_json
        self.timeout = timeout
        self._session = session or requests.Session()
        self._token = None

    @property
    def uses_vertex(self) -> bool:
        return not self.api_key

    def _endpoint(self, model: str) -> str:
        if self.uses_vertex:
            return (
                f"https://{self.location}-aiplatform.googleapis.com/v1/projects/{self.project}"
                f"/locations/{self.location}/publishers/google/models/{model}:generateContent"
            )
        return f"{GEMINI_API_BASE}/models/{model}:generateContent"

    def _refresh_token(self):
        """Refresh the OAuth token for API calls."""
        if self.credentials_json:
            creds = service_account.Credentials.from_service_account_file(
                self.credentials_json,
                scopes=[CLOUD_PLATFORM_SCOPE],
            )
        else:
            creds, _ = google.auth.default(scopes=[CLOUD_PLATFORM_SCOPE])

        auth_req = google.auth.transport.requests.Request()
        creds.refresh(auth_req)
        self._token = creds.token

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.uses_vertex:
            if not self._token:
                self._refresh_token()
            headers["Authorization"] = f"Bearer {self._token}"
        else:
            headers["x-goog-api-key"] = self.api_key
        return headers

    def generate_content(self, args: Dict[str, Any]) -> Dict[str, Any]:
        """
        Run one non-streaming generateContent call.

        Args:
            args: SDK-style request ({"model", "contents", "config"})

        Returns:
            The provider's response JSON

        Raises:
            RuntimeError: If the provider answers with an HTTP error
        """
        model = args.get("model") or self.model
        url = self._endpoint(model)
        body = build_request_body(args)
        logger.debug("generateContent model=%s", model)

        resp = self._session.post(url, headers=self._headers(), json=body, timeout=self.timeout)
        if resp.status_code == 401 and self.uses_vertex:
            # Token expired; refresh once
            logger.info("Vertex token rejected, refreshing")
            self._refresh_token()
            resp = self._session.post(url, headers=self._headers(), json=body, timeout=self.timeout)

        if resp.status_code >= 400:
            raise RuntimeError(f"Gemini REST error {resp.status_code}: {resp.text}")

        try:
            return resp.json()
        except ValueError:
            raise RuntimeError(f"Gemini returned a non-JSON body: {resp.text[:200]}")

    def generate_text(self, args: Dict[str, Any]) -> str:
        """Convenience wrapper returning only the generated text."""
        resp_json = self.generate_content(args)
        text = response_text(resp_json)
        if not text:
            logger.warning("Empty text in provider response: %s", json.dumps(resp_json)[:500])
        return text
