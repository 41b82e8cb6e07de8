"""
Career Copilot Configuration System
===================================

This file contains ALL configuration for the career copilot.
- User settings at the top (things users might want to change)
- Internal constants at the bottom (technical defaults)
"""
import os
from dataclasses import dataclass
from typing import Optional


# =============================================================================
# USER SETTINGS - Edit these to customize the copilot
# =============================================================================

# How requests reach the provider: "relay" (HTTP relay endpoint) or "ipc"
# (trusted local process that calls the provider directly)
TRANSPORT = "relay"
RELAY_URL = "http://localhost:3000/api/gemini"

# Provider credentials (only needed when this process talks to the provider)
GEMINI_API_KEY = None
GOOGLE_CLOUD_PROJECT = None
GOOGLE_APPLICATION_CREDENTIALS = None

# Model settings
MODEL_NAME = "gemini-2.5-flash"
ANSWER_TEMPERATURE = 0.7

# Logging
LOG_FILE = "./_copilot/copilot.log"
LOG_LEVEL = "INFO"


# =============================================================================
# INTERNAL CONSTANTS - Don't change these unless you know what you're doing
# =============================================================================

VALID_TRANSPORTS = ("relay", "ipc")

# Relay
RELAY_TIMEOUT = 60

# Provider REST API
GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
VERTEX_LOCATION = "us-central1"
LLM_TIMEOUT = 60
CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"

# Interview copilot
HISTORY_TURNS = 3
FALLBACK_ANSWER = "Sorry, I couldn't structure the answer correctly."
ERROR_ANSWER = "Error: Could not generate answer."

# Feature temperatures
BULLETS_TEMPERATURE = 0.7
COVER_LETTER_TEMPERATURE = 0.8
OUTREACH_TEMPERATURE = 0.8
CHATBOT_TEMPERATURE = 0.7
CHATBOT_MAX_OUTPUT_TOKENS = 150


# =============================================================================
# MAIN CONFIG OBJECT
# =============================================================================

@dataclass
class Config:
    """Main configuration object."""
    transport: str = TRANSPORT
    relay_url: str = RELAY_URL
    relay_timeout: int = RELAY_TIMEOUT
    api_key: Optional[str] = GEMINI_API_KEY
    google_cloud_project: Optional[str] = GOOGLE_CLOUD_PROJECT
    google_application_credentials: Optional[str] = GOOGLE_APPLICATION_CREDENTIALS
    vertex_location: str = VERTEX_LOCATION
    model_name: str = MODEL_NAME
    answer_temperature: float = ANSWER_TEMPERATURE
    log_file: str = LOG_FILE
    log_level: str = LOG_LEVEL

    @property
    def has_provider_credentials(self) -> bool:
        """Whether this process can call the provider itself."""
        return bool(self.api_key or self.google_cloud_project)


def get_config() -> Config:
    """Load configuration from the environment."""
    transport = (os.getenv("COPILOT_TRANSPORT") or TRANSPORT).strip().lower()
    if transport not in VALID_TRANSPORTS:
        raise ValueError(
            f"Unknown transport '{transport}'. Set COPILOT_TRANSPORT to one of: {', '.join(VALID_TRANSPORTS)}"
        )

    config = Config(
        transport=transport,
        relay_url=os.getenv("COPILOT_RELAY_URL") or RELAY_URL,
        api_key=os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or GEMINI_API_KEY,
        google_cloud_project=os.getenv("GOOGLE_CLOUD_PROJECT") or GOOGLE_CLOUD_PROJECT,
        google_application_credentials=(
            os.getenv("GOOGLE_APPLICATION_CREDENTIALS") or GOOGLE_APPLICATION_CREDENTIALS
        ),
        model_name=os.getenv("COPILOT_MODEL") or MODEL_NAME,
        log_file=os.getenv("COPILOT_LOG_FILE") or LOG_FILE,
        log_level=(os.getenv("COPILOT_LOG_LEVEL") or LOG_LEVEL).upper(),
    )

    if config.transport == "ipc" and not config.has_provider_credentials:
        raise ValueError(
            "The ipc transport calls the provider directly: set GEMINI_API_KEY or GOOGLE_CLOUD_PROJECT"
        )

    return config
