"""
OpenAI Provider for the BuildAura Application.

This module provides a centralized, lazily created async chat client.  Two
backends are supported:

- Azure OpenAI, selected when ``AZURE_OPENAI_ENDPOINT`` is set
- The public OpenAI API otherwise

Environment Variables:
- OPENAI_API_KEY: OpenAI API key (public API)
- OPENAI_MODEL: Chat model name (default: gpt-4o-mini)
- AZURE_OPENAI_ENDPOINT: Azure OpenAI endpoint URL
- AZURE_OPENAI_KEY: Azure OpenAI API key
- AZURE_OPENAI_API_VERSION: API version for chat completions (default: 2024-12-01-preview)
- AZURE_OPENAI_DEPLOYMENT_CHAT: Deployment name for the chat model (default: gpt-4o-mini)

Usage:
    from buildaura.openai_provider import get_async_client, get_chat_model
"""

import os
import logging
from functools import lru_cache
from typing import Union

from dotenv import load_dotenv
from openai import AsyncAzureOpenAI, AsyncOpenAI

load_dotenv()

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Loading
# =============================================================================


def _get_required_env(name: str) -> str:
    """Get a required environment variable or raise an error."""
    if value := os.getenv(name):
        return value
    else:
        raise ValueError(
            f"Missing required environment variable: {name}. "
            f"An LLM provider must be configured for generation endpoints."
        )


def _get_optional_env(name: str, default: str) -> str:
    """Get an optional environment variable with a default value."""
    return os.getenv(name, default)


class OpenAIConfig:
    """LLM provider configuration container."""

    def __init__(self):
        """Load configuration from environment variables."""
        self.azure_endpoint = os.getenv("AZURE_OPENAI_ENDPOINT")
        self.use_azure = bool(self.azure_endpoint)

        if self.use_azure:
            self.api_key = _get_required_env("AZURE_OPENAI_KEY")
            self.api_version = _get_optional_env(
                "AZURE_OPENAI_API_VERSION", "2024-12-01-preview"
            )
            self.chat_model = _get_optional_env(
                "AZURE_OPENAI_DEPLOYMENT_CHAT", "gpt-4o-mini"
            )
        else:
            self.api_key = _get_required_env("OPENAI_API_KEY")
            self.api_version = None
            self.chat_model = _get_optional_env("OPENAI_MODEL", "gpt-4o-mini")

    def log_configuration(self):
        """Log the current configuration (without sensitive data)."""
        logger.info("LLM provider configuration:")
        logger.info("  Backend: %s", "azure" if self.use_azure else "openai")
        if self.use_azure:
            logger.info("  Endpoint: %s", self.azure_endpoint)
            logger.info("  API Version: %s", self.api_version)
        logger.info("  Chat model: %s", self.chat_model)


# =============================================================================
# Client Initialization
# =============================================================================


@lru_cache(maxsize=1)
def get_config() -> OpenAIConfig:
    config = OpenAIConfig()
    config.log_configuration()
    return config


def _create_async_client(config: OpenAIConfig) -> Union[AsyncOpenAI, AsyncAzureOpenAI]:
    """Create an asynchronous chat client for the configured backend."""
    if config.use_azure:
        return AsyncAzureOpenAI(
            api_key=config.api_key,
            api_version=config.api_version,
            azure_endpoint=config.azure_endpoint,
        )
    return AsyncOpenAI(api_key=config.api_key)


@lru_cache(maxsize=1)
def get_async_client() -> Union[AsyncOpenAI, AsyncAzureOpenAI]:
    """Return the shared async client, creating it on first use.

    Raises:
        ValueError: If the required credentials are not configured.
    """
    client = _create_async_client(get_config())
    logger.info("LLM async client initialized successfully")
    return client


def get_chat_model() -> str:
    """Get the chat model (or Azure deployment) name."""
    return get_config().chat_model


def is_configured() -> bool:
    """Report whether credentials for either backend are present."""
    if os.getenv("AZURE_OPENAI_ENDPOINT"):
        return bool(os.getenv("AZURE_OPENAI_KEY"))
    return bool(os.getenv("OPENAI_API_KEY"))


__all__ = [
    "OpenAIConfig",
    "get_config",
    "get_async_client",
    "get_chat_model",
    "is_configured",
]
