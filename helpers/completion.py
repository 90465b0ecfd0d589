"""
Completion Client

This module wraps a single call to the external language-model endpoint.
One attempt per call; the caller decides what a failure means.

The blocking Gemini client is used and run in a worker thread. Flask runs
every async view in a fresh event loop, and the library's cached async
client is bound to the loop it was first created in.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-1.5-pro"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_TIMEOUT = 60

# gRPC reports these as UNAVAILABLE although no response ever came back
_CONNECT_FAILURE_MARKERS = (
    "failed to connect",
    "connection refused",
    "dns resolution failed",
    "name resolution",
    "network is unreachable",
    "socket closed",
    "connection reset",
)


class CompletionError(Exception):
    """Base exception for completion errors."""

    pass


class ConfigurationError(CompletionError):
    """The client cannot run: credential or runtime capability missing."""

    pass


class UpstreamError(CompletionError):
    """The model endpoint answered with an error."""

    def __init__(self, message, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class TransportError(CompletionError):
    """The model endpoint could not be reached in time."""

    pass


def extract_text(response) -> str:
    """Return the first non-empty text part of a response, or ""."""
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            text = getattr(part, "text", None)
            if isinstance(text, str) and text:
                return text
    return ""


def is_connect_failure(error) -> bool:
    """True when an UNAVAILABLE error means the endpoint was never reached."""
    message = (getattr(error, "message", None) or str(error)).lower()
    return any(marker in message for marker in _CONNECT_FAILURE_MARKERS)


class CompletionClient(ABC):
    """Turns a PromptPayload into raw model text."""

    @abstractmethod
    async def complete(self, prompt, max_tokens: Optional[int] = None) -> str:
        """
        Run one completion.

        Args:
            prompt: PromptPayload with system and user instructions.
            max_tokens: Optional cap on generated tokens.

        Returns:
            The raw completion text, "" when the response carried none.

        Raises:
            ConfigurationError: If the credential is missing.
            UpstreamError: If the endpoint returned an error.
            TransportError: If the endpoint could not be reached.
        """
        pass


class GeminiCompletionClient(CompletionClient):
    """Completion client backed by Google's Gemini API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: str = DEFAULT_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.api_key = (api_key or "").strip() or None
        self.model_name = model_name
        self.temperature = temperature
        self.timeout = timeout
        if self.api_key:
            genai.configure(api_key=self.api_key)

    @property
    def request_options(self) -> dict:
        # retry=None replaces the library's default retry policy: one attempt only
        return {"timeout": self.timeout, "retry": None}

    def _generate(self, prompt, generation_config: dict):
        model = genai.GenerativeModel(self.model_name, system_instruction=prompt.system)
        return model.generate_content(
            prompt.user,
            generation_config=genai.types.GenerationConfig(**generation_config),
            request_options=self.request_options,
        )

    async def complete(self, prompt, max_tokens: Optional[int] = None) -> str:
        if not self.api_key:
            raise ConfigurationError("Missing GEMINI_API_KEY")

        generation_config = {"temperature": self.temperature}
        if max_tokens:
            generation_config["max_output_tokens"] = max_tokens

        logger.info(f"Calling {self.model_name} (max_tokens={max_tokens})")
        logger.debug(
            f"Prompt sizes: system={len(prompt.system)} user={len(prompt.user)}"
        )

        try:
            response = await asyncio.to_thread(self._generate, prompt, generation_config)
        except (google_exceptions.DeadlineExceeded, google_exceptions.RetryError) as e:
            logger.error(f"Gemini request to {self.model_name} timed out: {e}")
            raise TransportError(f"Model request timed out: {e}") from e
        except google_exceptions.ServiceUnavailable as e:
            if is_connect_failure(e):
                logger.error(f"Could not reach Gemini: {e.message}")
                raise TransportError(
                    f"Could not reach the model endpoint: {e.message}"
                ) from e
            logger.error(f"Gemini is unavailable ({e.code}): {e.message}")
            raise UpstreamError(e.message or "Gemini unavailable", status=e.code) from e
        except google_exceptions.GoogleAPICallError as e:
            message = getattr(e, "message", None) or str(e) or "Gemini error"
            logger.error(f"Gemini returned an error ({e.code}): {message}")
            raise UpstreamError(message, status=e.code) from e
        except (asyncio.TimeoutError, ConnectionError, OSError) as e:
            logger.error(f"Could not reach Gemini: {e}")
            raise TransportError(f"Could not reach the model endpoint: {e}") from e

        text = extract_text(response)
        if not text:
            logger.warning(f"{self.model_name} returned no text content")
        return text


def get_completion_client(config) -> CompletionClient:
    """Create the completion client described by a config mapping."""
    return GeminiCompletionClient(
        api_key=config.get("GEMINI_API_KEY"),
        model_name=config.get("GEMINI_MODEL") or DEFAULT_MODEL,
        temperature=config.get("GEMINI_TEMPERATURE", DEFAULT_TEMPERATURE),
        timeout=config.get("COMPLETION_TIMEOUT", DEFAULT_TIMEOUT),
    )
