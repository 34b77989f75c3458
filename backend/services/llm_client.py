"""Completion client for Groq chat API integration."""
import json
import time
from dataclasses import dataclass
from typing import Any, Dict, List, NoReturn, Optional, Sequence
from groq import AsyncGroq
from groq import RateLimitError, AuthenticationError, APIError, APITimeoutError
import logging

from config import (
    GROQ_API_KEY,
    COMPLETION_MODEL,
    COMPLETION_TEMPERATURE,
    COMPLETION_MAX_TOKENS,
    LLM_TIMEOUT_SECONDS,
)
from models.conversation import Turn, USER_ROLE, ASSISTANT_ROLE

logger = logging.getLogger(__name__)

# Conversation roles -> Groq chat roles
ROLE_MAP = {
    USER_ROLE: "user",
    ASSISTANT_ROLE: "assistant",
}


@dataclass
class LLMError:
    """Structured error response from LLM operations."""
    code: str
    message: str
    details: Dict[str, Any]


class LLMClientError(Exception):
    """Custom exception for LLM client errors with structured error information."""

    def __init__(self, error: LLMError):
        self.error = error
        super().__init__(error.message)


class LLMClient:
    """Client for generating assistant replies through the Groq API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = COMPLETION_MODEL,
        temperature: float = COMPLETION_TEMPERATURE,
        max_tokens: int = COMPLETION_MAX_TOKENS,
    ):
        """
        Initialize LLM client with Groq API key.

        Args:
            api_key: Groq API key (defaults to GROQ_API_KEY from environment)
            model: Chat model name
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate per reply
        """
        self.api_key = api_key or GROQ_API_KEY
        if not self.api_key:
            raise ValueError("GROQ_API_KEY must be provided or set in environment")

        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.client = AsyncGroq(api_key=self.api_key, timeout=LLM_TIMEOUT_SECONDS)
        logger.info(f"LLMClient initialized successfully with model {model}")

    async def complete(
        self,
        system_instruction: str,
        history: Sequence[Turn],
        new_user_text: str,
    ) -> str:
        """
        Generate the assistant reply for a new user message.

        Args:
            system_instruction: System prompt, sent once ahead of the history
            history: Prior turns in transcript order (excluding the new message)
            new_user_text: The user's new message

        Returns:
            Generated reply as plain text

        Raises:
            LLMClientError: Structured error with code, message, and details
        """
        start_time = time.time()
        messages = self.build_messages(system_instruction, history, new_user_text)

        try:
            logger.debug(f"Requesting completion: model={self.model}, messages={len(messages)}")

            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except RateLimitError as e:
            self._raise(
                "RATE_LIMIT_ERROR",
                "Rate limit exceeded. Please try again in a few moments.",
                start_time, e, retry_after=60,
            )
        except AuthenticationError as e:
            self._raise(
                "AUTHENTICATION_ERROR",
                "Authentication failed. Please check your API key.",
                start_time, e,
            )
        except APITimeoutError as e:
            self._raise("TIMEOUT_ERROR", "Request timed out. Please try again.", start_time, e)
        except APIError as e:
            self._raise("API_ERROR", f"Groq API error: {str(e)}", start_time, e)
        except Exception as e:
            self._raise(
                "UNKNOWN_ERROR",
                f"Unexpected error during generation: {str(e)}",
                start_time, e, error_type=type(e).__name__,
            )

        latency_ms = int((time.time() - start_time) * 1000)
        try:
            text = self.extract_text(response)
        except Exception as e:
            self._raise(
                "UNKNOWN_ERROR",
                f"Could not read the model response: {str(e)}",
                start_time, e, error_type=type(e).__name__,
            )

        if not text.strip():
            self._raise("EMPTY_RESPONSE", "The model returned an empty response.", start_time)

        usage = getattr(response, "usage", None)
        logger.info(
            f"Generated response: model={self.model}, "
            f"input_tokens={getattr(usage, 'prompt_tokens', None)}, "
            f"output_tokens={getattr(usage, 'completion_tokens', None)}, "
            f"latency={latency_ms}ms"
        )
        return text

    def _raise(
        self,
        code: str,
        message: str,
        start_time: float,
        cause: Optional[BaseException] = None,
        **details: Any,
    ) -> NoReturn:
        latency_ms = int((time.time() - start_time) * 1000)
        details.update({"model": self.model, "latency_ms": latency_ms})
        if cause is not None:
            details["original_error"] = str(cause)

        error = LLMError(code=code, message=message, details=details)
        logger.error(
            f"Completion failed: code={code}, model={self.model}, latency={latency_ms}ms, error={cause}",
            exc_info=cause is not None,
            extra={"error_code": error.code, "error_details": error.details},
        )
        raise LLMClientError(error) from cause

    @staticmethod
    def build_messages(
        system_instruction: str,
        history: Sequence[Turn],
        new_user_text: str,
    ) -> List[Dict[str, str]]:
        """
        Build the chat message list sent to the API.

        The system instruction always comes first and exactly once, followed by
        the history in order and the new user message last.
        """
        messages = [{"role": "system", "content": system_instruction}]
        for turn in history:
            messages.append({"role": ROLE_MAP[turn.role], "content": turn.content})
        messages.append({"role": "user", "content": new_user_text})
        return messages

    @staticmethod
    def extract_text(result: Any) -> str:
        """
        Normalize a completion result to plain text.

        Lookup order: plain string, ``choices[0].message.content``, ``text``,
        ``output``, then a JSON serialization of the whole result. A chat
        message with no content yields "" rather than the serialized result.
        """
        if isinstance(result, str):
            return result

        message = _lookup(_first(_lookup(result, "choices")), "message")
        if message is not None:
            content = _lookup(message, "content")
            return content if isinstance(content, str) else ""

        for key in ("text", "output"):
            value = _lookup(result, key)
            if isinstance(value, str) and value:
                return value

        if hasattr(result, "model_dump"):
            result = result.model_dump()
        return json.dumps(result, default=str)


def _lookup(obj: Any, key: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)


def _first(items: Any) -> Any:
    if isinstance(items, (list, tuple)) and items:
        return items[0]
    return None
