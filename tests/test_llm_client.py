"""Unit tests for LLMClient."""
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))

import pytest
from unittest.mock import AsyncMock, Mock, patch
from services.llm_client import LLMClient, LLMError, LLMClientError
from models.conversation import Turn
from groq import RateLimitError, AuthenticationError, APIError, APITimeoutError
from groq.types.chat import ChatCompletion


def make_completion(content):
    """Build a Groq-shaped chat completion response."""
    response = Mock()
    response.choices = [Mock(message=Mock(content=content))]
    response.usage = Mock(prompt_tokens=150, completion_tokens=12)
    return response


def make_chat_completion(content):
    """Build a real Groq ChatCompletion object."""
    return ChatCompletion.model_validate({
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "llama-3.3-70b-versatile",
        "choices": [{
            "index": 0,
            "finish_reason": "stop",
            "logprobs": None,
            "message": {"role": "assistant", "content": content},
        }],
    })


@pytest.fixture
def mock_groq():
    """Patch AsyncGroq and expose the mocked create() coroutine."""
    with patch('services.llm_client.AsyncGroq') as mock_groq_class:
        mock_client = Mock()
        mock_client.chat.completions.create = AsyncMock()
        mock_groq_class.return_value = mock_client
        yield mock_client.chat.completions.create


class TestLLMClient:
    """Test suite for LLMClient class."""

    def test_initialization_with_api_key(self, mock_groq):
        """Test LLMClient initializes with provided API key."""
        client = LLMClient(api_key="test_key")
        assert client.api_key == "test_key"

    def test_initialization_without_api_key_raises_error(self):
        """Test LLMClient raises error when no API key provided."""
        with patch('services.llm_client.GROQ_API_KEY', None):
            with pytest.raises(ValueError, match="GROQ_API_KEY must be provided"):
                LLMClient()

    def test_build_messages_order_and_roles(self):
        """Test that the system prompt leads and history maps onto chat roles."""
        history = [
            Turn.user("Do you have SUVs?"),
            Turn.assistant("Yes, we have the Honda CR-V and Toyota RAV4."),
        ]

        messages = LLMClient.build_messages("SYSTEM", history, "Which is cheaper?")

        assert messages == [
            {"role": "system", "content": "SYSTEM"},
            {"role": "user", "content": "Do you have SUVs?"},
            {"role": "assistant", "content": "Yes, we have the Honda CR-V and Toyota RAV4."},
            {"role": "user", "content": "Which is cheaper?"},
        ]

    def test_build_messages_without_history(self):
        """Test that the system prompt appears exactly once with empty history."""
        messages = LLMClient.build_messages("SYSTEM", [], "Hello")

        assert [m["role"] for m in messages] == ["system", "user"]

    @pytest.mark.asyncio
    async def test_complete_success(self, mock_groq):
        """Test successful reply generation."""
        mock_groq.return_value = make_completion("We have 12 SUVs under $30k.")

        client = LLMClient(api_key="test_key", model="llama-3.1-8b-instant")
        text = await client.complete("SYSTEM", [Turn.user("Hi"), Turn.assistant("Hello!")], "SUVs under $30k?")

        assert text == "We have 12 SUVs under $30k."
        kwargs = mock_groq.call_args.kwargs
        assert kwargs["model"] == "llama-3.1-8b-instant"
        assert kwargs["messages"][0] == {"role": "system", "content": "SYSTEM"}
        assert kwargs["messages"][-1] == {"role": "user", "content": "SUVs under $30k?"}
        assert len(kwargs["messages"]) == 4

    @pytest.mark.asyncio
    async def test_complete_handles_unexpected_error(self, mock_groq):
        """Test that arbitrary exceptions become structured errors."""
        mock_groq.side_effect = Exception("API Error")

        client = LLMClient(api_key="test_key", model="llama-3.1-8b-instant")

        with pytest.raises(LLMClientError) as exc_info:
            await client.complete("SYSTEM", [], "Hi")

        error = exc_info.value.error
        assert isinstance(error, LLMError)
        assert error.code == "UNKNOWN_ERROR"
        assert "Unexpected error" in error.message
        assert error.details["model"] == "llama-3.1-8b-instant"
        assert error.details["error_type"] == "Exception"

    @pytest.mark.asyncio
    async def test_complete_handles_rate_limit_error(self, mock_groq):
        """Test that rate limit errors are handled with retry suggestion."""
        mock_groq.side_effect = RateLimitError(
            message="Rate limit exceeded",
            response=Mock(status_code=429),
            body=None
        )

        client = LLMClient(api_key="test_key")

        with pytest.raises(LLMClientError) as exc_info:
            await client.complete("SYSTEM", [], "Hi")

        error = exc_info.value.error
        assert error.code == "RATE_LIMIT_ERROR"
        assert "Rate limit exceeded" in error.message
        assert error.details["retry_after"] == 60

    @pytest.mark.asyncio
    async def test_complete_handles_authentication_error(self, mock_groq):
        """Test that authentication errors are handled properly."""
        mock_groq.side_effect = AuthenticationError(
            message="Invalid API key",
            response=Mock(status_code=401),
            body=None
        )

        client = LLMClient(api_key="test_key")

        with pytest.raises(LLMClientError) as exc_info:
            await client.complete("SYSTEM", [], "Hi")

        assert exc_info.value.error.code == "AUTHENTICATION_ERROR"
        assert "Authentication failed" in exc_info.value.error.message

    @pytest.mark.asyncio
    async def test_complete_handles_timeout_error(self, mock_groq):
        """Test that timeout errors are handled properly."""
        mock_groq.side_effect = APITimeoutError(request=Mock())

        client = LLMClient(api_key="test_key")

        with pytest.raises(LLMClientError) as exc_info:
            await client.complete("SYSTEM", [], "Hi")

        assert exc_info.value.error.code == "TIMEOUT_ERROR"
        assert "timed out" in exc_info.value.error.message

    @pytest.mark.asyncio
    async def test_complete_handles_generic_api_error(self, mock_groq):
        """Test that generic API errors are handled properly."""
        mock_groq.side_effect = APIError(
            message="Service unavailable",
            request=Mock(),
            body=None
        )

        client = LLMClient(api_key="test_key")

        with pytest.raises(LLMClientError) as exc_info:
            await client.complete("SYSTEM", [], "Hi")

        assert exc_info.value.error.code == "API_ERROR"
        assert "Groq API error" in exc_info.value.error.message

    @pytest.mark.asyncio
    async def test_complete_empty_response(self, mock_groq):
        """Test that blank replies are reported as failures."""
        mock_groq.return_value = make_completion("   ")

        client = LLMClient(api_key="test_key")

        with pytest.raises(LLMClientError) as exc_info:
            await client.complete("SYSTEM", [], "Hi")

        assert exc_info.value.error.code == "EMPTY_RESPONSE"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["", None])
    async def test_complete_empty_chat_completion(self, mock_groq, content):
        """Test that a real ChatCompletion with no content is an empty response, not serialized JSON."""
        mock_groq.return_value = make_chat_completion(content)

        client = LLMClient(api_key="test_key")

        with pytest.raises(LLMClientError) as exc_info:
            await client.complete("SYSTEM", [], "Hi")

        assert exc_info.value.error.code == "EMPTY_RESPONSE"

    @pytest.mark.asyncio
    async def test_complete_real_chat_completion(self, mock_groq):
        mock_groq.return_value = make_chat_completion("The Civic starts at $24k.")

        client = LLMClient(api_key="test_key")

        assert await client.complete("SYSTEM", [], "Civic price?") == "The Civic starts at $24k."

    @pytest.mark.asyncio
    async def test_complete_unreadable_response(self, mock_groq):
        """Test that normalization failures become structured errors."""
        circular = {}
        circular["self"] = circular
        mock_groq.return_value = circular

        client = LLMClient(api_key="test_key")

        with pytest.raises(LLMClientError) as exc_info:
            await client.complete("SYSTEM", [], "Hi")

        assert exc_info.value.error.code == "UNKNOWN_ERROR"
        assert exc_info.value.error.details["error_type"] == "ValueError"

    @pytest.mark.asyncio
    async def test_error_includes_latency(self, mock_groq):
        """Test that errors include latency measurement."""
        mock_groq.side_effect = RateLimitError(
            message="Rate limit exceeded",
            response=Mock(status_code=429),
            body=None
        )

        client = LLMClient(api_key="test_key")

        with pytest.raises(LLMClientError) as exc_info:
            await client.complete("SYSTEM", [], "Hi")

        details = exc_info.value.error.details
        assert isinstance(details["latency_ms"], int)
        assert details["latency_ms"] >= 0


class TestExtractText:
    """Test suite for response text normalization."""

    def test_plain_string(self):
        assert LLMClient.extract_text("Hello") == "Hello"

    def test_chat_completion_object(self):
        assert LLMClient.extract_text(make_completion("From choices")) == "From choices"

    def test_chat_completion_dict(self):
        result = {"choices": [{"message": {"content": "From dict"}}]}
        assert LLMClient.extract_text(result) == "From dict"

    def test_text_field(self):
        assert LLMClient.extract_text({"text": "From text"}) == "From text"

    def test_output_field(self):
        assert LLMClient.extract_text({"output": "From output"}) == "From output"

    def test_text_preferred_over_output(self):
        assert LLMClient.extract_text({"text": "first", "output": "second"}) == "first"

    @pytest.mark.parametrize("content", ["", None])
    def test_message_without_content(self, content):
        assert LLMClient.extract_text(make_chat_completion(content)) == ""

    def test_dict_message_without_content(self):
        assert LLMClient.extract_text({"choices": [{"message": {"content": None}}], "text": "ignored"}) == ""

    def test_falls_back_to_serialization(self):
        assert LLMClient.extract_text({"foo": 1}) == '{"foo": 1}'


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
