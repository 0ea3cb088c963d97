"""Claude API client wrapper with retry logic and structured (tool-call) output."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

from anthropic import APIConnectionError, APIStatusError, AsyncAnthropic, RateLimitError

from config_loader import Settings, get_anthropic_api_key

logger = logging.getLogger(__name__)


class CompletionClient(ABC):
    """A text-generation service constrained to return schema-shaped data."""

    @abstractmethod
    async def complete_structured(
        self,
        system: str,
        user: str,
        tool_name: str,
        description: str,
        schema: dict[str, Any],
        max_tokens: int | None = None,
    ) -> dict[str, Any]:
        """Return the model's arguments for the forced tool call.

        Raises:
            ValueError: If the response carries no structured output.
        """

    def get_token_usage(self) -> dict[str, int]:
        """Cumulative token usage; clients that do not meter report zeros."""
        return {"input_tokens": 0, "output_tokens": 0, "total_tokens": 0}

    def reset_token_usage(self) -> None:
        pass


class ClaudeClient(CompletionClient):
    """Wrapper for Claude API with retry logic, forced tool output, and token tracking."""

    def __init__(self, settings: Settings):
        """Initialize the Claude client.

        Args:
            settings: Settings with the API key, model and timeout.

        Raises:
            ValueError: If no API key is configured.
        """
        self.client = AsyncAnthropic(
            api_key=get_anthropic_api_key(settings),
            timeout=settings.completion_timeout,
            max_retries=0,
        )
        self.model = settings.completion_model
        self.max_tokens = settings.completion_max_tokens
        self.retry_count = max(1, settings.completion_retries)
        self.total_input_tokens = 0
        self.total_output_tokens = 0

    async def complete_structured(
        self,
        system: str,
        user: str,
        tool_name: str,
        description: str,
        schema: dict[str, Any],
        max_tokens: int | None = None,
    ) -> dict[str, Any]:
        """Make a Claude call that must answer through a single tool.

        Args:
            system: System prompt
            user: User message content
            tool_name: Name of the forced tool
            description: Tool description shown to the model
            schema: JSON schema of the tool input
            max_tokens: Maximum tokens in response

        Returns:
            The tool input as a dictionary

        Raises:
            ValueError: If the response contains no matching tool call
            APIError: If all retries fail
        """
        response = await self._create(
            system=system,
            messages=[{"role": "user", "content": user}],
            max_tokens=max_tokens or self.max_tokens,
            tools=[{"name": tool_name, "description": description, "input_schema": schema}],
            tool_choice={"type": "tool", "name": tool_name},
        )
        return self.parse_tool_response(response, tool_name)

    async def _create(self, retry_delay: float = 1.0, **request) -> Any:
        """Send a messages request, retrying transient failures with backoff."""
        last_error = None
        delay = retry_delay

        for attempt in range(self.retry_count):
            try:
                response = await self.client.messages.create(model=self.model, **request)

                # Track token usage
                self.total_input_tokens += response.usage.input_tokens
                self.total_output_tokens += response.usage.output_tokens

                return response

            except RateLimitError as e:
                last_error = e
                if attempt < self.retry_count - 1:
                    logger.warning("Rate limited, waiting %ss...", delay)
                    await asyncio.sleep(delay)
                    delay *= 2  # Exponential backoff

            except APIConnectionError as e:
                last_error = e
                if attempt < self.retry_count - 1:
                    logger.warning("Connection error, retrying in %ss...", delay)
                    await asyncio.sleep(delay)
                    delay *= 2

            except APIStatusError as e:
                # Don't retry on client errors (4xx except rate limit)
                if 400 <= e.status_code < 500:
                    raise
                last_error = e
                if attempt < self.retry_count - 1:
                    logger.warning("API error %s, retrying in %ss...", e.status_code, delay)
                    await asyncio.sleep(delay)
                    delay *= 2

        # All retries exhausted
        raise last_error

    @staticmethod
    def parse_tool_response(response: Any, tool_name: str) -> dict[str, Any]:
        """Extract the input of the named tool_use block.

        Raises:
            ValueError: If no such block exists or its input is not an object.
        """
        for block in getattr(response, "content", None) or []:
            if getattr(block, "type", None) == "tool_use" and getattr(block, "name", None) == tool_name:
                if not isinstance(block.input, dict):
                    raise ValueError(f"Tool {tool_name} returned non-object input")
                return block.input

        raise ValueError(f"No {tool_name} tool call in response")

    def get_token_usage(self) -> dict[str, int]:
        """Get cumulative token usage for this client instance.

        Returns:
            Dictionary with input_tokens, output_tokens, and total_tokens
        """
        return {
            "input_tokens": self.total_input_tokens,
            "output_tokens": self.total_output_tokens,
            "total_tokens": self.total_input_tokens + self.total_output_tokens,
        }

    def reset_token_usage(self) -> None:
        """Reset token usage counters."""
        self.total_input_tokens = 0
        self.total_output_tokens = 0
