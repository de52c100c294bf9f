"""Text generation provider interface and implementations."""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

import openai
from openai import AsyncOpenAI
from pydantic import BaseModel, Field
from rich.console import Console

console = Console()

SleepFn = Callable[[float], Awaitable[Any]]

# Errors worth another attempt; everything else from the SDK is permanent
_TRANSIENT_ERRORS = (
    openai.RateLimitError,
    openai.APIConnectionError,
    openai.InternalServerError,
)


class GenerationFailure(Exception):
    """The generation capability errored or returned nothing usable."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


class GenerationOptions(BaseModel):
    """Per-call generation options."""

    max_retries: int = Field(3, ge=0, description="Retries for transient failures")
    temperature: float = Field(0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(2048, ge=1)
    timeout: float = Field(60.0, gt=0, description="Per-request timeout (seconds)")


class TextGenerator(ABC):
    """Abstract text generation capability."""

    @abstractmethod
    async def generate(self, prompt: str, options: Optional[GenerationOptions] = None) -> str:
        """
        Generate text for a prompt.

        Args:
            prompt: Complete prompt text
            options: Retry, sampling and timeout options

        Returns:
            Generated text (never empty)

        Raises:
            GenerationFailure: When no text could be produced
        """

    @abstractmethod
    def get_usage_stats(self) -> Dict:
        """Get usage statistics."""


class OpenAIProvider(TextGenerator):
    """OpenAI (or OpenAI-compatible endpoint) implementation."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: Optional[str] = None,
        backoff_seconds: float = 2.0,
        client: Optional[AsyncOpenAI] = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        """
        Initialize OpenAI provider.

        Args:
            api_key: API key
            model: Model name to use
            base_url: Custom base URL (Gemini/Groq OpenAI-compatible endpoints, testing)
            backoff_seconds: Base delay for exponential backoff between retries
            client: Preconfigured client (testing)
            sleep: Async sleep used for backoff
        """
        # Retries are handled here so that backoff and accounting stay in one place
        self.client = client or AsyncOpenAI(api_key=api_key, base_url=base_url, max_retries=0)
        self.model = model
        self.backoff_seconds = backoff_seconds
        self._sleep = sleep
        self.total_tokens = 0
        self.api_calls = 0
        self.failures = 0

    async def generate(self, prompt: str, options: Optional[GenerationOptions] = None) -> str:
        """Generate text, retrying transient failures."""
        options = options or GenerationOptions()
        last_error: Optional[BaseException] = None

        for attempt in range(options.max_retries + 1):
            self.api_calls += 1
            try:
                response = await self.client.chat.completions.create(
                    model=self.model,
                    messages=[{"role": "user", "content": prompt}],
                    temperature=options.temperature,
                    max_tokens=options.max_tokens,
                    timeout=options.timeout,
                )
            except _TRANSIENT_ERRORS as e:
                self.failures += 1
                last_error = e
                if attempt < options.max_retries:
                    wait = self.backoff_seconds * (2 ** attempt)
                    console.print(
                        f"[yellow]Generation attempt {attempt + 1} failed ({type(e).__name__}), "
                        f"retrying in {wait:.1f}s[/yellow]"
                    )
                    await self._sleep(wait)
                continue
            except openai.OpenAIError as e:
                self.failures += 1
                raise GenerationFailure(f"Generation failed: {e}", cause=e) from e

            if response.usage:
                self.total_tokens += response.usage.total_tokens

            text = ""
            if response.choices:
                text = (response.choices[0].message.content or "").strip()
            if not text:
                self.failures += 1
                raise GenerationFailure("Generation returned empty text")
            return text

        raise GenerationFailure(
            f"Generation failed after {options.max_retries + 1} attempts: {last_error}",
            cause=last_error,
        )

    def get_usage_stats(self) -> Dict:
        """Get usage statistics."""
        return {
            "total_tokens": self.total_tokens,
            "api_calls": self.api_calls,
            "failures": self.failures,
            "model": self.model,
        }


class MockLLMProvider(TextGenerator):
    """Mock provider for testing and dry runs."""

    def __init__(
        self,
        responses: Optional[Sequence[str]] = None,
        handler: Optional[Callable[[str], str]] = None,
    ) -> None:
        """
        Initialize mock provider.

        Args:
            responses: Replies returned in order; exhaustion raises GenerationFailure
            handler: Callable producing a reply per prompt (may raise GenerationFailure)
        """
        self.responses: List[str] = list(responses or [])
        self._scripted = responses is not None
        self.handler = handler
        self.calls: List[str] = []

    async def generate(self, prompt: str, options: Optional[GenerationOptions] = None) -> str:
        """Mock generation."""
        self.calls.append(prompt)
        if self.handler is not None:
            return self.handler(prompt)
        if self.responses:
            return self.responses.pop(0)
        if self._scripted:
            raise GenerationFailure("No mock response available")
        return f"Mock response for prompt of {len(prompt)} characters"

    def get_usage_stats(self) -> Dict:
        """Get mock usage statistics."""
        return {
            "total_tokens": len(self.calls) * 100,
            "api_calls": len(self.calls),
            "failures": 0,
            "model": "mock",
        }


class DisabledProvider(TextGenerator):
    """Provider that always fails, forcing the rule-based path."""

    def __init__(self, reason: str = "AI generation disabled") -> None:
        self.reason = reason
        self.calls = 0

    async def generate(self, prompt: str, options: Optional[GenerationOptions] = None) -> str:
        self.calls += 1
        raise GenerationFailure(self.reason)

    def get_usage_stats(self) -> Dict:
        return {
            "total_tokens": 0,
            "api_calls": self.calls,
            "failures": self.calls,
            "model": "disabled",
        }
