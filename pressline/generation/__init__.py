"""Text generation, validation and rule-based fallbacks."""

from .fallbacks import FallbackGenerators, detect_category
from .llm_provider import (
    DisabledProvider,
    GenerationFailure,
    GenerationOptions,
    MockLLMProvider,
    OpenAIProvider,
    TextGenerator,
)
from .models import GeneratedMetadata
from .validators import ValidationResult

__all__ = [
    "DisabledProvider",
    "FallbackGenerators",
    "GeneratedMetadata",
    "GenerationFailure",
    "GenerationOptions",
    "MockLLMProvider",
    "OpenAIProvider",
    "TextGenerator",
    "ValidationResult",
    "detect_category",
]
