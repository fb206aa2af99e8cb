from newsdesk.llm.client import (
    AnthropicClient,
    LLMClient,
    LLMServiceError,
    OpenAIClient,
    build_llm_client,
)
from newsdesk.llm.schemas import KeywordExtractionResult

__all__ = [
    "AnthropicClient",
    "KeywordExtractionResult",
    "LLMClient",
    "LLMServiceError",
    "OpenAIClient",
    "build_llm_client",
]
