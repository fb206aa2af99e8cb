"""Content generation service - titles, articles, summaries, keywords and template fills via LLM."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable, Mapping
from typing import Any, Final

from pydantic import ValidationError
from starlette import status

from newsdesk.core.errors import ServiceError
from newsdesk.llm import prompts
from newsdesk.llm.client import LLMClient, LLMInvalidResponseError, LLMServiceError
from newsdesk.llm.schemas import KeywordExtractionResult
from newsdesk.repositories.template_repository import TemplateRepository

logger = logging.getLogger(__name__)

DEFAULT_STYLE: Final[str] = "专业"
DEFAULT_SUMMARY_LENGTH: Final[int] = 150
DEFAULT_KEYWORD_COUNT: Final[int] = 5

GENERATION_TYPES: Final[tuple[str, ...]] = (
    "article_title",
    "article_content",
    "article_summary",
    "extract_keywords",
    "template_content",
)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


class ContentGenerationError(ServiceError):
    """The LLM layer failed (unavailable, auth, invalid response, not configured)."""


class InvalidGenerationRequestError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, error_code: str = "VALIDATION_ERROR") -> None:
        super().__init__(message, error_code)


def render_template(template: str, variables: Mapping[str, Any]) -> str:
    """Substitute ``{key}`` placeholders; list values are joined with ", "."""
    rendered = template
    for key, value in variables.items():
        text = ", ".join(str(item) for item in value) if isinstance(value, list) else str(value)
        rendered = rendered.replace("{" + str(key) + "}", text)
    return rendered


def _positive_int(data: Mapping[str, Any], key: str, default: int) -> int:
    value = data.get(key)
    if value is None or value == "":
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise InvalidGenerationRequestError(f"{key} must be a positive integer") from None
    if number <= 0:
        raise InvalidGenerationRequestError(f"{key} must be a positive integer")
    return number


def _as_keyword_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [part.strip() for part in re.split(r"[,，]", value) if part.strip()]
    if isinstance(value, list):
        return [str(item).strip() for item in value if str(item).strip()]
    return []


def parse_keywords(raw: str) -> list[str]:
    """Read ``{"keywords": [...]}`` (optionally wrapped in a code fence) from model output.

    Raises:
        LLMInvalidResponseError: If the output is not that JSON shape.
    """
    cleaned = _CODE_FENCE.sub("", raw.strip())
    try:
        payload = json.loads(cleaned)
        if isinstance(payload, list):
            payload = {"keywords": payload}
        return KeywordExtractionResult.model_validate(payload).keywords
    except (json.JSONDecodeError, ValidationError) as exc:
        logger.error(f"Failed to parse keyword extraction response. Error: {exc}")
        raise LLMInvalidResponseError("LLM response did not match expected format.") from exc


class ContentGenerationService:
    """Runs generation requests against an LLM client created on first use."""

    def __init__(
        self,
        llm_client_factory: Callable[[], LLMClient],
        templates: TemplateRepository | None = None,
    ) -> None:
        self._llm_client_factory = llm_client_factory
        self._llm_client: LLMClient | None = None
        self._templates = templates

    @property
    def llm_client(self) -> LLMClient:
        if self._llm_client is None:
            self._llm_client = self._llm_client_factory()
        return self._llm_client

    async def _complete(self, system_prompt: str, user_prompt: str) -> str:
        try:
            return await self.llm_client.complete(system_prompt, user_prompt)
        except LLMServiceError as exc:
            raise ContentGenerationError(str(exc), exc.error_code) from exc

    async def generate_title(
        self, keywords: list[str], topic: str, style: str = DEFAULT_STYLE
    ) -> str:
        title = await self._complete(
            prompts.TITLE_SYSTEM_PROMPT, prompts.get_title_prompt(keywords, topic, style)
        )
        return title.strip().strip("\"'“”")

    async def generate_content(
        self, topic: str, keywords: list[str], style: str = DEFAULT_STYLE
    ) -> str:
        return await self._complete(
            prompts.CONTENT_SYSTEM_PROMPT, prompts.get_content_prompt(topic, keywords, style)
        )

    async def generate_summary(
        self, content: str, max_length: int = DEFAULT_SUMMARY_LENGTH
    ) -> str:
        return await self._complete(
            prompts.EDITOR_SYSTEM_PROMPT, prompts.get_summary_prompt(content, max_length)
        )

    async def extract_keywords(self, text: str, count: int = DEFAULT_KEYWORD_COUNT) -> list[str]:
        raw = await self._complete(
            prompts.EDITOR_SYSTEM_PROMPT, prompts.get_keywords_prompt(text, count)
        )
        try:
            return parse_keywords(raw)[:count]
        except LLMInvalidResponseError as exc:
            raise ContentGenerationError(str(exc), exc.error_code) from exc

    async def generate_from_template(
        self,
        variables: Mapping[str, Any],
        *,
        template_id: str | None = None,
        template: str | None = None,
    ) -> str:
        """Fill a stored (``template_id``) or inline template and let the model finish it.

        A stored template has its usage counter bumped in the same transaction.
        """
        if template_id:
            if self._templates is None:
                raise RuntimeError("Template repository is required for stored templates")
            stored = await self._templates.increment_usage(template_id)
            template = stored.content
        if not template:
            raise InvalidGenerationRequestError("templateId or template is required")
        rendered = render_template(template, variables)
        return await self._complete(
            prompts.TEMPLATE_SYSTEM_PROMPT, prompts.get_template_prompt(rendered)
        )

    async def generate(self, generation_type: str, data: Mapping[str, Any]) -> Any:
        """Dispatch one ``/ai/generate`` request by its ``type``.

        Raises:
            InvalidGenerationRequestError: Unknown type or missing inputs.
            ContentGenerationError: The LLM call failed.
        """
        if generation_type == "article_title":
            keywords = _as_keyword_list(data.get("keywords"))
            topic = data.get("topic")
            if not keywords or not topic:
                raise InvalidGenerationRequestError("article_title requires keywords and topic")
            return await self.generate_title(keywords, topic, data.get("style") or DEFAULT_STYLE)

        if generation_type == "article_content":
            keywords = _as_keyword_list(data.get("keywords"))
            topic = data.get("topic")
            if not topic or not keywords:
                raise InvalidGenerationRequestError("article_content requires topic and keywords")
            return await self.generate_content(
                topic, keywords, data.get("style") or DEFAULT_STYLE
            )

        if generation_type == "article_summary":
            content = data.get("content")
            if not content:
                raise InvalidGenerationRequestError("article_summary requires content")
            return await self.generate_summary(
                content, _positive_int(data, "maxLength", DEFAULT_SUMMARY_LENGTH)
            )

        if generation_type == "extract_keywords":
            text = data.get("text")
            if not text:
                raise InvalidGenerationRequestError("extract_keywords requires text")
            return await self.extract_keywords(
                text, _positive_int(data, "count", DEFAULT_KEYWORD_COUNT)
            )

        if generation_type == "template_content":
            template_id = data.get("templateId")
            template = data.get("template")
            if not template_id and not template:
                raise InvalidGenerationRequestError(
                    "template_content requires templateId or template"
                )
            variables = data.get("variables")
            if not isinstance(variables, Mapping):
                raise InvalidGenerationRequestError("template_content requires variables")
            return await self.generate_from_template(
                variables, template_id=template_id, template=template
            )

        raise InvalidGenerationRequestError(
            f"Unsupported generation type: {generation_type}", "UNSUPPORTED_GENERATION_TYPE"
        )
