from collections.abc import Callable

from fastapi import APIRouter, Depends, Request, status

from newsdesk.api.dependencies.clients import get_llm_client_factory
from newsdesk.api.dependencies.unit_of_work import UnitOfWork, get_uow
from newsdesk.api.openapi_responses import (
    ErrorExample,
    error_responses,
    merge_responses,
    not_found_response,
    rate_limited_response,
    validation_error_response,
)
from newsdesk.api.schemas.ai import GenerateRequest, GenerateResponse
from newsdesk.core.rate_limit import AI_GENERATE_RATE_LIMIT, limit, rate_limit_ip_key
from newsdesk.llm.client import LLMClient
from newsdesk.services.content_generation_service import ContentGenerationService

router = APIRouter()


@router.post(
    "/generate",
    summary="Generate content with the configured LLM",
    description=(
        "Dispatch on ``type``: article_title, article_content, article_summary, "
        "extract_keywords or template_content."
    ),
    response_model=GenerateResponse,
    responses=merge_responses(
        validation_error_response(),
        error_responses(
            ErrorExample(
                status_code=status.HTTP_400_BAD_REQUEST,
                error="bad_request",
                message="Unsupported generation type: poem",
                code="UNSUPPORTED_GENERATION_TYPE",
                description="Invalid request body",
            ),
            ErrorExample(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                error="internal_error",
                message="LLM service error. Try again later.",
                code="llm_unavailable",
                description="LLM failure",
            ),
            ErrorExample(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                error="internal_error",
                message="LLM authentication failed.",
                code="llm_auth_failed",
                description="LLM failure",
            ),
        ),
        not_found_response("Template"),
        rate_limited_response(),
    ),
)
@limit(AI_GENERATE_RATE_LIMIT, key_func=rate_limit_ip_key)
async def generate(
    request: Request,
    request_data: GenerateRequest,
    uow: UnitOfWork = Depends(get_uow, scope="function"),
    llm_client_factory: Callable[[], LLMClient] = Depends(get_llm_client_factory),
) -> GenerateResponse:
    """Generate a title, article, summary, keyword list or filled template."""
    service = ContentGenerationService(llm_client_factory, uow.templates)
    result = await service.generate(request_data.type, request_data.data)
    return GenerateResponse(result=result)
