from typing import Any

from fastapi import APIRouter, Depends, Query, Request, status

from newsdesk.api.dependencies.clients import get_dify_client
from newsdesk.api.dependencies.unit_of_work import UnitOfWork, get_uow
from newsdesk.api.openapi_responses import (
    ErrorExample,
    error_responses,
    merge_responses,
    rate_limited_response,
    validation_error_response,
)
from newsdesk.api.schemas.articles import ArticleResponse
from newsdesk.api.schemas.dify import (
    ConversationMessage,
    ConversationResponse,
    DifyCallbackRequest,
    DifyChatRequest,
    DifyChatResponse,
    StopTaskRequest,
    WorkflowLogsResponse,
    WorkflowRunRequest,
    WorkflowRunResponse,
)
from newsdesk.core.errors import build_http_error
from newsdesk.core.rate_limit import DIFY_RATE_LIMIT, limit, rate_limit_ip_key
from newsdesk.dify.client import DifyClient
from newsdesk.services.dify_ingest_service import DifyIngestService

router = APIRouter()

CALLBACK_PATH = "/api/dify/callback"

_UPSTREAM_RESPONSES = merge_responses(
    rate_limited_response(),
    error_responses(
        ErrorExample(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error="internal_error",
            message="Dify API configuration is incomplete",
            code="dify_not_configured",
            description="Dify not configured or upstream failure",
        ),
        ErrorExample(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error="internal_error",
            message="Dify request failed with status 502",
            code="dify_request_failed",
            description="Dify not configured or upstream failure",
        ),
    ),
)


def _missing_parameter(name: str) -> Exception:
    return build_http_error(
        status_code=status.HTTP_400_BAD_REQUEST,
        error="bad_request",
        message=f"Missing required parameter: {name}",
        code="VALIDATION_ERROR",
    )


def callback_url_for(request: Request) -> str:
    return str(request.base_url).rstrip("/") + CALLBACK_PATH


@router.post(
    "",
    summary="Generate content with a Dify chat message",
    response_model=DifyChatResponse,
    responses=merge_responses(validation_error_response(), _UPSTREAM_RESPONSES),
)
@limit(DIFY_RATE_LIMIT, key_func=rate_limit_ip_key)
async def generate_with_dify(
    request: Request,
    request_data: DifyChatRequest,
    dify: DifyClient = Depends(get_dify_client),
) -> DifyChatResponse:
    if not request_data.user:
        raise _missing_parameter("user")
    title = request_data.title or request_data.inputs.get("title")
    if not title:
        raise _missing_parameter("title")

    content = request_data.content or request_data.query or request_data.inputs.get("content")
    inputs: dict[str, Any] = {**request_data.inputs, "title": title, "content": content or ""}
    result = await dify.send_message(
        request_data.query or content or title,
        user=request_data.user,
        inputs=inputs,
        conversation_id=request_data.conversation_id,
    )
    return DifyChatResponse(**result)


@router.post(
    "/workflow/run",
    summary="Run the Dify workflow",
    response_model=WorkflowRunResponse,
    responses=merge_responses(validation_error_response(), _UPSTREAM_RESPONSES),
)
@limit(DIFY_RATE_LIMIT, key_func=rate_limit_ip_key)
async def run_workflow(
    request: Request,
    request_data: WorkflowRunRequest,
    dify: DifyClient = Depends(get_dify_client),
) -> WorkflowRunResponse:
    """Start a run; Dify posts the finished article back to ``/api/dify/callback``."""
    inputs = {**request_data.inputs, "sys.files": request_data.files}
    result = await dify.run_workflow(
        inputs,
        callback_url=callback_url_for(request),
        user_id=request_data.user_id,
        workflow_id=request_data.workflow_id,
    )
    return WorkflowRunResponse(**result)


@router.get(
    "/workflow/logs",
    summary="List Dify workflow logs",
    response_model=WorkflowLogsResponse,
    responses=_UPSTREAM_RESPONSES,
)
@limit(DIFY_RATE_LIMIT, key_func=rate_limit_ip_key)
async def workflow_logs(
    request: Request,
    page: int = Query(1, ge=1),
    limit_: int = Query(10, ge=1, le=100, alias="limit"),
    start_date: str | None = None,
    end_date: str | None = None,
    workflow_id: str | None = None,
    user: str | None = None,
    log_status: str | None = Query(None, alias="status", pattern="^(success|error|running)$"),
    dify: DifyClient = Depends(get_dify_client),
) -> WorkflowLogsResponse:
    logs = await dify.get_workflow_logs(
        page=page,
        limit=limit_,
        start_date=start_date,
        end_date=end_date,
        workflow_id=workflow_id,
        user=user,
        status=log_status,
    )
    return WorkflowLogsResponse(**logs)


@router.get(
    "/workflow/{run_id}",
    summary="Get a workflow run",
    responses=_UPSTREAM_RESPONSES,
)
@limit(DIFY_RATE_LIMIT, key_func=rate_limit_ip_key)
async def workflow_status(
    request: Request, run_id: str, dify: DifyClient = Depends(get_dify_client)
) -> dict[str, Any]:
    return {**await dify.get_workflow_status(run_id), "success": True}


@router.post(
    "/workflow/task/{task_id}/stop",
    summary="Stop a running workflow task",
    responses=_UPSTREAM_RESPONSES,
)
@limit(DIFY_RATE_LIMIT, key_func=rate_limit_ip_key)
async def stop_workflow_task(
    request: Request,
    task_id: str,
    request_data: StopTaskRequest | None = None,
    dify: DifyClient = Depends(get_dify_client),
) -> dict[str, Any]:
    user = request_data.user if request_data else None
    return {**await dify.stop_workflow_task(task_id, user=user), "success": True}


@router.get(
    "/parameters",
    summary="Dify app input parameters",
    responses=_UPSTREAM_RESPONSES,
)
@limit(DIFY_RATE_LIMIT, key_func=rate_limit_ip_key)
async def app_parameters(
    request: Request, dify: DifyClient = Depends(get_dify_client)
) -> dict[str, Any]:
    return {**await dify.get_parameters(), "success": True}


@router.get(
    "/conversation/{conversation_id}",
    summary="Message history of a Dify conversation",
    response_model=ConversationResponse,
    responses=_UPSTREAM_RESPONSES,
)
@limit(DIFY_RATE_LIMIT, key_func=rate_limit_ip_key)
async def conversation_history(
    request: Request,
    conversation_id: str,
    user: str | None = None,
    dify: DifyClient = Depends(get_dify_client),
) -> ConversationResponse:
    messages = await dify.get_conversation_messages(conversation_id, user=user)
    return ConversationResponse(
        conversation_id=conversation_id,
        messages=[ConversationMessage(**message) for message in messages],
    )


@router.post(
    "/callback",
    summary="Receive a finished workflow and save it as an article",
    responses=validation_error_response(),
)
async def workflow_callback(
    request_data: DifyCallbackRequest, uow: UnitOfWork = Depends(get_uow, scope="function")
) -> dict[str, Any]:
    """Persist the generated article as pending review."""
    article = await DifyIngestService(uow.articles).ingest(request_data.model_dump())
    return {
        "success": True,
        "message": "Article saved",
        "article": ArticleResponse.model_validate(article).model_dump(mode="json"),
    }
