from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from newsdesk.api.dependencies.unit_of_work import UnitOfWork, get_uow
from newsdesk.api.openapi_responses import (
    ErrorExample,
    database_error_response,
    entity_responses,
    error_responses,
    merge_responses,
    validation_error_response,
)
from newsdesk.api.schemas.ai_tasks import (
    AITaskComplete,
    AITaskCreate,
    AITaskFail,
    AITaskListResponse,
    AITaskResponse,
    AITaskUpdate,
)
from newsdesk.core.status import AITaskStatus, AITaskType

router = APIRouter()

_TRANSITION_RESPONSES = merge_responses(
    entity_responses("AITask"),
    error_responses(
        ErrorExample(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="bad_request",
            message="Cannot move AI task from 'completed' to 'processing'",
            code="INVALID_STATUS_TRANSITION",
            description="Lifecycle step not allowed from the current status",
        )
    ),
)


@router.get(
    "",
    summary="List AI tasks",
    response_model=AITaskListResponse,
    responses=merge_responses(validation_error_response(), database_error_response()),
)
async def list_ai_tasks(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100, alias="pageSize"),
    task_status: AITaskStatus | None = Query(None, alias="status"),
    task_type: AITaskType | None = Query(None, alias="type"),
    uow: UnitOfWork = Depends(get_uow, scope="function"),
) -> AITaskListResponse:
    tasks, total = await uow.ai_tasks.get_all(
        page=page, page_size=page_size, status=task_status, task_type=task_type
    )
    return AITaskListResponse(
        tasks=[AITaskResponse.model_validate(task) for task in tasks],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.post(
    "",
    summary="Create an AI task",
    status_code=status.HTTP_201_CREATED,
    response_model=AITaskResponse,
    responses=merge_responses(validation_error_response(), database_error_response()),
)
async def create_ai_task(
    request_data: AITaskCreate, uow: UnitOfWork = Depends(get_uow, scope="function")
) -> AITaskResponse:
    task = await uow.ai_tasks.create(request_data.model_dump(exclude_none=True))
    return AITaskResponse.model_validate(task)


@router.get(
    "/{task_id}",
    summary="Get an AI task",
    response_model=AITaskResponse,
    responses=entity_responses("AITask"),
)
async def get_ai_task(
    task_id: str,
    uow: UnitOfWork = Depends(get_uow, scope="function"),
) -> AITaskResponse:
    return AITaskResponse.model_validate(await uow.ai_tasks.get_by_id(task_id))


@router.put(
    "/{task_id}",
    summary="Update an AI task",
    response_model=AITaskResponse,
    responses=entity_responses("AITask"),
)
async def update_ai_task(
    task_id: str, request_data: AITaskUpdate, uow: UnitOfWork = Depends(get_uow, scope="function")
) -> AITaskResponse:
    task = await uow.ai_tasks.update(task_id, request_data.model_dump(exclude_unset=True))
    return AITaskResponse.model_validate(task)


@router.delete(
    "/{task_id}",
    summary="Delete an AI task",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=entity_responses("AITask"),
)
async def delete_ai_task(
    task_id: str,
    uow: UnitOfWork = Depends(get_uow, scope="function"),
) -> Response:
    await uow.ai_tasks.delete(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{task_id}/start",
    summary="Start a pending AI task",
    response_model=AITaskResponse,
    responses=_TRANSITION_RESPONSES,
)
async def start_ai_task(
    task_id: str,
    uow: UnitOfWork = Depends(get_uow, scope="function"),
) -> AITaskResponse:
    return AITaskResponse.model_validate(await uow.ai_tasks.start(task_id))


@router.post(
    "/{task_id}/complete",
    summary="Complete a processing AI task",
    response_model=AITaskResponse,
    responses=_TRANSITION_RESPONSES,
)
async def complete_ai_task(
    task_id: str,
    request_data: AITaskComplete,
    uow: UnitOfWork = Depends(get_uow, scope="function"),
) -> AITaskResponse:
    return AITaskResponse.model_validate(
        await uow.ai_tasks.complete(task_id, request_data.result)
    )


@router.post(
    "/{task_id}/fail",
    summary="Mark an AI task as failed",
    response_model=AITaskResponse,
    responses=_TRANSITION_RESPONSES,
)
async def fail_ai_task(
    task_id: str, request_data: AITaskFail, uow: UnitOfWork = Depends(get_uow, scope="function")
) -> AITaskResponse:
    return AITaskResponse.model_validate(await uow.ai_tasks.fail(task_id, request_data.error))
