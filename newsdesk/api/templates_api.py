from __future__ import annotations

import math

from fastapi import APIRouter, Depends, Query, Response, status

from newsdesk.api.dependencies.unit_of_work import UnitOfWork, get_uow
from newsdesk.api.openapi_responses import (
    database_error_response,
    entity_responses,
    merge_responses,
    validation_error_response,
)
from newsdesk.api.schemas.templates import (
    TemplateCreate,
    TemplateListResponse,
    TemplateResponse,
    TemplateUpdate,
)

router = APIRouter()


@router.get(
    "",
    summary="List templates",
    response_model=TemplateListResponse,
    responses=merge_responses(validation_error_response(), database_error_response()),
)
async def list_templates(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100, alias="pageSize"),
    category: str | None = None,
    search: str | None = None,
    uow: UnitOfWork = Depends(get_uow, scope="function"),
) -> TemplateListResponse:
    templates, total = await uow.templates.get_all(
        page=page, page_size=page_size, category=category, search=search
    )
    return TemplateListResponse(
        templates=[TemplateResponse.model_validate(template) for template in templates],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total / page_size),
    )


@router.post(
    "",
    summary="Create a template",
    status_code=status.HTTP_201_CREATED,
    response_model=TemplateResponse,
    responses=merge_responses(validation_error_response(), database_error_response()),
)
async def create_template(
    request_data: TemplateCreate, uow: UnitOfWork = Depends(get_uow, scope="function")
) -> TemplateResponse:
    template = await uow.templates.create(request_data.model_dump(exclude_none=True))
    return TemplateResponse.model_validate(template)


@router.get(
    "/{template_id}",
    summary="Get a template",
    response_model=TemplateResponse,
    responses=entity_responses("Template"),
)
async def get_template(
    template_id: str,
    uow: UnitOfWork = Depends(get_uow, scope="function"),
) -> TemplateResponse:
    return TemplateResponse.model_validate(await uow.templates.get_by_id(template_id))


@router.put(
    "/{template_id}",
    summary="Update a template",
    response_model=TemplateResponse,
    responses=entity_responses("Template"),
)
async def update_template(
    template_id: str,
    request_data: TemplateUpdate,
    uow: UnitOfWork = Depends(get_uow, scope="function"),
) -> TemplateResponse:
    template = await uow.templates.update(template_id, request_data.model_dump(exclude_unset=True))
    return TemplateResponse.model_validate(template)


@router.patch(
    "/{template_id}",
    summary="Record one use of a template",
    response_model=TemplateResponse,
    responses=entity_responses("Template"),
)
async def increment_template_usage(
    template_id: str, uow: UnitOfWork = Depends(get_uow, scope="function")
) -> TemplateResponse:
    """Atomically add one to the template's usage count."""
    return TemplateResponse.model_validate(await uow.templates.increment_usage(template_id))


@router.delete(
    "/{template_id}",
    summary="Delete a template",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=entity_responses("Template"),
)
async def delete_template(
    template_id: str,
    uow: UnitOfWork = Depends(get_uow, scope="function"),
) -> Response:
    await uow.templates.delete(template_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
