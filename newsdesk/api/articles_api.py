from __future__ import annotations

from datetime import date
from typing import Literal

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
from newsdesk.api.schemas.articles import (
    ArticleCreate,
    ArticleListResponse,
    ArticleResponse,
    ArticleUpdate,
)
from newsdesk.core.errors import build_http_error
from newsdesk.core.status import ArticleStatus, parse_article_status
from newsdesk.repositories.article_repository import ArticleFilter

router = APIRouter()

_REFERENCE_ERRORS = error_responses(
    ErrorExample(
        status_code=status.HTTP_400_BAD_REQUEST,
        error="bad_request",
        message="Referenced HotTopic 6f1c2d7e-0000-4000-8000-000000000000 does not exist",
        code="REFERENCE_NOT_FOUND",
        description="Referenced template or hot topic does not exist",
    ),
    ErrorExample(
        status_code=status.HTTP_400_BAD_REQUEST,
        error="bad_request",
        message="Cannot move article from 'published' to 'draft'",
        code="INVALID_STATUS_TRANSITION",
        description="Status change not allowed",
    ),
)


def _parse_status_filter(value: str | None) -> ArticleStatus | None:
    if not value:
        return None
    try:
        return parse_article_status(value)
    except ValueError as exc:
        raise build_http_error(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="bad_request",
            message=str(exc),
            code="VALIDATION_ERROR",
        ) from exc


@router.get(
    "",
    summary="List articles",
    response_model=ArticleListResponse,
    responses=merge_responses(validation_error_response(), database_error_response()),
)
async def list_articles(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100, alias="pageSize"),
    article_status: str | None = Query(None, alias="status"),
    category: str | None = None,
    keyword: str | None = None,
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    sort_by: str = Query("created_at", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    uow: UnitOfWork = Depends(get_uow, scope="function"),
) -> ArticleListResponse:
    """List articles with filters, sorting and offset pagination."""
    filters = ArticleFilter(
        page=page,
        page_size=page_size,
        status=_parse_status_filter(article_status),
        category=category,
        keyword=keyword,
        start_date=start_date,
        end_date=end_date,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    articles, total = await uow.articles.get_all(filters)
    return ArticleListResponse(
        articles=[ArticleResponse.model_validate(article) for article in articles],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.post(
    "",
    summary="Create an article",
    status_code=status.HTTP_201_CREATED,
    response_model=ArticleResponse,
    responses=merge_responses(
        validation_error_response(), _REFERENCE_ERRORS, database_error_response()
    ),
)
async def create_article(
    request_data: ArticleCreate, uow: UnitOfWork = Depends(get_uow, scope="function")
) -> ArticleResponse:
    article = await uow.articles.create(request_data.model_dump(exclude_none=True))
    return ArticleResponse.model_validate(article)


@router.get(
    "/{article_id}",
    summary="Get an article",
    response_model=ArticleResponse,
    responses=entity_responses("Article"),
)
async def get_article(
    article_id: str,
    uow: UnitOfWork = Depends(get_uow, scope="function"),
) -> ArticleResponse:
    return ArticleResponse.model_validate(await uow.articles.get_by_id(article_id))


@router.put(
    "/{article_id}",
    summary="Update an article",
    response_model=ArticleResponse,
    responses=merge_responses(entity_responses("Article"), _REFERENCE_ERRORS),
)
async def update_article(
    article_id: str,
    request_data: ArticleUpdate,
    uow: UnitOfWork = Depends(get_uow, scope="function"),
) -> ArticleResponse:
    """Update the fields present in the body; status changes follow the review workflow."""
    article = await uow.articles.update(article_id, request_data.model_dump(exclude_unset=True))
    return ArticleResponse.model_validate(article)


@router.delete(
    "/{article_id}",
    summary="Delete an article",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=entity_responses("Article"),
)
async def delete_article(
    article_id: str,
    uow: UnitOfWork = Depends(get_uow, scope="function"),
) -> Response:
    await uow.articles.delete(article_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
