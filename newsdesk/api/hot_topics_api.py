from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query, Response, status

from newsdesk.api.dependencies.unit_of_work import UnitOfWork, get_uow
from newsdesk.api.openapi_responses import (
    database_error_response,
    entity_responses,
    merge_responses,
    validation_error_response,
)
from newsdesk.api.schemas.hot_topics import (
    HotTopicAction,
    HotTopicCreate,
    HotTopicListResponse,
    HotTopicResponse,
    HotTopicUpdate,
)
from newsdesk.repositories.hot_topic_repository import HotTopicFilter

router = APIRouter()

_LIST_RESPONSES = merge_responses(validation_error_response(), database_error_response())


@router.get(
    "",
    summary="List hot topics",
    response_model=HotTopicListResponse,
    responses=_LIST_RESPONSES,
)
async def list_hot_topics(
    source: str | None = None,
    min_volume: int | None = Query(None, ge=0, alias="minVolume"),
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    limit: int | None = Query(None, ge=1, le=500),
    uow: UnitOfWork = Depends(get_uow, scope="function"),
) -> HotTopicListResponse:
    topics = await uow.hot_topics.get_all(
        HotTopicFilter(
            source=source,
            min_volume=min_volume,
            start_date=start_date,
            end_date=end_date,
            limit=limit,
        )
    )
    return HotTopicListResponse(topics=[HotTopicResponse.model_validate(t) for t in topics])


@router.get(
    "/search",
    summary="Search hot topics by keyword",
    response_model=HotTopicListResponse,
    responses=_LIST_RESPONSES,
)
async def search_hot_topics(
    q: str = "",
    limit: int = Query(20, ge=1, le=100),
    uow: UnitOfWork = Depends(get_uow, scope="function"),
) -> HotTopicListResponse:
    topics = await uow.hot_topics.search(q, limit=limit)
    return HotTopicListResponse(topics=[HotTopicResponse.model_validate(t) for t in topics])


@router.get(
    "/trending",
    summary="Highest-volume hot topics",
    response_model=HotTopicListResponse,
    responses=_LIST_RESPONSES,
)
async def trending_hot_topics(
    limit: int = Query(10, ge=1, le=100), uow: UnitOfWork = Depends(get_uow, scope="function")
) -> HotTopicListResponse:
    topics = await uow.hot_topics.trending(limit=limit)
    return HotTopicListResponse(topics=[HotTopicResponse.model_validate(t) for t in topics])


@router.post(
    "",
    summary="Create a hot topic",
    status_code=status.HTTP_201_CREATED,
    response_model=HotTopicResponse,
    responses=_LIST_RESPONSES,
)
async def create_hot_topic(
    request_data: HotTopicCreate, uow: UnitOfWork = Depends(get_uow, scope="function")
) -> HotTopicResponse:
    topic = await uow.hot_topics.create(request_data.model_dump(exclude_none=True))
    return HotTopicResponse.model_validate(topic)


@router.get(
    "/{topic_id}",
    summary="Get a hot topic",
    response_model=HotTopicResponse,
    responses=entity_responses("HotTopic"),
)
async def get_hot_topic(
    topic_id: str,
    uow: UnitOfWork = Depends(get_uow, scope="function"),
) -> HotTopicResponse:
    return HotTopicResponse.model_validate(await uow.hot_topics.get_by_id(topic_id))


@router.put(
    "/{topic_id}",
    summary="Update a hot topic",
    response_model=HotTopicResponse,
    responses=entity_responses("HotTopic"),
)
async def update_hot_topic(
    topic_id: str,
    request_data: HotTopicUpdate,
    uow: UnitOfWork = Depends(get_uow, scope="function"),
) -> HotTopicResponse:
    topic = await uow.hot_topics.update(topic_id, request_data.model_dump(exclude_unset=True))
    return HotTopicResponse.model_validate(topic)


@router.patch(
    "/{topic_id}",
    summary="Apply a volume action to a hot topic",
    response_model=HotTopicResponse,
    responses=entity_responses("HotTopic"),
)
async def apply_hot_topic_action(
    topic_id: str,
    request_data: HotTopicAction,
    uow: UnitOfWork = Depends(get_uow, scope="function"),
) -> HotTopicResponse:
    """``increment_volume`` (by ``volume``, default 1), ``mark_trending`` or ``archive``."""
    if request_data.action == "increment_volume":
        topic = await uow.hot_topics.increment_volume(topic_id, by=request_data.volume or 1)
    elif request_data.action == "mark_trending":
        topic = await uow.hot_topics.mark_trending(topic_id)
    else:
        topic = await uow.hot_topics.archive(topic_id)
    return HotTopicResponse.model_validate(topic)


@router.delete(
    "/{topic_id}",
    summary="Delete a hot topic",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=entity_responses("HotTopic"),
)
async def delete_hot_topic(
    topic_id: str,
    uow: UnitOfWork = Depends(get_uow, scope="function"),
) -> Response:
    await uow.hot_topics.delete(topic_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
