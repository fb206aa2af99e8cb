from fastapi import APIRouter, Request

from newsdesk.api.ai_api import router as ai_router
from newsdesk.api.ai_tasks_api import router as ai_tasks_router
from newsdesk.api.articles_api import router as articles_router
from newsdesk.api.dependencies.unit_of_work import get_connection_manager
from newsdesk.api.dify_api import router as dify_router
from newsdesk.api.hot_topics_api import router as hot_topics_router
from newsdesk.api.openapi_responses import rate_limited_response
from newsdesk.api.schemas.meta import HealthResponse
from newsdesk.api.templates_api import router as templates_router
from newsdesk.api.upload_api import router as upload_router
from newsdesk.core.rate_limit import HEALTH_RATE_LIMIT, limit, rate_limit_ip_key

router = APIRouter()


@router.get(
    "/health",
    tags=["meta"],
    summary="Health check",
    response_model=HealthResponse,
    responses=rate_limited_response(),
)
@limit(HEALTH_RATE_LIMIT, key_func=rate_limit_ip_key)
async def health(request: Request) -> HealthResponse:
    """Check the health of the application and its database."""
    connections = get_connection_manager(request)
    database_ok = await connections.check_health(getattr(request.state, "request_id", None))
    return HealthResponse(
        status="ok" if database_ok else "degraded",
        database="ok" if database_ok else "unavailable",
        mock_mode=connections.is_mock_mode,
    )


# Include sub-routers
router.include_router(articles_router, prefix="/articles", tags=["articles"])
router.include_router(templates_router, prefix="/templates", tags=["templates"])
router.include_router(hot_topics_router, prefix="/hot-topics", tags=["hot-topics"])
router.include_router(ai_tasks_router, prefix="/ai-tasks", tags=["ai-tasks"])
router.include_router(dify_router, prefix="/dify", tags=["dify"])
router.include_router(upload_router, prefix="/upload", tags=["upload"])
router.include_router(ai_router, prefix="/ai", tags=["ai"])
