"""API request and response schemas.

Import models from the submodules (e.g. articles, hot_topics) or from this
package for a single entry point.
"""

from __future__ import annotations

from newsdesk.api.schemas.ai import GenerateRequest, GenerateResponse
from newsdesk.api.schemas.ai_tasks import (
    AITaskComplete,
    AITaskCreate,
    AITaskFail,
    AITaskListResponse,
    AITaskResponse,
    AITaskUpdate,
)
from newsdesk.api.schemas.articles import (
    ArticleCreate,
    ArticleListResponse,
    ArticleResponse,
    ArticleUpdate,
)
from newsdesk.api.schemas.dify import (
    ConversationResponse,
    DifyCallbackRequest,
    DifyChatRequest,
    DifyChatResponse,
    StopTaskRequest,
    WorkflowLogsResponse,
    WorkflowRunRequest,
    WorkflowRunResponse,
)
from newsdesk.api.schemas.hot_topics import (
    HotTopicAction,
    HotTopicCreate,
    HotTopicListResponse,
    HotTopicResponse,
    HotTopicUpdate,
)
from newsdesk.api.schemas.meta import HealthResponse
from newsdesk.api.schemas.templates import (
    TemplateCreate,
    TemplateListResponse,
    TemplateResponse,
    TemplateUpdate,
)
from newsdesk.api.schemas.upload import UploadResponse

__all__ = [
    "AITaskComplete",
    "AITaskCreate",
    "AITaskFail",
    "AITaskListResponse",
    "AITaskResponse",
    "AITaskUpdate",
    "ArticleCreate",
    "ArticleListResponse",
    "ArticleResponse",
    "ArticleUpdate",
    "ConversationResponse",
    "DifyCallbackRequest",
    "DifyChatRequest",
    "DifyChatResponse",
    "GenerateRequest",
    "GenerateResponse",
    "HealthResponse",
    "HotTopicAction",
    "HotTopicCreate",
    "HotTopicListResponse",
    "HotTopicResponse",
    "HotTopicUpdate",
    "StopTaskRequest",
    "TemplateCreate",
    "TemplateListResponse",
    "TemplateResponse",
    "TemplateUpdate",
    "UploadResponse",
    "WorkflowLogsResponse",
    "WorkflowRunRequest",
    "WorkflowRunResponse",
]
