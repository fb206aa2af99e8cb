from newsdesk.dify.client import (
    DifyClient,
    DifyConfigurationError,
    DifyResponseError,
    DifyServiceError,
    DifyUnavailableError,
)

__all__ = [
    "DifyClient",
    "DifyConfigurationError",
    "DifyResponseError",
    "DifyServiceError",
    "DifyUnavailableError",
]
