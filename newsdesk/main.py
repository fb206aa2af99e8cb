from __future__ import annotations

import logging
import sys
import types
from importlib.metadata import PackageNotFoundError, version
from typing import cast

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ExceptionHandler

from newsdesk.core.errors import InvalidSettingsError

# Import settings - this may raise InvalidSettingsError
try:
    from newsdesk.core.config import Settings, settings
except InvalidSettingsError as e:
    print("ERROR: Invalid environment variable values:", file=sys.stderr)
    for field, message in e.invalid_fields:
        print(f"  - {field}: {message}", file=sys.stderr)
    print(
        "\nPlease update these in your .env file",
        file=sys.stderr,
    )
    sys.exit(1)

from newsdesk.api.router import router as api_router  # noqa: E402
from newsdesk.core.errors import (  # noqa: E402
    ServiceError,
    http_exception_handler,
    rate_limit_exception_handler,
    request_validation_exception_handler,
    service_exception_handler,
    unhandled_exception_handler,
)
from newsdesk.core.lifespan import lifespan  # noqa: E402
from newsdesk.core.logging import configure_logging  # noqa: E402
from newsdesk.core.rate_limit import limiter  # noqa: E402
from newsdesk.core.request_context import request_context_middleware  # noqa: E402
from newsdesk.db.client import ClientFactory  # noqa: E402
from newsdesk.db.config import resolve_database_config  # noqa: E402
from newsdesk.db.connection import ConnectionManager  # noqa: E402
from newsdesk.dify.client import DifyClient  # noqa: E402
from newsdesk.repositories import repository_registry  # noqa: E402

PACKAGE_NAME = "crypto-newsdesk-api"


def create_app(app_settings: Settings | None = None) -> FastAPI:
    app_settings = app_settings or settings
    configure_logging(app_settings.log_level)

    try:
        api_version = version(PACKAGE_NAME)
    except PackageNotFoundError:
        api_version = "0.1.0"  # Fallback if package not installed
        logging.warning("%s package not found, using fallback version 0.1.0", PACKAGE_NAME)

    is_debug_mode = app_settings.environment == "local"
    app = FastAPI(
        title=app_settings.app_name,
        version=api_version,
        debug=is_debug_mode,
        lifespan=lifespan,
    )
    app.add_exception_handler(
        StarletteHTTPException, cast(ExceptionHandler, http_exception_handler)
    )
    app.add_exception_handler(
        RequestValidationError, cast(ExceptionHandler, request_validation_exception_handler)
    )
    app.add_exception_handler(ServiceError, cast(ExceptionHandler, service_exception_handler))
    app.add_exception_handler(
        RateLimitExceeded, cast(ExceptionHandler, rate_limit_exception_handler)
    )
    app.add_exception_handler(Exception, cast(ExceptionHandler, unhandled_exception_handler))
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.middleware("http")(request_context_middleware)
    app.include_router(api_router, prefix="/api")

    database_config = resolve_database_config(app_settings)
    app.state.settings = app_settings
    app.state.connections = ConnectionManager(ClientFactory(database_config))
    app.state.dify_client = DifyClient.from_settings(app_settings)
    app.state.services = types.MappingProxyType(repository_registry())
    logging.getLogger(__name__).info(
        "Application configured (environment=%s, mock_mode=%s)",
        app_settings.environment,
        database_config.use_mock_mode,
    )

    return app


app = create_app()
