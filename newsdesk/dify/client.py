"""Client for the Dify chat, workflow and app-parameter APIs."""

from __future__ import annotations

import logging
import secrets
import string
import time
from collections.abc import Mapping
from typing import Any, Final

import httpx
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from newsdesk.core.config import Settings, settings
from newsdesk.core.errors import ServiceError
from newsdesk.core.http_fetch import CachedFetcher, FetchError

logger = logging.getLogger(__name__)

PARAMETERS_CACHE_TTL_SECONDS: Final[float] = 300.0
DEFAULT_USER_PREFIX: Final[str] = "user"
_RUN_ID_ALPHABET = string.ascii_lowercase + string.digits


class DifyServiceError(ServiceError):
    """Base error for Dify failures; always reported as a server error."""

    status_code = HTTP_500_INTERNAL_SERVER_ERROR


class DifyConfigurationError(DifyServiceError):
    def __init__(self, missing: list[str]) -> None:
        super().__init__(
            "Dify API configuration is incomplete",
            "dify_not_configured",
            {"missing": missing},
        )
        self.missing = missing


class DifyUnavailableError(DifyServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, "dify_unavailable")


class DifyResponseError(DifyServiceError):
    """Dify answered with an error status."""

    def __init__(self, message: str, upstream_status: int | None, body: Any | None = None) -> None:
        super().__init__(
            message,
            "dify_request_failed",
            {"upstream_status": upstream_status, "body": body},
        )
        self.upstream_status = upstream_status


def _random_suffix(length: int = 7) -> str:
    return "".join(secrets.choice(_RUN_ID_ALPHABET) for _ in range(length))


def generate_workflow_run_id() -> str:
    return f"run-{int(time.time() * 1000)}-{_random_suffix()}"


def generate_user_id() -> str:
    return f"{DEFAULT_USER_PREFIX}-{int(time.time() * 1000):x}-{_random_suffix()}"


class DifyClient:
    """Thin async wrapper over the Dify REST API.

    POST calls go straight through httpx. GET calls go through a
    :class:`CachedFetcher`, so they are retried with backoff and, for app
    parameters, memoized.
    """

    def __init__(
        self,
        *,
        api_endpoint: str,
        api_key: str | None,
        app_id: str | None = None,
        workflow_id: str | None = None,
        user_id: str | None = None,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
        fetcher: CachedFetcher | None = None,
    ) -> None:
        self.api_endpoint = api_endpoint.rstrip("/")
        self.api_key = api_key
        self.app_id = app_id
        self.workflow_id = workflow_id
        self.user_id = user_id
        self.timeout = timeout
        self._transport = transport
        self._fetcher = fetcher or CachedFetcher(transport=transport)

    @classmethod
    def from_settings(
        cls,
        app_settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        fetcher: CachedFetcher | None = None,
    ) -> DifyClient:
        app_settings = app_settings or settings
        return cls(
            api_endpoint=app_settings.dify_api_endpoint,
            api_key=app_settings.dify_api_key,
            app_id=app_settings.dify_app_id,
            workflow_id=app_settings.dify_workflow_id,
            user_id=app_settings.dify_user_id,
            timeout=app_settings.dify_timeout_seconds,
            transport=transport,
            fetcher=fetcher,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_endpoint and self.api_key)

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _require(self, **values: str | None) -> None:
        missing = [name for name, value in values.items() if not value]
        if missing:
            logger.error("Dify configuration incomplete, missing: %s", ", ".join(missing))
            raise DifyConfigurationError(missing)

    async def _post(self, path: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        self._require(api_endpoint=self.api_endpoint, api_key=self.api_key)
        url = f"{self.api_endpoint}{path}"
        try:
            async with httpx.AsyncClient(
                transport=self._transport, timeout=self.timeout
            ) as client:
                response = await client.post(url, json=dict(payload), headers=self._headers())
        except httpx.TimeoutException as exc:
            logger.error("Dify request to %s timed out: %s", path, exc)
            raise DifyUnavailableError("Dify request timed out") from exc
        except httpx.TransportError as exc:
            logger.error("Dify request to %s failed: %s", path, exc)
            raise DifyUnavailableError(f"Dify service unreachable: {exc}") from exc

        if not response.is_success:
            body = _decode(response)
            logger.error("Dify %s returned %s: %s", path, response.status_code, body)
            raise DifyResponseError(
                f"Dify request failed with status {response.status_code}",
                response.status_code,
                body,
            )
        data = _decode(response)
        return data if isinstance(data, dict) else {"data": data}

    async def _get(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        cache_ttl: float = 0,
    ) -> Any:
        self._require(api_endpoint=self.api_endpoint, api_key=self.api_key)
        try:
            return await self._fetcher.get_json(
                f"{self.api_endpoint}{path}",
                params=params,
                headers=self._headers(),
                cache_ttl=cache_ttl,
                timeout=self.timeout,
                use_cache=cache_ttl > 0,
            )
        except FetchError as exc:
            if exc.status_code is None:
                raise DifyUnavailableError(str(exc)) from exc
            raise DifyResponseError(str(exc), exc.status_code, exc.body) from exc

    async def send_message(
        self,
        query: str,
        *,
        user: str,
        inputs: Mapping[str, Any] | None = None,
        conversation_id: str | None = None,
    ) -> dict[str, Any]:
        """Send a blocking chat message and return the answer with its ids."""
        payload: dict[str, Any] = {
            "query": query,
            "inputs": dict(inputs or {}),
            "response_mode": "blocking",
            "user": user,
        }
        if self.app_id:
            payload["app_id"] = self.app_id
        if conversation_id:
            payload["conversation_id"] = conversation_id
        logger.info("Sending chat message to Dify for user %s", user)
        data = await self._post("/chat-messages", payload)
        return {
            "content": data.get("answer") or "",
            "conversation_id": data.get("conversation_id") or "",
            "message_id": data.get("message_id") or data.get("id") or "",
            "metadata": data.get("metadata"),
        }

    async def run_workflow(
        self,
        inputs: Mapping[str, Any],
        *,
        callback_url: str,
        user_id: str | None = None,
        workflow_id: str | None = None,
    ) -> dict[str, Any]:
        """Start a workflow run whose result Dify posts back to ``callback_url``.

        Raises:
            DifyConfigurationError: If endpoint, key, app id or workflow id is missing.
        """
        user_id = user_id or self.user_id or generate_user_id()
        workflow_id = workflow_id or self.workflow_id
        self._require(
            api_endpoint=self.api_endpoint,
            api_key=self.api_key,
            app_id=self.app_id,
            workflow_id=workflow_id,
        )
        run_id = generate_workflow_run_id()
        payload = {
            "inputs": {
                **inputs,
                "sys.user_id": user_id,
                "sys.app_id": self.app_id,
                "sys.workflow_id": workflow_id,
                "sys.workflow_run_id": run_id,
            },
            "response_mode": "blocking",
            "user": user_id,
            "callback_url": callback_url,
        }
        logger.info("Running Dify workflow %s (callback %s)", workflow_id, callback_url)
        data = await self._post("/workflows/run", payload)
        return {
            "workflow_run_id": data.get("workflow_run_id") or run_id,
            "task_id": data.get("task_id"),
            "result": data.get("result") or data.get("data"),
            "callback_url": callback_url,
        }

    async def get_workflow_status(self, run_id: str) -> dict[str, Any]:
        data = await self._get(f"/workflows/run/{run_id}")
        return data if isinstance(data, dict) else {"data": data}

    async def stop_workflow_task(self, task_id: str, *, user: str | None = None) -> dict[str, Any]:
        user = user or self.user_id or generate_user_id()
        logger.info("Stopping Dify workflow task %s", task_id)
        return await self._post(f"/workflows/tasks/{task_id}/stop", {"user": user})

    async def get_workflow_logs(
        self,
        *,
        page: int = 1,
        limit: int = 10,
        start_date: str | None = None,
        end_date: str | None = None,
        workflow_id: str | None = None,
        user: str | None = None,
        status: str | None = None,
    ) -> dict[str, Any]:
        """Fetch workflow logs, normalized to ``{page, limit, total, has_more, data}``."""
        params: dict[str, Any] = {"page": page, "limit": limit}
        optional = {
            "start_date": start_date,
            "end_date": end_date,
            "workflow_id": workflow_id,
            "user": user,
            "status": status,
        }
        params.update({key: value for key, value in optional.items() if value})
        data = await self._get("/workflows/logs", params=params)
        if isinstance(data, list):
            return {"page": page, "limit": limit, "total": len(data), "has_more": False, "data": data}
        items = data.get("data") if isinstance(data.get("data"), list) else []
        return {
            "page": data.get("page", page),
            "limit": data.get("limit", limit),
            "total": data.get("total", len(items)),
            "has_more": bool(data.get("has_more", False)),
            "data": items,
        }

    async def get_parameters(self) -> dict[str, Any]:
        """App input parameters; memoized for a few minutes."""
        data = await self._get("/parameters", cache_ttl=PARAMETERS_CACHE_TTL_SECONDS)
        return data if isinstance(data, dict) else {"data": data}

    async def get_conversation_messages(
        self, conversation_id: str, *, user: str | None = None
    ) -> list[dict[str, str]]:
        params = {"conversation_id": conversation_id, "user": user or self.user_id or ""}
        data = await self._get("/messages", params=params)
        messages = data.get("data", []) if isinstance(data, dict) else data
        history: list[dict[str, str]] = []
        for message in messages or []:
            # Dify returns each exchange as one record holding both sides.
            if message.get("query"):
                history.append({"role": "user", "content": message["query"]})
            if message.get("answer"):
                history.append({"role": "assistant", "content": message["answer"]})
            if not message.get("query") and not message.get("answer"):
                history.append(
                    {"role": message.get("role", "user"), "content": message.get("content", "")}
                )
        return history


def _decode(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text
