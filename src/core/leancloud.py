"""LeanCloud REST client.

Thin async wrapper over the LeanCloud storage REST API (``/1.1``) using
master-key authentication. One client is built at application start-up and
handed to the services that need storage access.
"""

import json
from datetime import datetime
from typing import Any

import httpx

from src.config.settings import Settings
from src.core.logging import get_logger


logger = get_logger(__name__)

LeanObject = dict[str, Any]

# LeanCloud caps a single query page at 1000 objects
MAX_QUERY_LIMIT = 1000


class LeanCloudError(Exception):
    """Raised when a LeanCloud request fails."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: int | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)


class LeanCloudNotConfiguredError(LeanCloudError):
    """LeanCloud credentials are missing."""

    def __init__(self) -> None:
        super().__init__(
            "LeanCloud credentials are not fully configured in environment variables"
        )


def pointer(class_name: str, object_id: str) -> dict[str, str]:
    """Build a LeanCloud pointer to another object."""
    return {"__type": "Pointer", "className": class_name, "objectId": object_id}


def increment(amount: int = 1) -> dict[str, Any]:
    """Atomic increment operation (negative amounts decrement)."""
    return {"__op": "Increment", "amount": amount}


def parse_date(value: Any) -> datetime | None:
    """Parse a LeanCloud timestamp (ISO string or ``{"__type": "Date"}``)."""
    if isinstance(value, dict):
        value = value.get("iso")
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


class LeanCloudClient:
    """Async LeanCloud storage client authenticated with the master key."""

    API_VERSION = "1.1"

    def __init__(
        self,
        app_id: str,
        app_key: str,
        master_key: str,
        server_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.app_id = app_id
        self.app_key = app_key
        self._http = httpx.AsyncClient(
            base_url=f"{server_url.rstrip('/')}/{self.API_VERSION}",
            headers={
                "X-LC-Id": app_id,
                "X-LC-Key": f"{master_key},master",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "LeanCloudClient":
        """Create a client from settings, failing fast on missing credentials."""
        if not settings.leancloud_configured:
            raise LeanCloudNotConfiguredError
        return cls(
            app_id=settings.leancloud_app_id or "",
            app_key=settings.leancloud_app_key or "",
            master_key=settings.leancloud_master_key or "",
            server_url=settings.leancloud_server_url or "",
            timeout=settings.leancloud_timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._http.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        body: Any = None,
    ) -> Any:
        try:
            response = await self._http.request(method, path, params=params, json=body)
        except httpx.TimeoutException as e:
            logger.error("leancloud_timeout", method=method, path=path, error=str(e))
            raise LeanCloudError("LeanCloud request timed out") from e
        except httpx.RequestError as e:
            logger.error("leancloud_request_error", method=method, path=path, error=str(e))
            raise LeanCloudError(f"LeanCloud request error: {e}") from e

        if response.is_error:
            code = None
            message = response.text[:500]
            try:
                payload = response.json()
                code = payload.get("code")
                message = payload.get("error", message)
            except ValueError:
                pass
            logger.error(
                "leancloud_request_failed",
                method=method,
                path=path,
                status_code=response.status_code,
                code=code,
                error=message,
            )
            raise LeanCloudError(message, status_code=response.status_code, code=code)

        if not response.content:
            return {}
        return response.json()

    # ==========================================================================
    # Queries
    # ==========================================================================

    async def query(
        self,
        class_name: str,
        where: dict[str, Any] | None = None,
        *,
        order: str | None = None,
        include: str | None = None,
        keys: str | None = None,
        limit: int = 100,
        skip: int = 0,
    ) -> list[LeanObject]:
        """Find objects of ``class_name`` matching ``where``.

        ``order`` uses LeanCloud syntax: ``createdAt`` ascending,
        ``-createdAt`` descending.
        """
        params: dict[str, Any] = {"limit": min(limit, MAX_QUERY_LIMIT)}
        if where:
            params["where"] = json.dumps(where, ensure_ascii=False)
        if order:
            params["order"] = order
        if include:
            params["include"] = include
        if keys:
            params["keys"] = keys
        if skip:
            params["skip"] = skip

        data = await self._request("GET", f"/classes/{class_name}", params=params)
        return data.get("results", [])

    async def first(
        self,
        class_name: str,
        where: dict[str, Any] | None = None,
    ) -> LeanObject | None:
        """Return the first matching object, or None."""
        results = await self.query(class_name, where, limit=1)
        return results[0] if results else None

    async def count(
        self,
        class_name: str,
        where: dict[str, Any] | None = None,
    ) -> int:
        """Count objects matching ``where`` without fetching them."""
        params: dict[str, Any] = {"count": 1, "limit": 0}
        if where:
            params["where"] = json.dumps(where, ensure_ascii=False)
        data = await self._request("GET", f"/classes/{class_name}", params=params)
        return int(data.get("count", 0))

    # ==========================================================================
    # Mutations
    # ==========================================================================

    async def create(self, class_name: str, data: dict[str, Any]) -> LeanObject:
        """Save a new object and return it with objectId and timestamps."""
        saved = await self._request(
            "POST",
            f"/classes/{class_name}",
            params={"fetchWhenSave": "true"},
            body=data,
        )
        return {**data, **saved}

    async def update(
        self,
        class_name: str,
        object_id: str,
        data: dict[str, Any],
    ) -> LeanObject:
        """Update an object; returns the saved values of the updated fields."""
        return await self._request(
            "PUT",
            f"/classes/{class_name}/{object_id}",
            params={"fetchWhenSave": "true"},
            body=data,
        )

    async def destroy(self, class_name: str, object_id: str) -> None:
        """Delete one object."""
        await self._request("DELETE", f"/classes/{class_name}/{object_id}")

    async def destroy_all(self, class_name: str, object_ids: list[str]) -> int:
        """Delete objects in batches through the batch endpoint."""
        deleted = 0
        batch_size = 50
        for start in range(0, len(object_ids), batch_size):
            chunk = object_ids[start : start + batch_size]
            await self._request(
                "POST",
                "/batch",
                body={
                    "requests": [
                        {
                            "method": "DELETE",
                            "path": f"/{self.API_VERSION}/classes/{class_name}/{oid}",
                        }
                        for oid in chunk
                    ]
                },
            )
            deleted += len(chunk)
        return deleted
