"""RecordsClient: list, delete and update the caller's stored records."""

import logging
import uuid
from typing import Any, Dict, List, Optional, Union

import httpx

from buildaura.client.http import ApiClient, response_detail
from buildaura.errors import PersistenceFailed

logger = logging.getLogger(__name__)

COLLECTIONS = ("ideas", "plans", "launch-assets", "tasks", "prompt-history")


def _check_collection(collection: str) -> str:
    if collection not in COLLECTIONS:
        raise ValueError(f"Unknown collection: {collection}. Available: {list(COLLECTIONS)}")
    return collection


class RecordsClient(ApiClient):
    """Client for ``/api/v1/me/<collection>``.

    Every failure (transport error or non-success status, including 404 for
    rows owned by someone else) raises ``PersistenceFailed``.
    """

    async def _call(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._send(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise PersistenceFailed(f"{method} {path} failed", detail=str(e)) from e

        if not response.is_success:
            detail = response_detail(response)
            logger.warning("%s %s returned %s: %s", method, path, response.status_code, detail)
            raise PersistenceFailed(
                f"{method} {path} returned {response.status_code}",
                status=response.status_code,
                detail=detail,
            )
        return response

    async def list(
        self, collection: str, search: Optional[str] = None, **filters: Any
    ) -> List[Dict[str, Any]]:
        params = {k: v for k, v in filters.items() if v is not None}
        if search:
            params["search"] = search
        response = await self._call(
            "GET", f"/api/v1/me/{_check_collection(collection)}", params=params
        )
        return response.json()

    async def delete(self, collection: str, item_id: Union[str, uuid.UUID]) -> None:
        await self._call("DELETE", f"/api/v1/me/{_check_collection(collection)}/{item_id}")

    async def update_task(
        self, task_id: Union[str, uuid.UUID], completed: bool
    ) -> Dict[str, Any]:
        response = await self._call(
            "PATCH", f"/api/v1/me/tasks/{task_id}", json={"completed": completed}
        )
        return response.json()
