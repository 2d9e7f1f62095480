"""GenerationGateway: calls the generation function endpoints over HTTP.

The gateway never retries and never deduplicates; each ``generate`` call is
one request and, on success, one newly persisted entity.
"""

import json
import logging
import uuid
from typing import Any, Dict, Mapping, Optional, Type, Union

import httpx
from pydantic import BaseModel, ValidationError

from buildaura.client.http import ApiClient, response_detail
from buildaura.errors import (
    ERROR_CODE_HEADER,
    GenerationFailed,
    MalformedResponse,
    Unauthenticated,
)
from buildaura.models.generation import ENTITY_ADAPTER, get_tool

logger = logging.getLogger(__name__)


class GenerationGateway(ApiClient):
    """Client for ``/functions/v1/*`` and ``/api/v1/me/generations/*``."""

    async def generate(
        self,
        tool_name: str,
        fields: Mapping[str, str],
        *,
        context: Optional[Mapping[str, Any]] = None,
    ):
        """Generate an entity with the named tool.

        Args:
            tool_name: One of the registered tool names (``idea-generator`` ...).
            fields: Wizard field values, sent as the request body.
            context: Extra body keys, e.g. ``{"idea_context": {...}}``.

        Raises:
            ValueError: Unknown tool name.
            Unauthenticated: No active session (nothing is sent) or HTTP 401.
            GenerationFailed: Transport error or non-success status.
            MalformedResponse: The body does not decode into the tool's entity,
                or the server reported unusable model output.
        """
        tool = get_tool(tool_name)
        payload: Dict[str, Any] = {**fields, **(context or {})}

        try:
            response = await self._send(
                "POST", f"/functions/v1/{tool.function_name}", json=payload
            )
        except httpx.HTTPError as e:
            logger.error("Generation request to %s failed: %s", tool.function_name, e)
            raise GenerationFailed(
                f"Could not reach {tool.function_name}: {type(e).__name__}",
                detail=str(e),
            ) from e

        self._raise_for_status(response, tool.function_name)
        return self._decode(response, tool.entity_model)

    async def fetch(self, generation_id: Union[str, uuid.UUID]):
        """Reload a previously generated entity by its generation id."""
        path = f"/api/v1/me/generations/{generation_id}"
        try:
            response = await self._send("GET", path)
        except httpx.HTTPError as e:
            logger.error("Fetching generation %s failed: %s", generation_id, e)
            raise GenerationFailed(
                f"Could not load generation {generation_id}", detail=str(e)
            ) from e

        self._raise_for_status(response, path)
        return self._decode(response, None)

    @staticmethod
    def _raise_for_status(response: httpx.Response, target: str) -> None:
        if response.status_code == 401:
            raise Unauthenticated("Session rejected by the server")
        if response.is_success:
            return
        detail = response_detail(response)
        logger.warning("%s returned %s: %s", target, response.status_code, detail)
        if response.headers.get(ERROR_CODE_HEADER) == MalformedResponse.code:
            raise MalformedResponse(f"{target} reported unusable model output: {detail}")
        raise GenerationFailed(status=response.status_code, detail=detail)

    @staticmethod
    def _decode(response: httpx.Response, model: Optional[Type[BaseModel]]):
        try:
            body = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedResponse(f"Response is not JSON: {e}") from e

        try:
            if model is None:
                return ENTITY_ADAPTER.validate_python(body)
            return model.model_validate(body)
        except ValidationError as e:
            logger.error("Response did not match the expected entity: %s", e)
            raise MalformedResponse(
                f"Response did not match the expected entity: "
                f"{e.error_count()} validation error(s)"
            ) from e
