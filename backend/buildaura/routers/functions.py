"""Generation function endpoints.

One POST endpoint per tool, addressed by function name
(``/functions/v1/generate-business-ideas`` and so on).  Each call runs the
LLM once and persists the entity with its prompt-history row; there is no
deduplication, so two identical requests produce two entities.
"""

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from buildaura.deps import (
    _safe_error,
    get_current_user,
    get_db,
    get_generation_service,
)
from buildaura.errors import (
    ERROR_CODE_HEADER,
    GenerationFailed,
    MalformedResponse,
    PersistenceFailed,
)
from buildaura.generation_service import GenerationService
from buildaura.models.generation import TOOLS_BY_FUNCTION
from buildaura.security import rate_limit_generation

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/functions/v1", tags=["functions"])


# ---------------------------------------------------------------------------
# POST /functions/v1/{function_name}
# ---------------------------------------------------------------------------


@router.post("/{function_name}")
@rate_limit_generation()
async def invoke_generation_function(
    function_name: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
    service: GenerationService = Depends(get_generation_service),
):
    """Run a generation tool and return the persisted entity.

    Returns:
        The ``GeneratedEntity`` JSON (discriminated by ``kind``).

    Raises:
        HTTPException 404: Unknown function name.
        HTTPException 422: Body is not JSON or misses required fields.
        HTTPException 502: LLM call failed or returned an unusable shape
            (the latter tagged ``X-Error-Code: MALFORMED_RESPONSE``).
        HTTPException 500: Results could not be saved.
    """
    tool = TOOLS_BY_FUNCTION.get(function_name)
    if tool is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown function: {function_name}",
        )

    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Request body must be a JSON object",
        ) from e

    try:
        body = tool.request_model.model_validate(payload)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.errors(include_url=False, include_context=False),
        ) from e

    try:
        entity = await service.generate(db, current_user["id"], tool.name, body)
    except MalformedResponse as e:
        logger.warning(
            "%s returned unusable output for user %s: %s", tool.name, current_user["id"], e
        )
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=e.user_message,
            headers={ERROR_CODE_HEADER: e.code},
        ) from e
    except GenerationFailed as e:
        logger.warning("%s failed for user %s: %s", tool.name, current_user["id"], e)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=e.user_message,
        ) from e
    except PersistenceFailed as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=_safe_error(f"saving {tool.name} results", e),
        ) from e

    return entity.model_dump(mode="json")
