"""Generations router: reload a generated entity by its generation id."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from buildaura.deps import _safe_error, get_current_user, get_db, get_generation_service
from buildaura.generation_service import GenerationService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/me", tags=["generations"])


# ---------------------------------------------------------------------------
# GET /me/generations/{generation_id}
# ---------------------------------------------------------------------------


@router.get("/generations/{generation_id}")
async def get_generation(
    generation_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
    service: GenerationService = Depends(get_generation_service),
):
    """Rebuild the entity persisted by one generation call.

    Items deleted since the generation are omitted.  Responds 404 when the
    generation is unknown, owned by another user, or has no items left.
    """
    try:
        entity = await service.load_generation(db, current_user["id"], generation_id)
    except Exception as e:
        logger.error("Failed to load generation %s: %s", generation_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=_safe_error("loading generation", e),
        ) from e

    if entity is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Generation not found",
        )
    return entity.model_dump(mode="json")
