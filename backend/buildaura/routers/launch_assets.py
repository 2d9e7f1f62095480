"""Launch assets router: saved brand toolkits (names, logos, colors, taglines)."""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from buildaura.deps import get_current_user, get_db
from buildaura.models.db.launch_asset import LaunchAsset
from buildaura.models.records import LaunchAssetResponse
from buildaura.routers.record_helpers import (
    delete_owned_row,
    get_owned_row,
    list_owned_rows,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/me", tags=["launch-assets"])


# ---------------------------------------------------------------------------
# GET /me/launch-assets
# ---------------------------------------------------------------------------


@router.get("/launch-assets", response_model=List[LaunchAssetResponse])
async def list_launch_assets(
    search: Optional[str] = Query(None, max_length=200),
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    rows = await list_owned_rows(
        db,
        LaunchAsset,
        current_user,
        search=search,
        search_columns=(LaunchAsset.business_name, LaunchAsset.industry),
        label="launch assets",
    )
    return [LaunchAssetResponse.model_validate(r) for r in rows]


# ---------------------------------------------------------------------------
# GET /me/launch-assets/{asset_id}
# ---------------------------------------------------------------------------


@router.get("/launch-assets/{asset_id}", response_model=LaunchAssetResponse)
async def get_launch_asset(
    asset_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    row = await get_owned_row(
        db, LaunchAsset, asset_id, current_user, label="launch asset"
    )
    return LaunchAssetResponse.model_validate(row)


# ---------------------------------------------------------------------------
# DELETE /me/launch-assets/{asset_id}
# ---------------------------------------------------------------------------


@router.delete("/launch-assets/{asset_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_launch_asset(
    asset_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    await delete_owned_row(
        db, LaunchAsset, asset_id, current_user, label="launch asset"
    )
