from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from vitetags.application.vite import Vite
from vitetags.infrastructure.exceptions import (
    ChunkNotFoundError,
    ViteError,
    create_user_friendly_error_message,
    log_error_details,
)
from vitetags.infrastructure.logging import get_logger, set_context
from vitetags.web.dependencies import get_vite
from vitetags.web.schemas import AssetResponse, ManifestHashResponse, PreloadedAssetsResponse

router = APIRouter(prefix="/api/vite", tags=["vite"])
logger = get_logger(__name__)


@router.get("/manifest-hash", response_model=ManifestHashResponse)
def manifest_hash(vite: Vite = Depends(get_vite)) -> ManifestHashResponse:
    return ManifestHashResponse(hot=vite.is_running_hot(), hash=vite.manifest_hash())


@router.get("/preloaded", response_model=PreloadedAssetsResponse)
def preloaded_assets(vite: Vite = Depends(get_vite)) -> PreloadedAssetsResponse:
    return PreloadedAssetsResponse(assets=vite.preloaded_assets)


@router.get("/assets/{asset:path}", response_model=AssetResponse)
def asset_url(asset: str, vite: Vite = Depends(get_vite)) -> AssetResponse:
    set_context(operation="resolve_asset")
    try:
        url = vite.asset(asset)
    except ViteError as exc:
        error_details = log_error_details(exc, {"asset": asset})
        code = (
            status.HTTP_404_NOT_FOUND
            if isinstance(exc, ChunkNotFoundError)
            else status.HTTP_503_SERVICE_UNAVAILABLE
        )
        if code == status.HTTP_404_NOT_FOUND:
            logger.info("Requested asset is not in the manifest", extra=error_details)
        else:
            logger.error("Unable to resolve asset", extra=error_details)
        raise HTTPException(
            status_code=code, detail=create_user_friendly_error_message(exc)
        ) from exc
    return AssetResponse(asset=asset, url=url)
