from __future__ import annotations

from pydantic import BaseModel, Field

from vitetags.domain.models import AttributeValue


class ManifestHashResponse(BaseModel):
    hot: bool
    hash: str | None = Field(None, description="MD5 of the manifest; null when hot or unbuilt")


class AssetResponse(BaseModel):
    asset: str
    url: str


class PreloadedAssetsResponse(BaseModel):
    assets: dict[str, dict[str, AttributeValue]]
