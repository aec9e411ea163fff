"""Portfolio content endpoints backed by the document store."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from ...api.deps import get_content_service
from ...api.errors import APIError
from ...core.security import require_admin
from ...services.content_service import ContentService

router = APIRouter()


class SkillCreate(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = Field(min_length=1)
    level: Optional[str] = None
    category: Optional[str] = None
    order: int = 0


def _found(data: Optional[Dict[str, Any]], what: str) -> Dict[str, Any]:
    if data is None:
        raise APIError(code="NOT_FOUND", message=f"{what} not found", status_code=404)
    return {"success": True, "data": data}


@router.get("/profile")
async def get_profile(content: ContentService = Depends(get_content_service)) -> Dict[str, Any]:
    return _found(await content.get_profile(), "Profile")


@router.put("/profile", dependencies=[Depends(require_admin)])
async def update_profile(
    payload: Dict[str, Any], content: ContentService = Depends(get_content_service)
) -> Dict[str, Any]:
    return {"success": True, "data": await content.update_profile(payload)}


@router.get("/site-settings")
async def get_site_settings(content: ContentService = Depends(get_content_service)) -> Dict[str, Any]:
    return _found(await content.get_site_settings(), "Site settings")


@router.put("/site-settings", dependencies=[Depends(require_admin)])
async def update_site_settings(
    payload: Dict[str, Any], content: ContentService = Depends(get_content_service)
) -> Dict[str, Any]:
    return {"success": True, "data": await content.update_site_settings(payload)}


@router.get("/portfolio/skills")
async def list_skills(content: ContentService = Depends(get_content_service)) -> Dict[str, Any]:
    return {"success": True, "data": await content.list_skills()}


@router.post("/portfolio/skills", status_code=201, dependencies=[Depends(require_admin)])
async def create_skill(
    payload: SkillCreate, content: ContentService = Depends(get_content_service)
) -> Dict[str, Any]:
    skill_id = await content.add_skill(payload.model_dump(exclude_none=True))
    return {"success": True, "message": "Skill created successfully", "id": skill_id}
