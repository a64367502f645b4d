from beanie import PydanticObjectId
from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, ConfigDict, Field

from app.core.responses import success
from app.core.validation import require_body
from app.deps import get_current_user
from app.models.user import User
from app.services import projects as projects_service

router = APIRouter()


class ProjectCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)


class ProjectUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    is_starred: bool | None = Field(default=None, alias="isStarred")
    add_files: list[PydanticObjectId] | None = Field(default=None, alias="addFiles")
    remove_files: list[PydanticObjectId] | None = Field(default=None, alias="removeFiles")


@router.get("")
async def projects_list(user: User = Depends(get_current_user)):
    items = await projects_service.list_projects(user.id)
    return success([projects_service.summary(p) for p in items])


@router.post("")
async def project_create(request: Request, user: User = Depends(get_current_user)):
    body = await require_body(request, ProjectCreate)
    p = await projects_service.create_project(user.id, body.name, body.description)
    return success(projects_service.summary(p), status_code=status.HTTP_201_CREATED)


@router.get("/{project_id}")
async def project_get(project_id: str, user: User = Depends(get_current_user)):
    p = await projects_service.get_project(project_id, user.id)
    return success(projects_service.detail(p))


@router.patch("/{project_id}")
async def project_update(project_id: str, request: Request, user: User = Depends(get_current_user)):
    body = await require_body(request, ProjectUpdate)
    p = await projects_service.update_project(
        project_id,
        user.id,
        name=body.name,
        description=body.description,
        is_starred=body.is_starred,
        add_files=body.add_files,
        remove_files=body.remove_files,
    )
    return success(projects_service.summary(p))


@router.delete("/{project_id}")
async def project_delete(project_id: str, user: User = Depends(get_current_user)):
    await projects_service.delete_project(project_id, user.id)
    return success({"deleted": True})
