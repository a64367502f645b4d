"""Projects CRUD, scoped to the owning user."""

from datetime import datetime

from beanie import PydanticObjectId
from bson.errors import InvalidId

from app.core.exceptions import NotFoundError
from app.models.project import Project


def _object_id(value: str) -> PydanticObjectId:
    try:
        return PydanticObjectId(value)
    except (InvalidId, TypeError) as e:
        raise NotFoundError("Project not found") from e


def summary(p: Project) -> dict:
    return {
        "id": str(p.id),
        "name": p.name,
        "description": p.description,
        "thumbnailUrl": p.thumbnail_url,
        "fileCount": len(p.files),
        "isStarred": p.is_starred,
        "updatedAt": p.updated_at.isoformat(),
    }


def detail(p: Project) -> dict:
    return {
        "id": str(p.id),
        "name": p.name,
        "description": p.description,
        "thumbnailUrl": p.thumbnail_url,
        "files": [str(f) for f in p.files],
        "isStarred": p.is_starred,
        "createdAt": p.created_at.isoformat(),
        "updatedAt": p.updated_at.isoformat(),
    }


async def list_projects(user_id: PydanticObjectId) -> list[Project]:
    return await Project.find(Project.user_id == user_id).sort(-Project.updated_at).to_list()


async def create_project(user_id: PydanticObjectId, name: str, description: str | None = None) -> Project:
    p = Project(user_id=user_id, name=name, description=description)
    await p.insert()
    return p


async def get_project(project_id: str, user_id: PydanticObjectId) -> Project:
    p = await Project.find_one(Project.id == _object_id(project_id), Project.user_id == user_id)
    if not p:
        raise NotFoundError("Project not found")
    return p


async def update_project(
    project_id: str,
    user_id: PydanticObjectId,
    name: str | None = None,
    description: str | None = None,
    is_starred: bool | None = None,
    add_files: list[PydanticObjectId] | None = None,
    remove_files: list[PydanticObjectId] | None = None,
) -> Project:
    p = await get_project(project_id, user_id)
    if name is not None:
        p.name = name
    if description is not None:
        p.description = description
    if is_starred is not None:
        p.is_starred = is_starred
    if add_files:
        for f in add_files:
            if f not in p.files:
                p.files.append(f)
    if remove_files:
        drop = set(remove_files)
        p.files = [f for f in p.files if f not in drop]
    p.updated_at = datetime.utcnow()
    await p.save()
    return p


async def delete_project(project_id: str, user_id: PydanticObjectId) -> None:
    p = await get_project(project_id, user_id)
    await p.delete()
