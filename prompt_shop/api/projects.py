"""Project and project-library endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import ValidationError

from prompt_shop.api.models import ProjectCreate, ProjectUpdate
from prompt_shop.core.projects import ProjectService, get_project_service
from prompt_shop.db.models import EntityKind, Project, ProjectSummary

router = APIRouter()


@router.get("", response_model=list[ProjectSummary])
async def list_projects(service: ProjectService = Depends(get_project_service)) -> list[ProjectSummary]:
    """List projects, most recently updated first."""
    return service.list_projects()


@router.post("", response_model=Project, status_code=201)
async def create_project(
    data: ProjectCreate,
    service: ProjectService = Depends(get_project_service),
) -> Project:
    """Create a project seeded with the default looks, lenses and micro packs."""
    return service.create_project(data.name)


@router.get("/{project_id}", response_model=Project)
async def get_project(
    project_id: str,
    service: ProjectService = Depends(get_project_service),
) -> Project:
    project = service.get_project(project_id)
    if not project:
        raise HTTPException(status_code=404, detail=f"Project '{project_id}' not found")
    return project


@router.patch("/{project_id}", response_model=Project)
async def rename_project(
    project_id: str,
    data: ProjectUpdate,
    service: ProjectService = Depends(get_project_service),
) -> Project:
    try:
        return service.rename_project(project_id, data.name)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{project_id}", status_code=204)
async def delete_project(
    project_id: str,
    service: ProjectService = Depends(get_project_service),
) -> None:
    if not service.delete_project(project_id):
        raise HTTPException(status_code=404, detail=f"Project '{project_id}' not found")


# --- Library ---


@router.get("/{project_id}/library/{kind}")
async def list_entities(
    project_id: str,
    kind: EntityKind,
    service: ProjectService = Depends(get_project_service),
) -> list[dict[str, Any]]:
    """List one library collection in library order."""
    try:
        entities = service.list_entities(project_id, kind)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return [entity.model_dump(mode="json") for entity in entities]


@router.post("/{project_id}/library/{kind}", status_code=201)
async def add_entity(
    project_id: str,
    kind: EntityKind,
    data: dict[str, Any] = Body(...),
    service: ProjectService = Depends(get_project_service),
) -> dict[str, Any]:
    try:
        entity = service.add_entity(project_id, kind, data)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return entity.model_dump(mode="json")


@router.put("/{project_id}/library/{kind}/{entity_id}")
async def update_entity(
    project_id: str,
    kind: EntityKind,
    entity_id: str,
    data: dict[str, Any] = Body(...),
    service: ProjectService = Depends(get_project_service),
) -> dict[str, Any]:
    """Merge fields into an entity; id and created_at never change."""
    try:
        entity = service.update_entity(project_id, kind, entity_id, data)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if not entity:
        raise HTTPException(status_code=404, detail=f"Entity '{entity_id}' not found in {kind.value}")
    return entity.model_dump(mode="json")


@router.delete("/{project_id}/library/{kind}/{entity_id}", status_code=204)
async def delete_entity(
    project_id: str,
    kind: EntityKind,
    entity_id: str,
    service: ProjectService = Depends(get_project_service),
) -> None:
    """Delete an entity. Prompts referencing it are re-checked on their next compile."""
    try:
        deleted = service.delete_entity(project_id, kind, entity_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Entity '{entity_id}' not found in {kind.value}")


@router.post("/{project_id}/library/{kind}/{entity_id}/duplicate", status_code=201)
async def duplicate_entity(
    project_id: str,
    kind: EntityKind,
    entity_id: str,
    service: ProjectService = Depends(get_project_service),
) -> dict[str, Any]:
    try:
        entity = service.duplicate_entity(project_id, kind, entity_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if not entity:
        raise HTTPException(status_code=404, detail=f"Entity '{entity_id}' not found in {kind.value}")
    return entity.model_dump(mode="json")
