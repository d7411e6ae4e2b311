"""Global library endpoints: characters and wardrobes shared across projects."""

from __future__ import annotations

from enum import Enum
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import ValidationError

from prompt_shop.api.models import ImportGlobalRequest
from prompt_shop.core.projects import GlobalLibrary, get_global_library
from prompt_shop.db.models import EntityKind

router = APIRouter()


class GlobalKind(str, Enum):
    CHARACTERS = "characters"
    WARDROBES = "wardrobes"

    @property
    def entity_kind(self) -> EntityKind:
        return EntityKind(self.value)


@router.get("/global/{kind}")
async def list_global(
    kind: GlobalKind,
    library: GlobalLibrary = Depends(get_global_library),
) -> list[dict[str, Any]]:
    return [item.model_dump(mode="json") for item in library.list_entities(kind.entity_kind)]


@router.post("/global/{kind}", status_code=201)
async def add_global(
    kind: GlobalKind,
    data: dict[str, Any] = Body(...),
    library: GlobalLibrary = Depends(get_global_library),
) -> dict[str, Any]:
    try:
        entity = library.add(kind.entity_kind, data)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return entity.model_dump(mode="json")


@router.put("/global/{kind}/{entity_id}")
async def update_global(
    kind: GlobalKind,
    entity_id: str,
    data: dict[str, Any] = Body(...),
    library: GlobalLibrary = Depends(get_global_library),
) -> dict[str, Any]:
    try:
        entity = library.update(kind.entity_kind, entity_id, data)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    if not entity:
        raise HTTPException(status_code=404, detail=f"Global entity '{entity_id}' not found")
    return entity.model_dump(mode="json")


@router.delete("/global/{kind}/{entity_id}", status_code=204)
async def delete_global(
    kind: GlobalKind,
    entity_id: str,
    library: GlobalLibrary = Depends(get_global_library),
) -> None:
    if not library.delete(kind.entity_kind, entity_id):
        raise HTTPException(status_code=404, detail=f"Global entity '{entity_id}' not found")


@router.post("/projects/{project_id}/import-global")
async def import_global(
    project_id: str,
    data: ImportGlobalRequest,
    library: GlobalLibrary = Depends(get_global_library),
) -> dict[str, list[dict[str, Any]]]:
    """Copy global characters/wardrobes into a project under fresh ids."""
    try:
        imported = library.import_into_project(project_id, data.character_ids, data.wardrobe_ids)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {kind: [item.model_dump(mode="json") for item in items] for kind, items in imported.items()}
