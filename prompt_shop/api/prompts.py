"""Stored prompt endpoints: drafts, history, validation and compilation."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import ValidationError

from prompt_shop.api.models import (
    CompileResponse,
    HistoryCreate,
    PromptCreate,
    PromptRename,
    PromptResponse,
    ValidateResponse,
    ValidationErrorOut,
)
from prompt_shop.core.lens import EmptyLensLibraryError
from prompt_shop.core.projects import ProjectService, PromptNotCompilableError, get_project_service
from prompt_shop.core.validator import can_compile
from prompt_shop.db.models import OutputMode, PromptHistoryEntry

router = APIRouter()


def _not_found(prompt_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Prompt '{prompt_id}' not found")


@router.get("/{project_id}/prompts", response_model=list[PromptResponse])
async def list_prompts(
    project_id: str,
    service: ProjectService = Depends(get_project_service),
) -> list[PromptResponse]:
    try:
        prompts = service.list_prompts(project_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return [PromptResponse.from_prompt(p) for p in prompts]


@router.post("/{project_id}/prompts", response_model=PromptResponse, status_code=201)
async def create_prompt(
    project_id: str,
    data: PromptCreate,
    service: ProjectService = Depends(get_project_service),
) -> PromptResponse:
    draft = data.prompt_request.model_dump(exclude_none=True) if data.prompt_request else None
    try:
        prompt = service.create_prompt(project_id, data.title, draft)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return PromptResponse.from_prompt(prompt)


@router.get("/{project_id}/prompts/{prompt_id}", response_model=PromptResponse)
async def get_prompt(
    project_id: str,
    prompt_id: str,
    service: ProjectService = Depends(get_project_service),
) -> PromptResponse:
    try:
        prompt = service.get_prompt(project_id, prompt_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if not prompt:
        raise _not_found(prompt_id)
    return PromptResponse.from_prompt(prompt)


@router.patch("/{project_id}/prompts/{prompt_id}", response_model=PromptResponse)
async def rename_prompt(
    project_id: str,
    prompt_id: str,
    data: PromptRename,
    service: ProjectService = Depends(get_project_service),
) -> PromptResponse:
    try:
        prompt = service.rename_prompt(project_id, prompt_id, data.title)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if not prompt:
        raise _not_found(prompt_id)
    return PromptResponse.from_prompt(prompt)


@router.delete("/{project_id}/prompts/{prompt_id}", status_code=204)
async def delete_prompt(
    project_id: str,
    prompt_id: str,
    service: ProjectService = Depends(get_project_service),
) -> None:
    try:
        deleted = service.delete_prompt(project_id, prompt_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if not deleted:
        raise _not_found(prompt_id)


@router.post("/{project_id}/prompts/{prompt_id}/duplicate", response_model=PromptResponse, status_code=201)
async def duplicate_prompt(
    project_id: str,
    prompt_id: str,
    service: ProjectService = Depends(get_project_service),
) -> PromptResponse:
    try:
        prompt = service.duplicate_prompt(project_id, prompt_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if not prompt:
        raise _not_found(prompt_id)
    return PromptResponse.from_prompt(prompt)


@router.patch("/{project_id}/prompts/{prompt_id}/request", response_model=PromptResponse)
async def update_prompt_request(
    project_id: str,
    prompt_id: str,
    updates: dict[str, Any] = Body(...),
    service: ProjectService = Depends(get_project_service),
) -> PromptResponse:
    """Merge field updates into the prompt's draft."""
    try:
        prompt = service.update_prompt_request(project_id, prompt_id, updates)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if not prompt:
        raise _not_found(prompt_id)
    return PromptResponse.from_prompt(prompt)


# --- History ---


@router.post(
    "/{project_id}/prompts/{prompt_id}/history",
    response_model=PromptHistoryEntry,
    status_code=201,
)
async def save_history_entry(
    project_id: str,
    prompt_id: str,
    data: HistoryCreate | None = None,
    service: ProjectService = Depends(get_project_service),
) -> PromptHistoryEntry:
    """Snapshot the current draft into the prompt's history."""
    try:
        entry = service.save_history_entry(project_id, prompt_id, note=data.note if data else None)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if not entry:
        raise _not_found(prompt_id)
    return entry


@router.post(
    "/{project_id}/prompts/{prompt_id}/history/{history_id}/restore",
    response_model=PromptResponse,
)
async def restore_from_history(
    project_id: str,
    prompt_id: str,
    history_id: str,
    service: ProjectService = Depends(get_project_service),
) -> PromptResponse:
    try:
        prompt = service.restore_from_history(project_id, prompt_id, history_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if not prompt:
        raise HTTPException(status_code=404, detail=f"History entry '{history_id}' not found")
    return PromptResponse.from_prompt(prompt)


# --- Validation & compilation ---


@router.post("/{project_id}/prompts/{prompt_id}/validate", response_model=ValidateResponse)
async def validate_prompt(
    project_id: str,
    prompt_id: str,
    service: ProjectService = Depends(get_project_service),
) -> ValidateResponse:
    try:
        errors = service.validate_prompt(project_id, prompt_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ValidateResponse(
        errors=[ValidationErrorOut.from_error(e) for e in errors],
        can_compile=can_compile(errors),
    )


@router.post("/{project_id}/prompts/{prompt_id}/compile", response_model=CompileResponse)
async def compile_prompt(
    project_id: str,
    prompt_id: str,
    mode: OutputMode | None = None,
    service: ProjectService = Depends(get_project_service),
) -> CompileResponse:
    """Compile a stored prompt. Hard validation errors return 422 with the error list."""
    try:
        compiled, errors = service.compile_prompt(project_id, prompt_id, output_mode=mode)
    except PromptNotCompilableError as e:
        raise HTTPException(status_code=422, detail=[err.to_dict() for err in e.errors])
    except EmptyLensLibraryError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return CompileResponse.build(compiled, errors)
