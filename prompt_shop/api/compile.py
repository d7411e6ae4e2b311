"""Stateless validation and compilation: the request and the library come in the body."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from prompt_shop.api.models import (
    CompileResponse,
    StatelessRequest,
    ValidateResponse,
    ValidationErrorOut,
)
from prompt_shop.core.compiler import compile_prompt
from prompt_shop.core.lens import EmptyLensLibraryError
from prompt_shop.core.validator import can_compile, hard_errors, validate

router = APIRouter()


@router.post("/validate", response_model=ValidateResponse)
async def validate_request(data: StatelessRequest) -> ValidateResponse:
    library = data.library
    errors = validate(data.prompt_request, library.characters, library.wardrobes, library.looks, library.lenses)
    return ValidateResponse(
        errors=[ValidationErrorOut.from_error(e) for e in errors],
        can_compile=can_compile(errors),
    )


@router.post("/compile", response_model=CompileResponse)
async def compile_request(data: StatelessRequest) -> CompileResponse:
    """Validate, then compile. Hard validation errors return 422 with the error list."""
    library = data.library
    draft = data.prompt_request
    errors = validate(draft, library.characters, library.wardrobes, library.looks, library.lenses)
    if not can_compile(errors):
        raise HTTPException(status_code=422, detail=[e.to_dict() for e in hard_errors(errors)])
    try:
        compiled = compile_prompt(draft.to_request(), library.to_library())
    except EmptyLensLibraryError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return CompileResponse.build(compiled, errors)
