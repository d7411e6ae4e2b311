"""Main API router: aggregates all endpoint modules."""

from fastapi import APIRouter

from prompt_shop.api.compile import router as compile_router
from prompt_shop.api.global_library import router as global_library_router
from prompt_shop.api.projects import router as projects_router
from prompt_shop.api.prompts import router as prompts_router
from prompt_shop.api.suggestions import router as suggestions_router

api_router = APIRouter()

api_router.include_router(projects_router, prefix="/projects", tags=["projects"])
api_router.include_router(prompts_router, prefix="/projects", tags=["prompts"])
api_router.include_router(compile_router, tags=["compilation"])
api_router.include_router(global_library_router, tags=["global-library"])
api_router.include_router(suggestions_router, prefix="/suggest", tags=["suggestions"])
