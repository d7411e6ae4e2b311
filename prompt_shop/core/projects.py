"""Project service: project, library, prompt and history operations over the record store."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

import structlog

from prompt_shop.config import get_settings
from prompt_shop.core.compiler import CompiledPrompt, compile_prompt
from prompt_shop.core.defaults import seeded_collections
from prompt_shop.core.library import EntityLibrary
from prompt_shop.core.validator import ValidationError, can_compile, hard_errors, validate
from prompt_shop.db.models import (
    ENTITY_MODELS,
    CharacterProfile,
    Entity,
    EntityKind,
    OutputMode,
    Project,
    ProjectPrompt,
    ProjectSummary,
    PromptDraft,
    PromptHistoryEntry,
    WardrobeProfile,
    new_entity_id,
    utcnow,
)
from prompt_shop.db.store import RecordStore, get_record_store

logger = structlog.get_logger()

# Fields callers may never set directly on an entity.
_MANAGED_FIELDS = ("id", "created_at", "updated_at")

_SEEDED_KINDS = ("lenses", "looks", "micro_textures", "micro_details")


class PromptNotCompilableError(ValueError):
    """Raised when a stored prompt still has hard validation errors."""

    def __init__(self, errors: list[ValidationError]) -> None:
        self.errors = errors
        super().__init__("; ".join(error.message for error in errors))


def _copy_name(name: str) -> str:
    return f"{name} (Copy)"


def _new_entity(model: type[Entity], data: dict[str, Any]) -> Entity:
    now = utcnow()
    fields = {k: v for k, v in data.items() if k not in _MANAGED_FIELDS}
    return model.model_validate({**fields, "id": new_entity_id(), "created_at": now, "updated_at": now})


class ProjectService:
    """Manages projects stored as one record each under ``projects/<id>``."""

    def __init__(self, store: RecordStore, history_limit: int = 50) -> None:
        self.store = store
        self.history_limit = history_limit

    # --- projects ---

    @staticmethod
    def _key(project_id: str) -> str:
        return f"projects/{project_id}"

    def _read(self, project_id: str) -> Project | None:
        record = self.store.load(self._key(project_id))
        if record is None:
            return None
        missing = [kind for kind in _SEEDED_KINDS if kind not in record]
        if missing:
            seeded = seeded_collections()
            for kind in missing:
                record[kind] = [entity.model_dump(mode="json") for entity in seeded[kind]]
            logger.info("project.backfilled", project_id=project_id, collections=missing)
        return Project.model_validate(record)

    def require_project(self, project_id: str) -> Project:
        project = self._read(project_id)
        if project is None:
            raise ValueError(f"Project '{project_id}' not found")
        return project

    def save_project(self, project: Project) -> None:
        project.touch()
        self.store.save(self._key(project.id), project.model_dump(mode="json"))

    def list_projects(self) -> list[ProjectSummary]:
        """Summaries of every project, most recently updated first."""
        summaries = []
        for key in self.store.list_keys("projects/"):
            project = self._read(key.split("/", 1)[1])
            if project is not None:
                summaries.append(ProjectSummary.from_project(project))
        return sorted(summaries, key=lambda s: s.updated_at, reverse=True)

    def create_project(self, name: str) -> Project:
        """Create a project seeded with the default looks, lenses and micro packs."""
        project = Project(name=name, **seeded_collections())
        self.save_project(project)
        logger.info("project.created", project_id=project.id, name=name)
        return project

    def get_project(self, project_id: str) -> Project | None:
        return self._read(project_id)

    def rename_project(self, project_id: str, name: str) -> Project:
        project = self.require_project(project_id)
        project.name = name
        self.save_project(project)
        logger.info("project.renamed", project_id=project_id, name=name)
        return project

    def delete_project(self, project_id: str) -> bool:
        deleted = self.store.delete(self._key(project_id))
        if deleted:
            logger.info("project.deleted", project_id=project_id)
        return deleted

    def get_library(self, project_id: str) -> EntityLibrary:
        return EntityLibrary.from_project(self.require_project(project_id))

    # --- library entities ---

    def list_entities(self, project_id: str, kind: EntityKind) -> list[Entity]:
        return list(self.require_project(project_id).collection(kind))

    def get_entity(self, project_id: str, kind: EntityKind, entity_id: str) -> Entity | None:
        for entity in self.require_project(project_id).collection(kind):
            if entity.id == entity_id:
                return entity
        return None

    def add_entity(self, project_id: str, kind: EntityKind, data: dict[str, Any]) -> Entity:
        """Add an entity with a fresh id. Raises pydantic.ValidationError on bad data."""
        project = self.require_project(project_id)
        entity = _new_entity(ENTITY_MODELS[kind], data)
        project.collection(kind).append(entity)
        self.save_project(project)
        logger.info("library.entity_added", project_id=project_id, kind=kind.value, entity_id=entity.id)
        return entity

    def update_entity(
        self, project_id: str, kind: EntityKind, entity_id: str, updates: dict[str, Any]
    ) -> Entity | None:
        """Merge updates into an entity, keeping its id and created_at."""
        project = self.require_project(project_id)
        collection = project.collection(kind)
        for idx, entity in enumerate(collection):
            if entity.id != entity_id:
                continue
            merged = entity.model_dump()
            merged.update({k: v for k, v in updates.items() if k not in _MANAGED_FIELDS})
            merged["updated_at"] = max(utcnow(), entity.created_at)
            collection[idx] = ENTITY_MODELS[kind].model_validate(merged)
            self.save_project(project)
            logger.info(
                "library.entity_updated",
                project_id=project_id,
                kind=kind.value,
                entity_id=entity_id,
                fields=sorted(updates),
            )
            return collection[idx]
        return None

    def delete_entity(self, project_id: str, kind: EntityKind, entity_id: str) -> bool:
        """Remove an entity. Prompts that reference it are left as they are."""
        project = self.require_project(project_id)
        collection = project.collection(kind)
        remaining = [entity for entity in collection if entity.id != entity_id]
        if len(remaining) == len(collection):
            return False
        collection[:] = remaining
        self.save_project(project)
        logger.info("library.entity_deleted", project_id=project_id, kind=kind.value, entity_id=entity_id)
        return True

    def duplicate_entity(self, project_id: str, kind: EntityKind, entity_id: str) -> Entity | None:
        project = self.require_project(project_id)
        collection = project.collection(kind)
        original = next((entity for entity in collection if entity.id == entity_id), None)
        if original is None:
            return None
        data = original.model_dump()
        data["ui_name"] = _copy_name(original.ui_name)
        duplicate = _new_entity(ENTITY_MODELS[kind], data)
        collection.append(duplicate)
        self.save_project(project)
        logger.info(
            "library.entity_duplicated",
            project_id=project_id,
            kind=kind.value,
            source_id=entity_id,
            entity_id=duplicate.id,
        )
        return duplicate

    # --- prompts ---

    def list_prompts(self, project_id: str) -> list[ProjectPrompt]:
        return list(self.require_project(project_id).prompts)

    def get_prompt(self, project_id: str, prompt_id: str) -> ProjectPrompt | None:
        return self.require_project(project_id).find_prompt(prompt_id)

    def create_prompt(
        self, project_id: str, title: str, prompt_request: dict[str, Any] | None = None
    ) -> ProjectPrompt:
        project = self.require_project(project_id)
        prompt = ProjectPrompt(title=title, prompt_request=PromptDraft.model_validate(prompt_request or {}))
        project.prompts.append(prompt)
        self.save_project(project)
        logger.info("prompt.created", project_id=project_id, prompt_id=prompt.id)
        return prompt

    def delete_prompt(self, project_id: str, prompt_id: str) -> bool:
        project = self.require_project(project_id)
        remaining = [prompt for prompt in project.prompts if prompt.id != prompt_id]
        if len(remaining) == len(project.prompts):
            return False
        project.prompts = remaining
        self.save_project(project)
        logger.info("prompt.deleted", project_id=project_id, prompt_id=prompt_id)
        return True

    def rename_prompt(self, project_id: str, prompt_id: str, title: str) -> ProjectPrompt | None:
        project = self.require_project(project_id)
        prompt = project.find_prompt(prompt_id)
        if prompt is None:
            return None
        prompt.title = title
        prompt.updated_at = utcnow()
        self.save_project(project)
        return prompt

    def duplicate_prompt(self, project_id: str, prompt_id: str) -> ProjectPrompt | None:
        """Copy a prompt's current draft into a new prompt with an empty history."""
        project = self.require_project(project_id)
        original = project.find_prompt(prompt_id)
        if original is None:
            return None
        duplicate = ProjectPrompt(
            title=_copy_name(original.title),
            prompt_request=original.prompt_request.model_copy(deep=True),
        )
        project.prompts.append(duplicate)
        self.save_project(project)
        logger.info("prompt.duplicated", project_id=project_id, source_id=prompt_id, prompt_id=duplicate.id)
        return duplicate

    def update_prompt_request(
        self, project_id: str, prompt_id: str, updates: dict[str, Any]
    ) -> ProjectPrompt | None:
        """Merge field updates into a prompt's draft. Raises pydantic.ValidationError on bad values."""
        project = self.require_project(project_id)
        prompt = project.find_prompt(prompt_id)
        if prompt is None:
            return None
        merged = prompt.prompt_request.model_dump()
        merged.update(updates)
        prompt.prompt_request = PromptDraft.model_validate(merged)
        prompt.updated_at = utcnow()
        self.save_project(project)
        logger.info("prompt.request_updated", project_id=project_id, prompt_id=prompt_id, fields=sorted(updates))
        return prompt

    # --- history ---

    def save_history_entry(
        self, project_id: str, prompt_id: str, note: str | None = None
    ) -> PromptHistoryEntry | None:
        """Snapshot the current draft. History is newest first and capped at history_limit."""
        project = self.require_project(project_id)
        prompt = project.find_prompt(prompt_id)
        if prompt is None:
            return None
        entry = PromptHistoryEntry(prompt_request=prompt.prompt_request.model_copy(deep=True), note=note)
        prompt.history = [entry, *prompt.history][: self.history_limit]
        prompt.updated_at = utcnow()
        self.save_project(project)
        logger.info("prompt.history_saved", project_id=project_id, prompt_id=prompt_id, history_id=entry.id)
        return entry

    def restore_from_history(self, project_id: str, prompt_id: str, history_id: str) -> ProjectPrompt | None:
        """Replace the draft with a history snapshot. History itself is unchanged."""
        project = self.require_project(project_id)
        prompt = project.find_prompt(prompt_id)
        if prompt is None:
            return None
        entry = next((h for h in prompt.history if h.id == history_id), None)
        if entry is None:
            return None
        prompt.prompt_request = entry.prompt_request.model_copy(deep=True)
        prompt.updated_at = utcnow()
        self.save_project(project)
        logger.info("prompt.history_restored", project_id=project_id, prompt_id=prompt_id, history_id=history_id)
        return prompt

    # --- validation & compilation ---

    def _stored_prompt(self, project_id: str, prompt_id: str) -> tuple[ProjectPrompt, EntityLibrary]:
        project = self.require_project(project_id)
        prompt = project.find_prompt(prompt_id)
        if prompt is None:
            raise ValueError(f"Prompt '{prompt_id}' not found")
        return prompt, EntityLibrary.from_project(project)

    def validate_prompt(self, project_id: str, prompt_id: str) -> list[ValidationError]:
        prompt, library = self._stored_prompt(project_id, prompt_id)
        return validate(prompt.prompt_request, library.characters, library.wardrobes, library.looks, library.lenses)

    def compile_prompt(
        self, project_id: str, prompt_id: str, output_mode: OutputMode | None = None
    ) -> tuple[CompiledPrompt, list[ValidationError]]:
        """Validate then compile a stored prompt; returns the result and any soft warnings.

        ``output_mode`` overrides the draft's mode for this compile only.
        Raises PromptNotCompilableError when hard errors remain.
        """
        prompt, library = self._stored_prompt(project_id, prompt_id)
        draft = prompt.prompt_request
        errors = validate(draft, library.characters, library.wardrobes, library.looks, library.lenses)
        if not can_compile(errors):
            raise PromptNotCompilableError(hard_errors(errors))
        request = draft.to_request()
        if output_mode is not None:
            request = request.model_copy(update={"output_mode": output_mode})
        compiled = compile_prompt(request, library)
        return compiled, errors


class GlobalLibrary:
    """Characters and wardrobes shared across projects; imported by copy."""

    _MODELS: dict[EntityKind, type[Entity]] = {
        EntityKind.CHARACTERS: CharacterProfile,
        EntityKind.WARDROBES: WardrobeProfile,
    }

    def __init__(self, store: RecordStore, projects: ProjectService) -> None:
        self.store = store
        self.projects = projects

    def _model(self, kind: EntityKind) -> type[Entity]:
        if kind not in self._MODELS:
            raise ValueError(f"Global library does not hold '{kind.value}'")
        return self._MODELS[kind]

    @staticmethod
    def _key(kind: EntityKind) -> str:
        return f"global/{kind.value}"

    def list_entities(self, kind: EntityKind) -> list[Entity]:
        model = self._model(kind)
        record = self.store.load(self._key(kind)) or {"items": []}
        return [model.model_validate(item) for item in record.get("items", [])]

    def _write(self, kind: EntityKind, items: list[Entity]) -> None:
        self.store.save(self._key(kind), {"items": [item.model_dump(mode="json") for item in items]})

    def add(self, kind: EntityKind, data: dict[str, Any]) -> Entity:
        items = self.list_entities(kind)
        entity = _new_entity(self._model(kind), data)
        items.append(entity)
        self._write(kind, items)
        logger.info("global.entity_added", kind=kind.value, entity_id=entity.id)
        return entity

    def update(self, kind: EntityKind, entity_id: str, updates: dict[str, Any]) -> Entity | None:
        items = self.list_entities(kind)
        for idx, entity in enumerate(items):
            if entity.id != entity_id:
                continue
            merged = entity.model_dump()
            merged.update({k: v for k, v in updates.items() if k not in _MANAGED_FIELDS})
            merged["updated_at"] = max(utcnow(), entity.created_at)
            items[idx] = self._model(kind).model_validate(merged)
            self._write(kind, items)
            return items[idx]
        return None

    def delete(self, kind: EntityKind, entity_id: str) -> bool:
        items = self.list_entities(kind)
        remaining = [item for item in items if item.id != entity_id]
        if len(remaining) == len(items):
            return False
        self._write(kind, remaining)
        logger.info("global.entity_deleted", kind=kind.value, entity_id=entity_id)
        return True

    def import_into_project(
        self,
        project_id: str,
        character_ids: list[str] | None = None,
        wardrobe_ids: list[str] | None = None,
    ) -> dict[str, list[Entity]]:
        """Copy the chosen global items into a project with fresh ids. Unknown ids are skipped."""
        project = self.projects.require_project(project_id)
        imported: dict[str, list[Entity]] = {"characters": [], "wardrobes": []}
        for kind, wanted in (
            (EntityKind.CHARACTERS, character_ids or []),
            (EntityKind.WARDROBES, wardrobe_ids or []),
        ):
            by_id = {item.id: item for item in self.list_entities(kind)}
            for entity_id in wanted:
                source = by_id.get(entity_id)
                if source is None:
                    continue
                copy = _new_entity(self._model(kind), source.model_dump())
                project.collection(kind).append(copy)
                imported[kind.value].append(copy)
        self.projects.save_project(project)
        logger.info(
            "global.imported",
            project_id=project_id,
            characters=len(imported["characters"]),
            wardrobes=len(imported["wardrobes"]),
        )
        return imported


@lru_cache
def get_project_service() -> ProjectService:
    """Get cached project service instance."""
    return ProjectService(get_record_store(), history_limit=get_settings().history_limit)


@lru_cache
def get_global_library() -> GlobalLibrary:
    """Get cached global library instance."""
    return GlobalLibrary(get_record_store(), get_project_service())
