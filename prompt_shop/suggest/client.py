"""Suggestion client: asks a chat-completions model for prompt-building suggestions.

Every call demands JSON-only output. Replies are parsed leniently (raw JSON,
a fenced code block, or the first ``{...}`` in the text) and then checked
against the pydantic shapes in ``prompt_shop.suggest.schemas``.
"""

from __future__ import annotations

import base64
import json
import re
from functools import lru_cache
from typing import Any

import httpx
import structlog
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from prompt_shop.config import get_settings
from prompt_shop.core.one_and_done import (
    OneAndDoneOptions,
    OneAndDoneSuggestion,
    ValidatedSuggestion,
    validate_suggestion,
)
from prompt_shop.db.models import Framing, PromptDraft
from prompt_shop.suggest import prompts
from prompt_shop.suggest.schemas import (
    AnchorSuggestions,
    EnvironmentAnalysis,
    FocusTargetSuggestions,
    MechanicLockSuggestions,
    MicroDetailSuggestions,
    QASuggestions,
    SceneHeartUpgrade,
)

logger = structlog.get_logger()

MIN_UPGRADE_LENGTH = 20

_FENCED = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_OBJECT = re.compile(r"\{[\s\S]*\}")


class SuggestionError(Exception):
    """An AI call failed; ``code`` says how."""

    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


def json_system_prompt(base_prompt: str, schema: str) -> str:
    """Append the JSON-only instructions and the expected schema to a system prompt."""
    return f"""{base_prompt}

CRITICAL: You MUST respond with valid JSON only. No markdown, no explanations, no commentary.
Your response must match this schema:
{schema}

Do not wrap the JSON in code blocks. Output raw JSON only."""


def extract_json(content: str) -> Any:
    """Parse model output as JSON. Raises SuggestionError(INVALID_JSON) if nothing parses."""
    try:
        return json.loads(content)
    except json.JSONDecodeError:
        pass

    fenced = _FENCED.search(content)
    if fenced:
        try:
            return json.loads(fenced.group(1).strip())
        except json.JSONDecodeError:
            pass

    obj = _OBJECT.search(content)
    if obj:
        try:
            return json.loads(obj.group())
        except json.JSONDecodeError:
            pass

    raise SuggestionError("Failed to parse JSON response from AI", "INVALID_JSON")


def _parse(model: type[BaseModel], data: Any, operation: str) -> Any:
    try:
        return model.model_validate(data)
    except SchemaError as e:
        logger.warning("suggest.invalid_format", operation=operation, errors=e.error_count())
        raise SuggestionError("Invalid AI response format", "INVALID_FORMAT") from e


def _non_blank(items: list[str] | None) -> list[str]:
    return [item.strip() for item in items or [] if item.strip()]


class SuggestionClient:
    """Async client for an OpenAI-compatible chat completions endpoint."""

    def __init__(
        self,
        api_url: str,
        api_key: str,
        model: str = "sonar-pro",
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_url = api_url
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._transport = transport

    async def _call_llm(
        self,
        system: str,
        user: str | list[dict[str, Any]],
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> Any:
        """Send one system + user exchange and return the parsed JSON payload.

        ``user`` is plain text, or a list of content parts for image input.
        """
        if not self.api_key:
            raise SuggestionError("AI API key not configured", "MISSING_API_KEY")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(
                    self.api_url,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json={
                        "model": self.model,
                        "messages": [
                            {"role": "system", "content": system},
                            {"role": "user", "content": user},
                        ],
                        "temperature": temperature,
                        "max_tokens": max_tokens,
                    },
                )
        except httpx.HTTPError as e:
            logger.warning("suggest.llm_call_failed", error=str(e))
            raise SuggestionError(str(e) or "Network error", "NETWORK_ERROR") from e

        if resp.status_code >= 400:
            try:
                message = resp.json().get("error", {}).get("message")
            except (ValueError, AttributeError):
                message = None
            logger.warning("suggest.llm_http_error", status=resp.status_code)
            raise SuggestionError(message or f"API error: {resp.status_code}", f"HTTP_{resp.status_code}")

        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError):
            content = None
        if not content:
            raise SuggestionError("No content in response", "EMPTY_RESPONSE")
        if isinstance(content, (dict, list)):
            return content
        if not isinstance(content, str):
            raise SuggestionError("Unexpected response format from AI", "INVALID_JSON")
        return extract_json(content)

    async def suggest_anchors(self, scene_heart: str, location_type: str | None = None) -> AnchorSuggestions:
        """Ten concrete environment anchors for a scene, five of them recommended."""
        user = f'Scene Heart: "{scene_heart}"'
        if location_type:
            user += f"\nLocation hint: {location_type}"
        user += (
            "\n\nGenerate 10 specific environmental anchors for this scene, then pick the 5 best ones."
            "\nEach anchor should be a short phrase describing a specific, visible object or element."
            '\nExamples: "worn leather armchair", "steaming coffee mug", "rain-streaked window"'
        )
        data = await self._call_llm(json_system_prompt(prompts.ANCHORS_SYSTEM, prompts.ANCHORS_SCHEMA), user)
        return _parse(AnchorSuggestions, data, "anchors")

    async def suggest_mechanic_locks(
        self,
        scene_heart: str,
        cast_snippets: list[str] | None = None,
        framing: Framing | None = None,
    ) -> MechanicLockSuggestions:
        user = f'Scene Heart: "{scene_heart}"'
        if cast_snippets:
            user += f"\nCast members: {'; '.join(cast_snippets)}"
        if framing:
            user += f"\nFraming: {framing.value}"
        user += (
            "\n\nGenerate 5 mechanic lock sentences for this scene."
            "\nEach should be ONE sentence describing a cause->effect relationship visible in the frozen moment."
        )
        data = await self._call_llm(
            json_system_prompt(prompts.MECHANIC_LOCK_SYSTEM, prompts.MECHANIC_LOCK_SCHEMA), user
        )
        return _parse(MechanicLockSuggestions, data, "mechanic_locks")

    async def suggest_focus_targets(
        self,
        scene_heart: str,
        framing: Framing | None = None,
        lens: str | None = None,
    ) -> FocusTargetSuggestions:
        user = f'Scene Heart: "{scene_heart}"'
        if framing:
            user += f"\nFraming: {framing.value}"
        if lens:
            user += f"\nLens: {lens}"
        user += (
            "\n\nGenerate 3 focus target descriptions for this scene."
            "\nEach should be a short sentence describing what MUST be sharp and what can be secondary."
        )
        data = await self._call_llm(
            json_system_prompt(prompts.FOCUS_TARGET_SYSTEM, prompts.FOCUS_TARGET_SCHEMA), user
        )
        return _parse(FocusTargetSuggestions, data, "focus_targets")

    async def suggest_micro_details(
        self, scene_heart: str, environment_anchors: list[str] | None = None
    ) -> MicroDetailSuggestions:
        user = f'Scene Heart: "{scene_heart}"'
        anchors = _non_blank(environment_anchors)
        if anchors:
            user += f"\nEnvironment anchors: {', '.join(anchors)}"
        user += (
            "\n\nGenerate 12 specific micro-detail suggestions for this scene."
            "\nInclude a mix of: atmospheric effects, wear/age signs, light interactions, "
            "and small environmental elements."
        )
        data = await self._call_llm(
            json_system_prompt(prompts.MICRO_DETAILS_SYSTEM, prompts.MICRO_DETAILS_SCHEMA), user
        )
        return _parse(MicroDetailSuggestions, data, "micro_details")

    async def qa_review(self, request: PromptDraft) -> QASuggestions:
        """Review a draft for contradictions. An unusable reply yields empty lists."""
        anchors = ", ".join(_non_blank(request.environment_anchors)) or "None"
        framing = request.framing.value if request.framing else "Not specified"
        lens_mode = request.lens_mode.value if request.lens_mode else "Not specified"
        scene_heart = request.scene_heart or "Not provided"
        mechanic_lock = request.mechanic_lock or "Not provided"
        focus_target = request.focus_target or "Not provided"
        user = f"""Review this prompt request for potential issues:

Scene Heart: "{scene_heart}"
Framing: {framing}
Lens Mode: {lens_mode}
Mechanic Lock: "{mechanic_lock}"
Focus Target: "{focus_target}"
Environment Anchors: {anchors}
Cast count: {len(request.cast)} characters

Identify any issues and provide actionable suggestions. Return empty arrays if no issues found."""
        data = await self._call_llm(json_system_prompt(prompts.QA_SYSTEM, prompts.QA_SCHEMA), user)
        try:
            return QASuggestions.model_validate(data)
        except SchemaError:
            logger.info("suggest.qa_unparsed")
            return QASuggestions()

    @staticmethod
    def _context_block(
        cast_summaries: list[str] | None,
        framing: Framing,
        mechanic_lock: str | None,
        focus_target: str | None,
        existing_anchors: list[str] | None,
    ) -> str:
        anchors = _non_blank(existing_anchors)
        cast = "\n".join(cast_summaries) if cast_summaries else "(No cast specified)"
        anchor_text = ", ".join(anchors) if anchors else "(None provided - infer from scene)"
        return f"""CONTEXT:
CAST (do not add anyone else):
{cast}

FRAMING:
{framing.value}

MECHANIC LOCK (optional):
{mechanic_lock or '(None provided)'}

FOCUS TARGET (optional):
{focus_target or '(None provided)'}

EXISTING ANCHORS (optional):
{anchor_text}"""

    async def upgrade_scene_heart(
        self,
        scene_heart: str,
        cast_summaries: list[str] | None = None,
        framing: Framing = Framing.MEDIUM,
        mechanic_lock: str | None = None,
        focus_target: str | None = None,
        existing_anchors: list[str] | None = None,
        look_family_name: str | None = None,
    ) -> SceneHeartUpgrade:
        """Three rewrites of a scene heart plus anchor ideas.

        Raises ValueError when the scene heart is shorter than 20 characters.
        """
        if len(scene_heart.strip()) < MIN_UPGRADE_LENGTH:
            raise ValueError(f"scene_heart must be at least {MIN_UPGRADE_LENGTH} characters")

        context = self._context_block(cast_summaries, framing, mechanic_lock, focus_target, existing_anchors)
        user = f"""{prompts.UPGRADE_TASK}

{context}

LOOK FAMILY (optional):
{look_family_name or '(None specified)'}

USER SCENE HEART:
{scene_heart}

OUTPUT JSON SCHEMA (must match exactly):
{prompts.UPGRADE_SCHEMA}"""
        data = await self._call_llm(
            json_system_prompt(prompts.EDITOR_SYSTEM, prompts.UPGRADE_SCHEMA),
            user,
            temperature=0.5,
            max_tokens=2048,
        )
        return _parse(SceneHeartUpgrade, data, "upgrade_scene_heart")

    async def analyze_environment(self, image: bytes, mime_type: str = "image/png") -> EnvironmentAnalysis:
        """Read environment fields and 3-5 stage anchors off one reference image.

        Raises ValueError when ``image`` is empty.
        """
        if not image:
            raise ValueError("Image is required")

        data_url = f"data:{mime_type or 'image/png'};base64,{base64.b64encode(image).decode('ascii')}"
        user = [
            {"type": "text", "text": prompts.ENVIRONMENT_TASK},
            {"type": "image_url", "image_url": {"url": data_url}},
        ]
        data = await self._call_llm(
            json_system_prompt(prompts.ENVIRONMENT_SYSTEM, prompts.ENVIRONMENT_SCHEMA),
            user,
            temperature=0.2,
            max_tokens=3000,
        )
        analysis = _parse(EnvironmentAnalysis, data, "analyze_environment")
        logger.info("suggest.environment_analyzed", anchors=len(analysis.stage_anchors))
        return analysis

    async def one_and_done(
        self,
        scene_heart: str,
        options: OneAndDoneOptions,
        cast_summaries: list[str] | None = None,
        framing: Framing = Framing.MEDIUM,
        mechanic_lock: str | None = None,
        focus_target: str | None = None,
        existing_anchors: list[str] | None = None,
    ) -> ValidatedSuggestion:
        """Ask for a complete suggestion bundle and check it against ``options``."""
        if not scene_heart.strip():
            raise ValueError("scene_heart is required")

        context = self._context_block(cast_summaries, framing, mechanic_lock, focus_target, existing_anchors)

        def listing(items: list[BaseModel]) -> str:
            return json.dumps([item.model_dump(exclude_none=True) for item in items], indent=2)

        user = f"""{prompts.ONE_AND_DONE_TASK}

{context}

LOOK OPTIONS (choose by id):
{listing(options.look_families)}

LENS OPTIONS (choose by id):
{listing(options.lens_profiles)}

MICRO TEXTURE PACKS (choose by id):
{listing(options.micro_texture_packs)}

MICRO DETAIL PACKS (choose by id):
{listing(options.micro_detail_packs)}

USER SCENE HEART:
{scene_heart}

OUTPUT JSON SCHEMA (must match exactly):
{prompts.ONE_AND_DONE_SCHEMA}"""
        data = await self._call_llm(
            json_system_prompt(prompts.EDITOR_SYSTEM, prompts.ONE_AND_DONE_SCHEMA),
            user,
            temperature=0.4,
            max_tokens=2048,
        )
        suggestion = _parse(OneAndDoneSuggestion, data, "one_and_done")
        validated = validate_suggestion(suggestion, options)
        logger.info(
            "suggest.one_and_done",
            look_lens_valid=validated.look_lens.valid,
            anchors_valid=validated.environment_anchors.valid,
            micro_packs_valid=validated.micro_packs.valid,
        )
        return validated


@lru_cache
def get_suggestion_client() -> SuggestionClient:
    """Get cached suggestion client configured from settings."""
    settings = get_settings()
    return SuggestionClient(
        api_url=settings.ai_api_url,
        api_key=settings.ai_api_key,
        model=settings.ai_model,
        timeout=settings.ai_timeout,
    )
