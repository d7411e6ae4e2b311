"""AI suggestion endpoints. Nothing returned here is applied to a prompt automatically."""

from __future__ import annotations

import base64
import binascii

from fastapi import APIRouter, Depends, HTTPException

from prompt_shop.api.models import (
    AnchorsRequest,
    EnvironmentRequest,
    FocusTargetsRequest,
    MechanicLocksRequest,
    MicroDetailsRequest,
    OneAndDoneRequest,
    QARequest,
    UpgradeSceneHeartRequest,
)
from prompt_shop.core.one_and_done import ValidatedSuggestion
from prompt_shop.suggest.client import SuggestionClient, SuggestionError, get_suggestion_client
from prompt_shop.suggest.schemas import (
    AnchorSuggestions,
    EnvironmentAnalysis,
    FocusTargetSuggestions,
    MechanicLockSuggestions,
    MicroDetailSuggestions,
    QASuggestions,
    SceneHeartUpgrade,
)

router = APIRouter()


def _upstream_error(e: SuggestionError) -> HTTPException:
    status = 503 if e.code == "MISSING_API_KEY" else 502
    return HTTPException(status_code=status, detail={"message": e.message, "code": e.code})


@router.post("/anchors", response_model=AnchorSuggestions)
async def suggest_anchors(
    data: AnchorsRequest,
    client: SuggestionClient = Depends(get_suggestion_client),
) -> AnchorSuggestions:
    try:
        return await client.suggest_anchors(data.scene_heart, data.location_type)
    except SuggestionError as e:
        raise _upstream_error(e)


@router.post("/mechanic-locks", response_model=MechanicLockSuggestions)
async def suggest_mechanic_locks(
    data: MechanicLocksRequest,
    client: SuggestionClient = Depends(get_suggestion_client),
) -> MechanicLockSuggestions:
    try:
        return await client.suggest_mechanic_locks(data.scene_heart, data.cast_snippets, data.framing)
    except SuggestionError as e:
        raise _upstream_error(e)


@router.post("/focus-targets", response_model=FocusTargetSuggestions)
async def suggest_focus_targets(
    data: FocusTargetsRequest,
    client: SuggestionClient = Depends(get_suggestion_client),
) -> FocusTargetSuggestions:
    try:
        return await client.suggest_focus_targets(data.scene_heart, data.framing, data.lens)
    except SuggestionError as e:
        raise _upstream_error(e)


@router.post("/micro-details", response_model=MicroDetailSuggestions)
async def suggest_micro_details(
    data: MicroDetailsRequest,
    client: SuggestionClient = Depends(get_suggestion_client),
) -> MicroDetailSuggestions:
    try:
        return await client.suggest_micro_details(data.scene_heart, data.environment_anchors)
    except SuggestionError as e:
        raise _upstream_error(e)


@router.post("/qa", response_model=QASuggestions)
async def qa_review(
    data: QARequest,
    client: SuggestionClient = Depends(get_suggestion_client),
) -> QASuggestions:
    try:
        return await client.qa_review(data.prompt_request)
    except SuggestionError as e:
        raise _upstream_error(e)


@router.post("/upgrade-scene-heart", response_model=SceneHeartUpgrade)
async def upgrade_scene_heart(
    data: UpgradeSceneHeartRequest,
    client: SuggestionClient = Depends(get_suggestion_client),
) -> SceneHeartUpgrade:
    try:
        return await client.upgrade_scene_heart(
            data.scene_heart,
            cast_summaries=data.cast_summaries,
            framing=data.framing,
            mechanic_lock=data.mechanic_lock,
            focus_target=data.focus_target,
            existing_anchors=data.existing_anchors,
            look_family_name=data.look_family_name,
        )
    except SuggestionError as e:
        raise _upstream_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/environment", response_model=EnvironmentAnalysis)
async def analyze_environment(
    data: EnvironmentRequest,
    client: SuggestionClient = Depends(get_suggestion_client),
) -> EnvironmentAnalysis:
    """Environment fields and stage anchors read off one base64-encoded reference image."""
    try:
        image = base64.b64decode(data.image_base64, validate=True)
    except binascii.Error:
        raise HTTPException(status_code=400, detail="image_base64 is not valid base64")
    try:
        return await client.analyze_environment(image, data.mime_type)
    except SuggestionError as e:
        raise _upstream_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/one-and-done", response_model=ValidatedSuggestion)
async def one_and_done(
    data: OneAndDoneRequest,
    client: SuggestionClient = Depends(get_suggestion_client),
) -> ValidatedSuggestion:
    """Full suggestion bundle, each recommendation checked against the offered options."""
    try:
        return await client.one_and_done(
            data.scene_heart,
            data.options,
            cast_summaries=data.cast_summaries,
            framing=data.framing,
            mechanic_lock=data.mechanic_lock,
            focus_target=data.focus_target,
            existing_anchors=data.existing_anchors,
        )
    except SuggestionError as e:
        raise _upstream_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
