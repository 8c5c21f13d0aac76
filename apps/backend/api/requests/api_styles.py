"""
Style matching API endpoints
"""
from fastapi import APIRouter, HTTPException, Depends, Query
from typing import Optional, List, Literal
import logging

from api.requests.api_auth import get_current_user_id
from config.scoring_config import DEFAULT_AXIS_PAGE_SIZE, DEFAULT_VIDEO_CHAT_LIMIT, DEFAULT_VIDEO_LIMIT
from models.style import CamelModel, StyleSelection, VideoChatContext
from services.brand_style_scoring import BrandStyleScorer, get_style_scorer
from services.exceptions import InvalidStyleQuery, StyleMatchingError
from services.selection_history import SelectionHistoryService, get_selection_history_service
from services.style_dna import StyleDNAService, get_style_dna_service, get_style_dna_summary
from services.video_references import (
    VideoReferenceService,
    get_video_reference_service,
    is_video_deliverable_type,
)

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/api/styles", tags=["styles"])


# Request models
class VideoChatRequest(CamelModel):
    deliverable_type: str
    limit: int = DEFAULT_VIDEO_CHAT_LIMIT
    intent: Optional[str] = None
    platform: Optional[str] = None
    topic: Optional[str] = None
    industry: Optional[str] = None
    user_message: Optional[str] = None
    ai_response: Optional[str] = None

    def context(self) -> VideoChatContext:
        return VideoChatContext(
            intent=self.intent,
            platform=self.platform,
            topic=self.topic,
            industry=self.industry,
            user_message=self.user_message,
            ai_response=self.ai_response,
        )


class RecordSelectionRequest(CamelModel):
    style_id: str
    deliverable_type: str
    style_axis: str
    selection_context: Literal["chat", "browse", "refinement"] = "chat"
    was_confirmed: bool = False
    draft_id: Optional[str] = None


class ConfirmSelectionRequest(CamelModel):
    style_id: str
    draft_id: Optional[str] = None


def _to_http_error(e: StyleMatchingError) -> HTTPException:
    if isinstance(e, InvalidStyleQuery):
        return HTTPException(status_code=400, detail=str(e))
    logger.error(f"Style matching failed: {str(e)}")
    return HTTPException(status_code=502, detail="Style data is temporarily unavailable")


@router.get("/history/preferences")
async def get_style_preferences(
    user_id: str = Depends(get_current_user_id),
    history: SelectionHistoryService = Depends(get_selection_history_service)
):
    """Per-axis preferences derived from the user's selections"""
    try:
        preferences = await history.get_user_style_preferences(user_id)
    except StyleMatchingError as e:
        raise _to_http_error(e)
    return preferences.to_client()


@router.get("/history/recent")
async def get_recent_selections(
    limit: int = Query(5, ge=1, le=50),
    user_id: str = Depends(get_current_user_id),
    history: SelectionHistoryService = Depends(get_selection_history_service)
):
    try:
        recent = await history.get_recently_selected_styles(user_id, limit=limit)
    except StyleMatchingError as e:
        raise _to_http_error(e)
    return {"selections": [r.to_client() for r in recent]}


@router.post("/history/selections", status_code=201)
async def record_selection(
    request: RecordSelectionRequest,
    user_id: str = Depends(get_current_user_id),
    history: SelectionHistoryService = Depends(get_selection_history_service)
):
    """Record that the user picked a style"""
    selection = StyleSelection(user_id=user_id, **request.model_dump())
    try:
        await history.record_style_selection(selection)
    except StyleMatchingError as e:
        raise _to_http_error(e)
    return {"status": "recorded"}


@router.post("/history/confirm")
async def confirm_selection(
    request: ConfirmSelectionRequest,
    user_id: str = Depends(get_current_user_id),
    history: SelectionHistoryService = Depends(get_selection_history_service)
):
    """Mark a selected style as confirmed (the user proceeded with it)"""
    try:
        await history.confirm_style_selection(user_id, request.style_id, request.draft_id)
    except StyleMatchingError as e:
        raise _to_http_error(e)
    return {"status": "confirmed"}


@router.get("/brand/dna")
async def get_brand_style_dna(
    user_id: str = Depends(get_current_user_id),
    dna_service: StyleDNAService = Depends(get_style_dna_service)
):
    """Style DNA of the user's company brand; null when the user has no company"""
    result = await dna_service.extract(user_id)
    if not result.ok:
        logger.error(f"Style DNA extraction failed for {user_id}: {result.error}")
        raise HTTPException(status_code=502, detail="Brand data is temporarily unavailable")
    if result.dna is None:
        return {"dna": None, "summary": None}
    return {"dna": result.dna.to_client(), "summary": get_style_dna_summary(result.dna).to_client()}


@router.get("/video/references")
async def list_video_references(
    deliverable_type: Optional[str] = Query(None, alias="deliverableType"),
    tags: Optional[List[str]] = Query(None),
    style_axis: Optional[str] = Query(None, alias="styleAxis"),
    limit: int = Query(DEFAULT_VIDEO_LIMIT),
    offset: int = Query(0),
    user_id: str = Depends(get_current_user_id),
    videos: VideoReferenceService = Depends(get_video_reference_service)
):
    try:
        references = await videos.get_video_references(
            deliverable_type, tags=tags, style_axis=style_axis, limit=limit, offset=offset
        )
    except StyleMatchingError as e:
        raise _to_http_error(e)
    return {"videos": [v.to_client() for v in references]}


@router.post("/video/chat")
async def get_chat_video_references(
    request: VideoChatRequest,
    user_id: str = Depends(get_current_user_id),
    videos: VideoReferenceService = Depends(get_video_reference_service)
):
    """Video references for a chat turn about a video deliverable"""
    if not is_video_deliverable_type(request.deliverable_type):
        return {"deliverableType": request.deliverable_type, "videos": []}
    try:
        references = await videos.get_video_references_for_chat(
            request.deliverable_type, request.context(), limit=request.limit
        )
    except StyleMatchingError as e:
        raise _to_http_error(e)
    return {"deliverableType": request.deliverable_type, "videos": [v.to_client() for v in references]}


@router.get("/{deliverable_type}")
async def get_styles_for_deliverable(
    deliverable_type: str,
    limit: Optional[int] = Query(None),
    include_all_axes: bool = Query(False, alias="includeAllAxes"),
    user_id: str = Depends(get_current_user_id),
    scorer: BrandStyleScorer = Depends(get_style_scorer)
):
    """Styles for a deliverable type ranked against the user's brand"""
    try:
        styles = await scorer.get_brand_aware_styles(
            deliverable_type, user_id, limit=limit, include_all_axes=include_all_axes
        )
    except StyleMatchingError as e:
        raise _to_http_error(e)
    return {"deliverableType": deliverable_type, "styles": [s.to_client() for s in styles]}


@router.get("/{deliverable_type}/axis/{style_axis}")
async def get_more_styles_of_axis(
    deliverable_type: str,
    style_axis: str,
    offset: int = Query(0),
    limit: int = Query(DEFAULT_AXIS_PAGE_SIZE),
    user_id: str = Depends(get_current_user_id),
    scorer: BrandStyleScorer = Depends(get_style_scorer)
):
    """Next page of one style axis, scored the same way"""
    try:
        styles = await scorer.get_brand_aware_styles_of_axis(
            deliverable_type, style_axis, user_id, offset=offset, limit=limit
        )
    except StyleMatchingError as e:
        raise _to_http_error(e)
    return {
        "deliverableType": deliverable_type,
        "styleAxis": style_axis,
        "offset": offset,
        "styles": [s.to_client() for s in styles],
    }
