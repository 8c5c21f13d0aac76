from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts snake_case (database rows) and camelCase (clients); dumps camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_client(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class StyleReference(CamelModel):
    """Catalog entry from `deliverable_style_references`."""
    id: str
    name: str
    description: Optional[str] = None
    image_url: str = ""
    deliverable_type: str
    style_axis: str
    sub_style: Optional[str] = None
    semantic_tags: List[str] = Field(default_factory=list)
    industries: List[str] = Field(default_factory=list)
    mood_keywords: List[str] = Field(default_factory=list)
    usage_count: int = 0
    featured_order: int = 0
    display_order: int = 0
    is_active: bool = True
    created_at: Optional[datetime] = None
    # Video references only
    video_url: Optional[str] = None
    video_thumbnail_url: Optional[str] = None
    video_duration: Optional[str] = None
    video_tags: List[str] = Field(default_factory=list)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "StyleReference":
        """Build from a catalog row; NULL array and counter columns become empty values."""
        data = dict(row)
        for key in ("semantic_tags", "industries", "mood_keywords", "video_tags"):
            data[key] = data.get(key) or []
        for key in ("usage_count", "featured_order", "display_order"):
            data[key] = data.get(key) or 0
        return cls.model_validate(data)


class ScoreFactors(CamelModel):
    """Breakdown of a style's score.

    Only brand and history contribute to brand_match_score; the other
    factors are reported for display.
    """
    brand: int
    history: int = 0
    popularity: Optional[int] = None
    freshness: Optional[int] = None
    dna: Optional[int] = None


class ScoredStyle(StyleReference):
    """A catalog entry scored for one request. Never persisted."""
    brand_match_score: int = Field(ge=0, le=100)
    match_reason: str
    match_reasons: List[str] = Field(default_factory=list)
    history_boost: Optional[int] = None
    score_factors: Optional[ScoreFactors] = None


class ScoredVideoReference(StyleReference):
    """A video reference scored against chat context."""
    brand_match_score: int = Field(ge=0, le=100)
    match_reason: str
    match_reasons: List[str] = Field(default_factory=list)
    score_factors: Dict[str, int] = Field(default_factory=dict)
    is_video_reference: bool = True


class VideoChatContext(CamelModel):
    """What is known about a video request when picking references for chat."""
    intent: Optional[str] = None
    platform: Optional[str] = None
    topic: Optional[str] = None
    industry: Optional[str] = None
    user_message: Optional[str] = None
    ai_response: Optional[str] = None


class StyleSelection(CamelModel):
    """One row of `style_selection_history`."""
    user_id: str
    style_id: str
    deliverable_type: str
    style_axis: str
    selection_context: str = "chat"
    was_confirmed: bool = False
    draft_id: Optional[str] = None
    created_at: Optional[datetime] = None


class StylePreference(CamelModel):
    style_axis: str
    count: int
    confirmed_count: int = 0
    recent_count: int = 0
    preference_score: int = 0


class DeliverableTypePreference(CamelModel):
    deliverable_type: str
    preferred_axes: List[StylePreference] = Field(default_factory=list)


class UserStylePreferences(CamelModel):
    top_axes: List[StylePreference] = Field(default_factory=list)
    by_deliverable_type: List[DeliverableTypePreference] = Field(default_factory=list)
    total_selections: int = 0


class RecentSelection(CamelModel):
    id: str
    name: str
    style_axis: str
    deliverable_type: str
    selected_at: Optional[datetime] = None
