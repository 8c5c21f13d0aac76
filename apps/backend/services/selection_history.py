"""
Style selection history.

Records which styles a user picks and turns that history into per-axis
preference scores and the boost applied during brand-aware ranking.
"""

from collections import OrderedDict
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Iterable, List, Optional

from config.scoring_config import (
    OVERALL_HISTORY_MAX_BOOST,
    RECENT_SELECTION_DAYS,
    TYPE_HISTORY_MAX_BOOST,
)
from models.style import (
    DeliverableTypePreference,
    RecentSelection,
    StylePreference,
    StyleSelection,
    UserStylePreferences,
)
from services.interfaces import HistoryBoostResult, IHistoryBooster
from services.style_repository import STYLE_TABLE, run_supabase_query
from setup_logging_optimized import get_logger
from utils.rounding import round_half_up
from utils.supabase import get_supabase_client

logger = get_logger(__name__)

HISTORY_TABLE = "style_selection_history"


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _group_by_axis(selections: Iterable[StyleSelection]) -> "OrderedDict[str, List[StyleSelection]]":
    grouped: "OrderedDict[str, List[StyleSelection]]" = OrderedDict()
    for selection in selections:
        grouped.setdefault(selection.style_axis, []).append(selection)
    return grouped


def compute_user_style_preferences(selections: List[StyleSelection], now: datetime) -> UserStylePreferences:
    """
    Aggregate raw selections into preferences.

    Overall axis score: frequency (0-50) + confirmation rate (0-30) +
    share of selections in the last 30 days (0-20).
    Per deliverable type: count / max count * 70 + confirmation rate * 30.
    """
    recent_cutoff = now - timedelta(days=RECENT_SELECTION_DAYS)

    top_axes = []
    grouped = _group_by_axis(selections)
    max_count = max([len(rows) for rows in grouped.values()] + [1])
    for axis, rows in grouped.items():
        count = len(rows)
        confirmed = sum(1 for r in rows if r.was_confirmed)
        recent = sum(1 for r in rows if r.created_at is not None and _aware(r.created_at) > recent_cutoff)

        frequency_score = count * 50 / max_count
        confirmation_score = confirmed * 30 / count
        recency_score = min(recent * 20 / count, 20) if recent else 0
        top_axes.append(StylePreference(
            style_axis=axis,
            count=count,
            confirmed_count=confirmed,
            recent_count=recent,
            preference_score=round_half_up(frequency_score + confirmation_score + recency_score),
        ))
    top_axes.sort(key=lambda p: -p.count)

    by_type: Dict[str, List[StyleSelection]] = {}
    for selection in selections:
        by_type.setdefault(selection.deliverable_type, []).append(selection)

    by_deliverable_type = []
    for deliverable_type in sorted(by_type):
        axes = _group_by_axis(by_type[deliverable_type])
        type_max = max([len(rows) for rows in axes.values()] + [1])
        preferred = []
        for axis, rows in axes.items():
            count = len(rows)
            confirmed = sum(1 for r in rows if r.was_confirmed)
            preferred.append(StylePreference(
                style_axis=axis,
                count=count,
                confirmed_count=confirmed,
                preference_score=round_half_up(count * 70 / type_max + confirmed * 30 / max(count, 1)),
            ))
        preferred.sort(key=lambda p: -p.count)
        by_deliverable_type.append(DeliverableTypePreference(deliverable_type=deliverable_type, preferred_axes=preferred))

    return UserStylePreferences(
        top_axes=top_axes,
        by_deliverable_type=by_deliverable_type,
        total_selections=len(selections),
    )


def _scale(preferences: List[StylePreference], ceiling: int) -> Dict[str, int]:
    max_score = max([p.preference_score for p in preferences] + [1])
    return {p.style_axis: round_half_up(p.preference_score * ceiling / max_score) for p in preferences}


def compute_history_boosts(preferences: UserStylePreferences, deliverable_type: str) -> Dict[str, int]:
    """
    Boost per axis: type-specific history scaled to 0-30 when the user has
    any for this deliverable type, otherwise overall history scaled to 0-20.
    """
    for type_pref in preferences.by_deliverable_type:
        if type_pref.deliverable_type == deliverable_type and type_pref.preferred_axes:
            return _scale(type_pref.preferred_axes, TYPE_HISTORY_MAX_BOOST)
    if preferences.top_axes:
        return _scale(preferences.top_axes, OVERALL_HISTORY_MAX_BOOST)
    return {}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SelectionHistoryService(IHistoryBooster):
    """Reads and writes `style_selection_history` in Supabase"""

    def __init__(self, clock: Callable[[], datetime] = _utcnow):
        self.clock = clock

    async def record_style_selection(self, selection: StyleSelection) -> None:
        """Insert a selection event and bump the style's usage count."""
        row = selection.model_dump(mode="json", exclude_none=True, exclude={"created_at"})

        def insert():
            return get_supabase_client().table(HISTORY_TABLE).insert(row).execute()

        await run_supabase_query(insert, "record style selection", {"style_id": selection.style_id})

        def increment():
            return get_supabase_client().rpc("increment_style_usage", {"p_style_id": selection.style_id}).execute()

        try:
            await run_supabase_query(increment, "increment style usage", {"style_id": selection.style_id})
        except Exception as e:
            # Usage count only feeds the informational popularity factor
            logger.warning(f"Selection recorded but usage count not updated for {selection.style_id}: {e}")

        logger.info(f"[STYLE HISTORY] {selection.user_id} selected {selection.style_axis} style {selection.style_id}")

    async def confirm_style_selection(self, user_id: str, style_id: str, draft_id: Optional[str] = None) -> None:
        """Mark a user's selections of a style as confirmed"""
        def update():
            q = (
                get_supabase_client()
                .table(HISTORY_TABLE)
                .update({"was_confirmed": True})
                .eq("user_id", user_id)
                .eq("style_id", style_id)
            )
            if draft_id:
                q = q.eq("draft_id", draft_id)
            return q.execute()

        await run_supabase_query(update, "confirm style selection", {"style_id": style_id, "draft_id": draft_id})

    async def _load_selections(self, user_id: str) -> List[StyleSelection]:
        def query():
            return get_supabase_client().table(HISTORY_TABLE).select("*").eq("user_id", user_id).execute()

        response = await run_supabase_query(query, "fetch selection history", {"user_id": user_id})
        return [StyleSelection.model_validate(row) for row in (response.data or [])]

    async def get_user_style_preferences(self, user_id: str) -> UserStylePreferences:
        selections = await self._load_selections(user_id)
        return compute_user_style_preferences(selections, self.clock())

    async def get_history_boost_scores(self, user_id: str, deliverable_type: str) -> HistoryBoostResult:
        try:
            preferences = await self.get_user_style_preferences(user_id)
        except Exception as e:
            return HistoryBoostResult.failed(str(e))
        return HistoryBoostResult(boosts=compute_history_boosts(preferences, deliverable_type))

    async def get_recently_selected_styles(self, user_id: str, limit: int = 5) -> List[RecentSelection]:
        def query():
            return (
                get_supabase_client()
                .table(HISTORY_TABLE)
                .select(f"created_at, style:{STYLE_TABLE}(id, name, style_axis, deliverable_type)")
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            )

        response = await run_supabase_query(query, "fetch recent selections", {"user_id": user_id})
        recent = []
        for row in response.data or []:
            style = row.get("style")
            # Selections of deleted styles have nothing to show
            if not style:
                continue
            recent.append(RecentSelection(**style, selected_at=row.get("created_at")))
        return recent


_default_service: Optional[SelectionHistoryService] = None


def get_selection_history_service() -> SelectionHistoryService:
    global _default_service
    if _default_service is None:
        _default_service = SelectionHistoryService()
    return _default_service
