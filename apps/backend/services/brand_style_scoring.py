"""
Brand-aware style scoring.

Ranks the style catalog of a deliverable type against a company's brand
(palette temperature and industry) and the user's selection history.

Score budget per style (see config.scoring_config):
- color affinity   0-40
- industry         0-30
- base floor       20
- history boost    0-30, added by the caller of the brand score, total capped at 100
"""

import math
from datetime import datetime, timezone
from typing import Callable, Dict, List, Mapping, Optional

from config.scoring_config import (
    DEFAULT_STYLE_LIMIT,
    DEFAULT_AXIS_PAGE_SIZE,
    DELIVERABLE_TYPE_FALLBACKS,
    COLOR_MATCH_POINTS,
    COLOR_DISTRIBUTION_BONUS,
    NEUTRAL_BRAND_POINTS,
    INDUSTRY_MATCH_POINTS,
    INDUSTRY_MISMATCH_POINTS,
    NO_INDUSTRY_POINTS,
    BASE_VARIETY_POINTS,
    UNKNOWN_AXIS_COLOR_POINTS,
    MAX_SCORE,
    MIN_SCORE,
    NO_BRAND_SCORE,
    HISTORY_REASON_THRESHOLD,
    STRONG_MATCH_THRESHOLD,
    VERSATILE_THRESHOLD,
    POPULAR_CHOICE_THRESHOLD,
    RECENTLY_ADDED_THRESHOLD,
    DNA_TOP_AXES,
)
from models.brand import (
    BrandColorProfile,
    CompanyBrand,
    StyleCharacteristic,
    DEFAULT_STYLE_CHARACTERISTICS,
)
from models.style import ScoreFactors, ScoredStyle, StyleReference
from services.color_temperature import analyze_company_colors
from services.exceptions import InvalidStyleQuery
from services.interfaces import (
    ICompanyRepository,
    IHistoryBooster,
    IStyleCatalog,
    IStyleDNAExtractor,
)
from services.style_dna import StyleDNA
from setup_logging_optimized import get_logger
from utils.rounding import round_half_up

logger = get_logger(__name__)

NO_BRAND_REASON = "No brand profile available"
PREFERENCE_REASON = "Based on your preferences"
VERSATILE_REASON = "Versatile style option"
ALTERNATIVE_REASON = "Alternative direction"
DNA_REASON = "Recommended for your brand"
POPULAR_REASON = "Popular choice"
RECENT_REASON = "Recently added"


def clamp_score(value: float) -> int:
    return max(MIN_SCORE, min(MAX_SCORE, round_half_up(value)))


def calculate_style_score(
    style_axis: str,
    color_profile: BrandColorProfile,
    industry: Optional[str],
    characteristics: Mapping[str, StyleCharacteristic] = DEFAULT_STYLE_CHARACTERISTICS,
) -> int:
    """Brand match score (0-100) of one style axis."""
    characteristic = characteristics.get(style_axis)
    if characteristic is None:
        return clamp_score(UNKNOWN_AXIS_COLOR_POINTS + NO_INDUSTRY_POINTS + BASE_VARIETY_POINTS)

    score = 0.0

    # Color affinity (0-40)
    if color_profile.dominant in characteristic.color_affinity:
        score += COLOR_MATCH_POINTS
        affinity_weight = sum(color_profile.distribution.get(bucket, 0.0) for bucket in characteristic.color_affinity)
        score += affinity_weight * COLOR_DISTRIBUTION_BONUS
    elif color_profile.dominant == "neutral":
        # Neutral palettes pair with anything
        score += NEUTRAL_BRAND_POINTS

    # Industry affinity (0-30)
    if industry and industry.strip():
        if characteristic.matches_industry(industry):
            score += INDUSTRY_MATCH_POINTS
        else:
            score += INDUSTRY_MISMATCH_POINTS
    else:
        score += NO_INDUSTRY_POINTS

    score += BASE_VARIETY_POINTS

    return clamp_score(score)


def calculate_popularity_score(usage_count: int, max_usage_count: int) -> int:
    """Usage relative to the most used style, sqrt-scaled to favour the middle."""
    if max_usage_count <= 0:
        return 50
    normalized = max(0, usage_count) / max_usage_count
    return round_half_up(math.sqrt(normalized) * 100)


def calculate_freshness_score(created_at: Optional[datetime], now: datetime) -> int:
    """100 for styles added this week, decaying to 50 after two months."""
    if created_at is None:
        return 50
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    age_days = (now - created_at).total_seconds() / 86400
    if age_days <= 7:
        return 100
    if age_days <= 14:
        return 90
    if age_days <= 30:
        return 75
    if age_days <= 60:
        return 60
    return 50


def palette_phrase(color_profile: BrandColorProfile) -> str:
    return f"Matches your {color_profile.dominant} palette"


def generate_match_reason(
    total_score: int,
    history_boost: int,
    characteristic: Optional[StyleCharacteristic],
    color_profile: BrandColorProfile,
    industry: Optional[str],
) -> str:
    """Single human-readable reason, in priority order."""
    if history_boost >= HISTORY_REASON_THRESHOLD:
        return PREFERENCE_REASON

    if total_score >= STRONG_MATCH_THRESHOLD:
        palette_match = characteristic is not None and color_profile.dominant in characteristic.color_affinity
        industry_match = characteristic is not None and characteristic.matches_industry(industry)
        if palette_match and industry_match:
            return f"{palette_phrase(color_profile)} and popular in {industry}"
        if palette_match:
            return palette_phrase(color_profile)
        if industry_match:
            return f"Popular in {industry}"
        return VERSATILE_REASON

    if total_score >= VERSATILE_THRESHOLD:
        return VERSATILE_REASON

    return ALTERNATIVE_REASON


def sort_by_score(styles: List[ScoredStyle]) -> List[ScoredStyle]:
    """Highest score first; equal scores keep catalog order."""
    return sorted(styles, key=lambda s: -s.brand_match_score)


def get_top_per_axis(styles: List[ScoredStyle], limit: Optional[int] = None) -> List[ScoredStyle]:
    """
    Highest scoring style of each axis, best first.

    Expects styles already sorted by score.
    """
    seen_axes = set()
    result: List[ScoredStyle] = []
    for style in styles:
        if style.style_axis not in seen_axes:
            seen_axes.add(style.style_axis)
            result.append(style)

    result = sort_by_score(result)
    return result[:limit] if limit else result


def _validate_limit(limit: Optional[int]) -> None:
    if limit is not None and limit < 1:
        raise InvalidStyleQuery("limit must be a positive integer", context={"limit": limit})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BrandStyleScorer:
    """Scores and ranks style references for a user's brand.

    Holds only injected read-only configuration and collaborators, so one
    instance can serve concurrent requests.
    """

    def __init__(
        self,
        catalog: IStyleCatalog,
        companies: ICompanyRepository,
        history_booster: Optional[IHistoryBooster] = None,
        dna_extractor: Optional[IStyleDNAExtractor] = None,
        characteristics: Mapping[str, StyleCharacteristic] = DEFAULT_STYLE_CHARACTERISTICS,
        fallbacks: Mapping[str, str] = DELIVERABLE_TYPE_FALLBACKS,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.catalog = catalog
        self.companies = companies
        self.history_booster = history_booster
        self.dna_extractor = dna_extractor
        self.characteristics = characteristics
        self.fallbacks = fallbacks
        self.clock = clock

    async def get_brand_aware_styles(
        self,
        deliverable_type: str,
        user_id: str,
        limit: Optional[int] = None,
        include_all_axes: bool = False,
    ) -> List[ScoredStyle]:
        """
        Get deliverable styles scored and sorted by brand match.

        Args:
            deliverable_type: Catalog to rank (e.g. "instagram_post")
            user_id: User whose company brand and history are used
            limit: Max results (default 8; with include_all_axes no default cap)
            include_all_axes: Return only the best style of each axis

        Returns:
            Scored styles, best first
        """
        _validate_limit(limit)

        company = await self.companies.get_company_for_user(user_id)
        styles = await self._load_catalog(deliverable_type)

        if not styles:
            logger.info(f"[STYLE MATCH] No active styles for {deliverable_type}")
            return []

        if company is None:
            scored = self._score_without_brand(styles)
        else:
            profile = analyze_company_colors(company)
            boosts = await self._fetch_history_boosts(user_id, deliverable_type)
            dna = await self._fetch_style_dna(company)
            scored = self._score_with_brand(styles, company, profile, boosts, dna)
            logger.info(
                f"[STYLE MATCH] Scored {len(scored)} {deliverable_type} styles "
                f"(palette={profile.dominant}, industry={company.industry}, boosted_axes={len(boosts)})"
            )

        ranked = sort_by_score(scored)
        if include_all_axes:
            return get_top_per_axis(ranked, limit)
        return ranked[:limit or DEFAULT_STYLE_LIMIT]

    async def get_brand_aware_styles_of_axis(
        self,
        deliverable_type: str,
        style_axis: str,
        user_id: str,
        offset: int = 0,
        limit: int = DEFAULT_AXIS_PAGE_SIZE,
    ) -> List[ScoredStyle]:
        """More styles of one axis, in display order, scored the same way."""
        _validate_limit(limit)
        if offset < 0:
            raise InvalidStyleQuery("offset must not be negative", context={"offset": offset})

        company = await self.companies.get_company_for_user(user_id)
        styles = await self._load_catalog(deliverable_type, style_axis=style_axis, offset=offset, limit=limit)
        if not styles:
            return []

        if company is None:
            scored = self._score_without_brand(styles)
        else:
            profile = analyze_company_colors(company)
            boosts = await self._fetch_history_boosts(user_id, deliverable_type)
            scored = self._score_with_brand(styles, company, profile, boosts, None)

        more_reason = f"More {style_axis} options"
        return [s.model_copy(update={"match_reason": more_reason}) for s in scored]

    async def _load_catalog(
        self,
        deliverable_type: str,
        style_axis: Optional[str] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[StyleReference]:
        styles = await self.catalog.list_active_styles(deliverable_type, style_axis=style_axis, offset=offset, limit=limit)
        fallback_type = self.fallbacks.get(deliverable_type)
        if styles or not fallback_type:
            return styles

        # An empty page past the end of a non-empty catalog is the end of that catalog
        if offset > 0 and await self.catalog.list_active_styles(deliverable_type, style_axis=style_axis, limit=1):
            return []

        logger.info(f"[STYLE MATCH] No styles for {deliverable_type}, using {fallback_type} catalog")
        return await self.catalog.list_active_styles(fallback_type, style_axis=style_axis, offset=offset, limit=limit)

    async def _fetch_history_boosts(self, user_id: str, deliverable_type: str) -> Dict[str, int]:
        if self.history_booster is None:
            return {}
        try:
            result = await self.history_booster.get_history_boost_scores(user_id, deliverable_type)
        except Exception as e:
            logger.error(f"Error fetching history boosts for {user_id}: {e}")
            return {}
        if not result.ok:
            logger.warning(f"History boosts unavailable for {user_id}: {result.error}")
            return {}
        return dict(result.boosts)

    async def _fetch_style_dna(self, company: CompanyBrand) -> Optional[StyleDNA]:
        if self.dna_extractor is None:
            return None
        try:
            result = await self.dna_extractor.extract_for_company(company)
        except Exception as e:
            logger.error(f"Error extracting style DNA for company {company.id}: {e}")
            return None
        if not result.ok:
            logger.warning(f"Style DNA unavailable for company {company.id}: {result.error}")
            return None
        return result.dna

    def _informational_factors(self, styles: List[StyleReference]) -> List[Dict[str, int]]:
        """Popularity and freshness per style, aligned with `styles`."""
        now = self.clock()
        max_usage = max((s.usage_count for s in styles), default=0)
        return [
            {
                "popularity": calculate_popularity_score(s.usage_count, max_usage),
                "freshness": calculate_freshness_score(s.created_at, now),
            }
            for s in styles
        ]

    @staticmethod
    def _informational_reasons(factors: Dict[str, int]) -> List[str]:
        reasons = []
        if factors["popularity"] >= POPULAR_CHOICE_THRESHOLD:
            reasons.append(POPULAR_REASON)
        if factors["freshness"] >= RECENTLY_ADDED_THRESHOLD:
            reasons.append(RECENT_REASON)
        return reasons

    def _score_without_brand(self, styles: List[StyleReference]) -> List[ScoredStyle]:
        info = self._informational_factors(styles)
        scored = []
        for style, factors in zip(styles, info):
            scored.append(ScoredStyle(
                **style.model_dump(),
                brand_match_score=NO_BRAND_SCORE,
                match_reason=NO_BRAND_REASON,
                match_reasons=[NO_BRAND_REASON] + self._informational_reasons(factors),
                score_factors=ScoreFactors(brand=NO_BRAND_SCORE, **factors),
            ))
        return scored

    def _score_with_brand(
        self,
        styles: List[StyleReference],
        company: CompanyBrand,
        profile: BrandColorProfile,
        boosts: Dict[str, int],
        dna: Optional[StyleDNA],
    ) -> List[ScoredStyle]:
        info = self._informational_factors(styles)
        dna_confidence = {}
        dna_top_axes = set()
        if dna is not None:
            dna_confidence = {rec.axis: rec.confidence for rec in dna.recommended_axes}
            dna_top_axes = {rec.axis for rec in dna.recommended_axes[:DNA_TOP_AXES]}

        scored = []
        for style, factors in zip(styles, info):
            characteristic = self.characteristics.get(style.style_axis)
            brand_score = calculate_style_score(style.style_axis, profile, company.industry, self.characteristics)
            history_boost = max(0, int(boosts.get(style.style_axis, 0)))
            total_score = clamp_score(brand_score + history_boost)

            match_reason = generate_match_reason(total_score, history_boost, characteristic, profile, company.industry)

            reasons = []
            if history_boost >= HISTORY_REASON_THRESHOLD:
                reasons.append(PREFERENCE_REASON)
            if characteristic is not None and profile.dominant in characteristic.color_affinity:
                reasons.append(palette_phrase(profile))
            if characteristic is not None and characteristic.matches_industry(company.industry):
                reasons.append(f"Popular in {company.industry}")
            if style.style_axis in dna_top_axes:
                reasons.append(DNA_REASON)
            reasons.extend(self._informational_reasons(factors))
            if not reasons:
                reasons.append(match_reason)

            scored.append(ScoredStyle(
                **style.model_dump(),
                brand_match_score=total_score,
                match_reason=match_reason,
                match_reasons=reasons,
                history_boost=history_boost if history_boost > 0 else None,
                score_factors=ScoreFactors(
                    brand=brand_score,
                    history=history_boost,
                    dna=dna_confidence.get(style.style_axis),
                    **factors,
                ),
            ))
        return scored


_default_scorer: Optional[BrandStyleScorer] = None


def get_style_scorer() -> BrandStyleScorer:
    """Process-wide scorer backed by Supabase."""
    global _default_scorer
    if _default_scorer is None:
        from services.selection_history import get_selection_history_service
        from services.style_dna import get_style_dna_service
        from services.style_repository import SupabaseCompanyRepository, SupabaseStyleCatalog

        _default_scorer = BrandStyleScorer(
            catalog=SupabaseStyleCatalog(),
            companies=SupabaseCompanyRepository(),
            history_booster=get_selection_history_service(),
            dna_extractor=get_style_dna_service(),
        )
    return _default_scorer


async def get_brand_aware_styles(
    deliverable_type: str,
    user_id: str,
    limit: Optional[int] = None,
    include_all_axes: bool = False,
) -> List[ScoredStyle]:
    return await get_style_scorer().get_brand_aware_styles(
        deliverable_type, user_id, limit=limit, include_all_axes=include_all_axes
    )


async def get_brand_aware_styles_of_axis(
    deliverable_type: str,
    style_axis: str,
    user_id: str,
    offset: int = 0,
    limit: int = DEFAULT_AXIS_PAGE_SIZE,
) -> List[ScoredStyle]:
    return await get_style_scorer().get_brand_aware_styles_of_axis(
        deliverable_type, style_axis, user_id, offset=offset, limit=limit
    )
