"""
Video style references.

Picks video references to show in chat for video deliverables. Chat
requests are scored against what the conversation says about the video
(intent, platform, topic, terms used by the assistant), then selected
with at most two references per style axis.
"""

import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from config.scoring_config import (
    DEFAULT_VIDEO_CHAT_LIMIT,
    DEFAULT_VIDEO_LIMIT,
    VIDEO_DELIVERABLE_TYPES,
    VIDEO_MAX_PER_AXIS,
)
from models.style import ScoredVideoReference, StyleReference, VideoChatContext
from services.exceptions import InvalidStyleQuery
from services.interfaces import IStyleCatalog
from setup_logging_optimized import get_logger

logger = get_logger(__name__)

# Extra rows fetched so tag filtering can still fill the page
TAG_FILTER_HEADROOM = 10

# ============= Message keyword tables =============

STYLE_KEYWORDS: Dict[str, List[str]] = {
    "cinematic": ["cinematic", "film", "movie", "dramatic", "epic"],
    "motion-graphics": ["motion", "animated", "animation", "graphics", "kinetic"],
    "documentary": ["documentary", "real", "authentic", "story"],
    "fast-paced": ["fast", "quick", "dynamic", "energetic", "action"],
    "slow-motion": ["slow", "smooth", "elegant", "calm"],
    "playful": ["playful", "fun", "colorful", "vibrant", "creative"],
    "professional": ["professional", "corporate", "business", "formal"],
}

INDUSTRY_KEYWORDS: Dict[str, List[str]] = {
    "tech": ["tech", "software", "app", "saas", "startup", "digital"],
    "ecommerce": ["ecommerce", "product", "shop", "store", "retail"],
    "lifestyle": ["lifestyle", "wellness", "health", "fitness"],
    "corporate": ["corporate", "b2b", "enterprise", "business"],
}

FORMAT_KEYWORDS: Dict[str, List[str]] = {
    "product-showcase": ["product", "showcase", "demo", "feature"],
    "explainer": ["explain", "how", "tutorial", "guide"],
    "teaser": ["teaser", "preview", "coming soon", "announcement"],
    "testimonial": ["testimonial", "review", "customer", "case study"],
}

# ============= Chat context tables =============

INTENT_KEYWORDS: Dict[str, List[str]] = {
    "launch": ["launch", "announcement", "reveal", "teaser", "coming soon", "product"],
    "product_demo": ["demo", "showcase", "product", "feature", "walkthrough", "ui"],
    "brand_story": ["story", "brand", "documentary", "authentic", "mission", "founder"],
    "explainer": ["explainer", "tutorial", "how", "guide", "animated", "motion"],
    "promotion": ["promo", "sale", "offer", "ad", "fast-paced", "bold"],
    "testimonial": ["testimonial", "customer", "review", "interview", "case study"],
}

INTENT_PREFERRED_AXES: Dict[str, Tuple[str, ...]] = {
    "launch": ("bold", "tech", "premium"),
    "product_demo": ("tech", "minimal"),
    "brand_story": ("editorial", "organic", "premium"),
    "explainer": ("playful", "minimal", "tech"),
    "promotion": ("bold", "playful"),
    "testimonial": ("editorial", "corporate", "organic"),
}

PLATFORM_KEYWORDS: Dict[str, List[str]] = {
    "instagram": ["instagram", "reel", "vertical", "social", "short-form"],
    "tiktok": ["tiktok", "vertical", "short-form", "trend", "social"],
    "youtube": ["youtube", "horizontal", "long-form", "widescreen"],
    "linkedin": ["linkedin", "professional", "b2b", "corporate"],
    "website": ["website", "hero", "landing", "loop", "background"],
}

STYLE_TERMS: Tuple[str, ...] = (
    "cinematic", "minimal", "bold", "playful", "elegant", "energetic",
    "dramatic", "clean", "modern", "retro", "vibrant", "moody",
    "kinetic", "motion graphics", "3d", "typography", "documentary",
    "premium", "organic", "tech", "corporate", "editorial",
    "fast-paced", "slow-motion", "animated", "futuristic", "handheld",
)

# Signal group ceilings
INTENT_MAX = 35
PLATFORM_MAX = 25
STYLE_MAX = 30
TOPIC_MAX = 15
QUALITY_MAX = 10

_WORD_RE = re.compile(r"[a-z0-9]+")


def is_video_deliverable_type(deliverable_type: Optional[str]) -> bool:
    return deliverable_type in VIDEO_DELIVERABLE_TYPES


def _detect(text: str, table: Dict[str, List[str]]) -> List[str]:
    return [tag for tag, keywords in table.items() if any(kw in text for kw in keywords)]


def extract_video_tags_from_message(message: Optional[str]) -> List[str]:
    """Style, industry and format tags mentioned in a user message, deduplicated in table order."""
    if not message:
        return []
    text = message.lower()
    tags: List[str] = []
    for table in (STYLE_KEYWORDS, INDUSTRY_KEYWORDS, FORMAT_KEYWORDS):
        for tag in _detect(text, table):
            if tag not in tags:
                tags.append(tag)
    return tags


def extract_style_terms_from_ai_response(response: Optional[str]) -> List[str]:
    """Known visual style terms the assistant used in its reply."""
    if not response:
        return []
    text = response.lower()
    return [term for term in STYLE_TERMS if term in text]


def _video_corpus(video: StyleReference) -> str:
    parts: List[str] = []
    parts.extend(video.video_tags)
    parts.extend(video.semantic_tags)
    parts.extend(video.mood_keywords)
    parts.extend(video.industries)
    parts.extend(p for p in (video.style_axis, video.sub_style, video.name, video.description) if p)
    return " ".join(parts).lower()


def _count_hits(corpus: str, terms: Iterable[str]) -> List[str]:
    return [term for term in terms if term in corpus]


def _normalize_key(value: str) -> str:
    return value.strip().lower().replace(" ", "_").replace("-", "_")


def score_video_reference(
    video: StyleReference,
    context: VideoChatContext,
    style_terms: Sequence[str],
) -> Tuple[int, Dict[str, int], List[str]]:
    """
    Score one video against chat context.

    Returns (score 0-100, points per signal group, reasons best first).
    """
    corpus = _video_corpus(video)
    factors = {"intent": 0, "platform": 0, "style": 0, "topic": 0, "quality": 0}
    reasons: List[str] = []

    if context.intent:
        intent = _normalize_key(context.intent)
        hits = _count_hits(corpus, INTENT_KEYWORDS.get(intent, [context.intent.lower()]))
        points = 20 + 5 * (len(hits) - 1) if hits else 0
        if video.style_axis in INTENT_PREFERRED_AXES.get(intent, ()):
            points += 10
        factors["intent"] = min(INTENT_MAX, points)
        if factors["intent"]:
            reasons.append(f"Fits {context.intent} videos")

    if context.platform:
        platform = _normalize_key(context.platform)
        hits = _count_hits(corpus, PLATFORM_KEYWORDS.get(platform, [context.platform.lower()]))
        if hits:
            factors["platform"] = min(PLATFORM_MAX, 15 + 5 * (len(hits) - 1))
            reasons.append(f"Works on {context.platform}")

    matched_terms = _count_hits(corpus, style_terms)
    if matched_terms:
        factors["style"] = min(STYLE_MAX, 10 * len(matched_terms))
        reasons.append(f"Matches: {', '.join(matched_terms[:2])}")

    topic_points = 0
    if context.topic:
        topic_words = [w for w in _WORD_RE.findall(context.topic.lower()) if len(w) >= 3]
        topic_points += min(10, 5 * len(_count_hits(corpus, topic_words)))
    if context.industry:
        industry = context.industry.strip().lower()
        if industry and (industry in corpus or any(i.lower() in industry for i in video.industries)):
            topic_points += 5
            reasons.append(f"Relevant to {context.industry}")
    factors["topic"] = min(TOPIC_MAX, topic_points)

    if video.usage_count > 5:
        factors["quality"] += 5
        reasons.append("Popular choice")
    if video.featured_order == 0:
        factors["quality"] += 5
        reasons.append("Featured style")
    factors["quality"] = min(QUALITY_MAX, factors["quality"])

    score = max(0, min(100, sum(factors.values())))
    return score, factors, reasons


def select_diverse(
    candidates: List[ScoredVideoReference],
    limit: int,
    max_per_axis: int = VIDEO_MAX_PER_AXIS,
) -> List[ScoredVideoReference]:
    """
    Top `limit` candidates with at most `max_per_axis` per style axis.

    Expects candidates sorted best first. When the cap leaves the result
    short, the best unselected candidates fill it regardless of axis.
    """
    selected: List[ScoredVideoReference] = []
    skipped: List[ScoredVideoReference] = []
    per_axis: Dict[str, int] = {}

    for candidate in candidates:
        if len(selected) >= limit:
            break
        if per_axis.get(candidate.style_axis, 0) < max_per_axis:
            selected.append(candidate)
            per_axis[candidate.style_axis] = per_axis.get(candidate.style_axis, 0) + 1
        else:
            skipped.append(candidate)

    for candidate in skipped:
        if len(selected) >= limit:
            break
        selected.append(candidate)

    return selected


def _as_video_reference(
    video: StyleReference,
    score: int,
    reasons: List[str],
    factors: Optional[Dict[str, int]] = None,
) -> ScoredVideoReference:
    data = video.model_dump()
    data["image_url"] = video.video_thumbnail_url or video.image_url
    return ScoredVideoReference(
        **data,
        brand_match_score=score,
        match_reason=reasons[0] if reasons else "Video style reference",
        match_reasons=reasons,
        score_factors=factors or {},
    )


class VideoReferenceService:
    """Video references from the style catalog"""

    def __init__(self, catalog: IStyleCatalog):
        self.catalog = catalog

    async def get_video_references(
        self,
        deliverable_type: Optional[str] = None,
        tags: Optional[List[str]] = None,
        style_axis: Optional[str] = None,
        limit: int = DEFAULT_VIDEO_LIMIT,
        offset: int = 0,
    ) -> List[ScoredVideoReference]:
        """
        Active video references, optionally narrowed to any of `tags`.

        Score: 50 base, +15 popular (used more than 5 times), +10 featured,
        +10 per matching tag, capped at 100.
        """
        if limit < 1:
            raise InvalidStyleQuery("limit must be a positive integer", context={"limit": limit})
        if offset < 0:
            raise InvalidStyleQuery("offset must not be negative", context={"offset": offset})

        videos = await self.catalog.list_active_styles(
            deliverable_type,
            style_axis=style_axis,
            offset=offset,
            limit=limit + TAG_FILTER_HEADROOM,
            video_only=True,
        )

        search_tags = [t.lower() for t in (tags or []) if t]
        if search_tags:
            videos = [v for v in videos if any(t in {vt.lower() for vt in v.video_tags} for t in search_tags)]

        results = []
        for video in videos[:limit]:
            score = 50
            reasons = []
            if video.usage_count > 5:
                score += 15
                reasons.append("Popular choice")
            if video.featured_order == 0:
                score += 10
                reasons.append("Featured style")
            if search_tags:
                video_tags = {t.lower() for t in video.video_tags}
                matching = [t for t in search_tags if t in video_tags]
                if matching:
                    score += 10 * len(matching)
                    reasons.append(f"Matches: {', '.join(matching[:2])}")
            results.append(_as_video_reference(video, min(100, score), reasons))
        return results

    async def get_video_references_for_chat(
        self,
        deliverable_type: str,
        context: Optional[VideoChatContext] = None,
        limit: int = DEFAULT_VIDEO_CHAT_LIMIT,
    ) -> List[ScoredVideoReference]:
        """Video references ranked for a chat turn, at most two per style axis."""
        if limit < 1:
            raise InvalidStyleQuery("limit must be a positive integer", context={"limit": limit})
        context = context or VideoChatContext()

        style_terms = extract_style_terms_from_ai_response(context.ai_response)
        for tag in extract_video_tags_from_message(context.user_message):
            if tag not in style_terms:
                style_terms.append(tag)

        logger.info(
            f"[VIDEO REFS] {deliverable_type}: intent={context.intent} platform={context.platform} "
            f"terms={', '.join(style_terms) or 'none'}"
        )

        # Every video reference is a candidate regardless of its deliverable type
        videos = await self.catalog.list_active_styles(None, video_only=True)
        if not videos:
            return []

        scored = []
        for video in videos:
            score, factors, reasons = score_video_reference(video, context, style_terms)
            scored.append(_as_video_reference(video, score, reasons, factors))
        scored.sort(key=lambda v: -v.brand_match_score)

        selected = select_diverse(scored, limit)
        logger.info(f"[VIDEO REFS] Selected {len(selected)} of {len(videos)} video references")
        return selected


_default_service: Optional[VideoReferenceService] = None


def get_video_reference_service() -> VideoReferenceService:
    global _default_service
    if _default_service is None:
        from services.style_repository import SupabaseStyleCatalog
        _default_service = VideoReferenceService(SupabaseStyleCatalog())
    return _default_service


async def get_video_references(
    deliverable_type: Optional[str] = None,
    tags: Optional[List[str]] = None,
    style_axis: Optional[str] = None,
    limit: int = DEFAULT_VIDEO_LIMIT,
    offset: int = 0,
) -> List[ScoredVideoReference]:
    return await get_video_reference_service().get_video_references(
        deliverable_type, tags=tags, style_axis=style_axis, limit=limit, offset=offset
    )


async def get_video_references_for_chat(
    deliverable_type: str,
    context: Optional[VideoChatContext] = None,
    limit: int = DEFAULT_VIDEO_CHAT_LIMIT,
) -> List[ScoredVideoReference]:
    return await get_video_reference_service().get_video_references_for_chat(deliverable_type, context, limit)
