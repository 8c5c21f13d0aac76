"""
Style DNA extraction.

Derives a style profile from a company's brand assets (colors, fonts,
industry): color and typography characteristics, recommended style axes
with confidence, and a short display summary.
"""

import colorsys
from typing import Dict, List, Optional

from pydantic import Field

from models.brand import CompanyBrand, STYLE_AXES
from models.style import CamelModel
from services.color_temperature import classify_color_temperature, dominant_bucket, hex_to_rgb
from services.interfaces import ICompanyRepository, IStyleDNAExtractor, StyleDNAResult
from setup_logging_optimized import get_logger
from utils.rounding import round_half_up

logger = get_logger(__name__)


class ColorDNA(CamelModel):
    temperature: str = "neutral"
    temperature_score: int = 50  # how strongly the palette leans, 0-100
    saturation: str = "balanced"  # vibrant | muted | balanced
    saturation_score: int = 50
    contrast: str = "medium"  # high | low | medium
    contrast_score: int = 50
    dominant_hue: Optional[str] = None


class TypographyDNA(CamelModel):
    primary_style: str = "unknown"  # serif | sans-serif | display | handwritten | unknown
    secondary_style: str = "unknown"
    personality: str = "neutral"  # professional | modern | elegant | playful | neutral


class RecommendedAxis(CamelModel):
    axis: str
    confidence: int
    reason: str


class IndustryInsights(CamelModel):
    industry: str
    common_styles: List[str] = Field(default_factory=list)
    avoid_styles: List[str] = Field(default_factory=list)


class StyleDNA(CamelModel):
    """Visual DNA of a brand"""
    color_dna: ColorDNA
    typography_dna: TypographyDNA
    # Derived levels, 0-100
    energy_level: int
    density_level: int
    formality_level: int
    modernity_level: int
    recommended_axes: List[RecommendedAxis]
    industry_insights: Optional[IndustryInsights] = None
    brand_personality: List[str] = Field(default_factory=list)
    data_quality_score: int = 0


class StyleDNASummary(CamelModel):
    headline: str
    description: str
    top_styles: List[str] = Field(default_factory=list)
    personality: List[str] = Field(default_factory=list)


# ============= Color DNA =============

def get_hue_name(hex_color: str) -> Optional[str]:
    rgb = hex_to_rgb(hex_color)
    if rgb is None:
        return None
    r, g, b = (c / 255 for c in rgb)
    h, l, s = colorsys.rgb_to_hls(r, g, b)
    if s == 0:
        return "white" if l > 0.9 else "black" if l < 0.1 else "gray"

    degrees = h * 360
    if degrees < 15 or degrees >= 345:
        return "red"
    if degrees < 45:
        return "orange"
    if degrees < 75:
        return "yellow"
    if degrees < 150:
        return "green"
    if degrees < 210:
        return "cyan"
    if degrees < 270:
        return "blue"
    if degrees < 330:
        return "purple"
    return "pink"


def _saturation_and_lightness(hex_color: str) -> Optional[tuple]:
    rgb = hex_to_rgb(hex_color)
    if rgb is None:
        return None
    _h, l, s = colorsys.rgb_to_hls(*(c / 255 for c in rgb))
    return s, l


def analyze_color_dna(company: CompanyBrand) -> ColorDNA:
    colors = [c for c in company.all_colors() if hex_to_rgb(c) is not None]
    if not colors:
        return ColorDNA()

    counts: Dict[str, float] = {"warm": 0, "cool": 0, "neutral": 0}
    for color in colors:
        counts[classify_color_temperature(color)] += 1
    temperature = dominant_bucket(counts)

    sat_light = [_saturation_and_lightness(c) for c in colors]
    avg_saturation = sum(s for s, _ in sat_light) / len(sat_light)
    lightnesses = [l for _, l in sat_light]
    contrast_range = max(lightnesses) - min(lightnesses)

    if avg_saturation > 0.6:
        saturation = "vibrant"
    elif avg_saturation < 0.3:
        saturation = "muted"
    else:
        saturation = "balanced"

    if contrast_range > 0.5:
        contrast = "high"
    elif contrast_range < 0.25:
        contrast = "low"
    else:
        contrast = "medium"

    return ColorDNA(
        temperature=temperature,
        temperature_score=round_half_up(counts[temperature] * 100 / len(colors)),
        saturation=saturation,
        saturation_score=round_half_up(avg_saturation * 100),
        contrast=contrast,
        contrast_score=round_half_up(contrast_range * 100),
        dominant_hue=get_hue_name(company.primary_color) if company.primary_color else None,
    )


# ============= Typography DNA =============

SERIF_FONTS = [
    "times", "georgia", "garamond", "playfair", "merriweather", "lora",
    "libre baskerville", "crimson", "pt serif", "noto serif",
]
SANS_SERIF_FONTS = [
    "arial", "helvetica", "roboto", "open sans", "lato", "montserrat", "poppins",
    "inter", "nunito", "raleway", "source sans", "work sans", "dm sans", "satoshi", "geist",
]
DISPLAY_FONTS = ["impact", "bebas", "oswald", "archivo", "anton", "righteous", "bangers", "lobster"]
HANDWRITTEN_FONTS = ["brush", "script", "dancing", "pacifico", "sacramento", "satisfy", "caveat", "indie flower"]


def classify_font(font: Optional[str]) -> str:
    if not font:
        return "unknown"
    lower = font.lower()
    if any(f in lower for f in SERIF_FONTS):
        return "serif"
    if any(f in lower for f in SANS_SERIF_FONTS):
        return "sans-serif"
    if any(f in lower for f in DISPLAY_FONTS):
        return "display"
    if any(f in lower for f in HANDWRITTEN_FONTS):
        return "handwritten"
    # "sans" must be checked before "serif" ("Sans Serif")
    if "sans" in lower:
        return "sans-serif"
    if "serif" in lower:
        return "serif"
    return "unknown"


def analyze_typography_dna(company: CompanyBrand) -> TypographyDNA:
    primary_style = classify_font(company.primary_font)
    secondary_style = classify_font(company.secondary_font)

    personality = {
        "serif": "elegant",
        "sans-serif": "modern",
        "display": "professional",
        "handwritten": "playful",
    }.get(primary_style, "neutral")

    if primary_style == "serif" and secondary_style == "sans-serif":
        personality = "professional"

    return TypographyDNA(primary_style=primary_style, secondary_style=secondary_style, personality=personality)


# ============= Industry insights =============

INDUSTRY_STYLE_MAP: Dict[str, Dict[str, List[str]]] = {
    "technology": {"common": ["tech", "minimal", "corporate"], "avoid": ["organic", "playful"]},
    "saas": {"common": ["tech", "minimal", "corporate"], "avoid": ["organic", "playful"]},
    "finance": {"common": ["corporate", "minimal", "premium"], "avoid": ["playful", "bold"]},
    "fintech": {"common": ["tech", "corporate", "minimal"], "avoid": ["playful", "organic"]},
    "healthcare": {"common": ["minimal", "corporate", "organic"], "avoid": ["bold", "playful"]},
    "wellness": {"common": ["organic", "minimal", "premium"], "avoid": ["corporate", "bold"]},
    "beauty": {"common": ["premium", "editorial", "organic"], "avoid": ["corporate", "tech"]},
    "fashion": {"common": ["editorial", "premium", "bold"], "avoid": ["corporate", "tech"]},
    "luxury": {"common": ["premium", "editorial", "minimal"], "avoid": ["playful", "bold"]},
    "food": {"common": ["organic", "playful", "bold"], "avoid": ["corporate", "tech"]},
    "restaurant": {"common": ["organic", "editorial", "playful"], "avoid": ["corporate", "tech"]},
    "education": {"common": ["playful", "minimal", "corporate"], "avoid": ["premium", "bold"]},
    "entertainment": {"common": ["bold", "playful", "editorial"], "avoid": ["corporate", "minimal"]},
    "gaming": {"common": ["bold", "tech", "playful"], "avoid": ["corporate", "premium"]},
    "sports": {"common": ["bold", "playful", "tech"], "avoid": ["premium", "editorial"]},
    "retail": {"common": ["playful", "bold", "organic"], "avoid": ["corporate", "tech"]},
    "ecommerce": {"common": ["minimal", "playful", "bold"], "avoid": ["corporate", "premium"]},
    "media": {"common": ["editorial", "bold", "minimal"], "avoid": ["corporate", "organic"]},
    "consulting": {"common": ["corporate", "minimal", "premium"], "avoid": ["playful", "bold"]},
    "legal": {"common": ["corporate", "minimal", "premium"], "avoid": ["playful", "bold", "organic"]},
    "realestate": {"common": ["premium", "corporate", "editorial"], "avoid": ["playful", "tech"]},
    "startup": {"common": ["tech", "minimal", "bold"], "avoid": ["corporate", "premium"]},
    "nonprofit": {"common": ["organic", "minimal", "playful"], "avoid": ["premium", "bold"]},
}


def get_industry_insights(industry: Optional[str]) -> Optional[IndustryInsights]:
    if not industry:
        return None
    normalized = "".join(ch for ch in industry.lower() if "a" <= ch <= "z")
    if not normalized:
        return None
    for key, styles in INDUSTRY_STYLE_MAP.items():
        if key in normalized or normalized in key:
            return IndustryInsights(industry=industry, common_styles=styles["common"], avoid_styles=styles["avoid"])
    return None


# ============= Recommendations =============

def calculate_recommended_axes(
    color_dna: ColorDNA,
    typography_dna: TypographyDNA,
    industry_insights: Optional[IndustryInsights],
) -> List[RecommendedAxis]:
    """All style axes ranked by how well they fit the DNA (base 50)."""
    scores = {axis: 50 for axis in STYLE_AXES}
    reasons: Dict[str, List[str]] = {axis: [] for axis in STYLE_AXES}

    def bump(axis: str, points: int, reason: Optional[str] = None) -> None:
        scores[axis] += points
        if reason:
            reasons[axis].append(reason)

    if color_dna.temperature == "cool":
        bump("tech", 20, "Cool color palette")
        bump("minimal", 15, "Cool tones suit minimal design")
        bump("corporate", 15, "Cool colors convey professionalism")
    elif color_dna.temperature == "warm":
        bump("organic", 20, "Warm color palette")
        bump("playful", 15, "Warm tones feel approachable")
        bump("bold", 10, "Warm colors can be bold")

    if color_dna.saturation == "vibrant":
        bump("bold", 20, "Vibrant colors")
        bump("playful", 15, "High saturation feels playful")
    elif color_dna.saturation == "muted":
        bump("minimal", 15, "Muted tones")
        bump("premium", 15, "Understated palette")
        bump("organic", 10, "Natural, muted tones")

    if color_dna.contrast == "high":
        bump("bold", 15, "High contrast")
        bump("editorial", 10, "Editorial contrast")
    elif color_dna.contrast == "low":
        bump("minimal", 10, "Subtle contrast")
        bump("premium", 10, "Refined contrast")

    if typography_dna.primary_style == "serif":
        bump("editorial", 20, "Serif typography")
        bump("premium", 15, "Classic typography")
    elif typography_dna.primary_style == "sans-serif":
        bump("minimal", 15, "Sans-serif typography")
        bump("tech", 15, "Modern sans-serif")
    elif typography_dna.primary_style == "handwritten":
        bump("playful", 20, "Handwritten typography")
        bump("organic", 15, "Natural feel from typography")

    if industry_insights:
        for i, axis in enumerate(industry_insights.common_styles):
            bump(axis, 25 - i * 5, f"Common in {industry_insights.industry}")
        for axis in industry_insights.avoid_styles:
            bump(axis, -15)

    recommended = [
        RecommendedAxis(
            axis=axis,
            confidence=max(0, min(100, scores[axis])),
            reason=reasons[axis][0] if reasons[axis] else "General fit",
        )
        for axis in STYLE_AXES
    ]
    # sorted() is stable, so equal confidence keeps STYLE_AXES order
    return sorted(recommended, key=lambda rec: -rec.confidence)


def calculate_data_quality_score(company: CompanyBrand) -> int:
    """Completeness of the brand record, 0-100."""
    weights = {
        "primary_color": 20,
        "secondary_color": 10,
        "accent_color": 10,
        "primary_font": 15,
        "secondary_font": 10,
        "industry": 20,
        "logo_url": 15,
    }
    return sum(weight for attr, weight in weights.items() if getattr(company, attr))


def build_style_dna(company: CompanyBrand) -> StyleDNA:
    color_dna = analyze_color_dna(company)
    typography_dna = analyze_typography_dna(company)
    industry_insights = get_industry_insights(company.industry)

    energy_level = {"vibrant": 70, "muted": 30}.get(color_dna.saturation, 50)
    density_level = {"high": 70, "low": 30}.get(color_dna.contrast, 50)
    formality_level = {"professional": 80, "elegant": 70, "playful": 20}.get(typography_dna.personality, 50)
    if typography_dna.primary_style == "sans-serif":
        modernity_level = 70
    elif typography_dna.primary_style == "serif":
        modernity_level = 30
    elif color_dna.temperature == "cool":
        modernity_level = 60
    else:
        modernity_level = 50

    personality: List[str] = []
    if formality_level >= 70:
        personality.append("professional")
    if formality_level <= 30:
        personality.append("approachable")
    if modernity_level >= 70:
        personality.append("innovative")
    if modernity_level <= 30:
        personality.append("classic")
    if energy_level >= 70:
        personality.append("dynamic")
    if energy_level <= 30:
        personality.append("calm")
    if color_dna.temperature == "warm":
        personality.append("friendly")
    if color_dna.temperature == "cool":
        personality.append("trustworthy")
    if typography_dna.personality == "elegant":
        personality.append("refined")

    return StyleDNA(
        color_dna=color_dna,
        typography_dna=typography_dna,
        energy_level=energy_level,
        density_level=density_level,
        formality_level=formality_level,
        modernity_level=modernity_level,
        recommended_axes=calculate_recommended_axes(color_dna, typography_dna, industry_insights),
        industry_insights=industry_insights,
        brand_personality=personality,
        data_quality_score=calculate_data_quality_score(company),
    )


def get_style_dna_summary(dna: StyleDNA) -> StyleDNASummary:
    """Headline and description for displaying a style DNA"""
    if dna.modernity_level >= 70 and dna.energy_level >= 60:
        headline, description = "Modern & Dynamic", "Your brand has a contemporary feel with energetic visual elements."
    elif dna.formality_level >= 70:
        headline, description = "Professional & Refined", "Your brand conveys trust and expertise through polished design."
    elif dna.energy_level <= 30 and dna.density_level <= 40:
        headline, description = "Clean & Minimal", "Your brand embraces simplicity and whitespace for impact."
    elif dna.color_dna.temperature == "warm" and dna.energy_level >= 50:
        headline, description = "Warm & Approachable", "Your brand feels inviting and friendly through warm tones."
    elif dna.color_dna.saturation == "vibrant":
        headline, description = "Bold & Vibrant", "Your brand makes a statement with high-energy colors."
    else:
        headline, description = "Balanced & Versatile", "Your brand has a well-rounded visual identity."

    return StyleDNASummary(
        headline=headline,
        description=description,
        top_styles=[rec.axis for rec in dna.recommended_axes[:3]],
        personality=list(dna.brand_personality),
    )


class StyleDNAService(IStyleDNAExtractor):
    """Extracts style DNA for a user's company"""

    def __init__(self, companies: ICompanyRepository):
        self.companies = companies

    async def extract(self, user_id: str) -> StyleDNAResult:
        try:
            company = await self.companies.get_company_for_user(user_id)
        except Exception as e:
            logger.warning(f"Style DNA: company lookup failed for {user_id}: {e}")
            return StyleDNAResult.failed(str(e))
        if company is None:
            return StyleDNAResult()
        return await self.extract_for_company(company)

    async def extract_for_company(self, company: CompanyBrand) -> StyleDNAResult:
        return StyleDNAResult(dna=build_style_dna(company))


_default_service: Optional[StyleDNAService] = None


def get_style_dna_service() -> StyleDNAService:
    global _default_service
    if _default_service is None:
        from services.style_repository import SupabaseCompanyRepository
        _default_service = StyleDNAService(SupabaseCompanyRepository())
    return _default_service
