"""
Brand models: company brand record, derived color profile and the
style-axis characteristic table used for brand matching.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Literal, Mapping, Optional, Tuple

from pydantic import BaseModel, Field


ColorBucket = Literal["warm", "cool", "neutral"]
EnergyLevel = Literal["calm", "balanced", "energetic"]
DensityLevel = Literal["minimal", "balanced", "rich"]

COLOR_BUCKETS: Tuple[str, ...] = ("warm", "cool", "neutral")

STYLE_AXES: Tuple[str, ...] = (
    "minimal",
    "bold",
    "editorial",
    "corporate",
    "playful",
    "premium",
    "organic",
    "tech",
)


class CompanyBrand(BaseModel):
    """Brand attributes of the company a user belongs to."""
    id: Optional[str] = None
    name: Optional[str] = None
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None
    accent_color: Optional[str] = None
    brand_colors: List[str] = Field(default_factory=list)
    industry: Optional[str] = None
    # Used by style DNA extraction only
    primary_font: Optional[str] = None
    secondary_font: Optional[str] = None
    logo_url: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict) -> "CompanyBrand":
        """Build from a `companies` row, tolerating NULL array columns."""
        data = dict(row)
        data["brand_colors"] = [c for c in (data.get("brand_colors") or []) if c]
        return cls.model_validate(data)

    def all_colors(self) -> List[str]:
        colors = [c for c in (self.primary_color, self.secondary_color, self.accent_color) if c]
        colors.extend(self.brand_colors)
        return colors


@dataclass
class BrandColorProfile:
    """Warm/cool/neutral signature of a brand palette."""
    dominant: str
    distribution: Dict[str, float]

    @classmethod
    def neutral(cls) -> "BrandColorProfile":
        return cls(dominant="neutral", distribution={"warm": 0.0, "cool": 0.0, "neutral": 1.0})

    def to_dict(self) -> Dict[str, object]:
        return {"dominant": self.dominant, "distribution": dict(self.distribution)}


@dataclass(frozen=True)
class StyleCharacteristic:
    """Fixed visual profile of a style axis.

    energy_level and density_level are descriptive and not part of the
    score formula.
    """
    color_affinity: Tuple[str, ...]
    energy_level: str
    density_level: str
    industry_affinity: Tuple[str, ...] = field(default_factory=tuple)

    def matches_industry(self, industry: Optional[str]) -> bool:
        """Case-insensitive substring match in either direction.

        Deliberately loose: short keywords match inside longer words, so the
        tech keyword "ai" also matches "Retail" and "Email marketing".
        """
        if not industry:
            return False
        normalized = industry.strip().lower()
        if not normalized:
            return False
        return any(normalized in keyword or keyword in normalized for keyword in self.industry_affinity)


DEFAULT_STYLE_CHARACTERISTICS: Mapping[str, StyleCharacteristic] = MappingProxyType({
    "minimal": StyleCharacteristic(
        color_affinity=("cool", "neutral"),
        energy_level="calm",
        density_level="minimal",
        industry_affinity=("technology", "saas", "finance", "consulting", "healthcare"),
    ),
    # Bold works with high contrast in either temperature
    "bold": StyleCharacteristic(
        color_affinity=("warm", "cool"),
        energy_level="energetic",
        density_level="rich",
        industry_affinity=("entertainment", "sports", "gaming", "food", "retail"),
    ),
    "editorial": StyleCharacteristic(
        color_affinity=("neutral", "cool"),
        energy_level="balanced",
        density_level="rich",
        industry_affinity=("media", "publishing", "fashion", "lifestyle", "luxury"),
    ),
    "corporate": StyleCharacteristic(
        color_affinity=("cool", "neutral"),
        energy_level="calm",
        density_level="balanced",
        industry_affinity=("finance", "legal", "consulting", "insurance", "b2b", "enterprise"),
    ),
    "playful": StyleCharacteristic(
        color_affinity=("warm", "neutral"),
        energy_level="energetic",
        density_level="balanced",
        industry_affinity=("education", "kids", "gaming", "food", "entertainment", "consumer"),
    ),
    "premium": StyleCharacteristic(
        color_affinity=("neutral", "cool"),
        energy_level="calm",
        density_level="balanced",
        industry_affinity=("luxury", "fashion", "automotive", "real estate", "jewelry", "hospitality"),
    ),
    "organic": StyleCharacteristic(
        color_affinity=("warm", "neutral"),
        energy_level="balanced",
        density_level="balanced",
        industry_affinity=("wellness", "health", "food", "beauty", "sustainability", "eco"),
    ),
    "tech": StyleCharacteristic(
        color_affinity=("cool", "neutral"),
        energy_level="energetic",
        density_level="minimal",
        industry_affinity=("technology", "saas", "ai", "crypto", "fintech", "startup"),
    ),
})
