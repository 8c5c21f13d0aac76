"""
Color temperature analysis for brand palettes.

Reduces a company's hex colors to a warm/cool/neutral profile that drives
style matching.
"""

from typing import Dict, Iterable, Optional, Tuple

from config.scoring_config import (
    WARMTH_THRESHOLD,
    PRIMARY_COLOR_WEIGHT,
    SECONDARY_COLOR_WEIGHT,
    ACCENT_COLOR_WEIGHT,
    EXTRA_BRAND_COLOR_WEIGHT,
)
from models.brand import BrandColorProfile, CompanyBrand, COLOR_BUCKETS
from setup_logging_optimized import get_logger

logger = get_logger(__name__)


def hex_to_rgb(hex_color: Optional[str]) -> Optional[Tuple[int, int, int]]:
    """Parse '#rrggbb' or '#rgb' into an RGB tuple; None if unparseable."""
    if not hex_color or not isinstance(hex_color, str):
        return None
    h = hex_color.strip().lstrip('#')
    if len(h) == 3:
        h = ''.join(c + c for c in h)
    if len(h) != 6:
        return None
    try:
        return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)
    except ValueError:
        return None


def classify_color_temperature(hex_color: Optional[str]) -> str:
    """Classify a hex color as warm, cool or neutral by its red-minus-blue balance."""
    rgb = hex_to_rgb(hex_color)
    if rgb is None:
        if hex_color:
            logger.debug(f"Unparseable brand color {hex_color!r}, treating as neutral")
        return "neutral"
    r, _g, b = rgb
    warmth = (r - b) / 255
    if warmth > WARMTH_THRESHOLD:
        return "warm"
    if warmth < -WARMTH_THRESHOLD:
        return "cool"
    return "neutral"


def dominant_bucket(votes: Dict[str, float]) -> str:
    """Bucket with the most votes; ties go to the alphabetically first bucket."""
    return min(votes, key=lambda bucket: (-votes[bucket], bucket))


def analyze_brand_color_temperature(
    primary_color: Optional[str] = None,
    secondary_color: Optional[str] = None,
    accent_color: Optional[str] = None,
    brand_colors: Optional[Iterable[str]] = None,
) -> BrandColorProfile:
    """
    Weighted warm/cool/neutral vote over a brand palette.

    Primary counts 2, secondary 1, accent 1 and every extra brand color 0.5.
    Only colors that are present vote. An empty palette is fully neutral.
    """
    extras = [c for c in (brand_colors or []) if c]
    if not any((primary_color, secondary_color, accent_color)) and not extras:
        return BrandColorProfile.neutral()

    votes: Dict[str, float] = {bucket: 0.0 for bucket in COLOR_BUCKETS}
    weighted = (
        (primary_color, PRIMARY_COLOR_WEIGHT),
        (secondary_color, SECONDARY_COLOR_WEIGHT),
        (accent_color, ACCENT_COLOR_WEIGHT),
    )
    for color, weight in weighted:
        if color:
            votes[classify_color_temperature(color)] += weight
    for color in extras:
        votes[classify_color_temperature(color)] += EXTRA_BRAND_COLOR_WEIGHT

    total = sum(votes.values())
    distribution = {bucket: votes[bucket] / total for bucket in COLOR_BUCKETS}
    return BrandColorProfile(dominant=dominant_bucket(votes), distribution=distribution)


def analyze_company_colors(company: CompanyBrand) -> BrandColorProfile:
    return analyze_brand_color_temperature(
        primary_color=company.primary_color,
        secondary_color=company.secondary_color,
        accent_color=company.accent_color,
        brand_colors=company.brand_colors,
    )
