"""
Configuration settings for brand-aware style matching.
"""

import os

################################
# Style Matching Configuration
################################

#==============================================================================
# RESULT SIZES
#==============================================================================

# Default number of styles returned by get_brand_aware_styles
DEFAULT_STYLE_LIMIT = int(os.getenv("STYLE_MATCH_DEFAULT_LIMIT", "8"))

# Page size for "more of this style" requests
DEFAULT_AXIS_PAGE_SIZE = 4

# Video references
DEFAULT_VIDEO_LIMIT = 8
DEFAULT_VIDEO_CHAT_LIMIT = 6
VIDEO_MAX_PER_AXIS = 2

#==============================================================================
# COLOR TEMPERATURE
#==============================================================================

# warmth = (R - B) / 255; beyond +/- this threshold a color is warm/cool
WARMTH_THRESHOLD = 0.2

PRIMARY_COLOR_WEIGHT = 2.0
SECONDARY_COLOR_WEIGHT = 1.0
ACCENT_COLOR_WEIGHT = 1.0
EXTRA_BRAND_COLOR_WEIGHT = 0.5

#==============================================================================
# BRAND SCORE POINT BUDGET
#==============================================================================

COLOR_MATCH_POINTS = 30
COLOR_DISTRIBUTION_BONUS = 10
NEUTRAL_BRAND_POINTS = 20
INDUSTRY_MATCH_POINTS = 30
INDUSTRY_MISMATCH_POINTS = 10
NO_INDUSTRY_POINTS = 15
BASE_VARIETY_POINTS = 20

# Axis with no characteristic row: medium weighting
UNKNOWN_AXIS_COLOR_POINTS = 20

MAX_SCORE = 100
MIN_SCORE = 0
NO_BRAND_SCORE = 50

#==============================================================================
# MATCH REASONS
#==============================================================================

HISTORY_REASON_THRESHOLD = 15
STRONG_MATCH_THRESHOLD = 70
VERSATILE_THRESHOLD = 50

POPULAR_CHOICE_THRESHOLD = 70
RECENTLY_ADDED_THRESHOLD = 90
DNA_TOP_AXES = 3

#==============================================================================
# HISTORY BOOST
#==============================================================================

TYPE_HISTORY_MAX_BOOST = 30
OVERALL_HISTORY_MAX_BOOST = 20
RECENT_SELECTION_DAYS = 30

#==============================================================================
# DELIVERABLE TYPES
#==============================================================================

# Catalog used when a deliverable type has no active styles of its own
DELIVERABLE_TYPE_FALLBACKS = {
    "instagram_story": "instagram_post",
    "instagram_reel": "instagram_post",
    "linkedin_banner": "web_banner",
    "twitter_post": "instagram_post",
    "facebook_ad": "static_ad",
}

VIDEO_DELIVERABLE_TYPES = (
    "launch_video",
    "video_ad",
    "instagram_reel",
    "explainer_video",
)
