"""
Tests for brand-aware style scoring and ranking.
"""

import asyncio
from datetime import timedelta

import pytest

from conftest import FIXED_NOW, FakeBooster, FakeCatalog, FakeCompanies, FakeDNAExtractor, make_style
from models.brand import BrandColorProfile, CompanyBrand, DEFAULT_STYLE_CHARACTERISTICS
from services.brand_style_scoring import (
    BrandStyleScorer,
    calculate_freshness_score,
    calculate_popularity_score,
    calculate_style_score,
    clamp_score,
    generate_match_reason,
)
from services.color_temperature import analyze_brand_color_temperature
from services.exceptions import DataFetchError, InvalidStyleQuery
from services.style_dna import StyleDNAService, build_style_dna

COOL = analyze_brand_color_temperature(primary_color="#1a73e8")
NEUTRAL = BrandColorProfile.neutral()


def make_scorer(catalog, company=None, **kwargs):
    companies = kwargs.pop("companies", None) or FakeCompanies(company)
    return BrandStyleScorer(catalog=catalog, companies=companies, clock=lambda: FIXED_NOW, **kwargs)


# ============= Score formula =============

def test_cool_brand_prefers_tech_over_playful():
    tech = calculate_style_score("tech", COOL, None)
    playful = calculate_style_score("playful", COOL, None)
    # 30 + 10 * 1.0 + 15 + 20
    assert tech == 75
    # no color points + 15 + 20
    assert playful == 35
    assert tech >= playful


def test_neutral_brand_gets_partial_color_points():
    # bold has no neutral affinity: 20 + 15 + 20
    assert calculate_style_score("bold", NEUTRAL, None) == 55
    # minimal lists neutral: 30 + 10 * 1.0 + 15 + 20
    assert calculate_style_score("minimal", NEUTRAL, None) == 75


def test_industry_points():
    assert calculate_style_score("tech", COOL, "SaaS") == 90
    assert calculate_style_score("tech", COOL, "Fintech startup") == 90
    assert calculate_style_score("tech", COOL, "Agriculture") == 70
    assert calculate_style_score("tech", COOL, "   ") == 75


def test_unknown_axis_scores_medium():
    assert calculate_style_score("brutalist", COOL, "saas") == 55


def test_scores_are_integers_in_range():
    for axis in list(DEFAULT_STYLE_CHARACTERISTICS) + ["unknown"]:
        for profile in (COOL, NEUTRAL):
            score = calculate_style_score(axis, profile, "technology")
            assert isinstance(score, int)
            assert 0 <= score <= 100


def test_match_reason_priority():
    tech = DEFAULT_STYLE_CHARACTERISTICS["tech"]
    playful = DEFAULT_STYLE_CHARACTERISTICS["playful"]
    assert generate_match_reason(95, 20, tech, COOL, "saas") == "Based on your preferences"
    assert generate_match_reason(90, 0, tech, COOL, "saas") == "Matches your cool palette and popular in saas"
    assert generate_match_reason(75, 0, tech, COOL, None) == "Matches your cool palette"
    assert generate_match_reason(72, 0, playful, COOL, "gaming") == "Popular in gaming"
    assert generate_match_reason(60, 0, playful, COOL, None) == "Versatile style option"
    assert generate_match_reason(35, 0, playful, COOL, None) == "Alternative direction"


def test_popularity_and_freshness_scores():
    assert calculate_popularity_score(0, 0) == 50
    assert calculate_popularity_score(25, 100) == 50
    assert calculate_popularity_score(100, 100) == 100
    assert calculate_freshness_score(None, FIXED_NOW) == 50
    assert calculate_freshness_score(FIXED_NOW - timedelta(days=3), FIXED_NOW) == 100
    assert calculate_freshness_score(FIXED_NOW - timedelta(days=10), FIXED_NOW) == 90
    assert calculate_freshness_score(FIXED_NOW - timedelta(days=20), FIXED_NOW) == 75
    assert calculate_freshness_score(FIXED_NOW - timedelta(days=45), FIXED_NOW) == 60
    assert calculate_freshness_score(FIXED_NOW - timedelta(days=365), FIXED_NOW) == 50


# ============= Ranking =============

def test_results_sorted_descending_with_default_limit(mixed_catalog, cool_saas_company):
    scorer = make_scorer(mixed_catalog, cool_saas_company)
    styles = asyncio.run(scorer.get_brand_aware_styles("instagram_post", "user-1"))

    assert len(styles) == 8
    scores = [s.brand_match_score for s in styles]
    assert scores == sorted(scores, reverse=True)
    assert styles[0].style_axis == "tech"


def test_equal_scores_keep_catalog_order(mixed_catalog, cool_saas_company):
    scorer = make_scorer(mixed_catalog, cool_saas_company)
    styles = asyncio.run(scorer.get_brand_aware_styles("instagram_post", "user-1", limit=12))

    tech_ids = [s.id for s in styles if s.style_axis == "tech"]
    assert tech_ids == ["t1", "t2", "t3"]


def test_explicit_limit(mixed_catalog, cool_saas_company):
    scorer = make_scorer(mixed_catalog, cool_saas_company)
    assert len(asyncio.run(scorer.get_brand_aware_styles("instagram_post", "user-1", limit=3))) == 3
    assert len(asyncio.run(scorer.get_brand_aware_styles("instagram_post", "user-1", limit=50))) == 12


@pytest.mark.parametrize("limit", [0, -1])
def test_non_positive_limit_is_rejected(mixed_catalog, cool_saas_company, limit):
    scorer = make_scorer(mixed_catalog, cool_saas_company)
    with pytest.raises(InvalidStyleQuery):
        asyncio.run(scorer.get_brand_aware_styles("instagram_post", "user-1", limit=limit))


def test_include_all_axes_returns_one_style_per_axis(mixed_catalog, cool_saas_company):
    scorer = make_scorer(mixed_catalog, cool_saas_company)
    styles = asyncio.run(scorer.get_brand_aware_styles("instagram_post", "user-1", include_all_axes=True))

    axes = [s.style_axis for s in styles]
    catalog_axes = {s.style_axis for s in mixed_catalog.styles}
    assert len(axes) == len(set(axes))
    assert set(axes) == catalog_axes
    assert [s.id for s in styles if s.style_axis == "tech"] == ["t1"]


def test_include_all_axes_respects_limit(mixed_catalog, cool_saas_company):
    scorer = make_scorer(mixed_catalog, cool_saas_company)
    styles = asyncio.run(scorer.get_brand_aware_styles("instagram_post", "user-1", limit=2, include_all_axes=True))

    assert len(styles) == 2
    assert styles[0].style_axis != styles[1].style_axis


# ============= Missing data =============

def test_no_company_gives_flat_scores_and_skips_signals(mixed_catalog):
    booster = FakeBooster({"tech": 30})
    dna = FakeDNAExtractor()
    scorer = make_scorer(mixed_catalog, None, history_booster=booster, dna_extractor=dna)

    styles = asyncio.run(scorer.get_brand_aware_styles("instagram_post", "user-1", limit=20))

    assert {s.brand_match_score for s in styles} == {50}
    assert {s.match_reason for s in styles} == {"No brand profile available"}
    assert [s.id for s in styles] == [s.id for s in mixed_catalog.styles]
    assert booster.calls == 0
    assert dna.calls == 0


def test_empty_catalog_without_fallback_returns_empty(cool_saas_company):
    scorer = make_scorer(FakeCatalog(), cool_saas_company)
    assert asyncio.run(scorer.get_brand_aware_styles("presentation_slide", "user-1")) == []


def test_empty_catalog_uses_fallback_type(cool_saas_company):
    catalog = FakeCatalog([make_style("t1", "tech", "instagram_post")])
    scorer = make_scorer(catalog, cool_saas_company)

    styles = asyncio.run(scorer.get_brand_aware_styles("instagram_story", "user-1"))

    assert [s.id for s in styles] == ["t1"]
    assert [c["deliverable_type"] for c in catalog.calls] == ["instagram_story", "instagram_post"]


def test_company_lookup_failure_propagates(mixed_catalog, failing_companies):
    scorer = make_scorer(mixed_catalog, companies=failing_companies)
    with pytest.raises(DataFetchError):
        asyncio.run(scorer.get_brand_aware_styles("instagram_post", "user-1"))


# ============= History boost =============

def test_history_boost_is_added_and_capped(mixed_catalog, cool_saas_company):
    booster = FakeBooster({"playful": 20, "tech": 30})
    scorer = make_scorer(mixed_catalog, cool_saas_company, history_booster=booster)

    styles = asyncio.run(scorer.get_brand_aware_styles("instagram_post", "user-1", limit=12))
    by_id = {s.id: s for s in styles}

    # playful: 0 color + 10 industry mismatch + 20 base + 20 boost
    assert by_id["p1"].brand_match_score == 50
    assert by_id["p1"].history_boost == 20
    assert by_id["p1"].match_reason == "Based on your preferences"
    assert by_id["p1"].score_factors.brand == 30
    assert by_id["p1"].score_factors.history == 20
    # tech: 90 + 30, capped
    assert by_id["t1"].brand_match_score == 100
    assert by_id["m1"].history_boost is None


def test_history_booster_exception_is_neutralized(mixed_catalog, cool_saas_company):
    plain = asyncio.run(make_scorer(mixed_catalog, cool_saas_company).get_brand_aware_styles("instagram_post", "user-1"))
    scorer = make_scorer(mixed_catalog, cool_saas_company, history_booster=FakeBooster(error=RuntimeError("db down")))

    styles = asyncio.run(scorer.get_brand_aware_styles("instagram_post", "user-1"))

    assert [(s.id, s.brand_match_score) for s in styles] == [(s.id, s.brand_match_score) for s in plain]


def test_history_booster_failure_result_is_neutralized(mixed_catalog, cool_saas_company):
    scorer = make_scorer(mixed_catalog, cool_saas_company, history_booster=FakeBooster(failure="timeout"))
    styles = asyncio.run(scorer.get_brand_aware_styles("instagram_post", "user-1"))
    assert all(s.history_boost is None for s in styles)


# ============= Style DNA =============

def test_style_dna_adds_reason_without_changing_scores(mixed_catalog, cool_saas_company):
    dna = build_style_dna(cool_saas_company)
    plain = asyncio.run(make_scorer(mixed_catalog, cool_saas_company).get_brand_aware_styles("instagram_post", "user-1"))
    scorer = make_scorer(mixed_catalog, cool_saas_company, dna_extractor=FakeDNAExtractor(dna))

    styles = asyncio.run(scorer.get_brand_aware_styles("instagram_post", "user-1"))

    assert [s.brand_match_score for s in styles] == [s.brand_match_score for s in plain]
    tech = next(s for s in styles if s.style_axis == "tech")
    assert "Recommended for your brand" in tech.match_reasons
    assert tech.score_factors.dna == 95


def test_style_dna_failure_is_neutralized(mixed_catalog, cool_saas_company):
    scorer = make_scorer(mixed_catalog, cool_saas_company, dna_extractor=FakeDNAExtractor(error=ValueError("bad row")))
    styles = asyncio.run(scorer.get_brand_aware_styles("instagram_post", "user-1"))
    assert len(styles) == 8
    assert all(s.score_factors.dna is None for s in styles)


# ============= Informational factors =============

def test_popularity_and_freshness_are_reported_not_scored(cool_saas_company):
    catalog = FakeCatalog([
        make_style("t1", "tech", usage_count=100, created_at=FIXED_NOW - timedelta(days=2)),
        make_style("t2", "tech", usage_count=0, display_order=1),
    ])
    scorer = make_scorer(catalog, cool_saas_company)

    t1, t2 = asyncio.run(scorer.get_brand_aware_styles("instagram_post", "user-1"))

    assert t1.brand_match_score == t2.brand_match_score
    assert t1.score_factors.popularity == 100
    assert t1.score_factors.freshness == 100
    assert "Popular choice" in t1.match_reasons
    assert "Recently added" in t1.match_reasons
    assert t2.score_factors.popularity == 0
    assert t2.score_factors.freshness == 50


# ============= Axis pagination =============

def test_axis_query_pages_in_display_order(mixed_catalog, cool_saas_company):
    scorer = make_scorer(mixed_catalog, cool_saas_company, history_booster=FakeBooster({"tech": 10}))

    page = asyncio.run(scorer.get_brand_aware_styles_of_axis("instagram_post", "tech", "user-1", offset=1, limit=4))

    assert [s.id for s in page] == ["t2", "t3"]
    assert {s.match_reason for s in page} == {"More tech options"}
    assert {s.brand_match_score for s in page} == {100}
    assert mixed_catalog.calls[-1]["offset"] == 1


def test_axis_query_past_end_of_catalog_is_empty(cool_saas_company):
    catalog = FakeCatalog(
        [make_style(f"story{i}", "tech", "instagram_story", display_order=i) for i in range(3)]
        + [make_style(f"post{i}", "tech", "instagram_post", display_order=i) for i in range(8)]
    )
    scorer = make_scorer(catalog, cool_saas_company)

    first = asyncio.run(scorer.get_brand_aware_styles_of_axis("instagram_story", "tech", "user-1", offset=0, limit=4))
    past_end = asyncio.run(scorer.get_brand_aware_styles_of_axis("instagram_story", "tech", "user-1", offset=4, limit=4))

    assert [s.id for s in first] == ["story0", "story1", "story2"]
    assert past_end == []
    assert "instagram_post" not in {c["deliverable_type"] for c in catalog.calls}


def test_axis_query_pages_within_fallback_catalog(cool_saas_company):
    catalog = FakeCatalog(
        [make_style(f"post{i}", "tech", "instagram_post", display_order=i) for i in range(6)]
        + [make_style("story-bold", "bold", "instagram_story")]
    )
    scorer = make_scorer(catalog, cool_saas_company)

    page = asyncio.run(scorer.get_brand_aware_styles_of_axis("instagram_story", "tech", "user-1", offset=4, limit=4))

    assert [s.id for s in page] == ["post4", "post5"]
    assert {s.deliverable_type for s in page} == {"instagram_post"}


def test_axis_query_rejects_negative_offset(mixed_catalog, cool_saas_company):
    scorer = make_scorer(mixed_catalog, cool_saas_company)
    with pytest.raises(InvalidStyleQuery):
        asyncio.run(scorer.get_brand_aware_styles_of_axis("instagram_post", "tech", "user-1", offset=-1))


def test_axis_query_without_company(mixed_catalog):
    scorer = make_scorer(mixed_catalog, None)
    page = asyncio.run(scorer.get_brand_aware_styles_of_axis("instagram_post", "minimal", "user-1"))
    assert [s.id for s in page] == ["m1", "m2"]
    assert {s.brand_match_score for s in page} == {50}


def test_brand_without_industry_still_scores():
    catalog = FakeCatalog([make_style("o1", "organic"), make_style("t1", "tech", display_order=1)])
    company = CompanyBrand(primary_color="#e85d1a")
    styles = asyncio.run(make_scorer(catalog, company).get_brand_aware_styles("instagram_post", "user-1"))
    # warm brand: organic 30 + 10 + 15 + 20, tech 0 + 15 + 20
    assert [(s.id, s.brand_match_score) for s in styles] == [("o1", 75), ("t1", 35)]


@pytest.mark.parametrize("value,expected", [(72.5, 73), (14.5, 15), (0.5, 1), (99.4, 99), (130, 100), (-3, 0)])
def test_clamp_score_rounds_half_up(value, expected):
    assert clamp_score(value) == expected


@pytest.mark.parametrize("industry", ["AI", "Retail", "Email marketing"])
def test_short_industry_keywords_match_inside_words(industry):
    assert DEFAULT_STYLE_CHARACTERISTICS["tech"].matches_industry(industry)


def test_branded_request_looks_up_company_once(mixed_catalog, cool_saas_company):
    companies = FakeCompanies(cool_saas_company)
    scorer = make_scorer(mixed_catalog, companies=companies, dna_extractor=StyleDNAService(companies))

    styles = asyncio.run(scorer.get_brand_aware_styles("instagram_post", "user-1"))

    assert companies.calls == 1
    tech = next(s for s in styles if s.style_axis == "tech")
    assert "Recommended for your brand" in tech.match_reasons
