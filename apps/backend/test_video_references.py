"""
Tests for video reference selection.
"""

import asyncio
from collections import Counter

import pytest

from conftest import FakeCatalog, make_style
from models.style import ScoredVideoReference, VideoChatContext
from services.exceptions import InvalidStyleQuery
from services.video_references import (
    VideoReferenceService,
    extract_style_terms_from_ai_response,
    extract_video_tags_from_message,
    is_video_deliverable_type,
    score_video_reference,
    select_diverse,
)


def make_video(video_id, axis, deliverable_type="launch_video", **fields):
    fields.setdefault("video_url", f"https://cdn.example.com/{video_id}.mp4")
    return make_style(video_id, axis, deliverable_type, **fields)


def scored(video_id, axis, score):
    return ScoredVideoReference(
        **make_video(video_id, axis).model_dump(),
        brand_match_score=score,
        match_reason="Video style reference",
    )


def test_extract_video_tags_from_message():
    tags = extract_video_tags_from_message("A cinematic launch video for our SaaS product")
    assert tags == ["cinematic", "tech", "ecommerce", "product-showcase"]
    assert extract_video_tags_from_message("") == []
    assert extract_video_tags_from_message(None) == []


def test_extract_style_terms_from_ai_response():
    terms = extract_style_terms_from_ai_response("I'd suggest a bold, cinematic look with clean typography.")
    assert terms == ["cinematic", "bold", "clean", "typography"]
    assert extract_style_terms_from_ai_response(None) == []


@pytest.mark.parametrize("deliverable_type,expected", [
    ("launch_video", True),
    ("instagram_reel", True),
    ("instagram_post", False),
    (None, False),
])
def test_is_video_deliverable_type(deliverable_type, expected):
    assert is_video_deliverable_type(deliverable_type) is expected


def test_score_video_reference_groups():
    video = make_video("v1", "bold", name="Orbit", video_tags=["launch", "product", "cinematic"], usage_count=10)
    context = VideoChatContext(intent="launch", platform="youtube")

    score, factors, reasons = score_video_reference(video, context, ["cinematic"])

    # intent: 20 first hit + 5 second hit + 10 preferred axis
    assert factors == {"intent": 35, "platform": 0, "style": 10, "topic": 0, "quality": 10}
    assert score == 55
    assert reasons[0] == "Fits launch videos"


def test_score_is_clamped_and_bounded():
    video = make_video(
        "v1", "tech",
        video_tags=["launch", "announcement", "reveal", "teaser", "product", "youtube", "widescreen", "long-form"],
        semantic_tags=["cinematic", "minimal", "bold", "clean", "fintech"],
        usage_count=50,
    )
    context = VideoChatContext(intent="launch", platform="YouTube", topic="fintech launch", industry="fintech")
    score, factors, _ = score_video_reference(video, context, ["cinematic", "minimal", "bold", "clean"])

    assert factors["intent"] == 35
    assert factors["platform"] == 25
    assert factors["style"] == 30
    assert factors["topic"] == 15
    assert 0 <= score <= 100


def test_select_diverse_caps_two_per_axis():
    candidates = [scored(f"t{i}", "tech", 90 - i) for i in range(3)] + [scored(f"b{i}", "bold", 80 - i) for i in range(3)]

    assert [c.id for c in select_diverse(candidates, 4)] == ["t0", "t1", "b0", "b1"]


def test_select_diverse_backfills_when_starved():
    candidates = [scored(f"t{i}", "tech", 90 - i) for i in range(3)] + [scored(f"b{i}", "bold", 80 - i) for i in range(3)]

    assert [c.id for c in select_diverse(candidates, 5)] == ["t0", "t1", "b0", "b1", "t2"]
    assert [c.id for c in select_diverse(candidates[:3], 3)] == ["t0", "t1", "t2"]


def test_chat_references_respect_cap():
    catalog = FakeCatalog(
        [make_video(f"t{i}", "tech", video_tags=["launch"], display_order=i) for i in range(4)]
        + [make_video(f"b{i}", "bold", video_tags=["launch"], display_order=10 + i) for i in range(2)]
        + [make_video(f"m{i}", "minimal", deliverable_type="video_ad", display_order=20 + i) for i in range(2)]
        + [make_style("still", "tech")]
    )
    service = VideoReferenceService(catalog)

    videos = asyncio.run(service.get_video_references_for_chat(
        "launch_video", VideoChatContext(intent="launch", ai_response="Something cinematic"), limit=6
    ))

    assert len(videos) == 6
    assert "still" not in {v.id for v in videos}
    assert max(Counter(v.style_axis for v in videos).values()) <= 2
    assert all(v.is_video_reference for v in videos)
    assert all(0 <= v.brand_match_score <= 100 for v in videos)
    assert catalog.calls[-1]["deliverable_type"] is None
    assert catalog.calls[-1]["video_only"] is True


def test_chat_references_with_empty_catalog():
    service = VideoReferenceService(FakeCatalog())
    assert asyncio.run(service.get_video_references_for_chat("launch_video")) == []


def test_chat_references_reject_bad_limit():
    service = VideoReferenceService(FakeCatalog())
    with pytest.raises(InvalidStyleQuery):
        asyncio.run(service.get_video_references_for_chat("launch_video", limit=0))


def test_video_references_filtered_by_tags():
    catalog = FakeCatalog([
        make_video("v1", "bold", video_tags=["Cinematic", "teaser"], usage_count=10,
                   video_thumbnail_url="https://cdn.example.com/v1.jpg"),
        make_video("v2", "tech", video_tags=["explainer"], display_order=1),
    ])
    service = VideoReferenceService(catalog)

    videos = asyncio.run(service.get_video_references(tags=["cinematic"]))

    assert [v.id for v in videos] == ["v1"]
    # 50 base + 15 popular + 10 featured + 10 tag
    assert videos[0].brand_match_score == 85
    assert videos[0].match_reason == "Popular choice"
    assert videos[0].image_url == "https://cdn.example.com/v1.jpg"
