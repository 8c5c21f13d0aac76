"""
Shared fakes for style matching tests.

The fakes implement the collaborator interfaces in services.interfaces
with in-memory data.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest

from models.brand import CompanyBrand
from models.style import StyleReference
from services.exceptions import DataFetchError
from services.interfaces import (
    HistoryBoostResult,
    ICompanyRepository,
    IHistoryBooster,
    IStyleCatalog,
    IStyleDNAExtractor,
    StyleDNAResult,
)

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_style(style_id: str, axis: str, deliverable_type: str = "instagram_post", **fields) -> StyleReference:
    return StyleReference(
        id=style_id,
        name=fields.pop("name", f"{axis.title()} {style_id}"),
        image_url=fields.pop("image_url", f"https://cdn.example.com/{style_id}.png"),
        deliverable_type=deliverable_type,
        style_axis=axis,
        **fields,
    )


class FakeCatalog(IStyleCatalog):
    def __init__(self, styles: Optional[List[StyleReference]] = None):
        self.styles = list(styles or [])
        self.calls: List[Dict] = []

    async def list_active_styles(self, deliverable_type, style_axis=None, offset=0, limit=None, video_only=False):
        self.calls.append({
            "deliverable_type": deliverable_type,
            "style_axis": style_axis,
            "offset": offset,
            "limit": limit,
            "video_only": video_only,
        })
        rows = [s for s in self.styles if s.is_active]
        if deliverable_type:
            rows = [s for s in rows if s.deliverable_type == deliverable_type]
        if style_axis:
            rows = [s for s in rows if s.style_axis == style_axis]
        if video_only:
            rows = [s for s in rows if s.video_url]
        rows.sort(key=lambda s: (s.featured_order, s.display_order))
        end = None if limit is None else offset + limit
        return rows[offset:end]


class FakeCompanies(ICompanyRepository):
    def __init__(self, company: Optional[CompanyBrand] = None, error: Optional[Exception] = None):
        self.company = company
        self.error = error
        self.calls = 0

    async def get_company_for_user(self, user_id):
        self.calls += 1
        if self.error:
            raise self.error
        return self.company


class FakeBooster(IHistoryBooster):
    def __init__(self, boosts: Optional[Dict[str, int]] = None, error: Optional[Exception] = None, failure: Optional[str] = None):
        self.boosts = boosts or {}
        self.error = error
        self.failure = failure
        self.calls = 0

    async def get_history_boost_scores(self, user_id, deliverable_type):
        self.calls += 1
        if self.error:
            raise self.error
        if self.failure:
            return HistoryBoostResult.failed(self.failure)
        return HistoryBoostResult(boosts=dict(self.boosts))


class FakeDNAExtractor(IStyleDNAExtractor):
    def __init__(self, dna=None, error: Optional[Exception] = None):
        self.dna = dna
        self.error = error
        self.calls = 0

    async def extract(self, user_id):
        self.calls += 1
        if self.error:
            raise self.error
        return StyleDNAResult(dna=self.dna)

    async def extract_for_company(self, company):
        return await self.extract(company.id)


@pytest.fixture
def cool_saas_company() -> CompanyBrand:
    return CompanyBrand(id="co-1", name="Acme", primary_color="#1a73e8", industry="saas")


@pytest.fixture
def mixed_catalog() -> FakeCatalog:
    styles = [
        make_style("p1", "playful", display_order=1),
        make_style("t1", "tech", display_order=2),
        make_style("m1", "minimal", display_order=3),
        make_style("b1", "bold", display_order=4),
        make_style("t2", "tech", display_order=5),
        make_style("o1", "organic", display_order=6),
        make_style("c1", "corporate", display_order=7),
        make_style("e1", "editorial", display_order=8),
        make_style("pr1", "premium", display_order=9),
        make_style("m2", "minimal", display_order=10),
        make_style("t3", "tech", display_order=11),
        make_style("p2", "playful", display_order=12),
    ]
    return FakeCatalog(styles)


@pytest.fixture
def failing_companies() -> FakeCompanies:
    return FakeCompanies(error=DataFetchError("Failed to fetch company"))
