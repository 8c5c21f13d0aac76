"""
Collaborator interfaces for brand-aware style matching.

Design principles:
- Small, focused interfaces
- Optional signals report failure in their result instead of raising
- Testability (in-memory fakes implement the same contracts)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, TYPE_CHECKING

from models.brand import CompanyBrand
from models.style import StyleReference

if TYPE_CHECKING:
    from services.style_dna import StyleDNA


# ============= Result types =============

@dataclass
class HistoryBoostResult:
    """Per-axis bonus from selection history, or the reason it is missing."""
    boosts: Dict[str, int] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, error: str) -> 'HistoryBoostResult':
        return cls(boosts={}, error=error)


@dataclass
class StyleDNAResult:
    """Extracted style DNA, or the reason it is missing."""
    dna: Optional['StyleDNA'] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, error: str) -> 'StyleDNAResult':
        return cls(dna=None, error=error)


# ============= Data store interfaces =============

class ICompanyRepository(ABC):
    """Looks up the company brand a user belongs to"""

    @abstractmethod
    async def get_company_for_user(self, user_id: str) -> Optional[CompanyBrand]:
        """Return the user's company brand, or None if the user has no company"""
        pass


class IStyleCatalog(ABC):
    """Reads active style references"""

    @abstractmethod
    async def list_active_styles(
        self,
        deliverable_type: Optional[str],
        style_axis: Optional[str] = None,
        offset: int = 0,
        limit: Optional[int] = None,
        video_only: bool = False
    ) -> List[StyleReference]:
        """Active rows ordered by (featured_order, display_order)"""
        pass


# ============= Optional signal interfaces =============

class IHistoryBooster(ABC):
    """Supplies per-axis bonus scores from a user's prior selections"""

    @abstractmethod
    async def get_history_boost_scores(self, user_id: str, deliverable_type: str) -> HistoryBoostResult:
        """Boost per style axis (typically 0-30)"""
        pass


class IStyleDNAExtractor(ABC):
    """Derives a style DNA profile from a user's brand"""

    @abstractmethod
    async def extract(self, user_id: str) -> StyleDNAResult:
        """Style DNA for the user's company"""
        pass

    @abstractmethod
    async def extract_for_company(self, company: CompanyBrand) -> StyleDNAResult:
        """Style DNA for an already loaded company"""
        pass
