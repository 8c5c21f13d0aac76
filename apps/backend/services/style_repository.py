"""
Supabase-backed company and style catalog repositories.
"""

import asyncio
from typing import Any, Callable, List, Optional

from models.brand import CompanyBrand
from models.style import StyleReference
from services.exceptions import DataFetchError
from services.interfaces import ICompanyRepository, IStyleCatalog
from setup_logging_optimized import get_logger
from utils.supabase import get_supabase_client, perform_supabase_operation_with_retry

logger = get_logger(__name__)

STYLE_TABLE = "deliverable_style_references"


async def run_supabase_query(operation: Callable[[], Any], description: str, context: Optional[dict] = None) -> Any:
    """Run a blocking Supabase call off the event loop; failures become DataFetchError."""
    loop = asyncio.get_event_loop()
    try:
        return await loop.run_in_executor(None, perform_supabase_operation_with_retry, operation, description)
    except Exception as e:
        logger.error(f"Supabase {description} failed: {e}")
        raise DataFetchError(f"Failed to {description}", cause=e, context=context) from e


class SupabaseCompanyRepository(ICompanyRepository):
    """Resolves a user's company through `users.company_id`"""

    async def get_company_for_user(self, user_id: str) -> Optional[CompanyBrand]:
        def query():
            return (
                get_supabase_client()
                .table("users")
                .select("id, company:companies(*)")
                .eq("id", user_id)
                .limit(1)
                .execute()
            )

        response = await run_supabase_query(query, "fetch company", {"user_id": user_id})
        rows = response.data or []
        if not rows or not rows[0].get("company"):
            logger.debug(f"No company for user {user_id}")
            return None
        return CompanyBrand.from_row(rows[0]["company"])


class SupabaseStyleCatalog(IStyleCatalog):
    """Active rows of `deliverable_style_references`"""

    async def list_active_styles(
        self,
        deliverable_type: Optional[str],
        style_axis: Optional[str] = None,
        offset: int = 0,
        limit: Optional[int] = None,
        video_only: bool = False
    ) -> List[StyleReference]:
        def query():
            q = get_supabase_client().table(STYLE_TABLE).select("*").eq("is_active", True)
            if deliverable_type:
                q = q.eq("deliverable_type", deliverable_type)
            if style_axis:
                q = q.eq("style_axis", style_axis)
            if video_only:
                q = q.not_.is_("video_url", "null")
            q = q.order("featured_order").order("display_order")
            if limit is not None:
                q = q.range(offset, offset + limit - 1)
            return q.execute()

        context = {"deliverable_type": deliverable_type, "style_axis": style_axis, "offset": offset, "limit": limit}
        response = await run_supabase_query(query, "list style references", context)
        rows = response.data or []
        if limit is None and offset:
            rows = rows[offset:]

        styles = []
        for row in rows:
            try:
                styles.append(StyleReference.from_row(row))
            except ValueError as e:
                # pydantic ValidationError subclasses ValueError
                logger.warning(f"Skipping malformed style reference {row.get('id')}: {e}")
        logger.debug(f"Loaded {len(styles)} styles for {deliverable_type}/{style_axis or 'all'}")
        return styles
