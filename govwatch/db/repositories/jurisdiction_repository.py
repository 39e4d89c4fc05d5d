"""
Repository for jurisdictions.

Responsibility: Look up jurisdictions and resolve city/county scopes
"""

from typing import Dict, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import JurisdictionModel


class JurisdictionRepository:
    """Repository for jurisdiction lookups"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, jurisdiction_id: int) -> Optional[JurisdictionModel]:
        return await self.session.get(JurisdictionModel, jurisdiction_id)

    async def get_by_slug(self, slug: str) -> Optional[JurisdictionModel]:
        result = await self.session.execute(
            select(JurisdictionModel).where(JurisdictionModel.slug == slug)
        )
        return result.scalar_one_or_none()

    async def get_by_slugs(self, slugs: Sequence[str]) -> List[JurisdictionModel]:
        if not slugs:
            return []
        result = await self.session.execute(
            select(JurisdictionModel).where(JurisdictionModel.slug.in_(list(slugs)))
        )
        return list(result.scalars().all())

    async def children_of(self, parent_id: int) -> List[JurisdictionModel]:
        result = await self.session.execute(
            select(JurisdictionModel).where(JurisdictionModel.parent_id == parent_id)
        )
        return list(result.scalars().all())

    async def slug_map(self, jurisdiction_ids: Sequence[int]) -> Dict[int, str]:
        """Map ids to slugs for the given jurisdictions"""
        if not jurisdiction_ids:
            return {}
        result = await self.session.execute(
            select(JurisdictionModel.id, JurisdictionModel.slug).where(
                JurisdictionModel.id.in_(list(jurisdiction_ids))
            )
        )
        return {row.id: row.slug for row in result}

    async def get_or_create(
        self,
        slug: str,
        name: str,
        type: str,
        parent: Optional[JurisdictionModel] = None,
    ) -> JurisdictionModel:
        existing = await self.get_by_slug(slug)
        if existing:
            return existing

        jurisdiction = JurisdictionModel(
            slug=slug,
            name=name,
            type=type,
            parent_id=parent.id if parent else None,
        )
        self.session.add(jurisdiction)
        await self.session.flush()
        return jurisdiction
