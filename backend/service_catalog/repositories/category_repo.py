"""Category repository implementation following SOLID principles."""

from typing import List, Optional

from sqlalchemy import func, select

from service_catalog.db.base import Category as DbCategory
from service_catalog.domain.entities import Category as DomainCategory
from service_catalog.domain.interfaces import ICategoryRepository


class CategoryRepository(ICategoryRepository):
    """Repository for Category persistence operations."""

    def __init__(self, db_session) -> None:
        self.db = db_session

    def get_by_id(self, category_id: int) -> Optional[DomainCategory]:
        db_category = self.db.get(DbCategory, category_id)
        return self._to_domain(db_category) if db_category else None

    def get_by_name(self, name: str) -> Optional[DomainCategory]:
        db_category = self.db.execute(
            select(DbCategory).where(
                func.lower(DbCategory.name) == name.strip().lower()
            )
        ).scalar_one_or_none()
        return self._to_domain(db_category) if db_category else None

    def get_all(self) -> List[DomainCategory]:
        rows = self.db.execute(select(DbCategory).order_by(DbCategory.name)).scalars()
        return [self._to_domain(c) for c in rows]

    def count(self) -> int:
        return self.db.execute(select(func.count(DbCategory.id))).scalar_one()

    def create(self, category: DomainCategory) -> DomainCategory:
        db_category = DbCategory(name=category.name)
        self.db.add(db_category)
        self.db.flush()
        return self._to_domain(db_category)

    def _to_domain(self, db_category: DbCategory) -> DomainCategory:
        return DomainCategory(id=db_category.id, name=db_category.name)
