import logging
from typing import Callable, List, Optional

from service_catalog.core.exceptions import EntityAlreadyExistsError
from service_catalog.db.unit_of_work import UnitOfWork, run_in_unit_of_work
from service_catalog.domain.entities import Category
from service_catalog.schemas.dtos import CategoryCreateRequest

logger = logging.getLogger(__name__)


class CategoryService:
    """Application service for service categories."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        max_attempts: Optional[int] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._max_attempts = max_attempts

    def create_category(self, request: CategoryCreateRequest) -> Category:
        """Create a category; names are unique case-insensitively."""
        request.validate()
        name = request.name.strip()

        def work(uow: UnitOfWork) -> Category:
            if uow.categories.get_by_name(name) is not None:
                raise EntityAlreadyExistsError(f"A category named '{name}' already exists")
            return uow.categories.create(Category(name=name))

        category = run_in_unit_of_work(self._uow_factory, work, self._max_attempts).value
        logger.info(
            "Category created",
            extra={"context": {"category_id": category.id, "name": category.name}},
        )
        return category

    def list_categories(self) -> List[Category]:
        with self._uow_factory() as uow:
            return uow.categories.get_all()
