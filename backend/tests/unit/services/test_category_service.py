"""Unit tests for CategoryService."""

import pytest

from service_catalog.core.exceptions import EntityAlreadyExistsError, RequestValidationError
from service_catalog.domain.entities import Category
from service_catalog.schemas.dtos import CategoryCreateRequest
from service_catalog.services.category_service import CategoryService
from tests.factories.repository_factories import UnitOfWorkFactory


@pytest.fixture
def uow():
    return UnitOfWorkFactory.create_mock()


@pytest.fixture
def service(uow):
    return CategoryService(lambda: uow, max_attempts=1)


@pytest.mark.unit
@pytest.mark.services
class TestCategoryService:
    def test_create_category(self, service, uow):
        category = service.create_category(CategoryCreateRequest(name=" Tratamientos "))

        assert category.name == "Tratamientos"
        uow.categories.get_by_name.assert_called_once_with("Tratamientos")
        uow.commit.assert_called_once()

    def test_duplicate_name(self, service, uow):
        uow.categories.get_by_name.return_value = Category(id=2, name="tratamientos")

        with pytest.raises(EntityAlreadyExistsError):
            service.create_category(CategoryCreateRequest(name="Tratamientos"))

        uow.categories.create.assert_not_called()

    def test_invalid_name(self, service):
        with pytest.raises(RequestValidationError):
            service.create_category(CategoryCreateRequest(name=""))

    def test_list_categories(self, service, uow):
        uow.categories.get_all.return_value = [Category(id=1, name="Barba")]

        assert [c.name for c in service.list_categories()] == ["Barba"]
