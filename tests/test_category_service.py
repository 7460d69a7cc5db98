"""Tests for the category registry."""

import logging

import pytest
from bson import ObjectId

from taskhub.errors import BadRequestError, ConflictError, NotFoundError
from taskhub.models.category_model import normalize_name


class TestNormalizeName:
    def test_lowercases_and_trims(self):
        assert normalize_name("  Work Stuff ") == "work stuff"

    def test_inner_whitespace_is_kept(self):
        assert normalize_name("Home  Office") == "home  office"


class TestCreateCategory:
    """Tests for category creation."""

    def test_create_stores_normalized_name(self, category_service):
        category = category_service.create("  Work ", color="#ff0000")

        assert category.id is not None
        assert category.name == "work"
        assert category.color == "#ff0000"
        assert category.task_count == 0

    def test_create_without_color(self, category_service):
        category = category_service.create("home")
        assert category.color is None

    def test_names_differing_by_case_and_whitespace_conflict(self, category_service):
        category_service.create("Work")

        with pytest.raises(ConflictError) as exc_info:
            category_service.create("  WORK  ")

        assert exc_info.value.message == "Category with this name already exists"
        assert len(category_service.list()) == 1


class TestFindCategory:
    def test_find_by_name_normalizes(self, category_service):
        created = category_service.create("errands")

        found = category_service.find_by_name(" Errands ")

        assert found is not None
        assert found.id == created.id

    def test_find_by_name_missing_returns_none(self, category_service):
        assert category_service.find_by_name("nope") is None

    def test_find_by_id_includes_task_count(self, category_service, task_service):
        category = category_service.create("work")
        task_service.create({"title": "A", "category_id": category.id})
        task_service.create({"title": "B", "category_id": category.id})
        task_service.create({"title": "C"})

        found = category_service.find_by_id(category.id)

        assert found.task_count == 2

    def test_find_by_id_missing_raises_not_found(self, category_service):
        missing = str(ObjectId())

        with pytest.raises(NotFoundError) as exc_info:
            category_service.find_by_id(missing)

        assert exc_info.value.message == f"Category with ID {missing} not found"

    def test_find_by_id_malformed_raises_bad_request(self, category_service):
        with pytest.raises(BadRequestError):
            category_service.find_by_id("not-an-id")


class TestListCategories:
    def test_list_empty(self, category_service):
        assert category_service.list() == []

    def test_list_sorted_by_name_with_counts(self, category_service, task_service):
        work = category_service.create("work")
        category_service.create("errands")
        home = category_service.create("home")
        task_service.create({"title": "A", "category_id": work.id})
        task_service.create({"title": "B", "category_id": home.id})
        task_service.create({"title": "C", "category_id": home.id})

        categories = category_service.list()

        assert [c.name for c in categories] == ["errands", "home", "work"]
        assert [c.task_count for c in categories] == [0, 2, 1]


class TestUpdateCategory:
    def test_update_color_only(self, category_service):
        category = category_service.create("work", color="red")

        updated = category_service.update(category.id, {"color": "blue"})

        assert updated.name == "work"
        assert updated.color == "blue"

    def test_update_clears_color_with_none(self, category_service):
        category = category_service.create("work", color="red")

        updated = category_service.update(category.id, {"color": None})

        assert updated.color is None

    def test_rename_normalizes(self, category_service):
        category = category_service.create("work")

        updated = category_service.update(category.id, {"name": " Office "})

        assert updated.name == "office"
        assert category_service.find_by_name("office").id == category.id

    def test_rename_to_own_name_is_allowed(self, category_service):
        category = category_service.create("work")

        updated = category_service.update(category.id, {"name": "WORK"})

        assert updated.name == "work"

    def test_rename_to_taken_name_conflicts(self, category_service):
        category_service.create("work")
        home = category_service.create("home")

        with pytest.raises(ConflictError):
            category_service.update(home.id, {"name": " Work"})

        assert category_service.find_by_id(home.id).name == "home"

    def test_update_missing_raises_not_found(self, category_service):
        with pytest.raises(NotFoundError):
            category_service.update(str(ObjectId()), {"color": "blue"})


class TestRemoveCategory:
    def test_remove_unused_category(self, category_service):
        category = category_service.create("work")

        removed = category_service.remove(category.id)

        assert removed.id == category.id
        with pytest.raises(NotFoundError):
            category_service.find_by_id(category.id)

    def test_remove_referenced_category_reports_exact_count(self, category_service, task_service):
        category = category_service.create("work")
        for title in ("A", "B", "C"):
            task_service.create({"title": title, "category_id": category.id})

        with pytest.raises(ConflictError) as exc_info:
            category_service.remove(category.id)

        assert exc_info.value.message == (
            "Cannot delete category with 3 tasks. Please reassign or delete tasks first."
        )
        assert category_service.find_by_id(category.id).task_count == 3

    def test_remove_after_tasks_are_gone(self, category_service, task_service):
        category = category_service.create("work")
        task = task_service.create({"title": "A", "category_id": category.id})
        task_service.remove(task.id)

        category_service.remove(category.id)

        assert category_service.list() == []

    def test_remove_missing_raises_not_found(self, category_service):
        with pytest.raises(NotFoundError):
            category_service.remove(str(ObjectId()))


class TestConcurrentWrites:
    """Another writer changes the registry between the check and the write."""

    @pytest.fixture()
    def warnings(self, caplog):
        caplog.set_level(logging.WARNING, logger="taskhub.services.category_service")
        return caplog

    @pytest.fixture()
    def vanishing_category(self, category_service, db, monkeypatch):
        category = category_service.create("work")
        real_find_by_id = category_service.find_by_id

        def find_then_delete(category_id):
            found = real_find_by_id(category_id)
            db.categories.delete_one({"_id": ObjectId(category_id)})
            return found

        monkeypatch.setattr(category_service, "find_by_id", find_then_delete)
        return category

    @pytest.fixture()
    def stale_name_lookup(self, category_service, monkeypatch):
        # The uniqueness check sees no owner; only the unique index catches it
        monkeypatch.setattr(category_service, "find_by_name", lambda name: None)

    def test_update_of_deleted_category_raises_not_found(self, category_service, vanishing_category, warnings):
        with pytest.raises(NotFoundError):
            category_service.update(vanishing_category.id, {"color": "blue"})

        assert "deleted while being updated" in warnings.text

    def test_remove_of_deleted_category_raises_not_found(self, category_service, vanishing_category, warnings):
        with pytest.raises(NotFoundError):
            category_service.remove(vanishing_category.id)

        assert "deleted concurrently" in warnings.text

    def test_duplicate_create_caught_by_unique_index(self, category_service, db, stale_name_lookup):
        category_service.create("work")

        with pytest.raises(ConflictError) as exc_info:
            category_service.create(" Work ")

        assert exc_info.value.message == "Category with this name already exists"
        assert db.categories.count_documents({}) == 1

    def test_duplicate_rename_caught_by_unique_index(self, category_service, db, stale_name_lookup):
        category_service.create("work")
        home = category_service.create("home")

        with pytest.raises(ConflictError):
            category_service.update(home.id, {"name": "WORK"})

        assert db.categories.find_one({"_id": ObjectId(home.id)})["name"] == "home"
