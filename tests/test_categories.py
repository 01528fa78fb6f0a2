# =============================================================================
# tests/test_categories.py - Category store and /categories routes
# =============================================================================

import pytest

from app.crud import category as category_crud
from app.db.models.Category import Category, DEFAULT_CATEGORY_NAME
from app.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError


# =============================================================================
# Store Tests
# =============================================================================

class TestCategoryStore:
    """Tests for app.crud.category."""

    def test_list_orders_by_name(self, db, make_category):
        for name in ("Zebras", "apples", "Mountains"):
            make_category(name)

        names = [c.name for c in category_crud.list_categories(db)]

        assert names == sorted(names)
        assert set(names) == {"Zebras", "apples", "Mountains"}

    def test_create_then_list_contains_exactly_one(self, db):
        category_crud.create_category(db, "Landscapes")

        names = [c.name for c in category_crud.list_categories(db)]

        assert names.count("Landscapes") == 1

    def test_create_duplicate_conflicts(self, db):
        category_crud.create_category(db, "Portraits")

        with pytest.raises(ConflictError):
            category_crud.create_category(db, "Portraits")

        assert db.query(Category).filter(Category.name == "Portraits").count() == 1

    @pytest.mark.parametrize("name", ["", "   "])
    def test_create_empty_name_rejected(self, db, name):
        with pytest.raises(ValidationError):
            category_crud.create_category(db, name)

    def test_create_strips_whitespace(self, db):
        category = category_crud.create_category(db, "  Travel  ")
        assert category.name == "Travel"

    def test_delete_default_category_forbidden(self, db):
        default = category_crud.ensure_default_category(db)

        with pytest.raises(ForbiddenError):
            category_crud.delete_category(db, default.id)

        assert category_crud.get_category_by_name(db, DEFAULT_CATEGORY_NAME) is not None

    def test_default_category_protected_whatever_its_id(self, db, make_category):
        # created after other categories, so it does not hold the lowest id
        make_category("First")
        make_category("Second")
        default = category_crud.ensure_default_category(db)

        with pytest.raises(ForbiddenError):
            category_crud.delete_category(db, default.id)

    def test_default_category_protected_when_referenced(self, db, make_image):
        default = category_crud.ensure_default_category(db)
        make_image(categories=[default])

        with pytest.raises(ForbiddenError):
            category_crud.delete_category(db, default.id)

    def test_delete_missing_category(self, db):
        category_crud.ensure_default_category(db)

        with pytest.raises(NotFoundError):
            category_crud.delete_category(db, 9999)

    def test_delete_keeps_images(self, db, make_category, make_image):
        travel = make_category("Travel")
        other = make_category("Other")
        image = make_image(categories=[travel, other])

        category_crud.delete_category(db, travel.id)
        db.expire_all()

        assert db.get(Category, travel.id) is None
        assert [c.name for c in image.categories] == ["Other"]

    def test_ensure_default_category_is_idempotent(self, db):
        first = category_crud.ensure_default_category(db)
        second = category_crud.ensure_default_category(db)

        assert first.id == second.id
        assert db.query(Category).filter(Category.name == DEFAULT_CATEGORY_NAME).count() == 1

    def test_get_categories_by_ids_reports_missing(self, db, make_category):
        known = make_category("Known")

        with pytest.raises(ValidationError) as exc_info:
            category_crud.get_categories_by_ids(db, [known.id, 404])

        assert "404" in exc_info.value.details[0]["msg"]


# =============================================================================
# Route Tests
# =============================================================================

class TestCategoryRoutes:
    """Tests for the /api/media/categories endpoints."""

    def test_startup_creates_default_category(self, client):
        response = client.get("/api/media/categories")

        assert response.status_code == 200
        assert [c["name"] for c in response.json()] == [DEFAULT_CATEGORY_NAME]

    def test_create_category(self, client):
        response = client.post("/api/media/categories", json={"name": "Nature"})

        assert response.status_code == 201
        body = response.json()
        assert body["name"] == "Nature"
        assert isinstance(body["id"], int)

    def test_create_duplicate_returns_409(self, client):
        client.post("/api/media/categories", json={"name": "Nature"})
        response = client.post("/api/media/categories", json={"name": "Nature"})

        assert response.status_code == 409
        assert response.json()["error"] == "Category with this name already exists."

    def test_create_empty_name_returns_400(self, client):
        response = client.post("/api/media/categories", json={"name": ""})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_create_missing_name_returns_400_with_issues(self, client):
        response = client.post("/api/media/categories", json={})

        assert response.status_code == 400
        issues = response.json()["details"]
        assert issues[0]["loc"][-1] == "name"

    def test_delete_category(self, client):
        created = client.post("/api/media/categories", json={"name": "Temp"}).json()

        response = client.delete(f"/api/media/categories/{created['id']}")

        assert response.status_code == 200
        assert response.json() == {"message": "Category deleted successfully."}
        names = [c["name"] for c in client.get("/api/media/categories").json()]
        assert "Temp" not in names

    def test_delete_default_returns_403(self, client):
        default = client.get("/api/media/categories").json()[0]

        response = client.delete(f"/api/media/categories/{default['id']}")

        assert response.status_code == 403

    def test_delete_unknown_returns_404(self, client):
        response = client.delete("/api/media/categories/12345")
        assert response.status_code == 404

    def test_delete_bad_id_returns_400(self, client):
        response = client.delete("/api/media/categories/not-a-number")
        assert response.status_code == 400


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
