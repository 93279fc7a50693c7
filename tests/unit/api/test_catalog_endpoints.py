"""HTTP tests for the drink, category, ingredient and review endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from dishes_api.database.exceptions import RecordNotFoundError, ReferenceNotFoundError
from dishes_api.query.filters import Metadata
from tests.factories.catalog import (
    CategoryFactory,
    DrinkFactory,
    IngredientFactory,
    ReviewFactory,
)


if TYPE_CHECKING:
    from unittest.mock import MagicMock

    from fastapi.testclient import TestClient

    from dishes_api.database.repositories.members import Member


pytestmark = pytest.mark.unit

API = "/api/v1"


@pytest.mark.parametrize(
    "path",
    ["/drinks", "/categories", "/ingredients", "/reviews"],
)
class TestGuards:
    """Every catalog collection sits behind the same chain as dishes."""

    def test_anonymous_gets_401(
        self, client: TestClient, authority: MagicMock, path: str
    ) -> None:
        response = client.get(f"{API}{path}")

        assert response.status_code == 401
        assert response.json()["error"] == "AUTHENTICATION_REQUIRED"

    def test_reader_cannot_create(
        self,
        client: TestClient,
        reader: Member,
        auth_headers: dict[str, str],
        path: str,
    ) -> None:
        response = client.post(f"{API}{path}", json={}, headers=auth_headers)

        assert response.status_code == 403
        assert response.json()["error"] == "NOT_PERMITTED"


class TestDrinks:
    """Tests for /drinks."""

    def test_list_uses_drink_safelist(
        self,
        client: TestClient,
        reader: Member,
        drink_repository: MagicMock,
        auth_headers: dict[str, str],
    ) -> None:
        drink_repository.list.return_value = ([DrinkFactory.build(id=2)], Metadata())

        response = client.get(
            f"{API}/drinks",
            params={"name": "Lemonade", "price": 2, "sort": "-name"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert [d["id"] for d in response.json()["drinks"]] == [2]
        name, min_price, page_query = drink_repository.list.await_args.args
        assert (name, min_price) == ("Lemonade", 2)
        assert page_query.order_by_clause() == "ORDER BY name DESC, id ASC"

    def test_list_rejects_rating_sort(
        self,
        client: TestClient,
        reader: Member,
        drink_repository: MagicMock,
        auth_headers: dict[str, str],
    ) -> None:
        response = client.get(
            f"{API}/drinks", params={"sort": "rating"}, headers=auth_headers
        )

        assert response.status_code == 422
        drink_repository.list.assert_not_awaited()

    def test_create(
        self,
        client: TestClient,
        writer: Member,
        drink_repository: MagicMock,
        auth_headers: dict[str, str],
    ) -> None:
        drink_repository.insert.return_value = DrinkFactory.build(id=5, name="Tea")

        response = client.post(
            f"{API}/drinks", json={"name": "Tea", "price": 2}, headers=auth_headers
        )

        assert response.status_code == 201
        drink = response.json()["drink"]
        assert set(drink) == {
            "id",
            "createdAt",
            "updatedAt",
            "name",
            "description",
            "price",
        }
        assert (drink["id"], drink["name"]) == (5, "Tea")
        inserted = drink_repository.insert.await_args.args[0]
        assert (inserted.name, inserted.price, inserted.description) == ("Tea", 2, "")

    def test_delete_missing_is_404(
        self,
        client: TestClient,
        writer: Member,
        drink_repository: MagicMock,
        auth_headers: dict[str, str],
    ) -> None:
        drink_repository.delete.side_effect = RecordNotFoundError("drink 4")

        response = client.delete(f"{API}/drinks/4", headers=auth_headers)

        assert response.status_code == 404


class TestCategories:
    """Tests for /categories."""

    def test_list_passes_name_fragment(
        self,
        client: TestClient,
        reader: Member,
        category_repository: MagicMock,
        auth_headers: dict[str, str],
    ) -> None:
        category_repository.list.return_value = (
            [CategoryFactory.build()],
            Metadata(
                current_page=1, page_size=20, first_page=1, last_page=1, total_records=1
            ),
        )

        response = client.get(
            f"{API}/categories", params={"name": "mai"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["categories"][0]["name"] == "Mains"
        name, _page_query = category_repository.list.await_args.args
        assert name == "mai"

    def test_list_rejects_price_sort(
        self,
        client: TestClient,
        reader: Member,
        category_repository: MagicMock,
        auth_headers: dict[str, str],
    ) -> None:
        response = client.get(
            f"{API}/categories", params={"sort": "-price"}, headers=auth_headers
        )

        assert response.status_code == 422
        assert response.json()["details"][0]["field"] == "sort"

    def test_update_missing_is_404(
        self,
        client: TestClient,
        writer: Member,
        category_repository: MagicMock,
        auth_headers: dict[str, str],
    ) -> None:
        category_repository.update.side_effect = RecordNotFoundError("category 8")

        response = client.put(
            f"{API}/categories/8", json={"name": "Sides"}, headers=auth_headers
        )

        assert response.status_code == 404


class TestIngredients:
    """Tests for /ingredients."""

    def test_get(
        self,
        client: TestClient,
        reader: Member,
        ingredient_repository: MagicMock,
        auth_headers: dict[str, str],
    ) -> None:
        ingredient_repository.get.return_value = IngredientFactory.build(id=3)

        response = client.get(f"{API}/ingredients/3", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["ingredient"]["dishId"] == 1

    def test_list_filters_by_dish(
        self,
        client: TestClient,
        reader: Member,
        ingredient_repository: MagicMock,
        auth_headers: dict[str, str],
    ) -> None:
        ingredient_repository.list.return_value = ([], Metadata())

        response = client.get(
            f"{API}/ingredients",
            params={"dish_id": 4, "sort": "-quantity"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        dish_id, page_query = ingredient_repository.list.await_args.args
        assert dish_id == 4
        assert page_query.order_by_clause() == "ORDER BY quantity DESC, id ASC"

    def test_create_for_unknown_dish_is_validation_error(
        self,
        client: TestClient,
        writer: Member,
        ingredient_repository: MagicMock,
        auth_headers: dict[str, str],
    ) -> None:
        ingredient_repository.insert.side_effect = ReferenceNotFoundError("dishId")

        response = client.post(
            f"{API}/ingredients",
            json={"name": "Basil", "quantity": 2, "dishId": 99},
            headers=auth_headers,
        )

        assert response.status_code == 422
        detail = response.json()["details"][0]
        assert detail["field"] == "dishId"
        assert detail["message"] == "does not exist"

    def test_create_rejects_negative_quantity(
        self,
        client: TestClient,
        writer: Member,
        ingredient_repository: MagicMock,
        auth_headers: dict[str, str],
    ) -> None:
        response = client.post(
            f"{API}/ingredients",
            json={"name": "Basil", "quantity": -1, "dishId": 1},
            headers=auth_headers,
        )

        assert response.status_code == 422
        ingredient_repository.insert.assert_not_awaited()


class TestReviews:
    """Tests for /reviews."""

    def test_list_filters_and_sorts_by_created_at(
        self,
        client: TestClient,
        reader: Member,
        review_repository: MagicMock,
        auth_headers: dict[str, str],
    ) -> None:
        review_repository.list.return_value = ([ReviewFactory.build()], Metadata())

        response = client.get(
            f"{API}/reviews",
            params={"drink_id": 2, "sort": "-created_at"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["reviews"][0]["rating"] == 4
        dish_id, drink_id, page_query = review_repository.list.await_args.args
        assert (dish_id, drink_id) == (None, 2)
        assert page_query.order_by_clause() == "ORDER BY created_at DESC, id ASC"

    @pytest.mark.parametrize(
        "body",
        [
            {"rating": 4},
            {"dishId": 1, "drinkId": 2, "rating": 4},
            {"dishId": 1, "rating": 6},
            {"dishId": 1, "rating": 0},
        ],
    )
    def test_create_rejects_bad_target_or_rating(
        self,
        client: TestClient,
        writer: Member,
        review_repository: MagicMock,
        auth_headers: dict[str, str],
        body: dict[str, int],
    ) -> None:
        response = client.post(f"{API}/reviews", json=body, headers=auth_headers)

        assert response.status_code == 422
        review_repository.insert.assert_not_awaited()

    def test_create_drink_review(
        self,
        client: TestClient,
        writer: Member,
        review_repository: MagicMock,
        auth_headers: dict[str, str],
    ) -> None:
        review_repository.insert.return_value = ReviewFactory.build(
            id=6, dish_id=None, drink_id=2
        )

        response = client.post(
            f"{API}/reviews",
            json={"drinkId": 2, "rating": 5, "comment": "crisp"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert response.json()["review"]["drinkId"] == 2
        assert response.json()["review"]["dishId"] is None
        inserted = review_repository.insert.await_args.args[0]
        assert (inserted.dish_id, inserted.drink_id, inserted.rating) == (None, 2, 5)

    def test_unknown_drink_is_validation_error(
        self,
        client: TestClient,
        writer: Member,
        review_repository: MagicMock,
        auth_headers: dict[str, str],
    ) -> None:
        review_repository.update.side_effect = ReferenceNotFoundError("drinkId")

        response = client.put(
            f"{API}/reviews/1",
            json={"drinkId": 99, "rating": 3},
            headers=auth_headers,
        )

        assert response.status_code == 422
        assert response.json()["details"][0]["field"] == "drinkId"
