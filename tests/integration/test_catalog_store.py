"""Integration tests for the menu catalog repositories against PostgreSQL.

Exercises the list queries (filters, safelisted ordering, window-count
metadata) and the foreign key and check constraints.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import asyncpg
import pytest

from dishes_api.database.exceptions import RecordNotFoundError, ReferenceNotFoundError
from dishes_api.database.repositories import (
    CATEGORY_SORT_SAFELIST,
    DISH_SORT_SAFELIST,
    DRINK_SORT_SAFELIST,
    REVIEW_SORT_SAFELIST,
    Category,
    Dish,
    Drink,
    Ingredient,
    Review,
)
from dishes_api.query.filters import compile_filters


if TYPE_CHECKING:
    from dishes_api.database.repositories import (
        CategoryRepository,
        DishRepository,
        DrinkRepository,
        IngredientRepository,
        ReviewRepository,
    )


pytestmark = pytest.mark.integration


class TestDishListing:
    """Filter, sort and paginate on a real table."""

    async def test_pages_with_ties_broken_by_id(self, dishes: DishRepository) -> None:
        for name in ("Soup", "Pasta", "Salad", "Pie", "Stew"):
            await dishes.insert(Dish(name=name, price=5.0))

        page_2 = compile_filters(2, 2, "price", DISH_SORT_SAFELIST)
        rows, metadata = await dishes.list("", 0, page_2)

        assert [d.id for d in rows] == [3, 4]
        assert metadata.total_records == 5
        assert metadata.last_page == 3

    async def test_name_is_exact_and_case_insensitive(
        self, dishes: DishRepository
    ) -> None:
        await dishes.insert(Dish(name="Pasta", price=9.0))
        await dishes.insert(Dish(name="Pasta al forno", price=12.0))

        rows, _ = await dishes.list(
            "pasta", 0, compile_filters(1, 20, "id", DISH_SORT_SAFELIST)
        )

        assert [d.name for d in rows] == ["Pasta"]

    async def test_minimum_price_and_descending_sort(
        self, dishes: DishRepository
    ) -> None:
        for price in (3.0, 8.0, 12.0):
            await dishes.insert(Dish(name=f"Dish {price}", price=price))

        rows, metadata = await dishes.list(
            "", 8.0, compile_filters(1, 20, "-price", DISH_SORT_SAFELIST)
        )

        assert [d.price for d in rows] == [12.0, 8.0]
        assert metadata.total_records == 2

    async def test_page_past_the_end_is_empty(self, dishes: DishRepository) -> None:
        await dishes.insert(Dish(name="Soup", price=4.0))

        rows, metadata = await dishes.list(
            "", 0, compile_filters(5, 20, "id", DISH_SORT_SAFELIST)
        )

        assert rows == []
        assert metadata.total_records == 0


class TestDrinks:
    async def test_crud_round(self, drinks: DrinkRepository) -> None:
        drink = await drinks.insert(Drink(name="Lemonade", price=3.0))

        updated = await drinks.update(drink.model_copy(update={"price": 3.5}))
        assert (await drinks.get(drink.id)).price == 3.5
        assert updated.updated_at is not None

        await drinks.delete(drink.id)
        with pytest.raises(RecordNotFoundError):
            await drinks.get(drink.id)

    async def test_list_by_name(self, drinks: DrinkRepository) -> None:
        await drinks.insert(Drink(name="Tea", price=2.0))
        await drinks.insert(Drink(name="Iced Tea", price=2.5))

        rows, _ = await drinks.list(
            "TEA", 0, compile_filters(1, 20, "id", DRINK_SORT_SAFELIST)
        )

        assert [d.name for d in rows] == ["Tea"]


class TestCategories:
    async def test_fragment_match_treats_wildcards_literally(
        self, categories: CategoryRepository
    ) -> None:
        await categories.insert(Category(name="Main Courses"))
        await categories.insert(Category(name="100% Vegan"))
        query = compile_filters(1, 20, "name", CATEGORY_SORT_SAFELIST)

        by_fragment, _ = await categories.list("cour", query)
        by_percent, _ = await categories.list("%", query)

        assert [c.name for c in by_fragment] == ["Main Courses"]
        assert [c.name for c in by_percent] == ["100% Vegan"]


class TestIngredients:
    async def test_unknown_dish_is_reference_error(
        self, ingredients: IngredientRepository
    ) -> None:
        with pytest.raises(ReferenceNotFoundError) as exc_info:
            await ingredients.insert(Ingredient(name="Basil", quantity=1, dish_id=404))

        assert exc_info.value.field == "dishId"

    async def test_deleted_with_their_dish(
        self, dishes: DishRepository, ingredients: IngredientRepository
    ) -> None:
        dish = await dishes.insert(Dish(name="Pesto", price=7.0))
        ingredient = await ingredients.insert(
            Ingredient(name="Basil", quantity=20, dish_id=dish.id)
        )

        await dishes.delete(dish.id)

        with pytest.raises(RecordNotFoundError):
            await ingredients.get(ingredient.id)


class TestReviews:
    async def test_filters_by_target(
        self,
        dishes: DishRepository,
        drinks: DrinkRepository,
        reviews: ReviewRepository,
    ) -> None:
        dish = await dishes.insert(Dish(name="Soup", price=4.0))
        drink = await drinks.insert(Drink(name="Tea", price=2.0))
        await reviews.insert(Review(dish_id=dish.id, rating=5))
        await reviews.insert(Review(drink_id=drink.id, rating=2))
        await reviews.insert(Review(dish_id=dish.id, rating=3))
        query = compile_filters(1, 20, "-rating", REVIEW_SORT_SAFELIST)

        of_dish, dish_meta = await reviews.list(dish.id, None, query)
        everything, all_meta = await reviews.list(None, None, query)

        assert [r.rating for r in of_dish] == [5, 3]
        assert dish_meta.total_records == 2
        assert all_meta.total_records == 3
        assert [r.rating for r in everything] == [5, 3, 2]

    async def test_unknown_drink_is_reference_error(
        self, reviews: ReviewRepository
    ) -> None:
        with pytest.raises(ReferenceNotFoundError) as exc_info:
            await reviews.insert(Review(drink_id=404, rating=4))

        assert exc_info.value.field == "drinkId"

    async def test_table_requires_exactly_one_target(
        self, reviews: ReviewRepository
    ) -> None:
        with pytest.raises(asyncpg.CheckViolationError):
            await reviews.insert(Review(rating=4))
