"""Data repositories for asyncpg access."""

from dishes_api.database.repositories.categories import (
    CATEGORY_SORT_SAFELIST,
    Category,
    CategoryRepository,
)
from dishes_api.database.repositories.dishes import (
    DISH_SORT_SAFELIST,
    Dish,
    DishRepository,
)
from dishes_api.database.repositories.drinks import (
    DRINK_SORT_SAFELIST,
    Drink,
    DrinkRepository,
)
from dishes_api.database.repositories.ingredients import (
    INGREDIENT_SORT_SAFELIST,
    Ingredient,
    IngredientRepository,
)
from dishes_api.database.repositories.members import Member, MemberRepository
from dishes_api.database.repositories.permissions import PermissionRepository
from dishes_api.database.repositories.reviews import (
    REVIEW_SORT_SAFELIST,
    Review,
    ReviewRepository,
)
from dishes_api.database.repositories.tokens import TokenRecord, TokenRepository


__all__ = [
    "CATEGORY_SORT_SAFELIST",
    "DISH_SORT_SAFELIST",
    "DRINK_SORT_SAFELIST",
    "INGREDIENT_SORT_SAFELIST",
    "REVIEW_SORT_SAFELIST",
    "Category",
    "CategoryRepository",
    "Dish",
    "DishRepository",
    "Drink",
    "DrinkRepository",
    "Ingredient",
    "IngredientRepository",
    "Member",
    "MemberRepository",
    "PermissionRepository",
    "Review",
    "ReviewRepository",
    "TokenRecord",
    "TokenRepository",
]
