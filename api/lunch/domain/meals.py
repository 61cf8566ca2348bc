"""Meals offered on the weekly lunch menu."""

from __future__ import annotations

from enum import Enum


class Meal(str, Enum):
    FRIED_CHICKEN_WITH_YOGURT_SAUCE = "FRIED_CHICKEN_WITH_YOGURT_SAUCE"
    BAKED_FISH_WITH_VEGETABLES = "BAKED_FISH_WITH_VEGETABLES"
    BEANS_WITH_SALAD = "BEANS_WITH_SALAD"
    BAKED_TURKEY_WITH_POTATOES = "BAKED_TURKEY_WITH_POTATOES"
    MEATBALLS_WITH_TOMATO_SAUCE = "MEATBALLS_WITH_TOMATO_SAUCE"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    Meal.FRIED_CHICKEN_WITH_YOGURT_SAUCE: "Fried chicken with yogurt sauce",
    Meal.BAKED_FISH_WITH_VEGETABLES: "Baked fish with vegetables",
    Meal.BEANS_WITH_SALAD: "Beans with salad",
    Meal.BAKED_TURKEY_WITH_POTATOES: "Baked turkey with potatoes",
    Meal.MEATBALLS_WITH_TOMATO_SAUCE: "Meatballs with tomato sauce",
}
