"""Premix costing and expansion.

A premix is a batched product whose bottle is made of other products. Its cost
per bottle is the sum of its ingredients' per-ml cost times the ml each
contributes; pouring a volume of premix draws proportionally from every
ingredient.
"""

import logging
from typing import Dict, Iterable, List, Mapping

from barcount.core.numbers import is_zero, round_half_up, to_number_or_default
from barcount.schemas.product import (
    CostCalculationMode,
    IngredientDraw,
    PremixIngredient,
    Product,
)

logger = logging.getLogger(__name__)


class PremixError(ValueError):
    """Base class for premix precondition failures."""


class NotAPremixError(PremixError):
    """Raised when a product without an ingredient list is treated as a premix."""

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product '{product_id}' is not a premix")


class InvalidPremixVolumeError(PremixError):
    """Raised when a premix's own bottle volume is zero or negative."""

    def __init__(self, product_id: str, bottle_volume_ml: float):
        self.product_id = product_id
        self.bottle_volume_ml = bottle_volume_ml
        super().__init__(
            f"Invalid bottle volume {bottle_volume_ml} ml for premix '{product_id}'"
        )


def is_premix(product: Product) -> bool:
    """True when the product is flagged composite and carries an ingredient list."""
    return bool(product.is_premix) and product.premix_ingredients is not None


def calculate_premix_cost(premix: Product, ingredients_by_id: Mapping[str, Product]) -> float:
    """
    Cost per bottle of a premix, summed over its ingredients.

    Ingredients that cannot be found, or whose bottle volume is zero, are logged
    and skipped; the result is then the partial sum of the remaining ones.
    A product that is not a premix keeps its stored cost_per_bottle.
    """
    if not is_premix(premix):
        return premix.cost_per_bottle

    total = 0.0
    for ingredient in premix.premix_ingredients:
        product = ingredients_by_id.get(ingredient.product_id)
        if product is None:
            logger.warning(
                f"Ingredient product {ingredient.product_id} not found for premix {premix.id}"
            )
            continue

        bottle_volume_ml = to_number_or_default(product.bottle_volume_ml)
        if is_zero(bottle_volume_ml) or bottle_volume_ml < 0:
            logger.warning(
                f"Invalid bottle_volume_ml={bottle_volume_ml} for ingredient product {product.id} "
                f"in premix {premix.id}"
            )
            continue

        cost_per_ml = to_number_or_default(product.cost_per_bottle) / bottle_volume_ml
        total += cost_per_ml * to_number_or_default(ingredient.volume_ml)

    return total


def expand_premix_to_ingredients(premix: Product, draw_volume_ml: float) -> List[IngredientDraw]:
    """
    Split a drawn volume of premix into per-ingredient volumes.

    Each ingredient volume is scaled by draw_volume_ml / premix bottle volume and
    rounded half-up to whole ml. Draws larger than a bottle scale linearly.

    Raises:
        NotAPremixError: the product is not a premix.
        InvalidPremixVolumeError: the premix bottle volume is zero or negative.
    """
    if not is_premix(premix):
        raise NotAPremixError(premix.id)

    bottle_volume_ml = to_number_or_default(premix.bottle_volume_ml)
    if bottle_volume_ml <= 0:
        raise InvalidPremixVolumeError(premix.id, bottle_volume_ml)

    scale = to_number_or_default(draw_volume_ml) / bottle_volume_ml

    return [
        IngredientDraw(
            product_id=ingredient.product_id,
            volume_ml=round_half_up(ingredient.volume_ml * scale),
        )
        for ingredient in premix.premix_ingredients
    ]


def recalculate_ingredient_ratios(premix: Product) -> List[PremixIngredient]:
    """New ingredient entries with ratio = volume_ml / bottle volume (0 without a volume)."""
    bottle_volume_ml = to_number_or_default(premix.bottle_volume_ml)
    return [
        PremixIngredient(
            product_id=ingredient.product_id,
            volume_ml=ingredient.volume_ml,
            ratio=ingredient.volume_ml / bottle_volume_ml if bottle_volume_ml > 0 else 0.0,
        )
        for ingredient in premix.premix_ingredients or []
    ]


def ingredient_volume_overflow(premix: Product) -> float:
    """Ml by which the ingredients exceed the premix bottle; 0 when they fit."""
    total = sum(to_number_or_default(i.volume_ml) for i in premix.premix_ingredients or [])
    overflow = total - to_number_or_default(premix.bottle_volume_ml)
    return overflow if overflow > 0 else 0.0


def resolve_effective_cost(product: Product, ingredients_by_id: Mapping[str, Product]) -> float:
    """Cost per bottle the rest of the system should use for ``product``."""
    if is_premix(product) and product.cost_calculation_mode == CostCalculationMode.AUTO:
        return calculate_premix_cost(product, ingredients_by_id)
    return product.cost_per_bottle


def with_effective_costs(products: Iterable[Product]) -> List[Product]:
    """Copies of ``products`` where auto-costed premixes carry their derived cost.

    The same list serves as the ingredient lookup, so premixes built from other
    products in the catalog resolve without a separate map. A premix used as an
    ingredient of another premix is resolved first. On a cycle the premix that
    closes it keeps its stored cost.
    """
    products = list(products)
    by_id: Dict[str, Product] = {p.id: p for p in products}
    resolved: Dict[str, Product] = {}
    in_progress = set()

    def resolve(product: Product) -> Product:
        if product.id in resolved:
            return resolved[product.id]
        if product.id in in_progress:
            logger.warning(f"Premix {product.id} contains itself, using its stored cost")
            return product

        ingredients_by_id: Dict[str, Product] = {}
        if is_premix(product):
            in_progress.add(product.id)
            for ingredient in product.premix_ingredients:
                ingredient_product = by_id.get(ingredient.product_id)
                if ingredient_product is not None:
                    ingredients_by_id[ingredient_product.id] = resolve(ingredient_product)
            in_progress.discard(product.id)

        cost = resolve_effective_cost(product, ingredients_by_id)
        if cost != product.cost_per_bottle:
            logger.debug(f"Premix {product.id} cost resolved to {cost:.2f}")
        resolved[product.id] = product.model_copy(update={"cost_per_bottle": cost})
        return resolved[product.id]

    return [resolve(product) for product in products]
