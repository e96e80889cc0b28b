"""Premix costing and expansion endpoints."""

from typing import List

from fastapi import APIRouter, HTTPException, status

from barcount.schemas.product import (
    IngredientDraw,
    PremixCostRequest,
    PremixCostResponse,
    PremixExpandRequest,
)
from barcount.services.premix_service import (
    PremixError,
    calculate_premix_cost,
    expand_premix_to_ingredients,
)

router = APIRouter()


@router.post("/cost", response_model=PremixCostResponse)
def premix_cost(body: PremixCostRequest):
    """Cost per bottle of a premix from the posted ingredient products."""
    ingredients_by_id = {p.id: p for p in body.ingredients}
    return PremixCostResponse(
        product_id=body.premix.id,
        cost=calculate_premix_cost(body.premix, ingredients_by_id),
    )


@router.post("/expand", response_model=List[IngredientDraw])
def expand_premix(body: PremixExpandRequest):
    """Ingredient volumes drawn when pouring ``draw_volume_ml`` of a premix."""
    try:
        return expand_premix_to_ingredients(body.premix, body.draw_volume_ml)
    except PremixError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )
