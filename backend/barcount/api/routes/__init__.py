"""API routes."""

from fastapi import APIRouter

from barcount.api.routes import calculations, holidays, premixes, products, sessions

api_router = APIRouter()

# Stateless calculations
api_router.include_router(calculations.router, prefix="/calculations", tags=["calculations"])
api_router.include_router(premixes.router, prefix="/premixes", tags=["premixes"])
api_router.include_router(holidays.router, prefix="/holidays", tags=["holidays"])

# Stored data
api_router.include_router(products.router, prefix="/products", tags=["products"])
api_router.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
