from fastapi import APIRouter

from app.api.routes import leagues, lottery, trades

api_router = APIRouter()
api_router.include_router(leagues.router)
api_router.include_router(lottery.router)
api_router.include_router(trades.router)
