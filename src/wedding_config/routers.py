from fastapi import APIRouter

from src.wedding_config.features.update_config.router import router as config_router

router = APIRouter()

router.include_router(config_router)
