from fastapi import APIRouter

from .features.backfill_invite_codes.router import router as backfill_router

router = APIRouter()

router.include_router(backfill_router)
