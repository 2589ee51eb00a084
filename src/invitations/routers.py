from fastapi import APIRouter

from src.invitations.features.create_invitations.router import router as create_router
from src.invitations.features.delete_invitations.router import router as delete_router
from src.invitations.features.import_invitations.router import router as import_router
from src.invitations.features.list_invitations.router import router as list_router
from src.invitations.features.regenerate_tokens.router import router as regenerate_router
from src.invitations.features.send_notifications.router import router as send_router
from src.invitations.features.update_invitation.router import router as update_router

router = APIRouter()

router.include_router(list_router)
router.include_router(create_router)
router.include_router(import_router)
router.include_router(delete_router)
router.include_router(send_router)
router.include_router(update_router)
router.include_router(regenerate_router)
