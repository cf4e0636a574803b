from fastapi import APIRouter

from meet.api.calls import router as calls_router
from meet.api.webhooks import router as webhooks_router

router = APIRouter()

router.include_router(calls_router)
router.include_router(webhooks_router)
