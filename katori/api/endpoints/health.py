from fastapi import APIRouter

from katori.core.config import settings

router = APIRouter()


@router.get("")
async def health():
    return {"status": "ok", "app": settings.APP_NAME, "env": settings.APP_ENV}
