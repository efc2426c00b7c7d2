from fastapi import APIRouter, Depends
from pymongo.errors import PyMongoError

from rundown.api.deps import get_settings
from rundown.core.config import Settings
from rundown.db.mongo import get_db

router = APIRouter(tags=["health"])


async def mongo_ok() -> bool:
    try:
        await get_db().command("ping")
    except (RuntimeError, PyMongoError):
        return False
    return True


@router.get("/health")
async def health(settings: Settings = Depends(get_settings)):
    return {
        "status": "ok",
        "app": settings.APP_NAME,
        "env": settings.ENV,
        "mongo": await mongo_ok(),
    }
