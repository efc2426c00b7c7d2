from typing import Optional
from fastapi import FastAPI
from rundown.core.config import Settings, settings as default_settings
from rundown.core.logging import setup_logging
from rundown.db import mongo
from rundown.db.facts import FactStore
from rundown.db.summaries import SummaryStore

from rundown.api.v1.health import router as health_router
from rundown.api.v1.summaries import router as summaries_router
from rundown.api.v1.generate import router as generate_router
from rundown.api.v1.release_notes import router as release_notes_router
from rundown.api.v1.facts import router as facts_router
from rundown.api.v1.traffic_lights import router as traffic_lights_router

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    logger = setup_logging(settings.LOG_LEVEL, json_logs=settings.ENV != "dev")

    app = FastAPI(title=settings.APP_NAME)
    app.state.settings = settings

    @app.on_event("startup")
    async def _startup():
        db = mongo.connect(settings.MONGODB_URI, settings.MONGODB_DB)
        await SummaryStore(db).ensure_indexes()
        await FactStore(db).ensure_indexes()
        logger.info("Indexes ensured")

    @app.on_event("shutdown")
    async def _shutdown():
        mongo.close()

    app.include_router(health_router, prefix="/api/v1")
    app.include_router(summaries_router, prefix="/api/v1")
    app.include_router(generate_router, prefix="/api/v1")
    app.include_router(release_notes_router, prefix="/api/v1")
    app.include_router(facts_router, prefix="/api/v1")
    app.include_router(traffic_lights_router, prefix="/api/v1")

    return app

app = create_app()
