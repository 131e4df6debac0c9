# catalog/main.py
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from sqlalchemy import text

from catalog.api.api import api_router
from catalog.config.database import WriteSessionLocal, create_tables, dispose_engines, write_engine
from catalog.config.logging import setup_logging
from catalog.config.otel import instrument_fastapi_app, setup_telemetry, shutdown_telemetry
from catalog.core.config import settings
from catalog.core.init_db import initialize_categories

# --- 1. 로깅 설정 (가장 먼저) ---
setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# --- 2. 트레이싱 설정 (OTEL_ENABLED일 때만) ---
setup_telemetry(write_engine)


@asynccontextmanager
async def lifespan(app_instance: FastAPI):
    logger.info("Application startup: Initializing resources...")

    await create_tables(write_engine)

    if settings.SEED_DEMO_CATALOG:
        async with WriteSessionLocal() as session:
            await initialize_categories(session)

    yield

    logger.info("Application shutdown: Cleaning up resources...")
    await dispose_engines()
    shutdown_telemetry()
    logger.info("Resources cleaned up.")


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

instrument_fastapi_app(app)

app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/health/live", tags=["Health"])
async def liveness():
    return {"status": "alive"}


@app.get("/health/ready", tags=["Health"])
async def readiness():
    status_details = {}
    try:
        async with WriteSessionLocal() as session:
            await session.execute(text("SELECT 1"))
            status_details["database"] = "connected"
    except Exception as e:
        logger.error("Database connection failed for readiness probe.", extra={"error": str(e)}, exc_info=True)
        status_details["database"] = "failed"
        return JSONResponse(
            status_code=503,
            content={"status": "not ready", "details": status_details, "errors": [f"Database: {str(e)}"]},
        )
    logger.debug("Readiness probe successful.", extra={"details": status_details})
    return {"status": "ready", "details": status_details}


@app.get("/", tags=["Root"])
def read_root():
    return {"message": f"Welcome to the {settings.PROJECT_NAME}"}


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
