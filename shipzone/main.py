"""
Shipzone API
FastAPI application entry point for shipping zone and rate resolution.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from shipzone.api.routes import shipping
from shipzone.core.config import settings
from shipzone.core.database import dispose_engine

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info(
        f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT}), "
        f"shipping timezone {settings.SHIPPING_TIMEZONE}, "
        f"{len(settings.shipping_holidays)} holidays configured"
    )
    yield
    await dispose_engine()
    logger.info(f"{settings.APP_NAME} shut down")


app = FastAPI(
    lifespan=lifespan,
    title=f"{settings.APP_NAME} API",
    description="Shipping zone, rate and delivery ETA resolution.",
    debug=settings.DEBUG,
)

app.include_router(shipping.router, prefix="/api", tags=["Shipping"])


@app.get("/health", tags=["Health"])
async def health_check():
    return {"status": "ok", "environment": settings.ENVIRONMENT}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "shipzone.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
