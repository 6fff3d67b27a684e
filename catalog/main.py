import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalog.api import products
from catalog.config import get_settings
from catalog.database import async_engine
from catalog.exceptions import CatalogError
from catalog.services.media_store import CloudinaryMediaStore
from catalog.utils.logging import setup_logging

logger = logging.getLogger(__name__)

setup_logging()
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Schema is managed by Alembic migrations
    app.state.media_store = CloudinaryMediaStore.from_settings(settings)
    try:
        yield
    finally:
        await app.state.media_store.close()
        await async_engine.dispose()


app = FastAPI(
    title=settings.api_title,
    description="API for managing catalog products and their images",
    version=settings.api_version,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(products.router)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


@app.exception_handler(CatalogError)
async def catalog_exception_handler(request: Request, exc: CatalogError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )
