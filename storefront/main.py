# storefront/main.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from storefront.api import api_router
from storefront.api.routers import health
from storefront.data.database import Base, engine, init_db
from storefront.data.seed import seed
from storefront.utils.logging import get_logger
from storefront.utils.settings import API_PREFIX, CORS_ORIGINS, SEED_CATALOG

logger = get_logger(__name__)


def _setup_database():
    logger.info("=" * 60)
    logger.info("INITIALIZING DATABASE...")
    try:
        init_db()
        logger.info(f"Tables ready: {list(Base.metadata.tables.keys())} on {engine.url.get_backend_name()}")
    except Exception as e:
        logger.error(f"FAILED TO CREATE TABLES: {e}")
        raise
    if SEED_CATALOG:
        seed()
    logger.info("=" * 60)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    #bledy walidacji body to 400 jak w reszcie API, nie 422
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


def create_app() -> FastAPI:
    app = FastAPI(
        title="Storefront",
        version="1.0.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(api_router, prefix=API_PREFIX)

    return app


_setup_database()
app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
