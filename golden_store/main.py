import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from golden_store.api.v1.api import api_router
from golden_store.core.config import Settings, settings as default_settings
from golden_store.core.errors import DuplicateOrderError, ErrorKind, StoreError
from golden_store.core.log_config import configure_logging
from golden_store.db.backends import build_backend
from golden_store.db.store import DataStore

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorKind.DUPLICATE_NAME: 409,
    ErrorKind.DUPLICATE_ORDER: 409,
    ErrorKind.VALIDATION: 422,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.PERSISTENCE: 503,
}


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    body = {"error": exc.kind.value, "detail": exc.message}
    if isinstance(exc, DuplicateOrderError):
        body["categoryName"] = exc.category_name
        body["orderDate"] = exc.order_date.isoformat()
    if exc.kind == ErrorKind.PERSISTENCE:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=ERROR_STATUS[exc.kind], content=body)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store = DataStore(build_backend(settings), settings.DEFAULT_VAT_PERCENTAGE)
        store.load()
        app.state.store = store
        yield

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.PROJECT_VERSION,
        description=settings.DESCRIPTION,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StoreError, store_error_handler)

    @app.get("/")
    async def root():
        return {"message": f"Welcome to {settings.PROJECT_NAME}"}

    app.include_router(api_router, prefix=settings.API_V1_STR)
    return app


app = create_app()
