import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from app.core.config import Settings, settings as default_settings
from app.core.database import DocumentStore
from app.core.exceptions import NotFoundOrForbidden, StoreError, ValidationError
from app.api import users, tasks

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store = DocumentStore(
            settings.database_url,
            echo=settings.debug,
            create_schema=settings.create_schema,
        )
        await store.open()
        try:
            await store.ping()
            logger.info("Pinged the database, connection is healthy")
        except StoreError:
            logger.warning("Database ping failed, requests will report store errors")
        app.state.store = store
        logger.info("%s is running on port: %s", settings.app_name, settings.port)
        try:
            yield
        finally:
            await store.close()

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Error mapping
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": "Invalid request body."},
        )

    @app.exception_handler(NotFoundOrForbidden)
    async def not_found_handler(request: Request, exc: NotFoundOrForbidden):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"message": "Task not found or access denied."},
        )

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        # Already logged with traceback by the store
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Internal server error."},
        )

    # Routers
    app.include_router(users.router)
    app.include_router(tasks.router)

    @app.get("/", response_class=PlainTextResponse)
    async def liveness():
        return "Drop task server is running"

    return app


app = create_app()
